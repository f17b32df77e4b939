"""Tests for the in-memory session store."""

import asyncio

import pytest

from ts_assistant.config import SessionConfig
from ts_assistant.conversation.session_store import SessionStore
from ts_assistant.schemas.conversation_schema import Role
from ts_assistant.schemas.session_schema import Domain, Record

from tests.conftest import make_message


class TestSessionLifecycle:
    def test_sessions_created_lazily(self, session_store):
        assert "s1" not in session_store
        session = session_store.get_or_create("s1")
        assert "s1" in session_store
        assert session_store.get_or_create("s1") is session
        assert len(session_store) == 1

    def test_sessions_are_isolated(self, session_store):
        session_store.append_message("a", make_message(Role.USER, "oi"))
        assert session_store.get_or_create("b").messages == []

    def test_domain_records(self, session_store):
        record = Record(values={"interest": "app"})
        session_store.update_domain_record("s1", Domain.LEAD, record)
        assert session_store.get_domain_record("s1", Domain.LEAD) is record
        assert session_store.get_domain_record("s1", Domain.SUPPORT) is None

    def test_clear_domain_record_resets_fallbacks(self, session_store):
        session = session_store.get_or_create("s1")
        session.fallback_attempts = 1
        session_store.update_domain_record("s1", Domain.LEAD, Record())
        session_store.clear_domain_record("s1", Domain.LEAD)
        assert Domain.LEAD not in session.records
        assert session.fallback_attempts == 0

    def test_unfinished_domains_in_priority_order(self, session_store):
        session = session_store.get_or_create("s1")
        session.records[Domain.SCHEDULE] = Record()
        session.records[Domain.LEAD] = Record()
        session.records[Domain.SUPPORT] = Record(confirmed=True)
        assert session.unfinished_domains() == [Domain.LEAD, Domain.SCHEDULE]


class TestHistoryTrimming:
    def test_within_limit_keeps_everything(self, session_store):
        for i in range(10):
            session_store.append_message("s1", make_message(Role.USER, f"m{i}"))
        session = session_store.get_or_create("s1")
        assert len(session.messages) == 10
        assert session.summary == ""

    def test_eleventh_message_trims_and_summarises(self, session_store):
        for i in range(11):
            role = Role.USER if i % 2 == 0 else Role.ASSISTANT
            session_store.append_message("s1", make_message(role, f"m{i}", float(i)))
        session = session_store.get_or_create("s1")
        assert len(session.messages) == 10
        assert session.messages[0].content == "m1"
        assert "Última mensagem do usuário: m10" in session.summary
        assert "Última resposta do assistente: m9" in session.summary

    def test_summary_accumulates(self):
        store = SessionStore(SessionConfig(max_messages=2, fallback_handoff_threshold=2))
        store.append_message("s1", make_message(Role.USER, "a"))
        store.append_message("s1", make_message(Role.ASSISTANT, "b"))
        store.append_message("s1", make_message(Role.USER, "c"))
        first = store.get_or_create("s1").summary
        store.append_message("s1", make_message(Role.ASSISTANT, "d"))
        second = store.get_or_create("s1").summary
        assert second.startswith(first)
        assert second.endswith("Última resposta do assistente: d")


class TestSessionLocks:
    def test_lock_is_per_session(self, session_store):
        assert session_store.lock("a") is session_store.lock("a")
        assert session_store.lock("a") is not session_store.lock("b")

    @pytest.mark.asyncio
    async def test_lock_serialises_turns(self, session_store):
        order: list[str] = []

        async def turn(name: str) -> None:
            async with session_store.lock("s1"):
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(turn("a"), turn("b"))
        assert order == ["a-start", "a-end", "b-start", "b-end"]
