"""Shared test fixtures and helpers."""

from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

import pytest

from ts_assistant.config import StorageConfig, settings
from ts_assistant.conversation.flows import build_flows
from ts_assistant.conversation.router import DialogueRouter
from ts_assistant.conversation.session_store import SessionStore
from ts_assistant.nlu.classifier import KeywordClassifier
from ts_assistant.schemas.conversation_schema import ChatMessage, Role
from ts_assistant.schemas.session_schema import Domain
from ts_assistant.tools.storage import build_stores

TZ = ZoneInfo("America/Sao_Paulo")

# Wednesday; the next weekday slots are Thursday 15/10 and Friday 16/10.
FIXED_NOW = datetime(2026, 10, 14, 10, 30, tzinfo=TZ)
EXPECTED_SLOTS = [
    "15/10/2026 09:00 BRT",
    "15/10/2026 11:00 BRT",
    "15/10/2026 14:00 BRT",
    "15/10/2026 16:00 BRT",
    "16/10/2026 09:00 BRT",
    "16/10/2026 11:00 BRT",
]


class MemoryStore:
    """In-memory ``RecordStore``; set ``fail=True`` to simulate write failures."""

    def __init__(self, records: Optional[list[dict[str, Any]]] = None, fail: bool = False) -> None:
        self.records = list(records or [])
        self.fail = fail
        self.append_calls = 0

    async def load_all(self) -> list[dict[str, Any]]:
        return list(self.records)

    async def append_one(self, record: dict[str, Any]) -> bool:
        self.append_calls += 1
        if self.fail:
            return False
        self.records.append(record)
        return True


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def stores(tmp_path):
    return build_stores(StorageConfig(data_dir=str(tmp_path)))


@pytest.fixture
def memory_stores():
    return {domain: MemoryStore() for domain in Domain}


@pytest.fixture
def session_store():
    return SessionStore(settings.session)


@pytest.fixture
def flows(stores):
    return build_flows(stores, clock=fixed_clock)


@pytest.fixture
def router(stores, session_store):
    return DialogueRouter(
        sessions=session_store,
        classifier=KeywordClassifier(),
        flows=build_flows(stores, clock=fixed_clock),
        config=settings,
    )


def make_message(role: Role, content: str, timestamp: float = 0.0) -> ChatMessage:
    """Helper to create a ChatMessage."""
    return ChatMessage(role=role, content=content, timestamp=timestamp)


async def converse(router: DialogueRouter, session_id: str, messages: list[str]) -> list:
    """Submit messages in order and return every ChatResponse."""
    responses = []
    for message in messages:
        responses.append(await router.submit(session_id, message))
    return responses
