"""
In-memory session store keyed by caller-supplied session id.

Sessions are created lazily on first use and live for the process lifetime.
History is bounded: once more than ``max_messages`` are held, the oldest are
dropped and folded into a one-line summary. Each key also owns an
``asyncio.Lock`` so a whole chat turn (classify, flow, persist) can run
without another turn for the same session interleaving.

Usage:
    store = SessionStore()
    async with store.lock("web-123"):
        session = store.append_message("web-123", message)
        ...
"""

import asyncio
import logging
from typing import Optional

from ts_assistant.config import SessionConfig, settings
from ts_assistant.schemas.conversation_schema import ChatMessage, Role
from ts_assistant.schemas.session_schema import Domain, Record, Session

logger = logging.getLogger(__name__)

USER_SUMMARY_PREFIX = "Última mensagem do usuário:"
ASSISTANT_SUMMARY_PREFIX = "Última resposta do assistente:"
SUMMARY_SEPARATOR = " | "


class SessionStore:
    """Owns every session plus a per-session lock."""

    def __init__(self, config: SessionConfig = settings.session) -> None:
        self._max_messages = config.max_messages
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def lock(self, session_id: str) -> asyncio.Lock:
        """The mutual-exclusion lock for one session key (created on demand)."""
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    def get_or_create(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            session = self._sessions[session_id] = Session()
            logger.debug("Session created: %s", session_id)
        return session

    def append_message(self, session_id: str, message: ChatMessage) -> Session:
        """Append to history, then fold the overflow into the summary."""
        session = self.get_or_create(session_id)
        session.messages.append(message)
        self._trim(session)
        return session

    def get_domain_record(self, session_id: str, domain: Domain) -> Optional[Record]:
        return self.get_or_create(session_id).records.get(domain)

    def update_domain_record(self, session_id: str, domain: Domain, record: Record) -> None:
        self.get_or_create(session_id).records[domain] = record

    def clear_domain_record(self, session_id: str, domain: Domain) -> None:
        """Detach a finished record so the next request starts a fresh one."""
        session = self.get_or_create(session_id)
        session.records.pop(domain, None)
        session.fallback_attempts = 0
        logger.debug("Cleared %s record for session %s", domain.value, session_id)

    def _trim(self, session: Session) -> None:
        if len(session.messages) <= self._max_messages:
            return

        latest_user = next(
            (m for m in reversed(session.messages) if m.role == Role.USER), None
        )
        latest_assistant = next(
            (m for m in reversed(session.messages) if m.role == Role.ASSISTANT), None
        )
        parts: list[str] = []
        if session.summary:
            parts.append(session.summary)
        if latest_user is not None:
            parts.append(f"{USER_SUMMARY_PREFIX} {latest_user.content}")
        if latest_assistant is not None:
            parts.append(f"{ASSISTANT_SUMMARY_PREFIX} {latest_assistant.content}")

        session.summary = SUMMARY_SEPARATOR.join(parts)
        session.messages = session.messages[-self._max_messages:]
