"""Session ID logging context for tracing a chat turn across modules.

Provides a session-aware logger that attaches the caller-supplied session
key to every log record, making it easy to follow one conversation through
the router, the flows and the storage layer.

Usage:
    from ts_assistant.logging_context import get_session_logger, set_session_id

    set_session_id("web-4f2a")
    logger = get_session_logger(__name__)
    logger.info("Processing turn")  # record.session_id == "web-4f2a"

``config.load_config`` calls ``install_session_filter`` on the root handlers
so the configured format can print ``%(session_id)s`` for every module.
"""

import logging
from contextvars import ContextVar
from typing import Optional

_session_id: ContextVar[str] = ContextVar("session_id", default="-")


def set_session_id(session_id: str) -> None:
    """Set the session key for the current async context."""
    _session_id.set(session_id)


def get_session_id() -> str:
    """Retrieve the current session key."""
    return _session_id.get()


class SessionIdFilter(logging.Filter):
    """Injects session_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """Return a logger with the SessionIdFilter attached.

    The filter adds ``session_id`` to each record so formatters can
    include ``%(session_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger


def install_session_filter(target: Optional[logging.Logger] = None) -> None:
    """Attach the filter to every handler of ``target`` (the root logger by default).

    Handler-level filters also cover plain ``logging.getLogger`` loggers, so a
    format string using ``%(session_id)s`` never meets a record without it.
    """
    target = target or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())
