"""
Centralized configuration with environment variable overrides.

Company details, dialogue thresholds, scheduling rules, storage paths and
classifier settings are configurable here. Nothing is hardcoded in flow or
tool logic.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from ts_assistant.logging_context import install_session_filter

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s session=%(session_id)s: %(message)s"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_int_list(env_var: str, default: str) -> tuple[int, ...]:
    """Parse a comma-separated list of integers (e.g. ``"9,11,14,16"``)."""
    raw = os.getenv(env_var, default)
    try:
        return tuple(int(part) for part in raw.split(",") if part.strip())
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer list for {env_var}: {raw!r}"
        ) from None


def _str_list(env_var: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(env_var, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class BusinessConfig:
    """Company-facing settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "Tech Solutions")
    assistant_name: str = os.getenv("ASSISTANT_NAME", "TS Assistente")
    timezone: str = os.getenv("BUSINESS_TIMEZONE", "America/Sao_Paulo")
    timezone_label: str = os.getenv("BUSINESS_TIMEZONE_LABEL", "BRT")
    closing_question: str = os.getenv("CLOSING_QUESTION", "Posso ajudar com algo mais?")
    privacy_notice: str = os.getenv(
        "PRIVACY_NOTICE",
        "Usamos os dados compartilhados apenas para contato e atendimento, conforme solicitado.",
    )


@dataclass(frozen=True)
class ModelConfig:
    """Remote intent classifier settings."""

    openai_api_key: Optional[str] = os.getenv("OPENAI_API_KEY") or None
    llm_model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    llm_temperature: float = _safe_float("LLM_TEMPERATURE", "0.2")
    classifier_timeout_sec: float = _safe_float("CLASSIFIER_TIMEOUT", "15.0")
    history_window: int = _safe_int("CLASSIFIER_HISTORY_WINDOW", "6")


@dataclass(frozen=True)
class SessionConfig:
    """Conversation memory and fallback thresholds."""

    max_messages: int = _safe_int("MAX_SESSION_MESSAGES", "10")
    fallback_handoff_threshold: int = _safe_int("FALLBACK_HANDOFF_THRESHOLD", "2")


@dataclass(frozen=True)
class SchedulingConfig:
    """Meeting slot generation rules."""

    business_hours: tuple[int, ...] = _safe_int_list("BUSINESS_HOURS", "9,11,14,16")
    max_slot_options: int = _safe_int("MAX_SLOT_OPTIONS", "6")
    horizon_days: int = _safe_int("SCHEDULING_HORIZON_DAYS", "7")


@dataclass(frozen=True)
class StorageConfig:
    """Location of the append-only JSON collections."""

    data_dir: str = os.getenv("DATA_DIR", "data")
    leads_file: str = os.getenv("LEADS_FILE", "leads.json")
    tickets_file: str = os.getenv("TICKETS_FILE", "tickets.json")
    bookings_file: str = os.getenv("BOOKINGS_FILE", "bookings.json")


@dataclass(frozen=True)
class ServerConfig:
    """HTTP transport settings."""

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _safe_int("PORT", "3000")
    allowed_origins: tuple[str, ...] = _str_list("ALLOWED_ORIGINS", "http://localhost:3000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 <= config.model.llm_temperature <= 2.0:
        raise ValueError(
            f"LLM_TEMPERATURE must be between 0.0 and 2.0, got {config.model.llm_temperature}"
        )
    if config.model.classifier_timeout_sec <= 0:
        raise ValueError(
            f"CLASSIFIER_TIMEOUT must be > 0, got {config.model.classifier_timeout_sec}"
        )
    if config.model.history_window < 0:
        raise ValueError(
            f"CLASSIFIER_HISTORY_WINDOW must be >= 0, got {config.model.history_window}"
        )
    if config.session.max_messages < 2:
        raise ValueError(
            f"MAX_SESSION_MESSAGES must be >= 2, got {config.session.max_messages}"
        )
    if config.session.fallback_handoff_threshold < 1:
        raise ValueError(
            "FALLBACK_HANDOFF_THRESHOLD must be >= 1, "
            f"got {config.session.fallback_handoff_threshold}"
        )
    if not config.scheduling.business_hours:
        raise ValueError("BUSINESS_HOURS must list at least one hour")
    for hour in config.scheduling.business_hours:
        if not 0 <= hour <= 23:
            raise ValueError(f"BUSINESS_HOURS entries must be between 0 and 23, got {hour}")
    if config.scheduling.max_slot_options < 1:
        raise ValueError(
            f"MAX_SLOT_OPTIONS must be >= 1, got {config.scheduling.max_slot_options}"
        )
    if config.scheduling.horizon_days < 1:
        raise ValueError(
            f"SCHEDULING_HORIZON_DAYS must be >= 1, got {config.scheduling.horizon_days}"
        )
    if not 1 <= config.server.port <= 65535:
        raise ValueError(f"PORT must be between 1 and 65535, got {config.server.port}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_session_filter()
    logger.info(
        "Configuration loaded for '%s' (remote classifier: %s)",
        config.business.name,
        "enabled" if config.model.openai_api_key else "disabled",
    )
    return config


# Singleton instance
settings = load_config()
