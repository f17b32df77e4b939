"""Chat message, classifier and response schemas."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Intent(str, Enum):
    FAQ = "faq"
    LEAD = "lead"
    SUPPORT = "support"
    SCHEDULE = "schedule"
    HANDOFF = "handoff"
    OTHER = "other"


class ClassifierAction(str, Enum):
    ASK = "ask"
    ANSWER = "answer"
    CONFIRM = "confirm"
    HANDOFF = "handoff"


class ChatMessage(BaseModel):
    """A single message in a session's rolling history."""

    role: Role
    content: str
    timestamp: float


class ClassifierContext(BaseModel):
    """Input handed to an intent classifier for one turn."""

    session_id: str
    message: str
    history: list[ChatMessage] = Field(default_factory=list)
    summary: str = ""


class ClassifiedMessage(BaseModel):
    """Intent label plus whatever fields the classifier managed to pull out."""

    intent: Intent
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    action: Optional[ClassifierAction] = None
    entities: dict[str, str] = Field(default_factory=dict)
    notes: Optional[str] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> Any:
        if value is None:
            return 0.5
        if isinstance(value, (int, float)):
            return min(max(float(value), 0.0), 1.0)
        return value

    @field_validator("action", mode="before")
    @classmethod
    def _unknown_action_is_none(cls, value: Any) -> Any:
        valid = {action.value for action in ClassifierAction}
        return value if value in valid else None

    @field_validator("entities", mode="before")
    @classmethod
    def _stringify_entities(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        return {
            str(key): str(item).strip()
            for key, item in value.items()
            if isinstance(item, (str, int, float)) and str(item).strip()
        }


class ChatResponse(BaseModel):
    """Result of one submitted turn."""

    reply: str
    intent: Intent
    privacy: str
    submission_failed: bool = False
