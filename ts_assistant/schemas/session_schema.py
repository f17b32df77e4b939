"""Per-session conversational state and in-flight flow records."""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from ts_assistant.schemas.conversation_schema import ChatMessage


class Domain(str, Enum):
    """Slot-filling domains, in sticky-continuation priority order."""
    LEAD = "lead"
    SUPPORT = "support"
    SCHEDULE = "schedule"


class _Unset:
    """Marker for a field the user has not provided yet."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


@dataclass
class Record:
    """
    Accumulating structured data for one flow instance.

    ``values`` only holds fields the user actually provided; a missing key
    reads back as ``UNSET`` so a blank extraction can never pass for a
    provided value.
    """
    values: dict[str, str] = field(default_factory=dict)
    confirmation_requested: bool = False
    confirmed: bool = False
    options: list[str] = field(default_factory=list)
    pending_field: Optional[str] = None

    def get(self, name: str) -> Union[str, _Unset]:
        return self.values.get(name, UNSET)

    def is_set(self, name: str) -> bool:
        return name in self.values

    def set(self, name: str, value: str) -> bool:
        """Store a value; returns True when it changed the record."""
        if not value:
            return False
        if self.values.get(name) == value:
            return False
        self.values[name] = value
        return True

    def copy(self) -> "Record":
        return copy.deepcopy(self)


@dataclass
class Session:
    """
    Everything the assistant remembers about one caller-supplied session key.

    Lives for the process lifetime; there is no expiry.
    """
    messages: list[ChatMessage] = field(default_factory=list)
    summary: str = ""
    records: dict[Domain, Record] = field(default_factory=dict)
    fallback_attempts: int = 0

    def unfinished_domains(self) -> list[Domain]:
        """Domains with an in-flight, unconfirmed record, in priority order."""
        return [
            domain
            for domain in Domain
            if domain in self.records and not self.records[domain].confirmed
        ]
