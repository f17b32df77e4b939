"""Committed record models written to the append-only collections."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LeadRecord(BaseModel):
    """Sales lead handed to the commercial team."""
    name: str
    email: str
    company: str
    team_size: str
    interest: str
    budget: Optional[str] = None
    created_at: str = Field(default_factory=_utc_now_iso)


class TicketRecord(BaseModel):
    """Support ticket opened with the support team."""
    severity: str
    description: str
    contact: str
    created_at: str = Field(default_factory=_utc_now_iso)


class BookingRecord(BaseModel):
    """Confirmed meeting slot."""
    slot: str
    interest: str
    contact: str
    created_at: str = Field(default_factory=_utc_now_iso)
