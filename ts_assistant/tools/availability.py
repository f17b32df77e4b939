"""
Meeting slot generation.

Offers the next free business-hour slots for a demo or discovery call,
skipping weekends and anything already present in the bookings collection.
Slots are plain strings in the business timezone, e.g. ``"21/10/2026 14:00 BRT"``;
the same string is stored on the booking so exclusion is an exact match.
"""

import logging
from datetime import datetime, time, timedelta
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from ts_assistant.config import BusinessConfig, SchedulingConfig, settings

logger = logging.getLogger(__name__)

SLOT_FORMAT = "%d/%m/%Y %H:%M"
SATURDAY = 5


def format_slot(moment: datetime, label: str = settings.business.timezone_label) -> str:
    return f"{moment.strftime(SLOT_FORMAT)} {label}"


def business_now(business: BusinessConfig = settings.business) -> datetime:
    """Current time in the business timezone."""
    return datetime.now(ZoneInfo(business.timezone))


def generate_slots(
    booked: Iterable[str] = (),
    now: Optional[datetime] = None,
    scheduling: SchedulingConfig = settings.scheduling,
    business: BusinessConfig = settings.business,
) -> list[str]:
    """
    Up to ``max_slot_options`` free weekday slots over the next ``horizon_days``.

    Days start tomorrow (relative to ``now`` in the business timezone) and
    hours follow ``business_hours`` in order, so the result is chronological.
    """
    tz = ZoneInfo(business.timezone)
    now = now.astimezone(tz) if now is not None else datetime.now(tz)
    taken = set(booked)
    slots: list[str] = []

    for day_offset in range(1, scheduling.horizon_days + 1):
        if len(slots) >= scheduling.max_slot_options:
            break
        day = now.date() + timedelta(days=day_offset)
        if day.weekday() >= SATURDAY:
            continue
        for hour in scheduling.business_hours:
            slot = format_slot(datetime.combine(day, time(hour=hour), tzinfo=tz), business.timezone_label)
            if slot in taken:
                continue
            slots.append(slot)
            if len(slots) >= scheduling.max_slot_options:
                break

    logger.debug("Generated %d slot options (%d already booked)", len(slots), len(taken))
    return slots


def parse_slot(slot: str) -> Optional[datetime]:
    """Inverse of ``format_slot`` (timezone label ignored); None if malformed."""
    try:
        return datetime.strptime(slot[:16], SLOT_FORMAT)
    except ValueError:
        return None
