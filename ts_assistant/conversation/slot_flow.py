"""
Generic slot-filling flow: Collect -> Confirm -> Commit.

One engine drives every domain. A ``FlowConfig`` supplies the ordered field
list, per-field extractors and prompts, the summary read-back and the commit
record builder; the engine owns the turn-by-turn state transitions.

Usage:
    flow = SlotFillingFlow(LEAD_CONFIG, store)
    result = await flow.advance(session_record, "Meu nome é Ana", entities={})
    if result.done:
        ...  # record committed (or already submitted), detach it from the session
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from pydantic import BaseModel

from ts_assistant.conversation.extractors import extract_free_text, is_affirmative
from ts_assistant.logging_context import get_session_logger
from ts_assistant.prompts.replies import SUBMISSION_FAILED, build_bullet_summary
from ts_assistant.schemas.session_schema import Domain, Record
from ts_assistant.tools.storage import RecordStore
from ts_assistant.utils import fold_accents

logger = get_session_logger(__name__)


@dataclass(frozen=True)
class FieldSpec:
    """Schema for a single field to collect."""

    name: str
    label: str
    prompt: str
    extractor: Optional[Callable[[str], Optional[str]]] = None
    required: bool = True
    # Extractor is only trusted when this matches (or the field was just asked for).
    cue: Optional[re.Pattern] = None
    # Accept the whole message when this field was just asked for and nothing else matched.
    free_text: bool = False
    entity_keys: tuple[str, ...] = ()
    prompt_includes_privacy: bool = False


@dataclass(frozen=True)
class FlowReplies:
    already_submitted: str
    success: str
    confirm_reprompt: str
    confirm_question: str
    summary_title: str = ""
    submission_failed: str = SUBMISSION_FAILED


@dataclass(frozen=True)
class FlowConfig:
    """Everything that makes a flow a lead, support or schedule flow."""

    domain: Domain
    fields: tuple[FieldSpec, ...]
    replies: FlowReplies
    build_commit: Callable[[Record], BaseModel]
    # Filled with the whole opening message when the record is created.
    opening_field: Optional[str] = None
    render_summary: Optional[Callable[[Record], str]] = None
    summary_includes_privacy: bool = True

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise ValueError(f"Unknown field for {self.domain.value}: {name}")

    @property
    def required_fields(self) -> list[FieldSpec]:
        return [spec for spec in self.fields if spec.required]


@dataclass
class FlowResult:
    """Outcome of one ``advance`` call."""

    reply: str
    record: Record
    done: bool = False
    privacy_included: bool = False
    committed: bool = False
    failed: bool = False
    updated_fields: list[str] = field(default_factory=list)


class SlotFillingFlow:
    """
    Turn-by-turn state machine for one domain.

    The input record is never mutated; every call works on a copy and hands
    the new record back in the ``FlowResult``. A confirmed record is
    terminal: further calls return the "already submitted" reply and never
    commit again.
    """

    def __init__(self, config: FlowConfig, store: RecordStore) -> None:
        self.config = config
        self._store = store

    @property
    def domain(self) -> Domain:
        return self.config.domain

    # ------------------------------------------------------------------ #
    # Transition function
    # ------------------------------------------------------------------ #

    async def advance(
        self,
        current: Optional[Record],
        message: str,
        entities: Optional[dict[str, str]] = None,
    ) -> FlowResult:
        replies = self.config.replies
        is_new = current is None
        record = Record() if current is None else current.copy()

        if record.confirmed:
            logger.info("%s flow already submitted, ignoring message", self.domain.value)
            return FlowResult(reply=replies.already_submitted, record=record, done=True)

        self._seed(record, entities or {}, message, is_new)
        await self._prepare(record)
        updated = self._extract_fields(record, message)
        missing = self.missing_fields(record)

        if not missing and record.confirmation_requested:
            if is_affirmative(message):
                return await self._commit(record)
            if updated:
                logger.info(
                    "%s correction received (%s), re-summarising",
                    self.domain.value, ", ".join(updated),
                )
                record.confirmation_requested = False
            else:
                return FlowResult(
                    reply=replies.confirm_reprompt, record=record, updated_fields=updated
                )

        if not missing:
            record.confirmation_requested = True
            record.pending_field = None
            return FlowResult(
                reply=self.summarize(record),
                record=record,
                privacy_included=self.config.summary_includes_privacy,
                updated_fields=updated,
            )

        next_field = missing[0]
        record.pending_field = next_field.name
        logger.debug("%s flow asking for '%s'", self.domain.value, next_field.name)
        return FlowResult(
            reply=self._prompt_for(next_field, record),
            record=record,
            privacy_included=next_field.prompt_includes_privacy,
            updated_fields=updated,
        )

    def missing_fields(self, record: Record) -> list[FieldSpec]:
        """Required fields still unset, in declared order."""
        return [spec for spec in self.config.required_fields if not record.is_set(spec.name)]

    def summarize(self, record: Record) -> str:
        """Read back every collected field followed by the confirmation question."""
        if self.config.render_summary is not None:
            return self.config.render_summary(record)
        items = [
            (spec.label, str(record.get(spec.name)))
            for spec in self.config.fields
            if record.is_set(spec.name)
        ]
        replies = self.config.replies
        return build_bullet_summary(replies.summary_title, items, replies.confirm_question)

    # ------------------------------------------------------------------ #
    # Hooks for domain specialisations
    # ------------------------------------------------------------------ #

    async def _prepare(self, record: Record) -> None:
        """Attach domain data the extractors need before this turn runs."""

    def _extract(self, spec: FieldSpec, message: str, record: Record) -> Optional[str]:
        if spec.extractor is None:
            return None
        is_pending = record.pending_field == spec.name
        if spec.cue is not None and not is_pending and not spec.cue.search(fold_accents(message)):
            return None
        return spec.extractor(message)

    def _prompt_for(self, spec: FieldSpec, record: Record) -> str:
        return spec.prompt

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _seed(
        self, record: Record, entities: dict[str, str], message: str, is_new: bool
    ) -> None:
        """Fill unset fields from classifier entities, then the opening message."""
        for spec in self.config.fields:
            if record.is_set(spec.name):
                continue
            for key in spec.entity_keys:
                raw = (entities.get(key) or "").strip()
                if not raw:
                    continue
                value = raw if spec.free_text or spec.extractor is None else spec.extractor(raw)
                if value and record.set(spec.name, value):
                    logger.debug("Seeded '%s' from classifier entity '%s'", spec.name, key)
                    break

        opening = self.config.opening_field
        if is_new and opening and not record.is_set(opening):
            value = extract_free_text(message)
            if value:
                record.set(opening, value)

    def _extract_fields(self, record: Record, message: str) -> list[str]:
        """
        Try every eligible field against the message; returns names that changed.

        Unset fields are always eligible. Set fields are only eligible while
        confirmation is pending, and only a differing value counts as a
        correction.
        """
        correcting = record.confirmation_requested
        captured: dict[str, str] = {}
        for spec in self.config.fields:
            if record.is_set(spec.name) and not correcting:
                continue
            value = self._extract(spec, message, record)
            if value:
                captured[spec.name] = value

        pending = record.pending_field
        if not captured and pending and not record.is_set(pending):
            spec = self.config.get_field(pending)
            if spec.free_text:
                value = extract_free_text(message)
                if value:
                    captured[pending] = value

        updated = []
        for name, value in captured.items():
            previous = record.get(name)
            if record.set(name, value):
                updated.append(name)
                if previous:
                    logger.info("%s field '%s' corrected", self.domain.value, name)
        return updated

    async def _commit(self, record: Record) -> FlowResult:
        record.confirmed = True
        record.confirmation_requested = False
        payload = self.config.build_commit(record)
        ok = await self._store.append_one(payload.model_dump())
        if not ok:
            record.confirmed = False
            record.confirmation_requested = True
            logger.error("%s commit failed, record kept for retry", self.domain.value)
            return FlowResult(
                reply=self.config.replies.submission_failed, record=record, failed=True
            )
        logger.info("%s record committed", self.domain.value)
        return FlowResult(
            reply=self.config.replies.success, record=record, done=True, committed=True
        )
