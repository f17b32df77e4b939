"""
Domain configurations for the lead, support and schedule flows.

Field order is significant: it is both the extraction order and the order
in which missing fields are asked for.
"""

import re
from datetime import datetime
from typing import Callable, Mapping, Optional

from ts_assistant.config import BusinessConfig, SchedulingConfig, settings
from ts_assistant.conversation.extractors import (
    extract_budget,
    extract_company,
    extract_contact,
    extract_email,
    extract_name,
    extract_severity,
    extract_team_size,
    select_option,
)
from ts_assistant.conversation.slot_flow import (
    FieldSpec,
    FlowConfig,
    FlowReplies,
    SlotFillingFlow,
)
from ts_assistant.logging_context import get_session_logger
from ts_assistant.prompts import replies
from ts_assistant.schemas.record_schema import BookingRecord, LeadRecord, TicketRecord
from ts_assistant.schemas.session_schema import Domain, Record
from ts_assistant.tools.availability import business_now, generate_slots
from ts_assistant.tools.storage import RecordStore

logger = get_session_logger(__name__)

TEAM_SIZE_CUE = re.compile(
    r"equipe|time\b|squad|pessoas|funcionari|colaborador|desenvolvedor|devs?\b|"
    r"pequen|startup|\bmedi[ao]\b|grande|enterprise|corp"
)
BUDGET_CUE = re.compile(r"orcamento|budget|verba|investimento|r\$|reais|\bmil\b|\d+\s*k\b")


# --------------------------------------------------------------------------- #
# Lead
# --------------------------------------------------------------------------- #

def _lead_commit(record: Record) -> LeadRecord:
    return LeadRecord(
        name=record.values["name"],
        email=record.values["email"],
        company=record.values["company"],
        team_size=record.values["team_size"],
        interest=record.values["interest"],
        budget=record.values.get("budget"),
    )


LEAD_CONFIG = FlowConfig(
    domain=Domain.LEAD,
    fields=(
        FieldSpec("name", "Nome", replies.LEAD_PROMPTS["name"],
                  extractor=extract_name, free_text=True, entity_keys=("nome", "name")),
        FieldSpec("email", "E-mail", replies.LEAD_PROMPTS["email"],
                  extractor=extract_email, entity_keys=("email",)),
        FieldSpec("company", "Empresa", replies.LEAD_PROMPTS["company"],
                  extractor=extract_company, free_text=True, entity_keys=("empresa", "company")),
        FieldSpec("team_size", "Tamanho da equipe", replies.LEAD_PROMPTS["team_size"],
                  extractor=extract_team_size, cue=TEAM_SIZE_CUE,
                  entity_keys=("tamanhoEquipe", "team_size")),
        FieldSpec("interest", "Interesse", replies.LEAD_PROMPTS["interest"],
                  free_text=True, entity_keys=("interesse", "interest")),
        FieldSpec("budget", "Orçamento estimado", replies.LEAD_PROMPTS["budget"],
                  extractor=extract_budget, required=False, cue=BUDGET_CUE,
                  entity_keys=("orcamento", "budget")),
    ),
    replies=FlowReplies(
        already_submitted=replies.LEAD_ALREADY_SUBMITTED,
        success=replies.LEAD_SUCCESS,
        confirm_reprompt=replies.LEAD_CONFIRM_REPROMPT,
        confirm_question=replies.LEAD_CONFIRM_QUESTION,
        summary_title=replies.LEAD_SUMMARY_TITLE,
    ),
    build_commit=_lead_commit,
)


# --------------------------------------------------------------------------- #
# Support
# --------------------------------------------------------------------------- #

def _ticket_commit(record: Record) -> TicketRecord:
    return TicketRecord(
        severity=record.values["severity"],
        description=record.values["description"],
        contact=record.values["contact"],
    )


SUPPORT_CONFIG = FlowConfig(
    domain=Domain.SUPPORT,
    fields=(
        FieldSpec("severity", "Severidade", replies.SUPPORT_PROMPTS["severity"],
                  extractor=extract_severity, entity_keys=("severidade", "severity")),
        FieldSpec("description", "Descrição", replies.SUPPORT_PROMPTS["description"],
                  free_text=True, entity_keys=("descricao", "description")),
        FieldSpec("contact", "Contato", replies.SUPPORT_PROMPTS["contact"],
                  extractor=extract_contact, entity_keys=("contato", "contact", "email", "telefone")),
    ),
    replies=FlowReplies(
        already_submitted=replies.SUPPORT_ALREADY_SUBMITTED,
        success=replies.SUPPORT_SUCCESS,
        confirm_reprompt=replies.SUPPORT_CONFIRM_REPROMPT,
        confirm_question=replies.SUPPORT_CONFIRM_QUESTION,
        summary_title=replies.SUPPORT_SUMMARY_TITLE,
    ),
    build_commit=_ticket_commit,
    opening_field="description",
)


# --------------------------------------------------------------------------- #
# Schedule
# --------------------------------------------------------------------------- #

def _booking_commit(record: Record) -> BookingRecord:
    return BookingRecord(
        slot=record.values["slot"],
        interest=record.values["interest"],
        contact=record.values["contact"],
    )


def _schedule_summary(record: Record) -> str:
    return replies.build_schedule_summary(
        record.values["interest"], record.values["slot"], record.values["contact"]
    )


SCHEDULE_CONFIG = FlowConfig(
    domain=Domain.SCHEDULE,
    fields=(
        FieldSpec("interest", "Interesse", replies.SCHEDULE_PROMPTS["interest"],
                  free_text=True, entity_keys=("interesse", "interest")),
        FieldSpec("slot", "Horário", replies.SCHEDULE_PROMPTS["slot"]),
        FieldSpec("contact", "Contato", replies.SCHEDULE_PROMPTS["contact"],
                  extractor=extract_contact, entity_keys=("contato", "contact", "email", "telefone"),
                  prompt_includes_privacy=True),
    ),
    replies=FlowReplies(
        already_submitted=replies.SCHEDULE_ALREADY_SUBMITTED,
        success=replies.SCHEDULE_SUCCESS,
        confirm_reprompt=replies.SCHEDULE_CONFIRM_REPROMPT,
        confirm_question="Posso finalizar o agendamento?",
    ),
    build_commit=_booking_commit,
    opening_field="interest",
    render_summary=_schedule_summary,
    summary_includes_privacy=False,
)


class ScheduleFlow(SlotFillingFlow):
    """
    Schedule flow: offers free slots and resolves the user's pick among them.

    Options are generated once per record, the first time the flow runs,
    from the bookings collection the flow also commits to.
    """

    def __init__(
        self,
        store: RecordStore,
        config: FlowConfig = SCHEDULE_CONFIG,
        scheduling: SchedulingConfig = settings.scheduling,
        business: BusinessConfig = settings.business,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        super().__init__(config, store)
        self._scheduling = scheduling
        self._business = business
        self._clock = clock or (lambda: business_now(business))

    async def available_slots(self) -> list[str]:
        bookings = await self._store.load_all()
        booked = [str(b["slot"]) for b in bookings if b.get("slot")]
        return generate_slots(booked, self._clock(), self._scheduling, self._business)

    async def _prepare(self, record: Record) -> None:
        if record.options:
            return
        record.options = await self.available_slots()
        logger.info("Offering %d slot options", len(record.options))

    def _extract(self, spec: FieldSpec, message: str, record: Record) -> Optional[str]:
        if spec.name == "slot":
            return select_option(message, record.options)
        return super()._extract(spec, message, record)

    def _prompt_for(self, spec: FieldSpec, record: Record) -> str:
        if spec.name == "slot":
            if not record.options:
                return replies.SCHEDULE_NO_SLOTS
            return replies.build_slot_options_prompt(record.options)
        return spec.prompt


def build_flows(stores: Mapping[Domain, RecordStore], **schedule_kwargs) -> dict[Domain, SlotFillingFlow]:
    """Wire one flow per domain to its persistence collection."""
    return {
        Domain.LEAD: SlotFillingFlow(LEAD_CONFIG, stores[Domain.LEAD]),
        Domain.SUPPORT: SlotFillingFlow(SUPPORT_CONFIG, stores[Domain.SUPPORT]),
        Domain.SCHEDULE: ScheduleFlow(stores[Domain.SCHEDULE], **schedule_kwargs),
    }
