from ts_assistant.conversation.flows import (
    LEAD_CONFIG,
    SCHEDULE_CONFIG,
    SUPPORT_CONFIG,
    ScheduleFlow,
    build_flows,
)
from ts_assistant.conversation.router import DialogueRouter, InvalidRequestError
from ts_assistant.conversation.session_store import SessionStore
from ts_assistant.conversation.slot_flow import (
    FieldSpec,
    FlowConfig,
    FlowResult,
    SlotFillingFlow,
)

__all__ = [
    "DialogueRouter",
    "InvalidRequestError",
    "SessionStore",
    "SlotFillingFlow",
    "ScheduleFlow",
    "FieldSpec",
    "FlowConfig",
    "FlowResult",
    "LEAD_CONFIG",
    "SUPPORT_CONFIG",
    "SCHEDULE_CONFIG",
    "build_flows",
]
