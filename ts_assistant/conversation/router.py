"""
Dialogue router: one inbound message in, one reply out.

Per turn, under the session's lock:
1. sanitise and append the user message to history
2. classify (remote or keyword classifier)
3. resolve the intent: classifier label, keyword override for ``other``,
   then sticky continuation of an unfinished flow (lead, support, schedule)
4. dispatch to a slot-filling flow, the knowledge base or the hand-off reply
5. decorate the reply (privacy notice, closing question) and append it to history
"""

import re
import time
from typing import Mapping, Optional

from ts_assistant.config import AppConfig, settings
from ts_assistant.conversation.flows import build_flows
from ts_assistant.conversation.session_store import SessionStore
from ts_assistant.conversation.slot_flow import FlowResult, SlotFillingFlow
from ts_assistant.logging_context import get_session_logger, set_session_id
from ts_assistant.nlu.classifier import IntentClassifier, build_classifier
from ts_assistant.prompts.replies import HANDOFF_MESSAGE, HANDOFF_OFFER_CONTACT, REPHRASE_REQUEST
from ts_assistant.schemas.conversation_schema import (
    ChatMessage,
    ChatResponse,
    ClassifiedMessage,
    ClassifierContext,
    Intent,
    Role,
)
from ts_assistant.schemas.session_schema import Domain, Session
from ts_assistant.tools.knowledge_base import answer_or_fallback
from ts_assistant.tools.storage import RecordStore, build_stores
from ts_assistant.utils import fold_accents, sanitize_input

logger = get_session_logger(__name__)

# Applied only when the classifier gives up with ``other``.
KEYWORD_OVERRIDES: list[tuple[re.Pattern, Intent]] = [
    (re.compile(r"orcamento|proposta|preco"), Intent.LEAD),
    (re.compile(r"erro|bug|falha|problema|incidente"), Intent.SUPPORT),
    (re.compile(r"agend|reuniao|demo|calendario"), Intent.SCHEDULE),
    (re.compile(r"servico|produto|faq|pergunta"), Intent.FAQ),
]

DOMAIN_INTENTS: dict[Intent, Domain] = {
    Intent.LEAD: Domain.LEAD,
    Intent.SUPPORT: Domain.SUPPORT,
    Intent.SCHEDULE: Domain.SCHEDULE,
}


class InvalidRequestError(ValueError):
    """Raised for a missing or non-string session id / message."""


class DialogueRouter:
    """Top-level orchestrator for chat turns."""

    def __init__(
        self,
        sessions: SessionStore,
        classifier: IntentClassifier,
        flows: Mapping[Domain, SlotFillingFlow],
        config: AppConfig = settings,
    ) -> None:
        self.sessions = sessions
        self.classifier = classifier
        self.flows = dict(flows)
        self._privacy_notice = config.business.privacy_notice
        self._closing = config.business.closing_question
        self._handoff_threshold = config.session.fallback_handoff_threshold

    @classmethod
    def from_config(
        cls,
        config: AppConfig = settings,
        stores: Optional[Mapping[Domain, RecordStore]] = None,
        classifier: Optional[IntentClassifier] = None,
    ) -> "DialogueRouter":
        """Wire the default collaborators: JSON stores and the configured classifier."""
        stores = stores if stores is not None else build_stores(config.storage)
        return cls(
            sessions=SessionStore(config.session),
            classifier=classifier or build_classifier(config.model),
            flows=build_flows(stores, scheduling=config.scheduling, business=config.business),
            config=config,
        )

    async def submit(self, session_id: object, message: object) -> ChatResponse:
        """Handle one inbound message for one session and return the reply."""
        if not isinstance(session_id, str) or not session_id.strip():
            raise InvalidRequestError("sessionId is required and must be a non-empty string")
        if not isinstance(message, str) or not message.strip():
            raise InvalidRequestError("message is required and must be a non-empty string")

        set_session_id(session_id)
        text = sanitize_input(message)
        if not text:
            raise InvalidRequestError("message is empty after sanitisation")

        async with self.sessions.lock(session_id):
            return await self._handle_turn(session_id, text)

    # ------------------------------------------------------------------ #
    # Turn handling
    # ------------------------------------------------------------------ #

    async def _handle_turn(self, session_id: str, text: str) -> ChatResponse:
        session = self.sessions.append_message(
            session_id, ChatMessage(role=Role.USER, content=text, timestamp=time.time())
        )
        verdict = await self.classifier.classify(
            ClassifierContext(
                session_id=session_id,
                message=text,
                history=list(session.messages[:-1]),
                summary=session.summary,
            )
        )
        intent = self.resolve_intent(verdict.intent, text, session)

        submission_failed = False
        domain = DOMAIN_INTENTS.get(intent)
        if domain is not None:
            result = await self._run_flow(session_id, session, domain, text, verdict)
            reply = result.reply
            if not result.privacy_included:
                reply = self._with_privacy_notice(reply)
            submission_failed = result.failed
        elif intent == Intent.FAQ:
            reply = answer_or_fallback(text)
            session.fallback_attempts = 0
        elif intent == Intent.HANDOFF:
            reply = HANDOFF_MESSAGE
            session.fallback_attempts = 0
        else:
            reply = self._fallback_reply(session)

        reply = self._with_closing(reply)
        self.sessions.append_message(
            session_id, ChatMessage(role=Role.ASSISTANT, content=reply, timestamp=time.time())
        )
        action = verdict.action.value if verdict.action else None
        logger.info("session=%s intent=%s action=%s", session_id, intent.value, action)
        return ChatResponse(
            reply=reply,
            intent=intent,
            privacy=self._privacy_notice,
            submission_failed=submission_failed,
        )

    def resolve_intent(self, label: Intent, text: str, session: Session) -> Intent:
        """Classifier label, then keyword override, then sticky continuation."""
        if label != Intent.OTHER:
            return label
        folded = fold_accents(text)
        for pattern, intent in KEYWORD_OVERRIDES:
            if pattern.search(folded):
                logger.debug("Keyword override: other -> %s", intent.value)
                return intent
        unfinished = session.unfinished_domains()
        if unfinished:
            logger.debug("Sticky continuation: other -> %s", unfinished[0].value)
            return Intent(unfinished[0].value)
        return Intent.OTHER

    async def _run_flow(
        self,
        session_id: str,
        session: Session,
        domain: Domain,
        text: str,
        verdict: ClassifiedMessage,
    ) -> FlowResult:
        flow = self.flows[domain]
        result = await flow.advance(
            self.sessions.get_domain_record(session_id, domain), text, verdict.entities
        )
        if result.done:
            self.sessions.clear_domain_record(session_id, domain)
        else:
            self.sessions.update_domain_record(session_id, domain, result.record)
            session.fallback_attempts = 0
        return result

    def _fallback_reply(self, session: Session) -> str:
        session.fallback_attempts += 1
        if session.fallback_attempts >= self._handoff_threshold:
            session.fallback_attempts = 0
            return f"{HANDOFF_MESSAGE}\n{HANDOFF_OFFER_CONTACT}"
        return REPHRASE_REQUEST

    # ------------------------------------------------------------------ #
    # Reply decoration
    # ------------------------------------------------------------------ #

    def _with_privacy_notice(self, reply: str) -> str:
        """Add the notice, keeping the closing question last if the reply has one."""
        if reply.endswith(self._closing):
            body = reply[: -len(self._closing)].rstrip()
            return f"{body}\n{self._privacy_notice}\n{self._closing}"
        return f"{reply}\n{self._privacy_notice}"

    def _with_closing(self, reply: str) -> str:
        if not reply or reply.endswith(self._closing):
            return reply
        return f"{reply}\n{self._closing}"
