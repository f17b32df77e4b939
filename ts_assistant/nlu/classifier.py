"""
Intent classification: remote LLM classifier with a deterministic fallback.

Two implementations share one contract. ``KeywordClassifier`` is pure
pattern matching and never fails. ``OpenAIClassifier`` asks a chat model for
a JSON verdict and falls back to the keyword classifier on any failure
(SDK error, timeout, empty or malformed payload, unknown intent label), so
classification problems never reach the user.

Usage:
    classifier = build_classifier()
    verdict = await classifier.classify(ClassifierContext(session_id="s1", message="Oi"))
"""

import asyncio
import logging
import re
from typing import Any, Optional, Protocol

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from ts_assistant.config import ModelConfig, settings
from ts_assistant.prompts.system_prompts import (
    CLASSIFIER_SYSTEM_PROMPT,
    FEW_SHOT_EXAMPLES,
    SUMMARY_ACK,
    SUMMARY_CONTEXT_TEMPLATE,
)
from ts_assistant.schemas.conversation_schema import (
    ClassifiedMessage,
    ClassifierAction,
    ClassifierContext,
    Intent,
)
from ts_assistant.utils import fold_accents

logger = logging.getLogger(__name__)

JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


class IntentClassifier(Protocol):
    async def classify(self, context: ClassifierContext) -> ClassifiedMessage: ...


class KeywordClassifier:
    """Deterministic keyword rules, checked in a fixed priority order."""

    RULES: list[tuple[re.Pattern, Intent, float, ClassifierAction, Optional[str]]] = [
        (re.compile(r"servic|oferecem|produtos"), Intent.FAQ, 0.7, ClassifierAction.ANSWER, None),
        (re.compile(r"orcamento|proposta|preco|cot(a)?cao"), Intent.LEAD, 0.75,
         ClassifierAction.ASK, "interesse"),
        (re.compile(r"erro|bug|falha|problema|parou"), Intent.SUPPORT, 0.7,
         ClassifierAction.ASK, "descricao"),
        (re.compile(r"agend|marcar|reuniao|demo"), Intent.SCHEDULE, 0.72,
         ClassifierAction.ASK, "interesse"),
        (re.compile(r"\b(humano|atendente|pessoa)\b"), Intent.HANDOFF, 0.8,
         ClassifierAction.HANDOFF, None),
    ]

    async def classify(self, context: ClassifierContext) -> ClassifiedMessage:
        return self.classify_text(context.message)

    def classify_text(self, text: str) -> ClassifiedMessage:
        folded = fold_accents(text)
        for pattern, intent, confidence, action, entity_key in self.RULES:
            if pattern.search(folded):
                entities = {entity_key: text} if entity_key else {}
                return ClassifiedMessage(
                    intent=intent, confidence=confidence, action=action, entities=entities
                )
        return ClassifiedMessage(
            intent=Intent.OTHER, confidence=0.4, action=ClassifierAction.ASK
        )


class OpenAIClassifier:
    """Chat-completion classifier; any failure degrades to ``KeywordClassifier``."""

    def __init__(
        self,
        config: ModelConfig = settings.model,
        client: Optional[Any] = None,
        fallback: Optional[KeywordClassifier] = None,
    ) -> None:
        self._config = config
        self._client = client or AsyncOpenAI(api_key=config.openai_api_key)
        self._fallback = fallback or KeywordClassifier()

    def build_messages(self, context: ClassifierContext) -> list[dict[str, str]]:
        messages = [{"role": "system", "content": CLASSIFIER_SYSTEM_PROMPT}, *FEW_SHOT_EXAMPLES]
        if context.summary:
            messages.append(
                {"role": "user", "content": SUMMARY_CONTEXT_TEMPLATE.format(summary=context.summary)}
            )
            messages.append({"role": "assistant", "content": SUMMARY_ACK})
        window = self._config.history_window
        recent = context.history[-window:] if window else []
        for msg in recent:
            messages.append({"role": msg.role.value, "content": msg.content})
        messages.append({"role": "user", "content": context.message})
        return messages

    async def classify(self, context: ClassifierContext) -> ClassifiedMessage:
        try:
            completion = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._config.llm_model,
                    temperature=self._config.llm_temperature,
                    messages=self.build_messages(context),
                ),
                timeout=self._config.classifier_timeout_sec,
            )
            content = completion.choices[0].message.content if completion.choices else None
        except (OpenAIError, asyncio.TimeoutError, AttributeError, IndexError) as exc:
            logger.warning("Remote classifier failed (%s), using keyword fallback", exc)
            return self._fallback.classify_text(context.message)

        if not content:
            logger.warning("Remote classifier returned no content, using keyword fallback")
            return self._fallback.classify_text(context.message)
        return self.parse_response(content, context.message)

    def parse_response(self, content: str, message: str) -> ClassifiedMessage:
        """Validate the model's JSON; the user's message is re-classified by keyword if it fails."""
        match = JSON_OBJECT_RE.search(content)
        try:
            if match is None:
                raise ValueError("no JSON object in classifier reply")
            verdict = ClassifiedMessage.model_validate_json(match.group(0))
        except (ValidationError, ValueError) as exc:
            logger.warning("Malformed classifier payload (%s), using keyword fallback", exc)
            return self._fallback.classify_text(message)
        logger.debug("Remote classifier verdict: %s (%.2f)", verdict.intent.value, verdict.confidence)
        return verdict


def build_classifier(config: ModelConfig = settings.model) -> IntentClassifier:
    """Remote classifier when an API key is configured, keyword rules otherwise."""
    if config.openai_api_key:
        logger.info("Using remote intent classifier (%s)", config.llm_model)
        return OpenAIClassifier(config)
    logger.info("No OPENAI_API_KEY configured, using keyword intent classifier")
    return KeywordClassifier()
