"""
Field extractors: pull one candidate value for one field out of raw text.

Every extractor is a pure function returning the value or ``None``. A miss
is never an error, it just means the user has not provided the field yet.
Keyword tests run on accent-folded lowercase text so "média" and "media"
behave the same; returned values keep the user's spelling.
"""

import re
from typing import Optional

from ts_assistant.utils import fold_accents, normalize_phone, sanitize_input

MIN_PHONE_DIGITS = 8

EMAIL_RE = re.compile(r"[\w.+-]+@(?:[\w-]+\.)+[\w-]{2,}")
PHONE_RE = re.compile(r"\+?\(?\d[\d\s()-]{7,}")
DIGITS_RE = re.compile(r"\d+")
AMOUNT_RE = re.compile(r"\d+[\d.,]*")

NAME_RE = re.compile(
    r"(?:meu nome (?:é|e)|nome:|me chamo|pode me chamar de)\s*(?P<value>.+)",
    re.IGNORECASE,
)
COMPANY_RE = re.compile(
    r"(?:^|\s)(?:empresa|companhia)(?:\s+(?:é|e|se chama|chamada))?[\s:]+(?P<value>\S.*)",
    re.IGNORECASE,
)

TEAM_BUCKETS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\b(pequena|pequeno|startup)\b"), "Pequena"),
    (re.compile(r"\b(media|medio)\b"), "Média"),
    (re.compile(r"\b(grande|enterprise|corp\w*)\b"), "Grande"),
]

SEVERITY_LEVELS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\b(alta|alto|critic[oa]|parad[oa]|urgente)\b"), "alta"),
    (re.compile(r"\b(media|medio|intermediari[oa])\b"), "media"),
    (re.compile(r"\b(baixa|baixo|leve|informativo)\b"), "baixa"),
]

AFFIRMATION_RE = re.compile(
    r"\b(sim|correto|certo|isso mesmo|perfeito|ok|okay|confirmo|confirma|confirme|"
    r"confirmado|pode enviar|pode marcar|pode registrar|pode seguir|fechado|fechar|claro|yes)\b"
)
NEGATION_RE = re.compile(r"\b(nao|errado|incorreto|corrigir|ajustar|alterar|mudar|trocar)\b")

ORDINAL_RE = re.compile(r"(?<![\d/:])\b(\d{1,2})\b(?![\d/:])")
HOUR_RE = re.compile(r"\b(\d{1,2})\s*h\s*(\d{2})?\b")
TIME_RE = re.compile(r"\b(\d{1,2}):(\d{2})\b")


def _clean_value(value: str) -> Optional[str]:
    value = value.strip().rstrip(".!;,").strip()
    return value or None


def extract_free_text(text: str) -> Optional[str]:
    """The whole sanitised message, for open questions like "what do you need?"."""
    return sanitize_input(text) or None


def extract_email(text: str) -> Optional[str]:
    match = EMAIL_RE.search(text)
    return match.group(0) if match else None


def extract_name(text: str) -> Optional[str]:
    """Explicit forms only ("meu nome é ..."); bare answers are handled as free text."""
    match = NAME_RE.search(text)
    return _clean_value(match.group("value")) if match else None


def extract_company(text: str) -> Optional[str]:
    """Explicit forms only ("empresa XPTO", "a empresa se chama ...")."""
    match = COMPANY_RE.search(text)
    return _clean_value(match.group("value")) if match else None


def extract_team_size(text: str) -> Optional[str]:
    """A literal head count wins over a qualitative size bucket."""
    match = DIGITS_RE.search(text)
    if match:
        return match.group(0)
    folded = fold_accents(text)
    for pattern, bucket in TEAM_BUCKETS:
        if pattern.search(folded):
            return bucket
    return None


def extract_budget(text: str) -> Optional[str]:
    match = AMOUNT_RE.search(text)
    if not match:
        return None
    return match.group(0).rstrip(".,")


def extract_severity(text: str) -> Optional[str]:
    """Map the message onto the bounded ``baixa | media | alta`` scale."""
    folded = fold_accents(text)
    for pattern, level in SEVERITY_LEVELS:
        if pattern.search(folded):
            return level
    return None


def extract_contact(text: str) -> Optional[str]:
    """An email address, or else a phone-like digit run of at least 8 digits."""
    email = extract_email(text)
    if email:
        return email
    match = PHONE_RE.search(text)
    if not match:
        return None
    phone = normalize_phone(match.group(0))
    if len(phone.lstrip("+")) < MIN_PHONE_DIGITS:
        return None
    return phone


def is_negative(text: str) -> bool:
    return bool(NEGATION_RE.search(fold_accents(text)))


def is_affirmative(text: str) -> bool:
    """Permissive "yes" detection; any negation word vetoes it."""
    folded = fold_accents(text)
    return bool(AFFIRMATION_RE.search(folded)) and not is_negative(text)


def _mentioned_times(text: str) -> set[str]:
    times = {f"{int(h):02d}:{m}" for h, m in TIME_RE.findall(text)}
    times.update(f"{int(h):02d}:{m or '00'}" for h, m in HOUR_RE.findall(text.lower()))
    return times


def select_option(text: str, options: list[str]) -> Optional[str]:
    """
    Resolve a reference to one of the offered slots.

    Accepts a 1-based ordinal ("2", "opção 2") or a partial match on the
    slot's date ("21/10", "21/10/2026") and/or time ("14:00", "14h").
    Options look like ``"21/10/2026 14:00 BRT"``. A number outside the
    option range is not an ordinal, so "dia 15 às 14:00" still matches on
    the time. References matching more than one slot return ``None``.
    """
    if not options:
        return None

    ordinal = ORDINAL_RE.search(text)
    if ordinal:
        index = int(ordinal.group(1)) - 1
        if 0 <= index < len(options):
            return options[index]

    times = _mentioned_times(text)
    by_date: list[str] = []
    by_time: list[str] = []
    for option in options:
        full_date, short_date, slot_time = option[:10], option[:5], option[11:16]
        if full_date in text or short_date in text:
            by_date.append(option)
        if slot_time in times:
            by_time.append(option)

    both = [option for option in by_date if option in by_time]
    if len(both) == 1:
        return both[0]
    if both or (by_date and by_time):
        return None
    either = by_date or by_time
    if len(either) == 1:
        return either[0]
    return None
