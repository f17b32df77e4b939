"""Shared utilities used across the assistant."""

import re
import unicodedata

_DANGEROUS_CHARS = re.compile(r"[<>\\{}\[\]\^`]")


def sanitize_input(value: str) -> str:
    """Strip markup-like characters and surrounding whitespace from user text.

    Examples:
        >>> sanitize_input("  <b>Olá</b> ")
        'bOlá/b'
        >>> sanitize_input("erro {500}")
        'erro 500'
    """
    return _DANGEROUS_CHARS.sub("", value).strip()


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("11 98765-4321")
        '11987654321'
        >>> normalize_phone("+55 (11) 98765-4321")
        '+5511987654321'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def fold_accents(value: str) -> str:
    """Lowercase and drop diacritics so keyword patterns match "média" and "media" alike.

    Examples:
        >>> fold_accents("Orçamento Médio")
        'orcamento medio'
    """
    decomposed = unicodedata.normalize("NFKD", value.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))
