"""Static knowledge base: company profile, service catalog and FAQ entries."""

import logging
from typing import Optional

from ts_assistant.config import settings
from ts_assistant.utils import fold_accents, sanitize_input

logger = logging.getLogger(__name__)

COMPANY_PROFILE: dict[str, str] = {
    "name": settings.business.name,
    "mission": (
        "Ajudar empresas a acelerar seus produtos digitais com engenharia de software "
        "sob medida, dados e inteligência artificial aplicada."
    ),
    "email": "contato@techsolutions.com.br",
    "phone": "(11) 4002-8922",
    "hours": "segunda a sexta, das 9h às 18h",
}

SERVICES: list[str] = [
    "desenvolvimento de aplicativos mobile",
    "sistemas web sob medida",
    "integrações com ERP e CRM",
    "consultoria em dados e BI",
    "soluções com inteligência artificial",
    "sustentação e suporte técnico",
]

FAQS: list[dict[str, str]] = [
    {
        "question": "Quais serviços vocês oferecem?",
        "answer": "Oferecemos " + ", ".join(SERVICES[:-1]) + f" e {SERVICES[-1]}.",
    },
    {
        "question": "Quanto tempo leva um projeto?",
        "answer": (
            "Projetos menores costumam levar de 4 a 8 semanas; iniciativas maiores são "
            "planejadas em fases com entregas quinzenais."
        ),
    },
    {
        "question": "Vocês atendem empresas de todos os tamanhos?",
        "answer": "Sim, atendemos desde startups até grandes empresas, com squads dedicados.",
    },
    {
        "question": "Como funciona o suporte?",
        "answer": (
            "O suporte funciona por ticket com classificação de severidade; chamados de "
            "severidade alta são atendidos em até 4 horas úteis."
        ),
    },
    {
        "question": "Vocês assinam acordo de confidencialidade?",
        "answer": "Sim, assinamos NDA antes de qualquer conversa que envolva informações sensíveis.",
    },
]

FAQ_FALLBACK = (
    "Ainda não tenho essa informação aqui. "
    f"Posso encaminhar para alguém da {settings.business.name} ajudar melhor?"
)


def _question_stem(question: str) -> str:
    return fold_accents(question).split("?")[0].strip()


def find_answer(question: str) -> Optional[str]:
    """Match a question against the FAQ, then against profile keywords. None if no match."""
    normalized = fold_accents(sanitize_input(question))
    for item in FAQS:
        if _question_stem(item["question"]) in normalized:
            return item["answer"]

    if "servico" in normalized:
        return f"Atualmente oferecemos: {', '.join(SERVICES)}."
    if any(term in normalized for term in ("contat", "telefone", "email", "e-mail")):
        return (
            f"Você pode falar conosco pelo e-mail {COMPANY_PROFILE['email']} ou pelo telefone "
            f"{COMPANY_PROFILE['phone']} ({COMPANY_PROFILE['hours']})."
        )
    if "missao" in normalized or "sobre" in normalized:
        return f"Nossa missão: {COMPANY_PROFILE['mission']}"

    logger.debug("No knowledge base match for question")
    return None


def answer_or_fallback(question: str) -> str:
    return find_answer(question) or FAQ_FALLBACK
