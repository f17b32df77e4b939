"""User-facing replies for the router and the slot-filling flows.

All copy is Brazilian Portuguese. Company-specific values come from
configuration so the same flows can be rebranded without code changes.
"""

from ts_assistant.config import settings

_biz = settings.business

# --- Router ---

HANDOFF_MESSAGE = (
    f"Vou encaminhar sua conversa para um especialista da {_biz.name}. "
    "Em breve alguém do time entra em contato com você."
)
HANDOFF_OFFER_CONTACT = "Se preferir posso registrar seu contato."
REPHRASE_REQUEST = "Não tenho certeza se entendi. Poderia reformular ou detalhar um pouco mais?"

# --- Lead ---

LEAD_PROMPTS: dict[str, str] = {
    "name": "Perfeito! Qual é o seu nome completo?",
    "email": "Obrigado. Pode compartilhar seu e-mail corporativo?",
    "company": "Qual é o nome da sua empresa?",
    "team_size": "Quantas pessoas aproximadas compõem a equipe ou squad que usaria a solução?",
    "interest": "Poderia detalhar rapidamente o que você busca? (ex: tipo de projeto, objetivo)",
    "budget": (
        "Se já tiver uma estimativa de orçamento, posso registrar. "
        "Caso não tenha, é só dizer que ainda não definiu."
    ),
}
LEAD_SUMMARY_TITLE = "Resumo do que anotei:"
LEAD_CONFIRM_QUESTION = (
    "Posso registrar esses dados no CRM para nosso time comercial? "
    "Usaremos somente para contato e acompanhamento."
)
LEAD_CONFIRM_REPROMPT = (
    "Se precisar ajustar alguma informação é só me avisar. "
    "Está tudo correto para eu enviar ao time comercial?"
)
LEAD_SUCCESS = (
    "Perfeito, encaminhei os dados ao time comercial. Eles entrarão em contato em breve. "
    f"{_biz.closing_question}"
)
LEAD_ALREADY_SUBMITTED = (
    f"Dados já confirmados e enviados ao time comercial. {_biz.closing_question}"
)

# --- Support ---

SUPPORT_PROMPTS: dict[str, str] = {
    "severity": "Pode me informar a severidade? (baixa, média ou alta)",
    "description": "Poderia descrever rapidamente o que está ocorrendo?",
    "contact": "Qual e-mail ou telefone podemos usar para retorno?",
}
SUPPORT_SUMMARY_TITLE = "Resumo do ticket:"
SUPPORT_CONFIRM_QUESTION = (
    "Posso registrar isso com o suporte agora? Usaremos os dados apenas para esse atendimento."
)
SUPPORT_CONFIRM_REPROMPT = (
    "Se precisar ajustar alguma informação do ticket é só avisar. "
    "Posso prosseguir com o envio para o suporte?"
)
SUPPORT_SUCCESS = (
    "Perfeito, abri o ticket com nossa equipe de suporte. Retornaremos no contato informado. "
    f"{_biz.closing_question}"
)
SUPPORT_ALREADY_SUBMITTED = (
    "O ticket já foi encaminhado ao suporte. Assim que possível retornaremos. "
    f"{_biz.closing_question}"
)

# --- Schedule ---

SCHEDULE_PROMPTS: dict[str, str] = {
    "interest": "Sobre qual assunto ou solução você gostaria de conversar na reunião?",
    "slot": "Qual horário prefere? Basta indicar o número.",
    "contact": (
        "Qual e-mail ou telefone podemos usar para confirmar o convite? "
        "Os dados serão usados apenas para esse agendamento."
    ),
}
SCHEDULE_NO_SLOTS = (
    "No momento não encontrei horários livres nos próximos dias. "
    "Posso pedir para alguém do time entrar em contato para combinar outra data?"
)
SCHEDULE_CONFIRM_REPROMPT = (
    "Tudo certo para eu confirmar esse horário? Se preferir outro, é só mencionar."
)
SCHEDULE_SUCCESS = (
    "Agenda confirmada! Você receberá o convite por e-mail em breve. "
    f"{_biz.closing_question}"
)
SCHEDULE_ALREADY_SUBMITTED = (
    "Agendamento confirmado anteriormente. Se precisar alterar, posso verificar disponibilidade. "
    f"{_biz.closing_question}"
)

# --- Shared ---

SUBMISSION_FAILED = (
    "Não consegui registrar suas informações agora por uma falha interna. "
    "Seus dados continuam anotados; pode confirmar novamente em instantes?"
)


def build_bullet_summary(title: str, items: list[tuple[str, str]], question: str) -> str:
    """Read-back of collected fields followed by the confirmation question."""
    lines = [title]
    for label, value in items:
        lines.append(f"- {label}: {value}")
    lines.append(question)
    return "\n".join(lines)


def build_slot_options_prompt(options: list[str]) -> str:
    """Enumerate offered slots, 1-based, so the user can answer with a number."""
    listing = "\n".join(f"{index}. {slot}" for index, slot in enumerate(options, start=1))
    return (
        f"Tenho essas opções nos próximos dias:\n{listing}\n"
        f"{SCHEDULE_PROMPTS['slot']}"
    )


def build_schedule_summary(interest: str, slot: str, contact: str) -> str:
    return (
        f"Ótimo! Anotei o interesse em {interest} e o horário {slot}. "
        f"Podemos confirmar usando o contato {contact}?\n"
        "Posso finalizar o agendamento?"
    )
