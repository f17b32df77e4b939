"""Tests for the per-field value extractors."""

import pytest

from ts_assistant.conversation.extractors import (
    extract_budget,
    extract_company,
    extract_contact,
    extract_email,
    extract_free_text,
    extract_name,
    extract_severity,
    extract_team_size,
    is_affirmative,
    is_negative,
    select_option,
)

OPTIONS = [
    "15/10/2026 09:00 BRT",
    "15/10/2026 14:00 BRT",
    "16/10/2026 09:00 BRT",
    "16/10/2026 11:00 BRT",
]


class TestEmailAndContact:
    def test_extracts_email(self):
        assert extract_email("meu email é joao@empresa.com.br, obrigado") == "joao@empresa.com.br"

    def test_no_email(self):
        assert extract_email("não tenho email") is None

    def test_contact_prefers_email(self):
        assert extract_contact("ana@cliente.com ou 11 98765-4321") == "ana@cliente.com"

    def test_contact_phone_is_normalized(self):
        assert extract_contact("me liga no 11 98765-4321") == "11987654321"

    def test_contact_phone_keeps_parenthesised_area_code(self):
        assert extract_contact("Meu telefone é (11) 98765-4321") == "11987654321"
        assert extract_contact("+55 (11) 98765-4321") == "+5511987654321"

    def test_contact_short_number_rejected(self):
        assert extract_contact("ramal 1234") is None

    def test_contact_missing(self):
        assert extract_contact("pode ser amanhã") is None


class TestNameAndCompany:
    @pytest.mark.parametrize("text, expected", [
        ("Meu nome é Ana Souza", "Ana Souza"),
        ("me chamo Carlos.", "Carlos"),
        ("nome: Beatriz Lima", "Beatriz Lima"),
    ])
    def test_explicit_name_forms(self, text, expected):
        assert extract_name(text) == expected

    def test_bare_name_is_not_extracted(self):
        assert extract_name("João Silva") is None

    def test_company_explicit(self):
        assert extract_company("Empresa XPTO") == "XPTO"

    def test_company_se_chama(self):
        assert extract_company("a empresa se chama Acme Ltda") == "Acme Ltda"

    def test_company_not_taken_from_email_domain(self):
        assert extract_company("joao@empresa.com") is None


class TestTeamSizeBudgetSeverity:
    def test_team_size_digits(self):
        assert extract_team_size("Equipe de 12 pessoas") == "12"

    def test_team_size_bucket(self):
        assert extract_team_size("somos uma empresa média") == "Média"

    def test_team_size_startup(self):
        assert extract_team_size("uma startup") == "Pequena"

    def test_team_size_missing(self):
        assert extract_team_size("ainda não sei") is None

    def test_budget_amount(self):
        assert extract_budget("Orçamento estimado 50000") == "50000"

    def test_budget_with_separators(self):
        assert extract_budget("uns R$ 50.000,00.") == "50.000,00"

    def test_budget_missing(self):
        assert extract_budget("ainda não definimos") is None

    @pytest.mark.parametrize("text, expected", [
        ("alta", "alta"),
        ("é crítico, sistema parado", "alta"),
        ("Média", "media"),
        ("baixa prioridade", "baixa"),
    ])
    def test_severity_levels(self, text, expected):
        assert extract_severity(text) == expected

    def test_severity_missing(self):
        assert extract_severity("erro no login") is None

    def test_free_text_is_sanitized(self):
        assert extract_free_text("  <app> mobile ") == "app mobile"

    def test_free_text_empty(self):
        assert extract_free_text("  <>  ") is None


class TestAffirmation:
    @pytest.mark.parametrize("text", ["Sim, pode enviar", "ok", "Confirmo", "isso mesmo", "Claro!"])
    def test_affirmative(self, text):
        assert is_affirmative(text)

    @pytest.mark.parametrize("text", ["Não, está errado", "sim, mas quero alterar o e-mail"])
    def test_negation_vetoes(self, text):
        assert not is_affirmative(text)
        assert is_negative(text)

    def test_unrelated_text(self):
        assert not is_affirmative("Empresa XPTO")


class TestSelectOption:
    def test_ordinal(self):
        assert select_option("2", OPTIONS) == OPTIONS[1]

    def test_ordinal_in_sentence(self):
        assert select_option("quero a opção 3", OPTIONS) == OPTIONS[2]

    def test_ordinal_out_of_range(self):
        assert select_option("7", OPTIONS) is None

    def test_day_number_is_not_read_as_ordinal(self):
        assert select_option("dia 15 às 14:00", OPTIONS) == OPTIONS[1]
        assert select_option("dia 16 às 11h", OPTIONS) == OPTIONS[3]

    def test_full_date_and_time(self):
        assert select_option("16/10/2026 às 11:00", OPTIONS) == OPTIONS[3]

    def test_short_date_and_hour_suffix(self):
        assert select_option("dia 15/10 às 14h", OPTIONS) == OPTIONS[1]

    def test_unique_time(self):
        assert select_option("pode ser às 14:00", OPTIONS) == OPTIONS[1]

    def test_ambiguous_date(self):
        assert select_option("dia 15/10", OPTIONS) is None

    def test_ambiguous_time(self):
        assert select_option("às 9h", OPTIONS) is None

    def test_conflicting_date_and_time(self):
        assert select_option("15/10 às 11:00", OPTIONS) is None

    def test_no_reference(self):
        assert select_option("qualquer um", OPTIONS) is None

    def test_no_options(self):
        assert select_option("1", []) is None
