"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from ts_assistant.config import (
    AppConfig,
    ModelConfig,
    SchedulingConfig,
    ServerConfig,
    SessionConfig,
    _safe_float,
    _safe_int,
    _safe_int_list,
    _validate_config,
)


class TestConfigDefaults:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_business_defaults(self):
        config = AppConfig()
        assert config.business.timezone == "America/Sao_Paulo"
        assert config.business.closing_question.endswith("?")

    def test_scheduling_defaults(self):
        scheduling = SchedulingConfig()
        assert scheduling.business_hours == (9, 11, 14, 16)
        assert scheduling.max_slot_options == 6


class TestConfigValidation:
    def _with(self, **sections) -> AppConfig:
        return replace(AppConfig(), **sections)

    def test_invalid_temperature_too_high(self):
        config = self._with(model=replace(ModelConfig(), llm_temperature=3.0))
        with pytest.raises(ValueError, match="LLM_TEMPERATURE"):
            _validate_config(config)

    def test_invalid_temperature_negative(self):
        config = self._with(model=replace(ModelConfig(), llm_temperature=-0.5))
        with pytest.raises(ValueError, match="LLM_TEMPERATURE"):
            _validate_config(config)

    def test_invalid_classifier_timeout(self):
        config = self._with(model=replace(ModelConfig(), classifier_timeout_sec=0))
        with pytest.raises(ValueError, match="CLASSIFIER_TIMEOUT"):
            _validate_config(config)

    def test_history_too_short(self):
        config = self._with(session=replace(SessionConfig(), max_messages=1))
        with pytest.raises(ValueError, match="MAX_SESSION_MESSAGES"):
            _validate_config(config)

    def test_fallback_threshold_zero(self):
        config = self._with(session=replace(SessionConfig(), fallback_handoff_threshold=0))
        with pytest.raises(ValueError, match="FALLBACK_HANDOFF_THRESHOLD"):
            _validate_config(config)

    def test_business_hour_out_of_range(self):
        config = self._with(scheduling=replace(SchedulingConfig(), business_hours=(9, 25)))
        with pytest.raises(ValueError, match="BUSINESS_HOURS"):
            _validate_config(config)

    def test_no_business_hours(self):
        config = self._with(scheduling=replace(SchedulingConfig(), business_hours=()))
        with pytest.raises(ValueError, match="BUSINESS_HOURS"):
            _validate_config(config)

    def test_max_slot_options_zero(self):
        config = self._with(scheduling=replace(SchedulingConfig(), max_slot_options=0))
        with pytest.raises(ValueError, match="MAX_SLOT_OPTIONS"):
            _validate_config(config)

    def test_invalid_port(self):
        config = self._with(server=replace(ServerConfig(), port=70000))
        with pytest.raises(ValueError, match="PORT"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_parsing(self):
        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_float_parsing(self):
        assert _safe_float("NONEXISTENT_VAR_12345", "3.14") == pytest.approx(3.14)

    def test_safe_int_list_parsing(self, monkeypatch):
        monkeypatch.setenv("TEST_HOURS_12345", "8, 10,15")
        assert _safe_int_list("TEST_HOURS_12345", "9") == (8, 10, 15)

    def test_bad_int_names_the_variable(self, monkeypatch):
        monkeypatch.setenv("TEST_PORT_12345", "abc")
        with pytest.raises(ValueError, match="TEST_PORT_12345"):
            _safe_int("TEST_PORT_12345", "3000")

    def test_bad_int_list_names_the_variable(self, monkeypatch):
        monkeypatch.setenv("TEST_HOURS_12345", "9,noon")
        with pytest.raises(ValueError, match="TEST_HOURS_12345"):
            _safe_int_list("TEST_HOURS_12345", "9")
