"""
Tests for settings objects and environment-driven configuration.

Tests: allocation_engine/settings.py, config/startup_checks.py, config/logging.py
"""

import pytest
import structlog

from allocation_engine.exceptions import ConfigurationError
from allocation_engine.settings import (
    CurrencySettings,
    EngineSettings,
    UserSettings,
    currency_settings_from_env,
    update_fallback_rate,
    validate_settings,
)
from config import settings as config_settings
from config.logging import ENGINE_LOGGERS, get_logging_config
from config.startup_checks import validate_engine_config


@pytest.mark.unit
class TestValidateSettings:
    def test_defaults_are_valid(self) -> None:
        assert validate_settings(UserSettings()) == []

    def test_partial_update(self) -> None:
        assert validate_settings({"decimal_separator": ","}) == []

    def test_account_name_too_long(self) -> None:
        errors = validate_settings({"account_name": "x" * 101})
        assert errors == ["Account name must be 100 characters or less"]

    def test_account_name_not_string(self) -> None:
        assert validate_settings({"account_name": 42}) == ["Account name must be a string"]

    def test_bad_separator(self) -> None:
        assert validate_settings({"decimal_separator": ";"}) == [
            'Decimal separator must be "." or ","'
        ]

    @pytest.mark.parametrize("rate", [0, -1.5, "1.0", True])
    def test_bad_rate(self, rate) -> None:
        errors = validate_settings({"fallback_rates": {"USD": rate}})
        assert errors == ["Invalid rate for USD: must be a positive number"]

    def test_bad_rate_in_user_settings(self) -> None:
        settings = UserSettings(
            currency_settings=CurrencySettings(fallback_rates={"EUR": 1.0, "USD": 0})
        )
        assert len(validate_settings(settings)) == 1


@pytest.mark.unit
class TestUpdateFallbackRate:
    def test_replaces_one_rate(self) -> None:
        settings = UserSettings()

        updated = update_fallback_rate(settings, "USD", 0.9)

        assert updated.currency_settings.fallback_rates["USD"] == 0.9
        assert updated.currency_settings.fallback_rates["GBP"] == 1.15
        assert settings.currency_settings.fallback_rates["USD"] == 0.85

    def test_unsupported_currency(self) -> None:
        with pytest.raises(ConfigurationError):
            update_fallback_rate(UserSettings(), "BTC", 1.0)

    def test_non_positive_rate(self) -> None:
        with pytest.raises(ConfigurationError):
            update_fallback_rate(UserSettings(), "USD", 0.0)


@pytest.mark.unit
class TestEngineSettings:
    def test_default_tolerance(self) -> None:
        assert EngineSettings().tolerance == 0.01

    def test_negative_tolerance_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            EngineSettings(tolerance=-1.0)

    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setattr(config_settings, "TOLERANCE", "0.5")
        assert EngineSettings.from_env().tolerance == 0.5

    def test_currency_settings_from_env(self, monkeypatch) -> None:
        monkeypatch.setattr(config_settings, "DEFAULT_CURRENCY", "USD")

        currency = currency_settings_from_env()

        assert currency.default_currency == "USD"
        assert currency.fallback_rates["USD"] == 1.0
        assert currency.fallback_rates["EUR"] == pytest.approx(1 / 0.85)


@pytest.mark.unit
class TestStartupChecks:
    def test_defaults_pass(self, monkeypatch) -> None:
        monkeypatch.setattr(config_settings, "DEFAULT_CURRENCY", "EUR")
        monkeypatch.setattr(config_settings, "TOLERANCE", "0.01")
        validate_engine_config()

    def test_unsupported_currency(self, monkeypatch) -> None:
        monkeypatch.setattr(config_settings, "DEFAULT_CURRENCY", "XYZ")
        with pytest.raises(ConfigurationError, match="ALLOCATION_DEFAULT_CURRENCY"):
            validate_engine_config()

    def test_non_numeric_tolerance(self, monkeypatch) -> None:
        monkeypatch.setattr(config_settings, "TOLERANCE", "abc")
        with pytest.raises(ConfigurationError, match="must be a number"):
            validate_engine_config()

    def test_negative_tolerance(self, monkeypatch) -> None:
        monkeypatch.setattr(config_settings, "TOLERANCE", "-0.1")
        with pytest.raises(ConfigurationError, match="non-negative"):
            validate_engine_config()


@pytest.mark.unit
class TestLoggingConfig:
    def test_production_uses_json(self) -> None:
        config = get_logging_config(debug=False)

        renderer = config["formatters"]["engine"]["processor"]
        assert isinstance(renderer, structlog.processors.JSONRenderer)
        assert config["loggers"]["allocation_engine"]["level"] == "INFO"

    def test_debug_uses_console(self) -> None:
        config = get_logging_config(debug=True)

        renderer = config["formatters"]["engine"]["processor"]
        assert isinstance(renderer, structlog.dev.ConsoleRenderer)
        assert config["loggers"]["allocation_engine"]["level"] == "DEBUG"

    def test_explicit_level(self) -> None:
        config = get_logging_config(level="WARNING")
        assert config["loggers"]["allocation_engine.services"]["level"] == "WARNING"

    def test_every_engine_logger_configured(self) -> None:
        config = get_logging_config()

        assert set(config["loggers"]) == set(ENGINE_LOGGERS)
        for logger_config in config["loggers"].values():
            assert logger_config["handlers"] == ["engine"]
            assert logger_config["propagate"] is False
