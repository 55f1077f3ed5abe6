"""Explicit settings values threaded through the engine.

Nothing here is process-global: callers build a settings object (usually via
``from_env``) and pass it to the engine, and a single owning context is
responsible for persisting it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Literal, TypeAlias

from allocation_engine.exceptions import ConfigurationError
from allocation_engine.services.currency import (
    DEFAULT_FALLBACK_RATES,
    is_valid_currency,
    recalculate_fallback_rates,
)
from allocation_engine.services.targets import DEFAULT_TOLERANCE

DecimalSeparator: TypeAlias = Literal[".", ","]

MAX_ACCOUNT_NAME_LENGTH = 100


@dataclass(frozen=True)
class CurrencySettings:
    """Display currency and the fallback rates used to convert into it.

    ``fallback_rates`` are expressed relative to ``default_currency``
    (initially EUR, re-based whenever the display currency changes).
    """

    default_currency: str = "EUR"
    fallback_rates: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_FALLBACK_RATES)
    )
    use_api_rates: bool = True
    last_api_update: str | None = None


@dataclass(frozen=True)
class UserSettings:
    account_name: str = "My Portfolio"
    decimal_separator: DecimalSeparator = "."
    currency_settings: CurrencySettings = field(default_factory=CurrencySettings)


@dataclass(frozen=True)
class EngineSettings:
    """Numeric knobs of the allocation engine."""

    tolerance: float = DEFAULT_TOLERANCE

    def __post_init__(self) -> None:
        if self.tolerance < 0:
            raise ConfigurationError(f"Tolerance must be non-negative, got {self.tolerance}")

    @classmethod
    def from_env(cls) -> EngineSettings:
        """Build settings from ``config.settings`` (environment / .env)."""
        from config import settings as config_settings
        from config.startup_checks import validate_engine_config

        validate_engine_config()
        return cls(tolerance=float(config_settings.TOLERANCE))


def currency_settings_from_env() -> CurrencySettings:
    """Currency settings whose display currency comes from the environment.

    The default EUR-based fallback rates are re-based onto that currency.
    """
    from config import settings as config_settings
    from config.startup_checks import validate_engine_config

    validate_engine_config()
    currency = config_settings.DEFAULT_CURRENCY
    return CurrencySettings(
        default_currency=currency,
        fallback_rates=recalculate_fallback_rates(DEFAULT_FALLBACK_RATES, "EUR", currency),
    )


def validate_settings(settings: UserSettings | Mapping[str, Any]) -> list[str]:
    """Return validation errors for (possibly partial) user settings.

    Accepts a full ``UserSettings`` or a mapping holding only the fields
    being changed.
    """
    if isinstance(settings, UserSettings):
        values: Mapping[str, Any] = {
            "account_name": settings.account_name,
            "decimal_separator": settings.decimal_separator,
            "fallback_rates": settings.currency_settings.fallback_rates,
        }
    else:
        values = settings

    errors: list[str] = []

    account_name = values.get("account_name")
    if account_name is not None:
        if not isinstance(account_name, str):
            errors.append("Account name must be a string")
        elif len(account_name) > MAX_ACCOUNT_NAME_LENGTH:
            errors.append(f"Account name must be {MAX_ACCOUNT_NAME_LENGTH} characters or less")

    separator = values.get("decimal_separator")
    if separator is not None and separator not in (".", ","):
        errors.append('Decimal separator must be "." or ","')

    for currency, rate in (values.get("fallback_rates") or {}).items():
        if isinstance(rate, bool) or not isinstance(rate, int | float) or rate <= 0:
            errors.append(f"Invalid rate for {currency}: must be a positive number")

    return errors


def update_fallback_rate(settings: UserSettings, currency: str, rate: float) -> UserSettings:
    """Return a copy of ``settings`` with one fallback rate replaced.

    Raises:
        ConfigurationError: ``currency`` is unsupported or ``rate`` is not positive
    """
    if not is_valid_currency(currency):
        raise ConfigurationError(f"Unsupported currency: {currency!r}")
    if rate <= 0:
        raise ConfigurationError(f"Invalid rate for {currency}: must be a positive number")

    currency_settings = settings.currency_settings
    rates = dict(currency_settings.fallback_rates)
    rates[currency] = rate
    return replace(
        settings, currency_settings=replace(currency_settings, fallback_rates=rates)
    )
