"""
Startup validation checks for the allocation engine configuration.

Validates environment-provided values before they are used, giving a fast
failure with a clear error message rather than a cryptic runtime error.
"""

from allocation_engine.exceptions import ConfigurationError
from allocation_engine.services.currency import SUPPORTED_CURRENCIES, is_valid_currency


def validate_engine_config() -> None:
    """
    Validate the engine's environment variables.

    Raises:
        ConfigurationError: If a value is present but unusable.

    Usage:
        from config.startup_checks import validate_engine_config
        validate_engine_config()
    """
    from config import settings

    if not is_valid_currency(settings.DEFAULT_CURRENCY):
        supported = ", ".join(info.code for info in SUPPORTED_CURRENCIES)
        raise ConfigurationError(
            f"ALLOCATION_DEFAULT_CURRENCY must be one of {supported}, "
            f"got {settings.DEFAULT_CURRENCY!r}"
        )

    try:
        tolerance = float(settings.TOLERANCE)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"ALLOCATION_TOLERANCE must be a number, got {settings.TOLERANCE!r}"
        ) from None

    if tolerance < 0:
        raise ConfigurationError("ALLOCATION_TOLERANCE must be non-negative")
