class AllocationEngineError(Exception):
    """Base exception for all allocation engine errors."""

    pass


class InvalidInputError(AllocationEngineError, ValueError):
    """Raised when an edit or conversion receives input it cannot act on.

    The operation is aborted and the caller's prior state is left untouched.
    """

    pass


class UnknownAssetClassError(InvalidInputError):
    """Raised when an asset class value is not one of the known classes."""

    pass


class NegativeValueError(InvalidInputError):
    """Raised when a monetary value that must be non-negative is negative."""

    pass


class TargetModeError(InvalidInputError):
    """Raised when a percentage edit targets a SET or OFF entity."""

    pass


class AssetNotFoundError(InvalidInputError):
    """Raised when an operation references an asset id that does not exist."""

    pass


class UnsupportedCurrencyError(InvalidInputError):
    """Raised when a currency is missing from the rate table."""

    pass


class AllocationError(AllocationEngineError):
    """Raised when a mass edit leaves a percentage group not summing to 100%."""

    pass


class ConfigurationError(AllocationEngineError):
    """Raised when settings or environment values are invalid."""

    pass
