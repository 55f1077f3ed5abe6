"""Currency normalization.

Rate tables map each currency code to its value in the table's base currency
("1 unit of X = rate base units"). The base is EUR unless the table has been
re-based with :func:`recalculate_fallback_rates`; conversion pivots through
whichever currency the table is based on.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

import structlog

from allocation_engine.domain.assets import Asset
from allocation_engine.domain.targets import SetTarget
from allocation_engine.exceptions import UnsupportedCurrencyError
from allocation_engine.types import RateTable

logger = structlog.get_logger(__name__)

PIVOT_CURRENCY = "EUR"


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    name: str
    symbol: str


SUPPORTED_CURRENCIES: tuple[CurrencyInfo, ...] = (
    CurrencyInfo("EUR", "Euro", "€"),
    CurrencyInfo("USD", "US Dollar", "$"),
    CurrencyInfo("GBP", "British Pound", "£"),
    CurrencyInfo("CHF", "Swiss Franc", "CHF"),
    CurrencyInfo("JPY", "Japanese Yen", "¥"),
    CurrencyInfo("AUD", "Australian Dollar", "A$"),
    CurrencyInfo("CAD", "Canadian Dollar", "C$"),
)

_CURRENCIES_BY_CODE = {info.code: info for info in SUPPORTED_CURRENCIES}

# 1 unit of currency = rate EUR
DEFAULT_FALLBACK_RATES: dict[str, float] = {
    "EUR": 1.0,
    "USD": 0.85,
    "GBP": 1.15,
    "CHF": 1.08,
    "JPY": 0.0054,
    "AUD": 0.57,
    "CAD": 0.62,
}


def is_valid_currency(code: str) -> bool:
    """Return True for a supported currency code. Case sensitive."""
    return code in _CURRENCIES_BY_CODE


def get_currency_symbol(code: str) -> str:
    """Return the display symbol for ``code``, or the code itself if unknown."""
    info = _CURRENCIES_BY_CODE.get(code)
    return info.symbol if info else code


def _rate(rates: RateTable, currency: str) -> float:
    try:
        return rates[currency]
    except KeyError:
        raise UnsupportedCurrencyError(f"No exchange rate for currency {currency!r}") from None


def convert(amount: float, from_currency: str, to_currency: str, rates: RateTable) -> float:
    """Convert ``amount`` between two currencies of ``rates``.

    Same-currency conversions return ``amount`` untouched so no floating-point
    drift is introduced.

    Raises:
        UnsupportedCurrencyError: Either currency is missing from ``rates``
    """
    if from_currency == to_currency:
        return amount

    pivot_amount = amount * _rate(rates, from_currency)
    return pivot_amount / _rate(rates, to_currency)


def convert_to_eur(amount: float, currency: str, rates: RateTable = DEFAULT_FALLBACK_RATES) -> float:
    return convert(amount, currency, PIVOT_CURRENCY, rates)


def convert_from_eur(
    amount: float, currency: str, rates: RateTable = DEFAULT_FALLBACK_RATES
) -> float:
    return convert(amount, PIVOT_CURRENCY, currency, rates)


def convert_assets_to_new_currency(
    assets: Iterable[Asset],
    from_currency: str,
    to_currency: str,
    rates: RateTable,
) -> list[Asset]:
    """Return copies of ``assets`` with monetary fields converted.

    ``current_value`` and SET target values are converted; percentages are
    dimensionless and left alone. Provenance fields are kept as-is. Assets
    without an ``original_currency`` are assumed to already be in
    ``from_currency``.
    """
    assets = list(assets)
    if from_currency == to_currency:
        return assets

    # Fail before converting anything
    _rate(rates, from_currency)
    _rate(rates, to_currency)

    converted = []
    for asset in assets:
        target = asset.target
        if isinstance(target, SetTarget):
            target = SetTarget(convert(target.value, from_currency, to_currency, rates))
        converted.append(
            replace(
                asset,
                current_value=convert(asset.current_value, from_currency, to_currency, rates),
                target=target,
            )
        )

    logger.debug(
        "assets_converted",
        from_currency=from_currency,
        to_currency=to_currency,
        asset_count=len(converted),
    )
    return converted


def rebase_rates(rates: RateTable, new_base: str) -> dict[str, float]:
    """Re-base ``rates`` so that ``new_base`` becomes the 1.0 pivot.

    Works whatever currency the table is currently based on:
    ``new[c] = rates[c] / rates[new_base]``.

    Raises:
        UnsupportedCurrencyError: ``new_base`` is missing from ``rates``
    """
    divisor = _rate(rates, new_base)
    new_rates = {code: rate / divisor for code, rate in rates.items()}
    new_rates[new_base] = 1.0
    return new_rates


def recalculate_fallback_rates(old_rates: RateTable, old_base: str, new_base: str) -> dict[str, float]:
    """Re-base a table known to be based on ``old_base`` onto ``new_base``.

    Relative rates between all currencies are preserved. Matching bases
    return a plain copy.

    Raises:
        UnsupportedCurrencyError: ``new_base`` is missing from ``old_rates``
    """
    if old_base == new_base:
        return dict(old_rates)
    return rebase_rates(old_rates, new_base)
