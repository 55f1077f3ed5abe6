"""Enumerations and type aliases shared across the allocation engine."""

from collections.abc import Mapping
from enum import StrEnum
from typing import TypeAlias

from allocation_engine.exceptions import UnknownAssetClassError

# Type aliases
RateTable: TypeAlias = Mapping[str, float]  # {currency_code: rate_to_base}
PercentMap: TypeAlias = Mapping[str, float]  # {asset_id or class name: percent}


class AssetClass(StrEnum):
    """Fixed set of asset classes assets are grouped under.

    Declaration order is the display order of class summaries.
    """

    STOCKS = "STOCKS"
    BONDS = "BONDS"
    CASH = "CASH"
    CRYPTO = "CRYPTO"
    REAL_ESTATE = "REAL_ESTATE"


class TargetMode(StrEnum):
    PERCENTAGE = "PERCENTAGE"
    SET = "SET"
    OFF = "OFF"


class Action(StrEnum):
    """Recommended action derived from a delta.

    CASH uses SAVE/INVEST instead of BUY/SELL.
    """

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"
    SAVE = "SAVE"
    INVEST = "INVEST"
    EXCLUDED = "EXCLUDED"


class SubAssetType(StrEnum):
    ETF = "ETF"
    STOCK = "STOCK"
    SINGLE_BOND = "SINGLE_BOND"
    SAVINGS_ACCOUNT = "SAVINGS_ACCOUNT"
    CHECKING_ACCOUNT = "CHECKING_ACCOUNT"
    CRYPTO_COIN = "CRYPTO_COIN"
    PROPERTY = "PROPERTY"
    OTHER = "OTHER"


def parse_asset_class(value: AssetClass | str) -> AssetClass:
    """Return the AssetClass for ``value`` or raise UnknownAssetClassError."""
    try:
        return AssetClass(value)
    except ValueError:
        raise UnknownAssetClassError(f"Unknown asset class: {value!r}") from None
