"""Roll individual assets up into per-class totals using pandas."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from allocation_engine.domain.assets import Asset
from allocation_engine.types import AssetClass

ASSET_COLUMNS = ["id", "asset_class", "target_mode", "current_value"]


@dataclass(frozen=True)
class Aggregation:
    """Portfolio total and per-class current totals.

    Every asset class is present in ``per_class_totals``; empty classes are 0.
    """

    total_value: float
    per_class_totals: dict[AssetClass, float]

    def current_percent(self, asset_class: AssetClass) -> float:
        return current_percent(self.per_class_totals[asset_class], self.total_value)


def assets_to_dataframe(assets: Iterable[Asset]) -> pd.DataFrame:
    """Build a long-format DataFrame with one row per asset."""

    records = [
        {
            "id": asset.id,
            "asset_class": asset.asset_class.value,
            "target_mode": asset.target_mode.value,
            "current_value": float(asset.current_value),
        }
        for asset in assets
    ]
    return pd.DataFrame(records, columns=ASSET_COLUMNS)


def aggregate(assets: Iterable[Asset]) -> Aggregation:
    """Sum current values per asset class and across the portfolio.

    OFF assets count as held value: target mode does not affect totals.
    """
    df = assets_to_dataframe(assets)

    by_class = (
        df.groupby("asset_class")["current_value"]
        .sum()
        .reindex([ac.value for ac in AssetClass], fill_value=0.0)
    )

    return Aggregation(
        total_value=float(df["current_value"].sum()),
        per_class_totals={AssetClass(ac): float(value) for ac, value in by_class.items()},
    )


def current_percent(class_total: float, total_value: float) -> float:
    """Class share of the portfolio on a 0-100 scale.

    When total_value is zero, returns 0 to avoid division by zero.
    """
    if total_value == 0:
        return 0.0
    return class_total / total_value * 100
