from __future__ import annotations

from dataclasses import dataclass, field

from allocation_engine.types import Action, AssetClass, TargetMode


@dataclass(frozen=True)
class AssetClassSummary:
    """Derived per-class rollup. Recomputed on every read, never stored.

    ``target_total`` and ``delta`` are None for OFF classes. ``delta`` already
    includes the cash adjustment for non-CASH classes.
    """

    asset_class: AssetClass
    target_mode: TargetMode
    target_percent: float | None
    current_total: float
    current_percent: float
    target_total: float | None
    delta: float | None
    action: Action


@dataclass(frozen=True)
class AssetDelta:
    """Derived per-asset target and delta."""

    asset_id: str
    asset_class: AssetClass
    target_mode: TargetMode
    current_value: float
    target_value: float | None
    delta: float | None
    action: Action


@dataclass(frozen=True)
class PortfolioAllocation:
    """Complete derived view of a portfolio's targets."""

    total_value: float
    asset_classes: tuple[AssetClassSummary, ...] = ()
    assets: tuple[AssetDelta, ...] = ()
    validation_errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors

    def summary_for(self, asset_class: AssetClass) -> AssetClassSummary:
        for summary in self.asset_classes:
            if summary.asset_class == asset_class:
                return summary
        raise KeyError(asset_class)

    def delta_for(self, asset_id: str) -> AssetDelta:
        for delta in self.assets:
            if delta.asset_id == asset_id:
                return delta
        raise KeyError(asset_id)
