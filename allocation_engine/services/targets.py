"""Resolve class and asset targets into target values, deltas and actions."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from allocation_engine.domain.allocation import AssetDelta
from allocation_engine.domain.assets import Asset, AssetClassTargets
from allocation_engine.domain.targets import (
    MemberSumTarget,
    PercentageTarget,
    SetTarget,
)
from allocation_engine.types import Action, AssetClass, TargetMode

DEFAULT_TOLERANCE = 0.01


@dataclass(frozen=True)
class ClassResolution:
    """Per-class target totals and cash-adjusted deltas.

    Both maps hold None for OFF classes.
    """

    per_class_target: dict[AssetClass, float | None]
    per_class_delta: dict[AssetClass, float | None]


def derive_action(
    asset_class: AssetClass,
    mode: TargetMode,
    delta: float | None,
    tolerance: float = DEFAULT_TOLERANCE,
) -> Action:
    """Label a delta. CASH saves and invests where other classes buy and sell."""

    if mode is TargetMode.OFF or delta is None:
        return Action.EXCLUDED
    if abs(delta) <= tolerance:
        return Action.HOLD

    is_cash = asset_class is AssetClass.CASH
    if delta > 0:
        return Action.SAVE if is_cash else Action.BUY
    return Action.INVEST if is_cash else Action.SELL


def set_members_total(assets: Iterable[Asset], asset_class: AssetClass) -> float:
    """Sum of SET target values over the assets of one class."""

    return sum(
        (
            asset.target.value
            for asset in assets
            if asset.asset_class == asset_class and isinstance(asset.target, SetTarget)
        ),
        0.0,
    )


def resolve_class_targets(
    per_class_totals: Mapping[AssetClass, float],
    total_value: float,
    class_targets: AssetClassTargets,
    assets: Iterable[Asset],
) -> ClassResolution:
    """Compute each class's target total and delta.

    - PERCENTAGE: ``percent / 100 * total_value``
    - SET: sum of the class's SET-mode asset target values
    - OFF: no target, no delta

    Money projected to move into or out of cash is assumed to come from or go
    to the other classes, so every non-CASH delta has the CASH delta
    subtracted. An OFF CASH class applies no adjustment.
    """
    assets = list(assets)
    targets: dict[AssetClass, float | None] = {}
    raw_deltas: dict[AssetClass, float | None] = {}

    for asset_class in AssetClass:
        target = class_targets[asset_class]
        current = per_class_totals.get(asset_class, 0.0)

        if isinstance(target, PercentageTarget):
            target_total: float | None = target.target_value_for(total_value)
        elif isinstance(target, MemberSumTarget):
            target_total = set_members_total(assets, asset_class)
        else:
            target_total = None

        targets[asset_class] = target_total
        raw_deltas[asset_class] = None if target_total is None else target_total - current

    cash_delta = raw_deltas[AssetClass.CASH] or 0.0

    deltas: dict[AssetClass, float | None] = {}
    for asset_class, delta in raw_deltas.items():
        if delta is None or asset_class is AssetClass.CASH:
            deltas[asset_class] = delta
        else:
            deltas[asset_class] = delta - cash_delta

    return ClassResolution(per_class_target=targets, per_class_delta=deltas)


def resolve_asset_targets(
    assets: Iterable[Asset],
    class_target_totals: Mapping[AssetClass, float | None],
    tolerance: float = DEFAULT_TOLERANCE,
) -> list[AssetDelta]:
    """Compute per-asset targets within their class.

    Percentages are relative to the class target total, not the portfolio.
    A PERCENTAGE asset inside a class without a target total is excluded.
    """
    results = []
    for asset in assets:
        target = asset.target
        class_total = class_target_totals.get(asset.asset_class)

        if isinstance(target, PercentageTarget) and class_total is not None:
            target_value: float | None = target.target_value_for(class_total)
        elif isinstance(target, SetTarget):
            target_value = target.value
        else:
            target_value = None

        delta = None if target_value is None else target_value - asset.current_value
        mode = TargetMode.OFF if target_value is None else asset.target_mode

        results.append(
            AssetDelta(
                asset_id=asset.id,
                asset_class=asset.asset_class,
                target_mode=asset.target_mode,
                current_value=asset.current_value,
                target_value=target_value,
                delta=delta,
                action=derive_action(asset.asset_class, mode, delta, tolerance),
            )
        )
    return results


def distribute_delta_to_assets(
    assets: Iterable[Asset],
    asset_class: AssetClass,
    class_delta: float,
) -> dict[str, float]:
    """Split a class-level delta across its PERCENTAGE-mode assets.

    Shares follow each asset's target percent (not its current value). When
    every percent is 0 the delta splits equally. SET and OFF assets are left
    out of the result entirely.
    """
    members = [
        asset
        for asset in assets
        if asset.asset_class == asset_class and isinstance(asset.target, PercentageTarget)
    ]
    if not members:
        return {}

    total_percent = sum(asset.target.percent for asset in members)  # type: ignore[union-attr]
    if total_percent == 0:
        share = class_delta / len(members)
        return {asset.id: share for asset in members}

    return {
        asset.id: asset.target.percent / total_percent * class_delta  # type: ignore[union-attr]
        for asset in members
    }
