"""Advisory validation of a target set.

Nothing here raises: problems are returned as messages so callers can still
render best-effort summaries.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from allocation_engine.domain.assets import Asset, AssetClassTargets
from allocation_engine.domain.targets import PercentageTarget, SetTarget
from allocation_engine.services.targets import DEFAULT_TOLERANCE
from allocation_engine.types import AssetClass


def check_percentage_sum(values: Iterable[float], tolerance: float = DEFAULT_TOLERANCE) -> float | None:
    """Return the total if it is NOT within tolerance of 100, else None."""

    total = sum(values, 0.0)
    if abs(total - 100) > tolerance:
        return total
    return None


def validate_allocation(
    assets: Sequence[Asset],
    class_targets: AssetClassTargets,
    total_value: float,
    tolerance: float = DEFAULT_TOLERANCE,
) -> list[str]:
    """Return human-readable validation errors for the current targets."""

    errors: list[str] = []

    class_percents = [
        target.percent for target in class_targets.values() if isinstance(target, PercentageTarget)
    ]
    if class_percents:
        bad_total = check_percentage_sum(class_percents, tolerance)
        if bad_total is not None:
            errors.append(f"Asset class targets sum to {bad_total:.2f}%, expected 100%")

    for asset_class in AssetClass:
        asset_percents = [
            asset.target.percent
            for asset in assets
            if asset.asset_class == asset_class and isinstance(asset.target, PercentageTarget)
        ]
        if not asset_percents:
            continue
        bad_total = check_percentage_sum(asset_percents, tolerance)
        if bad_total is not None:
            errors.append(
                f"{asset_class.value} asset targets sum to {bad_total:.2f}%, expected 100%"
            )

    fixed_total = sum(
        (asset.target.value for asset in assets if isinstance(asset.target, SetTarget)), 0.0
    )
    if fixed_total - total_value > tolerance:
        errors.append(
            f"Fixed targets ({fixed_total:.2f}) exceed available funds ({total_value:.2f})"
        )

    return errors
