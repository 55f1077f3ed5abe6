"""Proportional redistribution of percentage targets.

Every function is pure: it returns a new collection with the fully
redistributed result and never mutates its inputs, so a caller can never
observe a half-applied edit.

Class-level edits weight siblings by their current target percent (stated
intent). Asset-level edits weight siblings by their current value (real
holdings). Removals weight the remaining siblings by target percent.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence
from typing import TypeVar

import structlog

from allocation_engine.domain.assets import Asset, AssetClassTargets
from allocation_engine.domain.targets import ClassTarget, PercentageTarget
from allocation_engine.exceptions import (
    AllocationError,
    AssetNotFoundError,
    InvalidInputError,
    TargetModeError,
)
from allocation_engine.services.targets import DEFAULT_TOLERANCE
from allocation_engine.services.validation import check_percentage_sum
from allocation_engine.types import AssetClass, PercentMap, parse_asset_class

logger = structlog.get_logger(__name__)

K = TypeVar("K", bound=Hashable)


def _check_percent(percent: float) -> float:
    if not 0 <= percent <= 100:
        raise InvalidInputError(f"Target percent must be between 0 and 100, got {percent}")
    return float(percent)


def proportional_shares(weights: Mapping[K, float], amount: float) -> dict[K, float]:
    """Split ``amount`` across ``weights`` proportionally.

    Falls back to an equal split when every weight is zero.
    """
    if not weights:
        return {}

    weight_total = sum(weights.values())
    if weight_total == 0:
        equal_share = amount / len(weights)
        return {key: equal_share for key in weights}

    return {key: weight / weight_total * amount for key, weight in weights.items()}


def find_asset(assets: Sequence[Asset], asset_id: str) -> Asset:
    for asset in assets:
        if asset.id == asset_id:
            return asset
    raise AssetNotFoundError(f"Asset {asset_id!r} does not exist")


def redistribute_class_percentages(
    class_targets: AssetClassTargets,
    asset_class: AssetClass | str,
    new_percent: float,
) -> dict[AssetClass, ClassTarget]:
    """Set one class's percent and rescale the other PERCENTAGE classes.

    The remaining ``100 - new_percent`` is split across the other
    PERCENTAGE-mode classes in proportion to their pre-edit percents, or
    equally when those are all 0. SET and OFF classes are never touched.

    Raises:
        UnknownAssetClassError: ``asset_class`` is not a known class
        TargetModeError: The edited class is not in PERCENTAGE mode
        InvalidInputError: ``new_percent`` is outside 0-100
    """
    asset_class = parse_asset_class(asset_class)
    new_percent = _check_percent(new_percent)

    if not isinstance(class_targets[asset_class], PercentageTarget):
        raise TargetModeError(
            f"Cannot edit percent of {asset_class.value}: mode is "
            f"{class_targets[asset_class].mode.value}"
        )

    updated: dict[AssetClass, ClassTarget] = dict(class_targets)
    updated[asset_class] = PercentageTarget(new_percent)

    others = {
        ac: target.percent
        for ac, target in class_targets.items()
        if ac != asset_class and isinstance(target, PercentageTarget)
    }
    if not others:
        return updated

    shares = proportional_shares(others, 100 - new_percent)
    for ac, percent in shares.items():
        updated[ac] = PercentageTarget(percent)

    logger.debug(
        "class_percent_redistributed",
        asset_class=asset_class.value,
        new_percent=new_percent,
        sibling_count=len(shares),
    )
    return updated


def redistribute_asset_percentages(
    assets: Sequence[Asset],
    asset_id: str,
    new_percent: float,
) -> list[Asset]:
    """Set one asset's percent and rescale its PERCENTAGE siblings.

    Siblings share ``100 - new_percent`` in proportion to their current
    value, so larger holdings absorb more of the change. When every sibling
    holds nothing the remainder splits equally. Assets in other classes and
    SET/OFF assets are returned unchanged.

    Raises:
        AssetNotFoundError: No asset has ``asset_id``
        TargetModeError: The edited asset is not in PERCENTAGE mode
        InvalidInputError: ``new_percent`` is outside 0-100
    """
    edited = find_asset(assets, asset_id)
    new_percent = _check_percent(new_percent)

    if not isinstance(edited.target, PercentageTarget):
        raise TargetModeError(
            f"Cannot edit percent of asset {asset_id!r}: mode is {edited.target_mode.value}"
        )

    siblings = {
        asset.id: asset.current_value
        for asset in assets
        if asset.id != asset_id
        and asset.asset_class == edited.asset_class
        and isinstance(asset.target, PercentageTarget)
    }
    shares = proportional_shares(siblings, 100 - new_percent)

    result = []
    for asset in assets:
        if asset.id == asset_id:
            result.append(asset.with_percent(new_percent))
        elif asset.id in shares:
            result.append(asset.with_percent(shares[asset.id]))
        else:
            result.append(asset)

    logger.debug(
        "asset_percent_redistributed",
        asset_id=asset_id,
        asset_class=edited.asset_class.value,
        new_percent=new_percent,
        sibling_count=len(shares),
    )
    return result


def redistribute_on_removal(assets: Sequence[Asset], asset_id: str) -> list[Asset]:
    """Remove an asset and hand its percent to its PERCENTAGE siblings.

    Siblings absorb the removed percent in proportion to their own target
    percents (equally when those are all 0). Removing a SET or OFF asset, or
    one at 0%, leaves every sibling untouched.

    Raises:
        AssetNotFoundError: No asset has ``asset_id``
    """
    removed = find_asset(assets, asset_id)
    remaining = [asset for asset in assets if asset.id != asset_id]

    freed = removed.target_percent or 0.0
    if freed == 0:
        return remaining

    siblings = {
        asset.id: asset.target.percent
        for asset in remaining
        if asset.asset_class == removed.asset_class and isinstance(asset.target, PercentageTarget)
    }
    if not siblings:
        return remaining

    shares = proportional_shares(siblings, freed)
    logger.debug(
        "removed_percent_redistributed",
        asset_id=asset_id,
        asset_class=removed.asset_class.value,
        freed_percent=freed,
        sibling_count=len(shares),
    )
    return [
        asset.with_percent(siblings[asset.id] + shares[asset.id]) if asset.id in shares else asset
        for asset in remaining
    ]


def mass_set_class_percentages(
    class_targets: AssetClassTargets,
    percents: Mapping[AssetClass | str, float],
    tolerance: float = DEFAULT_TOLERANCE,
) -> dict[AssetClass, ClassTarget]:
    """Overwrite several class percents at once without redistribution.

    Negative inputs are clamped to 0. The edit is rejected unless the
    PERCENTAGE classes then sum to 100 within ``tolerance``.

    Raises:
        TargetModeError: A listed class is not in PERCENTAGE mode
        InvalidInputError: A percent is above 100
        AllocationError: The resulting group does not sum to 100
    """
    updated: dict[AssetClass, ClassTarget] = dict(class_targets)
    for key, percent in percents.items():
        asset_class = parse_asset_class(key)
        if not isinstance(class_targets[asset_class], PercentageTarget):
            raise TargetModeError(
                f"Cannot mass edit {asset_class.value}: mode is "
                f"{class_targets[asset_class].mode.value}"
            )
        updated[asset_class] = PercentageTarget(_check_percent(max(0.0, percent)))

    bad_total = check_percentage_sum(
        (t.percent for t in updated.values() if isinstance(t, PercentageTarget)), tolerance
    )
    if bad_total is not None:
        raise AllocationError(f"Total must be 100%. Current: {bad_total:.2f}%")

    logger.info("class_percentages_mass_set", class_count=len(percents))
    return updated


def mass_set_asset_percentages(
    assets: Sequence[Asset],
    asset_class: AssetClass | str,
    percents: PercentMap,
    tolerance: float = DEFAULT_TOLERANCE,
) -> list[Asset]:
    """Overwrite several asset percents within one class without redistribution.

    Raises:
        AssetNotFoundError: An id does not exist
        TargetModeError: A listed asset is not in PERCENTAGE mode or is in another class
        InvalidInputError: A percent is above 100
        AllocationError: The class's PERCENTAGE assets do not then sum to 100
    """
    asset_class = parse_asset_class(asset_class)
    new_percents: dict[str, float] = {}
    for asset_id, percent in percents.items():
        asset = find_asset(assets, asset_id)
        if asset.asset_class != asset_class:
            raise TargetModeError(
                f"Asset {asset_id!r} belongs to {asset.asset_class.value}, not {asset_class.value}"
            )
        if not isinstance(asset.target, PercentageTarget):
            raise TargetModeError(
                f"Cannot mass edit asset {asset_id!r}: mode is {asset.target_mode.value}"
            )
        new_percents[asset_id] = _check_percent(max(0.0, percent))

    result = [
        asset.with_percent(new_percents[asset.id]) if asset.id in new_percents else asset
        for asset in assets
    ]

    bad_total = check_percentage_sum(
        (
            asset.target.percent
            for asset in result
            if asset.asset_class == asset_class and isinstance(asset.target, PercentageTarget)
        ),
        tolerance,
    )
    if bad_total is not None:
        raise AllocationError(
            f"{asset_class.value} total must be 100%. Current: {bad_total:.2f}%"
        )

    logger.info(
        "asset_percentages_mass_set", asset_class=asset_class.value, asset_count=len(percents)
    )
    return result
