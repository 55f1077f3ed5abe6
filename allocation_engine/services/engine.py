"""Allocation engine: a pure reducer over portfolio state plus a thin facade.

Usage:
    from allocation_engine.services.engine import AllocationEngine, EditClassPercent

    engine = AllocationEngine()
    result = engine.apply(state, EditClassPercent(AssetClass.STOCKS, 30))

    result.state        # updated assets and class targets
    result.allocation   # totals, per-class summaries and per-asset deltas
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, TypeAlias

import structlog

from allocation_engine.domain.allocation import AssetClassSummary, PortfolioAllocation
from allocation_engine.domain.assets import (
    Asset,
    AssetClassTargets,
    class_target_percent,
    normalize_class_targets,
)
from allocation_engine.domain.targets import ClassTarget, PercentageTarget
from allocation_engine.exceptions import InvalidInputError
from allocation_engine.services.aggregation import aggregate, current_percent
from allocation_engine.services.currency import (
    convert_assets_to_new_currency,
    rebase_rates,
    recalculate_fallback_rates,
)
from allocation_engine.services.redistribution import (
    find_asset,
    mass_set_asset_percentages,
    mass_set_class_percentages,
    redistribute_asset_percentages,
    redistribute_class_percentages,
    redistribute_on_removal,
)
from allocation_engine.services.targets import (
    DEFAULT_TOLERANCE,
    derive_action,
    resolve_asset_targets,
    resolve_class_targets,
)
from allocation_engine.services.validation import validate_allocation
from allocation_engine.settings import CurrencySettings, EngineSettings
from allocation_engine.types import AssetClass, PercentMap, RateTable, parse_asset_class

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PortfolioState:
    """The only persisted state: assets, class targets and currency settings.

    Everything else is derived from it on every read.
    """

    assets: tuple[Asset, ...] = ()
    class_targets: Mapping[AssetClass, ClassTarget] = field(
        default_factory=lambda: normalize_class_targets({})
    )
    currency: CurrencySettings = field(default_factory=CurrencySettings)

    def __post_init__(self) -> None:
        object.__setattr__(self, "assets", tuple(self.assets))
        object.__setattr__(self, "class_targets", normalize_class_targets(self.class_targets))
        ids = [asset.id for asset in self.assets]
        if len(ids) != len(set(ids)):
            raise InvalidInputError("Asset ids must be unique")

    def asset(self, asset_id: str) -> Asset:
        return find_asset(self.assets, asset_id)


# ============================================================================
# EDIT INTENTS
# ============================================================================


@dataclass(frozen=True)
class EditClassPercent:
    asset_class: AssetClass | str
    percent: float


@dataclass(frozen=True)
class EditAssetPercent:
    asset_id: str
    percent: float


@dataclass(frozen=True)
class RemoveAsset:
    asset_id: str


@dataclass(frozen=True)
class AddAsset:
    asset: Asset


@dataclass(frozen=True)
class MassSetPercentages:
    """Directly overwrite a percentage group, gated by a 100% check.

    With ``asset_class`` unset the keys are asset classes; otherwise they are
    ids of assets in that class.
    """

    percents: PercentMap
    asset_class: AssetClass | str | None = None


@dataclass(frozen=True)
class ChangeDisplayCurrency:
    currency: str
    rates: RateTable | None = None


@dataclass(frozen=True)
class SetClassTargetMode:
    """Switch a class between PERCENTAGE, SET and OFF.

    Switching to a percentage redistributes the other classes exactly like a
    percent edit.
    """

    asset_class: AssetClass | str
    target: ClassTarget


@dataclass(frozen=True)
class UpdateAsset:
    """Replace fields of one asset (value, name, ticker, shares, price, target)."""

    asset_id: str
    changes: Mapping[str, Any]


Edit: TypeAlias = (
    EditClassPercent
    | EditAssetPercent
    | RemoveAsset
    | AddAsset
    | MassSetPercentages
    | ChangeDisplayCurrency
    | SetClassTargetMode
    | UpdateAsset
)

UPDATABLE_ASSET_FIELDS = frozenset(
    {"name", "ticker", "sub_asset_type", "current_value", "shares", "price_per_share", "target"}
)


# ============================================================================
# REDUCER
# ============================================================================


def reduce(state: PortfolioState, edit: Edit, tolerance: float = DEFAULT_TOLERANCE) -> PortfolioState:
    """Apply one edit and return the new state.

    Pure: ``state`` is never modified. Invalid input raises before anything
    is built, so the caller keeps its prior state.

    Raises:
        InvalidInputError: (or a subclass) for edits the engine cannot apply
        AllocationError: A mass edit does not sum to 100%
    """
    if isinstance(edit, EditClassPercent):
        return replace(
            state,
            class_targets=redistribute_class_percentages(
                state.class_targets, edit.asset_class, edit.percent
            ),
        )

    if isinstance(edit, EditAssetPercent):
        return replace(
            state, assets=redistribute_asset_percentages(state.assets, edit.asset_id, edit.percent)
        )

    if isinstance(edit, RemoveAsset):
        return replace(state, assets=redistribute_on_removal(state.assets, edit.asset_id))

    if isinstance(edit, AddAsset):
        if any(asset.id == edit.asset.id for asset in state.assets):
            raise InvalidInputError(f"Asset {edit.asset.id!r} already exists")
        return replace(state, assets=(*state.assets, edit.asset))

    if isinstance(edit, MassSetPercentages):
        if edit.asset_class is None:
            return replace(
                state,
                class_targets=mass_set_class_percentages(
                    state.class_targets, edit.percents, tolerance
                ),
            )
        return replace(
            state,
            assets=mass_set_asset_percentages(
                state.assets, edit.asset_class, edit.percents, tolerance
            ),
        )

    if isinstance(edit, ChangeDisplayCurrency):
        return _change_display_currency(state, edit)

    if isinstance(edit, SetClassTargetMode):
        return _set_class_target_mode(state, edit)

    if isinstance(edit, UpdateAsset):
        return _update_asset(state, edit)

    raise InvalidInputError(f"Unknown edit: {type(edit).__name__}")


def _change_display_currency(state: PortfolioState, edit: ChangeDisplayCurrency) -> PortfolioState:
    old = state.currency
    rates = edit.rates if edit.rates is not None else old.fallback_rates

    assets = convert_assets_to_new_currency(
        state.assets, old.default_currency, edit.currency, rates
    )
    if edit.rates is not None:
        # Explicit tables may be based on any currency
        new_rates = rebase_rates(edit.rates, edit.currency)
    else:
        new_rates = recalculate_fallback_rates(rates, old.default_currency, edit.currency)

    return replace(
        state,
        assets=tuple(assets),
        currency=replace(old, default_currency=edit.currency, fallback_rates=new_rates),
    )


def _set_class_target_mode(state: PortfolioState, edit: SetClassTargetMode) -> PortfolioState:
    asset_class = parse_asset_class(edit.asset_class)
    targets = dict(state.class_targets)

    if isinstance(edit.target, PercentageTarget):
        # Enter PERCENTAGE mode first so the edit redistributes like any other
        targets[asset_class] = PercentageTarget(0.0)
        targets = redistribute_class_percentages(targets, asset_class, edit.target.percent)
    else:
        targets[asset_class] = edit.target

    return replace(state, class_targets=targets)


def _update_asset(state: PortfolioState, edit: UpdateAsset) -> PortfolioState:
    unknown = set(edit.changes) - UPDATABLE_ASSET_FIELDS
    if unknown:
        raise InvalidInputError(f"Cannot update asset fields: {', '.join(sorted(unknown))}")

    current = state.asset(edit.asset_id)
    changes = dict(edit.changes)
    if "target" in changes:
        current = current.with_target(changes.pop("target"))
    if ("shares" in changes or "price_per_share" in changes) and "current_value" not in changes:
        shares = changes.get("shares", current.shares)
        price = changes.get("price_per_share", current.price_per_share)
        if shares is not None and price is not None:
            changes["current_value"] = shares * price

    updated = replace(current, **changes)
    return replace(
        state,
        assets=tuple(updated if asset.id == edit.asset_id else asset for asset in state.assets),
    )


# ============================================================================
# DERIVED ALLOCATION
# ============================================================================


def calculate_portfolio_allocation(
    assets: Sequence[Asset],
    class_targets: AssetClassTargets,
    tolerance: float = DEFAULT_TOLERANCE,
) -> PortfolioAllocation:
    """Aggregate, resolve targets and validate in one pass."""

    class_targets = normalize_class_targets(class_targets)
    aggregation = aggregate(assets)
    resolution = resolve_class_targets(
        aggregation.per_class_totals, aggregation.total_value, class_targets, assets
    )

    summaries = []
    for asset_class in AssetClass:
        target = class_targets[asset_class]
        current_total = aggregation.per_class_totals[asset_class]
        delta = resolution.per_class_delta[asset_class]
        summaries.append(
            AssetClassSummary(
                asset_class=asset_class,
                target_mode=target.mode,
                target_percent=class_target_percent(target),
                current_total=current_total,
                current_percent=current_percent(current_total, aggregation.total_value),
                target_total=resolution.per_class_target[asset_class],
                delta=delta,
                action=derive_action(asset_class, target.mode, delta, tolerance),
            )
        )

    asset_deltas = resolve_asset_targets(assets, resolution.per_class_target, tolerance)
    errors = validate_allocation(assets, class_targets, aggregation.total_value, tolerance)

    return PortfolioAllocation(
        total_value=aggregation.total_value,
        asset_classes=tuple(summaries),
        assets=tuple(asset_deltas),
        validation_errors=tuple(errors),
    )


# ============================================================================
# FACADE
# ============================================================================


@dataclass(frozen=True)
class EditResult:
    state: PortfolioState
    allocation: PortfolioAllocation


class AllocationEngine:
    """
    Stateless entry point for UI collaborators.

    Holds only settings; every call takes the current state and returns the
    full updated state together with its derived allocation.
    """

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()

    def allocation(self, state: PortfolioState) -> PortfolioAllocation:
        return calculate_portfolio_allocation(
            state.assets, state.class_targets, self.settings.tolerance
        )

    def apply(self, state: PortfolioState, edit: Edit) -> EditResult:
        """Apply an edit and recompute the allocation.

        Errors are logged and re-raised; ``state`` is left untouched.
        """
        try:
            new_state = reduce(state, edit, self.settings.tolerance)
        except Exception as e:
            logger.warning(
                "edit_rejected",
                edit=type(edit).__name__,
                error=str(e),
            )
            raise

        allocation = self.allocation(new_state)
        logger.info(
            "edit_applied",
            edit=type(edit).__name__,
            asset_count=len(new_state.assets),
            total_value=allocation.total_value,
            is_valid=allocation.is_valid,
        )
        if not allocation.is_valid:
            logger.debug("allocation_invalid", errors=list(allocation.validation_errors))
        return EditResult(state=new_state, allocation=allocation)

    def edit_class_percent(
        self, state: PortfolioState, asset_class: AssetClass | str, percent: float
    ) -> EditResult:
        return self.apply(state, EditClassPercent(asset_class, percent))

    def edit_asset_percent(self, state: PortfolioState, asset_id: str, percent: float) -> EditResult:
        return self.apply(state, EditAssetPercent(asset_id, percent))

    def remove_asset(self, state: PortfolioState, asset_id: str) -> EditResult:
        return self.apply(state, RemoveAsset(asset_id))

    def add_asset(self, state: PortfolioState, asset: Asset) -> EditResult:
        return self.apply(state, AddAsset(asset))

    def mass_set_percentages(
        self,
        state: PortfolioState,
        percents: PercentMap,
        asset_class: AssetClass | str | None = None,
    ) -> EditResult:
        return self.apply(state, MassSetPercentages(percents, asset_class))

    def change_display_currency(
        self, state: PortfolioState, currency: str, rates: RateTable | None = None
    ) -> EditResult:
        return self.apply(state, ChangeDisplayCurrency(currency, rates))

    def set_class_target_mode(
        self, state: PortfolioState, asset_class: AssetClass | str, target: ClassTarget
    ) -> EditResult:
        return self.apply(state, SetClassTargetMode(asset_class, target))

    def update_asset(self, state: PortfolioState, asset_id: str, **changes: Any) -> EditResult:
        return self.apply(state, UpdateAsset(asset_id, changes))
