from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, TypeAlias

from allocation_engine.domain.targets import (
    AssetTarget,
    ClassTarget,
    MemberSumTarget,
    OffTarget,
    PercentageTarget,
    SetTarget,
)
from allocation_engine.exceptions import InvalidInputError, NegativeValueError
from allocation_engine.types import AssetClass, SubAssetType, TargetMode, parse_asset_class

AssetClassTargets: TypeAlias = Mapping[AssetClass, ClassTarget]


@dataclass(frozen=True)
class Asset:
    """A single holding.

    Attributes:
        id: Unique identifier
        name: Display name
        asset_class: Class the holding is grouped under
        current_value: Value in the portfolio's working currency
        target: PERCENTAGE (share of its class), SET (absolute) or OFF
        ticker: Optional ticker symbol
        sub_asset_type: Optional finer classification
        shares: Optional share count the value was derived from
        price_per_share: Optional price the value was derived from
        original_currency: Currency the value was entered in, if known
        original_value: Value before normalization, kept for reference
    """

    id: str
    name: str
    asset_class: AssetClass
    current_value: float
    target: AssetTarget
    ticker: str | None = None
    sub_asset_type: SubAssetType | None = None
    shares: float | None = None
    price_per_share: float | None = None
    original_currency: str | None = None
    original_value: float | None = None

    def __post_init__(self) -> None:
        """Validate asset data."""
        object.__setattr__(self, "asset_class", parse_asset_class(self.asset_class))
        if not isinstance(self.target, PercentageTarget | SetTarget | OffTarget):
            raise InvalidInputError(
                f"Invalid target for asset {self.id!r}: {type(self.target).__name__}"
            )
        if not math.isfinite(self.current_value):
            raise InvalidInputError(
                f"Current value must be a finite number, got {self.current_value} for {self.id!r}"
            )
        if self.current_value < 0:
            raise NegativeValueError(
                f"Current value must be non-negative, got {self.current_value} for {self.id!r}"
            )

    @classmethod
    def from_shares(
        cls,
        *,
        id: str,
        name: str,
        asset_class: AssetClass | str,
        shares: float,
        price_per_share: float,
        target: AssetTarget,
        **kwargs: Any,
    ) -> Asset:
        """Build an asset whose current value is ``shares * price_per_share``."""

        return cls(
            id=id,
            name=name,
            asset_class=asset_class,  # type: ignore[arg-type]
            current_value=shares * price_per_share,
            target=target,
            shares=shares,
            price_per_share=price_per_share,
            **kwargs,
        )

    @property
    def target_mode(self) -> TargetMode:
        return self.target.mode

    @property
    def target_percent(self) -> float | None:
        return self.target.percent if isinstance(self.target, PercentageTarget) else None

    @property
    def target_value(self) -> float | None:
        return self.target.value if isinstance(self.target, SetTarget) else None

    def with_target(self, target: AssetTarget) -> Asset:
        return replace(self, target=target)

    def with_percent(self, percent: float) -> Asset:
        return replace(self, target=PercentageTarget(percent))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape shared with UI and import collaborators."""

        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "ticker": self.ticker,
            "assetClass": self.asset_class.value,
            "subAssetType": self.sub_asset_type.value if self.sub_asset_type else None,
            "currentValue": self.current_value,
            "targetMode": self.target_mode.value,
        }
        if self.target_percent is not None:
            data["targetPercent"] = self.target_percent
        if self.target_value is not None:
            data["targetValue"] = self.target_value
        for key, value in (
            ("shares", self.shares),
            ("pricePerShare", self.price_per_share),
            ("originalCurrency", self.original_currency),
            ("originalValue", self.original_value),
        ):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Asset:
        """Inverse of :meth:`to_dict`.

        Raises:
            UnknownAssetClassError: ``assetClass`` is not a known class
            InvalidInputError: ``targetMode`` or ``subAssetType`` is unknown, or a
                required field is missing
        """
        try:
            mode = TargetMode(data.get("targetMode", TargetMode.PERCENTAGE))
        except ValueError:
            raise InvalidInputError(f"Unknown target mode: {data.get('targetMode')!r}") from None

        target: AssetTarget
        if mode is TargetMode.PERCENTAGE:
            target = PercentageTarget(float(data.get("targetPercent") or 0))
        elif mode is TargetMode.SET:
            target = SetTarget(float(data.get("targetValue") or 0))
        else:
            target = OffTarget()

        sub_type = data.get("subAssetType")
        try:
            sub_asset_type = SubAssetType(sub_type) if sub_type else None
        except ValueError:
            raise InvalidInputError(f"Unknown sub asset type: {sub_type!r}") from None

        try:
            return cls(
                id=str(data["id"]),
                name=str(data.get("name", data["id"])),
                asset_class=parse_asset_class(data["assetClass"]),
                current_value=float(data.get("currentValue", 0)),
                target=target,
                ticker=data.get("ticker"),
                sub_asset_type=sub_asset_type,
                shares=data.get("shares"),
                price_per_share=data.get("pricePerShare"),
                original_currency=data.get("originalCurrency"),
                original_value=data.get("originalValue"),
            )
        except KeyError as e:
            raise InvalidInputError(f"Asset data is missing required field {e}") from None


def normalize_class_targets(targets: Mapping[AssetClass | str, ClassTarget]) -> dict[AssetClass, ClassTarget]:
    """Return a complete, ordered class-target map.

    Keys are validated against ``AssetClass``; classes missing from ``targets``
    default to 0%.
    """

    given = {parse_asset_class(key): target for key, target in targets.items()}
    for asset_class, target in given.items():
        if not isinstance(target, PercentageTarget | MemberSumTarget | OffTarget):
            raise InvalidInputError(
                f"Invalid target for {asset_class}: {type(target).__name__}"
            )
    return {ac: given.get(ac, PercentageTarget(0.0)) for ac in AssetClass}


def class_target_percent(target: ClassTarget) -> float | None:
    return target.percent if isinstance(target, PercentageTarget) else None
