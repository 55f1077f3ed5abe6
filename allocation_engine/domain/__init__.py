from __future__ import annotations

from .allocation import AssetClassSummary, AssetDelta, PortfolioAllocation
from .assets import Asset, AssetClassTargets, class_target_percent, normalize_class_targets
from .targets import (
    AssetTarget,
    ClassTarget,
    MemberSumTarget,
    OffTarget,
    PercentageTarget,
    SetTarget,
)

__all__ = [
    "Asset",
    "AssetClassSummary",
    "AssetClassTargets",
    "AssetDelta",
    "AssetTarget",
    "ClassTarget",
    "MemberSumTarget",
    "OffTarget",
    "PercentageTarget",
    "PortfolioAllocation",
    "SetTarget",
    "class_target_percent",
    "normalize_class_targets",
]
