"""
Tests for the Asset value object and class-target normalization.

Tests: allocation_engine/domain/assets.py
"""

import math

import pytest

from allocation_engine.domain import (
    Asset,
    MemberSumTarget,
    OffTarget,
    PercentageTarget,
    SetTarget,
    normalize_class_targets,
)
from allocation_engine.exceptions import (
    InvalidInputError,
    NegativeValueError,
    UnknownAssetClassError,
)
from allocation_engine.types import AssetClass, SubAssetType, TargetMode

from ..factories import AssetFactory


@pytest.mark.domain
@pytest.mark.unit
class TestAsset:
    def test_string_asset_class_is_parsed(self) -> None:
        asset = AssetFactory(asset_class="BONDS")
        assert asset.asset_class is AssetClass.BONDS

    def test_unknown_asset_class_rejected(self) -> None:
        with pytest.raises(UnknownAssetClassError):
            AssetFactory(asset_class="COMMODITIES")

    def test_negative_current_value_rejected(self) -> None:
        with pytest.raises(NegativeValueError):
            AssetFactory(current_value=-5.0)

    def test_zero_current_value_allowed(self) -> None:
        assert AssetFactory(current_value=0.0).current_value == 0.0

    @pytest.mark.parametrize("target", [MemberSumTarget(), "PERCENTAGE", None, 40.0])
    def test_non_asset_target_rejected(self, target) -> None:
        with pytest.raises(InvalidInputError, match="Invalid target"):
            AssetFactory(target=target)

    @pytest.mark.parametrize("value", [math.nan, math.inf])
    def test_non_finite_current_value_rejected(self, value: float) -> None:
        with pytest.raises(InvalidInputError, match="finite"):
            AssetFactory(current_value=value)

    def test_from_shares_derives_current_value(self) -> None:
        asset = Asset.from_shares(
            id="vti",
            name="VTI",
            asset_class=AssetClass.STOCKS,
            shares=10,
            price_per_share=250.5,
            target=PercentageTarget(100.0),
        )
        assert asset.current_value == pytest.approx(2505.0)
        assert asset.shares == 10
        assert asset.price_per_share == 250.5

    def test_target_accessors(self) -> None:
        pct = AssetFactory(target=PercentageTarget(30.0))
        fixed = AssetFactory(target=SetTarget(700.0))
        off = AssetFactory(target=OffTarget())

        assert (pct.target_mode, pct.target_percent, pct.target_value) == (
            TargetMode.PERCENTAGE,
            30.0,
            None,
        )
        assert (fixed.target_mode, fixed.target_percent, fixed.target_value) == (
            TargetMode.SET,
            None,
            700.0,
        )
        assert (off.target_mode, off.target_percent, off.target_value) == (
            TargetMode.OFF,
            None,
            None,
        )

    def test_with_percent_returns_new_asset(self) -> None:
        asset = AssetFactory(target=PercentageTarget(30.0))
        updated = asset.with_percent(45.0)

        assert updated.target_percent == 45.0
        assert asset.target_percent == 30.0


@pytest.mark.domain
@pytest.mark.unit
class TestAssetSerialization:
    def test_to_dict_percentage_asset(self) -> None:
        asset = AssetFactory(
            id="spy",
            name="SPY",
            ticker="SPY",
            asset_class=AssetClass.STOCKS,
            current_value=12000.0,
            target=PercentageTarget(40.0),
        )
        data = asset.to_dict()

        assert data["assetClass"] == "STOCKS"
        assert data["subAssetType"] == "ETF"
        assert data["currentValue"] == 12000.0
        assert data["targetMode"] == "PERCENTAGE"
        assert data["targetPercent"] == 40.0
        assert "targetValue" not in data

    def test_to_dict_set_asset(self) -> None:
        data = AssetFactory(target=SetTarget(5000.0)).to_dict()
        assert data["targetMode"] == "SET"
        assert data["targetValue"] == 5000.0
        assert "targetPercent" not in data

    def test_from_dict_restores_asset(self) -> None:
        original = AssetFactory(
            id="bnd",
            asset_class=AssetClass.BONDS,
            sub_asset_type=SubAssetType.SINGLE_BOND,
            target=SetTarget(1500.0),
            original_currency="USD",
            original_value=1000.0,
        )
        assert Asset.from_dict(original.to_dict()) == original

    def test_from_dict_off_asset(self) -> None:
        asset = Asset.from_dict(
            {"id": "x", "name": "X", "assetClass": "CRYPTO", "currentValue": 10, "targetMode": "OFF"}
        )
        assert asset.target == OffTarget()
        assert asset.sub_asset_type is None

    def test_from_dict_unknown_asset_class(self) -> None:
        with pytest.raises(UnknownAssetClassError):
            Asset.from_dict({"id": "x", "assetClass": "GOLD", "currentValue": 1})

    def test_from_dict_unknown_target_mode(self) -> None:
        with pytest.raises(InvalidInputError):
            Asset.from_dict({"id": "x", "assetClass": "CASH", "targetMode": "AUTO"})

    def test_from_dict_missing_asset_class(self) -> None:
        with pytest.raises(InvalidInputError, match="assetClass"):
            Asset.from_dict({"id": "x", "currentValue": 1})

    def test_from_dict_unknown_sub_asset_type(self) -> None:
        with pytest.raises(InvalidInputError, match="sub asset type"):
            Asset.from_dict(
                {"id": "x", "assetClass": "STOCKS", "currentValue": 1, "subAssetType": "WARRANT"}
            )


@pytest.mark.domain
@pytest.mark.unit
class TestNormalizeClassTargets:
    def test_fills_missing_classes_with_zero_percent(self) -> None:
        targets = normalize_class_targets({AssetClass.STOCKS: PercentageTarget(100.0)})

        assert list(targets) == list(AssetClass)
        assert targets[AssetClass.BONDS] == PercentageTarget(0.0)

    def test_accepts_string_keys(self) -> None:
        targets = normalize_class_targets({"CASH": MemberSumTarget()})
        assert targets[AssetClass.CASH] == MemberSumTarget()

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(UnknownAssetClassError):
            normalize_class_targets({"BULLION": OffTarget()})

    def test_asset_level_set_target_rejected_for_class(self) -> None:
        with pytest.raises(InvalidInputError):
            normalize_class_targets({AssetClass.CASH: SetTarget(100.0)})  # type: ignore[dict-item]
