from typing import Any, Protocol

from allocation_engine.domain.assets import Asset
from allocation_engine.domain.targets import (
    ClassTarget,
    MemberSumTarget,
    OffTarget,
    PercentageTarget,
    SetTarget,
)
from allocation_engine.services.engine import PortfolioState
from allocation_engine.settings import CurrencySettings
from allocation_engine.types import AssetClass, SubAssetType

DEFAULT_PORTFOLIO_VALUE = 50000.0


class Logger(Protocol):
    def write(self, msg: str) -> None: ...
    def success(self, msg: str) -> None: ...


class SilentLogger:
    def write(self, msg: str) -> None:
        pass

    def success(self, msg: str) -> None:
        pass


class DemoPortfolioSeeder:
    """Builds the demo portfolio shown to first-time users.

    50,000 EUR split roughly 60/30/10 across stocks, bonds and cash, with
    asset targets that already satisfy the 100% invariants.
    """

    def __init__(self, logger: Logger | None = None):
        self.logger = logger or SilentLogger()

    def run(self) -> PortfolioState:
        """Build the demo state."""
        self.logger.write("Seeding demo portfolio...")

        state = PortfolioState(
            assets=tuple(self.build_assets()),
            class_targets=self.build_class_targets(),
            currency=CurrencySettings(),
        )

        self.logger.success(f"Demo portfolio seeded with {len(state.assets)} assets")
        return state

    def build_assets(self) -> list[Asset]:
        stocks: list[dict[str, Any]] = [
            {"id": "stock-1", "name": "S&P 500 Index ETF", "ticker": "SPY", "value": 12000, "pct": 40},
            {"id": "stock-2", "name": "Vanguard Total Stock Market", "ticker": "VTI", "value": 8000, "pct": 27},
            {"id": "stock-3", "name": "International Developed Markets", "ticker": "VXUS", "value": 5000, "pct": 17},
            {"id": "stock-4", "name": "Emerging Markets ETF", "ticker": "VWO", "value": 3000, "pct": 10},
            {"id": "stock-5", "name": "Small Cap Value", "ticker": "VBR", "value": 2000, "pct": 6},
        ]
        bonds: list[dict[str, Any]] = [
            {"id": "bond-1", "name": "Total Bond Market", "ticker": "BND", "value": 7500, "pct": 50},
            {"id": "bond-2", "name": "Treasury Inflation-Protected", "ticker": "TIP", "value": 4500, "pct": 30},
            {"id": "bond-3", "name": "International Bond", "ticker": "BNDX", "value": 3000, "pct": 20},
        ]

        assets = [
            Asset(
                id=row["id"],
                name=row["name"],
                ticker=row["ticker"],
                asset_class=asset_class,
                sub_asset_type=SubAssetType.ETF,
                current_value=float(row["value"]),
                target=PercentageTarget(float(row["pct"])),
            )
            for asset_class, rows in ((AssetClass.STOCKS, stocks), (AssetClass.BONDS, bonds))
            for row in rows
        ]

        assets.append(
            Asset(
                id="cash-1",
                name="Emergency Fund",
                ticker="CASH",
                asset_class=AssetClass.CASH,
                sub_asset_type=SubAssetType.SAVINGS_ACCOUNT,
                current_value=4750.0,
                target=SetTarget(5000.0),
            )
        )
        assets.append(
            Asset(
                id="cash-2",
                name="Broker Cash",
                ticker="CASH",
                asset_class=AssetClass.CASH,
                sub_asset_type=SubAssetType.CHECKING_ACCOUNT,
                current_value=250.0,
                target=OffTarget(),
            )
        )
        return assets

    def build_class_targets(self) -> dict[AssetClass, ClassTarget]:
        return {
            AssetClass.STOCKS: PercentageTarget(60.0),
            AssetClass.BONDS: PercentageTarget(40.0),
            AssetClass.CASH: MemberSumTarget(),
            AssetClass.CRYPTO: PercentageTarget(0.0),
            AssetClass.REAL_ESTATE: PercentageTarget(0.0),
        }
