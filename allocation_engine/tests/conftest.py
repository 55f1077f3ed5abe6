"""
Root-level pytest fixtures for the allocation engine test suite.

Fixture Hierarchy:
- class_targets: Standard class targets (60/40 with SET cash)
- stock_assets / bond_assets / cash_assets: Asset groups per class
- demo_state: Complete seeded PortfolioState
"""

import pytest

from allocation_engine.domain import MemberSumTarget, PercentageTarget, SetTarget
from allocation_engine.services.currency import DEFAULT_FALLBACK_RATES
from allocation_engine.services.engine import AllocationEngine, PortfolioState
from allocation_engine.services.seeder import DemoPortfolioSeeder
from allocation_engine.types import AssetClass

from .factories import AssetFactory

# ============================================================================
# TARGET FIXTURES
# ============================================================================


@pytest.fixture
def class_targets():
    """STOCKS 60% / BONDS 40% / CASH SET / CRYPTO 0% / REAL_ESTATE 0%."""
    return {
        AssetClass.STOCKS: PercentageTarget(60.0),
        AssetClass.BONDS: PercentageTarget(40.0),
        AssetClass.CASH: MemberSumTarget(),
        AssetClass.CRYPTO: PercentageTarget(0.0),
        AssetClass.REAL_ESTATE: PercentageTarget(0.0),
    }


# ============================================================================
# ASSET FIXTURES
# ============================================================================


@pytest.fixture
def stock_assets():
    """Five STOCKS ETFs at 40/27/17/10/6 percent of the class."""
    rows = [
        ("spy", 12000.0, 40.0),
        ("vti", 8000.0, 27.0),
        ("vxus", 5000.0, 17.0),
        ("vwo", 3000.0, 10.0),
        ("vbr", 2000.0, 6.0),
    ]
    return [
        AssetFactory(
            id=asset_id,
            ticker=asset_id.upper(),
            asset_class=AssetClass.STOCKS,
            current_value=value,
            target=PercentageTarget(pct),
        )
        for asset_id, value, pct in rows
    ]


@pytest.fixture
def bond_assets():
    """BND 50% / TIP 30% / BNDX 20%."""
    rows = [("bnd", 10000.0, 50.0), ("tip", 6000.0, 30.0), ("bndx", 4000.0, 20.0)]
    return [
        AssetFactory(
            id=asset_id,
            ticker=asset_id.upper(),
            asset_class=AssetClass.BONDS,
            current_value=value,
            target=PercentageTarget(pct),
        )
        for asset_id, value, pct in rows
    ]


@pytest.fixture
def cash_assets():
    """Emergency fund held at 4750 with a 5000 SET target."""
    return [
        AssetFactory(
            id="emergency",
            ticker="CASH",
            asset_class=AssetClass.CASH,
            current_value=4750.0,
            target=SetTarget(5000.0),
        )
    ]


@pytest.fixture
def portfolio_state(stock_assets, bond_assets, cash_assets, class_targets):
    """Stocks 30k, bonds 20k, cash 4.75k with the standard class targets."""
    return PortfolioState(
        assets=tuple(stock_assets + bond_assets + cash_assets),
        class_targets=class_targets,
    )


@pytest.fixture
def demo_state():
    return DemoPortfolioSeeder().run()


@pytest.fixture
def engine():
    return AllocationEngine()


@pytest.fixture
def rates():
    return dict(DEFAULT_FALLBACK_RATES)
