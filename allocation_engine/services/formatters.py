"""Formatting helpers for UI and export collaborators.

The engine itself never rounds; these functions are the single place where
numbers are turned into display strings or flat rows.
"""

from typing import Any

from allocation_engine.domain.allocation import PortfolioAllocation
from allocation_engine.services.currency import get_currency_symbol


def format_currency_value(amount: float, currency: str, decimal_separator: str = ".") -> str:
    """Format ``amount`` as e.g. ``€1,234.56`` (or ``€1.234,56`` with ``,``)."""

    formatted = f"{abs(amount):,.2f}"
    if decimal_separator == ",":
        formatted = formatted.replace(",", "\0").replace(".", ",").replace("\0", ".")

    sign = "-" if round(amount, 2) < 0 else ""
    return f"{sign}{get_currency_symbol(currency)}{formatted}"


def format_percent(value: float | None, decimals: int = 2) -> str:
    if value is None:
        return "-"
    return f"{value:.{decimals}f}%"


def summary_rows(allocation: PortfolioAllocation) -> list[dict[str, Any]]:
    """
    Flatten class summaries into plain dicts with raw numeric values.

    Presentation layers handle formatting; ``None`` marks an excluded class.
    """
    return [
        {
            "asset_class": summary.asset_class.value,
            "target_mode": summary.target_mode.value,
            "target_percent": summary.target_percent,
            "current_total": summary.current_total,
            "current_percent": summary.current_percent,
            "target_total": summary.target_total,
            "delta": summary.delta,
            "action": summary.action.value,
        }
        for summary in allocation.asset_classes
    ]


def asset_rows(allocation: PortfolioAllocation) -> list[dict[str, Any]]:
    """Flatten per-asset deltas into plain dicts with raw numeric values."""

    return [
        {
            "asset_id": delta.asset_id,
            "asset_class": delta.asset_class.value,
            "target_mode": delta.target_mode.value,
            "current_value": delta.current_value,
            "target_value": delta.target_value,
            "delta": delta.delta,
            "action": delta.action.value,
        }
        for delta in allocation.assets
    ]
