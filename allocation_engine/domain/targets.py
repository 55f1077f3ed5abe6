"""Three-mode targets modelled as a tagged union.

A percentage only exists on ``PercentageTarget`` and an absolute amount only on
``SetTarget``; code dispatches on the concrete type (or its ``mode``) instead of
checking optional fields.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, TypeAlias

from allocation_engine.exceptions import InvalidInputError, NegativeValueError
from allocation_engine.types import TargetMode

# Redistributed percents may land a rounding error outside 0-100
PERCENT_EPSILON = 1e-9


@dataclass(frozen=True)
class PercentageTarget:
    """Share-based target on a 0-100 scale.

    For an asset class the share is of the whole portfolio; for an asset it
    is of its asset class.
    """

    percent: float
    mode: ClassVar[TargetMode] = TargetMode.PERCENTAGE

    def __post_init__(self) -> None:
        if not -PERCENT_EPSILON <= self.percent <= 100 + PERCENT_EPSILON:
            raise InvalidInputError(f"Target percent must be between 0 and 100, got {self.percent}")

    def target_value_for(self, base_total: float) -> float:
        """Return the target amount for a given base total."""

        return self.percent / 100 * base_total


@dataclass(frozen=True)
class SetTarget:
    """Fixed absolute target amount for a single asset."""

    value: float
    mode: ClassVar[TargetMode] = TargetMode.SET

    def __post_init__(self) -> None:
        if not math.isfinite(self.value):
            raise InvalidInputError(f"Target value must be a finite number, got {self.value}")
        if self.value < 0:
            raise NegativeValueError(f"Target value must be non-negative, got {self.value}")


@dataclass(frozen=True)
class MemberSumTarget:
    """SET mode at the class level.

    The class target is the sum of its SET-mode members' target values, not an
    independently stored number.
    """

    mode: ClassVar[TargetMode] = TargetMode.SET


@dataclass(frozen=True)
class OffTarget:
    """Excluded from rebalancing; still counts towards current totals."""

    mode: ClassVar[TargetMode] = TargetMode.OFF


AssetTarget: TypeAlias = PercentageTarget | SetTarget | OffTarget
ClassTarget: TypeAlias = PercentageTarget | MemberSumTarget | OffTarget
