"""
Water footprint calculation.

Turns raw usage counters into weekly gallons per category, totals,
an impact score and the deviation from the national baseline.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Union

from .inputs import HouseholdContext, UsageInputs
from .rates import (
    DAYS_PER_WEEK,
    GALLONS_PER_SCORE_POINT,
    NATIONAL_WEEKLY_BASELINE,
    RATE_TABLE,
    TARGET_WEEKLY_GALLONS,
    WEEKS_PER_MONTH,
    Category,
    RateTable,
    UsageKind,
)


@dataclass(frozen=True)
class FootprintResult:
    """Weekly footprint derived from one inputs snapshot.

    Breakdown values are signed weekly gallons; credits are negative.
    Totals are unrounded. grand_total is not clamped at zero, so large
    credits can push it below zero.
    """
    breakdown: Dict[Category, float]
    direct_total: float
    virtual_total: float
    grand_total: float
    score: int
    trend_percent: float

    @property
    def monthly_estimate(self) -> int:
        """Approximate monthly gallons published to the leaderboard."""
        return round_half_up(self.grand_total * WEEKS_PER_MONTH)

    def filter(self, kind: Optional[UsageKind] = None) -> Dict[Category, float]:
        """Breakdown restricted to one usage kind (all when kind is None)."""
        return {
            category: value
            for category, value in self.breakdown.items()
            if kind is None or category.kind == kind
        }

    def share_of_total(self, category: Category) -> float:
        """Percentage of the grand total for a display bar, kept within [1, 100]."""
        if self.grand_total == 0:
            return 0.0
        percent = abs(self.breakdown[category]) / self.grand_total * 100
        return min(100.0, max(percent, 1.0))

    def biggest_contributors(self, count: int = 3) -> List[Category]:
        """Categories using the most water, largest first."""
        positive = [c for c, v in self.breakdown.items() if v > 0]
        return sorted(positive, key=lambda c: self.breakdown[c], reverse=True)[:count]

    def to_dict(self) -> Dict[str, Union[float, int, Dict[str, float]]]:
        """Stable plain-data form of the result."""
        return {
            "breakdown": {c.label: v for c, v in self.breakdown.items()},
            "direct_total": self.direct_total,
            "virtual_total": self.virtual_total,
            "grand_total": self.grand_total,
            "score": self.score,
            "trend_percent": self.trend_percent,
            "monthly_estimate": self.monthly_estimate,
        }


def calculate_footprint(
    inputs: UsageInputs,
    household: Optional[HouseholdContext] = None,
    rate_table: RateTable = RATE_TABLE,
) -> FootprintResult:
    """Calculate the weekly water footprint for an inputs snapshot.

    Per-day counters are scaled to a week, shared household counters are
    divided by the household size (never below 1), and everything else is
    taken as a weekly count. Never raises for numeric inputs.

    Args:
        inputs: Raw usage counters
        household: Household to split shared usage across (defaults to one person)
        rate_table: Rates to apply

    Returns:
        FootprintResult with breakdown, totals, score and trend
    """
    divisor = Decimal((household or HouseholdContext()).divisor)

    breakdown: Dict[Category, Decimal] = {}
    for field, rate in rate_table.items():
        gallons = Decimal(str(getattr(inputs, field))) * rate.gallons_per_unit
        if rate.per_day:
            gallons *= DAYS_PER_WEEK
        if rate.shared:
            gallons /= divisor
        breakdown[rate.category] = gallons

    direct_total = float(sum(v for c, v in breakdown.items() if c.kind == UsageKind.DIRECT))
    virtual_total = float(sum(v for c, v in breakdown.items() if c.kind == UsageKind.VIRTUAL))
    grand_total = direct_total + virtual_total

    return FootprintResult(
        breakdown={c: float(v) for c, v in breakdown.items()},
        direct_total=direct_total,
        virtual_total=virtual_total,
        grand_total=grand_total,
        score=impact_score(grand_total),
        trend_percent=trend_percent(grand_total),
    )


def impact_score(grand_total: float) -> int:
    """Score from 0 to 100; 100 at or below the weekly target.

    Each GALLONS_PER_SCORE_POINT over the target costs one point.
    """
    raw_score = 100 - (grand_total - TARGET_WEEKLY_GALLONS) / GALLONS_PER_SCORE_POINT
    return max(0, min(100, round_half_up(raw_score)))


def trend_percent(grand_total: float) -> float:
    """Signed percentage above (positive) or below the national baseline."""
    return (grand_total - NATIONAL_WEEKLY_BASELINE) / NATIONAL_WEEKLY_BASELINE * 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))
