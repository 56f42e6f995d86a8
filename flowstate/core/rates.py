"""
Water usage rates and category definitions.

Fixed gallons-per-unit constants for every usage counter.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping


NATIONAL_WEEKLY_BASELINE = 4200  # Average weekly gallons per person
TARGET_WEEKLY_GALLONS = 1500  # At or below this scores 100
GALLONS_PER_SCORE_POINT = 40
WEEKS_PER_MONTH = 4
DAYS_PER_WEEK = 7


class UsageKind(Enum):
    """Whether water is used at home or embodied in goods and services."""
    DIRECT = "direct"
    VIRTUAL = "virtual"


class Category(Enum):
    """Breakdown categories, each tagged with its usage kind."""
    SHOWERS = ("Showers", UsageKind.DIRECT)
    BATHS = ("Baths", UsageKind.DIRECT)
    TOILET = ("Toilet", UsageKind.DIRECT)
    FAUCETS = ("Faucets", UsageKind.DIRECT)
    LAUNDRY = ("Laundry", UsageKind.DIRECT)
    DISHES = ("Dishes", UsageKind.DIRECT)
    GARDEN = ("Garden", UsageKind.DIRECT)
    CLOTHING = ("Clothing", UsageKind.VIRTUAL)
    DIET = ("Diet", UsageKind.VIRTUAL)
    TRANSPORT = ("Transport", UsageKind.VIRTUAL)
    AI_USAGE = ("AI Usage", UsageKind.VIRTUAL)
    RECYCLING = ("Recycling", UsageKind.VIRTUAL)
    COMPOST = ("Compost", UsageKind.VIRTUAL)

    def __init__(self, label: str, kind: UsageKind):
        self.label = label
        self.kind = kind

    @property
    def is_credit(self) -> bool:
        """Credits represent water saved and contribute negative gallons."""
        return self in (Category.RECYCLING, Category.COMPOST)


@dataclass(frozen=True)
class UsageRate:
    """Weekly gallons contributed by one unit of a usage counter."""
    category: Category
    gallons_per_unit: Decimal
    per_day: bool = False  # Counter is per day, multiply by 7
    shared: bool = False  # Split across the household


@dataclass(frozen=True)
class RateTable:
    """Fixed rate table keyed by usage field name."""
    rates: Mapping[str, UsageRate]

    def __post_init__(self):
        """Freeze the mapping so the table cannot change at runtime."""
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    def get_rate(self, field: str) -> UsageRate:
        """Get the rate for a usage field.

        Args:
            field: UsageInputs field name

        Returns:
            UsageRate for the field

        Raises:
            ValueError: If field has no rate
        """
        if field not in self.rates:
            raise ValueError(f"Unknown usage field: {field}")
        return self.rates[field]

    def items(self):
        return self.rates.items()


# Ordered as the breakdown is displayed. Credits are negative rates.
RATE_TABLE = RateTable({
    "shower_minutes": UsageRate(Category.SHOWERS, Decimal("2.1"), per_day=True),
    "baths": UsageRate(Category.BATHS, Decimal("40")),
    "flushes": UsageRate(Category.TOILET, Decimal("1.6"), per_day=True),
    "faucet_minutes": UsageRate(Category.FAUCETS, Decimal("1.5"), per_day=True),
    "laundry_loads": UsageRate(Category.LAUNDRY, Decimal("30"), shared=True),
    "dishwasher_loads": UsageRate(Category.DISHES, Decimal("6"), shared=True),
    "garden_minutes": UsageRate(Category.GARDEN, Decimal("12"), shared=True),
    "new_clothing_items": UsageRate(Category.CLOTHING, Decimal("1400")),
    "meat_meals": UsageRate(Category.DIET, Decimal("450")),
    "miles_driven": UsageRate(Category.TRANSPORT, Decimal("0.5")),
    "ai_queries": UsageRate(Category.AI_USAGE, Decimal("0.13")),
    "recycling_items": UsageRate(Category.RECYCLING, Decimal("-5")),
    "compost_lbs": UsageRate(Category.COMPOST, Decimal("-15")),
})
