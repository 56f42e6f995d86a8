"""
Usage inputs and household context.

Raw self-reported counters that feed the footprint calculator.
"""

from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping, Optional, Tuple


# Daily hygiene log (individual, per day except baths which are per week)
DAILY_FIELDS: Tuple[str, ...] = (
    "shower_minutes",
    "baths",
    "faucet_minutes",
    "flushes",
)

# Weekly household and lifestyle log
WEEKLY_FIELDS: Tuple[str, ...] = (
    "laundry_loads",
    "dishwasher_loads",
    "garden_minutes",
    "meat_meals",
    "new_clothing_items",
    "miles_driven",
    "recycling_items",
    "compost_lbs",
    "ai_queries",
)


def _check_fields(values: Mapping[str, float], allowed: Tuple[str, ...], group: str) -> None:
    unknown = set(values) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown {group} fields: {sorted(unknown)}")


@dataclass(frozen=True)
class UsageInputs:
    """Immutable snapshot of one user's raw usage counters.

    Values are taken as-is. Range checks belong to whoever collects them
    (see ``clamp_inputs``); the calculator never validates.
    """
    shower_minutes: float = 0
    baths: float = 0
    faucet_minutes: float = 0
    flushes: float = 0
    laundry_loads: float = 0
    dishwasher_loads: float = 0
    garden_minutes: float = 0
    meat_meals: float = 0
    new_clothing_items: float = 0
    miles_driven: float = 0
    recycling_items: float = 0
    compost_lbs: float = 0
    ai_queries: float = 0

    @classmethod
    def combine(cls, daily: Mapping[str, float], weekly: Mapping[str, float]) -> "UsageInputs":
        """Merge a daily log and a weekly log into one snapshot.

        Args:
            daily: Values for DAILY_FIELDS
            weekly: Values for WEEKLY_FIELDS

        Returns:
            Combined UsageInputs

        Raises:
            ValueError: If either mapping holds a field from the other group
        """
        _check_fields(daily, DAILY_FIELDS, "daily")
        _check_fields(weekly, WEEKLY_FIELDS, "weekly")
        return cls(**dict(daily), **dict(weekly))

    def daily_values(self) -> Dict[str, float]:
        """Values of the daily hygiene fields."""
        return {name: getattr(self, name) for name in DAILY_FIELDS}

    def weekly_values(self) -> Dict[str, float]:
        """Values of the weekly household and lifestyle fields."""
        return {name: getattr(self, name) for name in WEEKLY_FIELDS}

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def with_values(self, **values: float) -> "UsageInputs":
        """Return a copy with some counters replaced.

        Raises:
            ValueError: If a name is not a usage field
        """
        _check_fields(values, DAILY_FIELDS + WEEKLY_FIELDS, "usage")
        return replace(self, **values)


DEFAULT_DAILY_INPUTS: Dict[str, float] = {
    "shower_minutes": 8,
    "baths": 0,
    "faucet_minutes": 5,
    "flushes": 5,
}

DEFAULT_WEEKLY_INPUTS: Dict[str, float] = {
    "laundry_loads": 4,
    "dishwasher_loads": 5,
    "garden_minutes": 15,
    "meat_meals": 7,
    "new_clothing_items": 1,
    "miles_driven": 100,
    "recycling_items": 5,
    "compost_lbs": 2,
    "ai_queries": 20,
}

# Combined dashboard default; assumes one bath a week
DEFAULT_INPUTS = UsageInputs.combine(
    {**DEFAULT_DAILY_INPUTS, "baths": 1},
    DEFAULT_WEEKLY_INPUTS,
)

# Slider ranges offered by the input forms (inclusive)
INPUT_RANGES: Dict[str, Tuple[float, float]] = {
    "shower_minutes": (1, 25),
    "baths": (0, 3),
    "faucet_minutes": (1, 20),
    "flushes": (1, 15),
    "laundry_loads": (0, 15),
    "dishwasher_loads": (0, 14),
    "garden_minutes": (0, 120),
    "meat_meals": (0, 21),
    "new_clothing_items": (0, 5),
    "miles_driven": (0, 500),
    "recycling_items": (0, 50),
    "compost_lbs": (0, 20),
    "ai_queries": (0, 200),
}


def clamp_value(name: str, value: float) -> float:
    """Clamp one counter into its input form range."""
    low, high = INPUT_RANGES[name]
    return min(high, max(low, value))


def clamp_inputs(inputs: UsageInputs) -> UsageInputs:
    """Clamp every counter into its input form range."""
    return UsageInputs(**{name: clamp_value(name, getattr(inputs, name)) for name in INPUT_RANGES})


@dataclass(frozen=True)
class HouseholdContext:
    """Household the shared categories are split across."""
    household_size: Optional[int] = 1

    @property
    def divisor(self) -> int:
        """Effective divisor for shared usage, never below 1.

        Missing, zero or negative sizes are coerced to 1 without error.
        """
        return max(1, self.household_size or 1)
