"""
Unit tests for the rate table and usage inputs.

Tests fixed rates, category tags and household handling.
"""

import pytest
from decimal import Decimal

from flowstate.core.inputs import (
    DAILY_FIELDS,
    DEFAULT_INPUTS,
    WEEKLY_FIELDS,
    HouseholdContext,
    UsageInputs,
    clamp_inputs,
)
from flowstate.core.rates import RATE_TABLE, Category, UsageKind


class TestRateTable:
    """Test rate table lookups and immutability."""

    def test_get_known_rate(self):
        """Verify rates match the published constants."""
        shower = RATE_TABLE.get_rate("shower_minutes")
        assert shower.gallons_per_unit == Decimal("2.1")
        assert shower.per_day is True
        assert shower.shared is False
        assert shower.category == Category.SHOWERS

    def test_shared_rates(self):
        """Only laundry, dishwasher and garden are split across the household."""
        shared = {field for field, rate in RATE_TABLE.items() if rate.shared}
        assert shared == {"laundry_loads", "dishwasher_loads", "garden_minutes"}

    def test_per_day_rates(self):
        per_day = {field for field, rate in RATE_TABLE.items() if rate.per_day}
        assert per_day == {"shower_minutes", "faucet_minutes", "flushes"}

    def test_credits_are_negative(self):
        assert RATE_TABLE.get_rate("recycling_items").gallons_per_unit == Decimal("-5")
        assert RATE_TABLE.get_rate("compost_lbs").gallons_per_unit == Decimal("-15")

    def test_unknown_field_raises_error(self):
        with pytest.raises(ValueError, match="Unknown usage field: bathtub"):
            RATE_TABLE.get_rate("bathtub")

    def test_table_cannot_be_mutated(self):
        with pytest.raises(TypeError):
            RATE_TABLE.rates["baths"] = None

    def test_every_input_field_has_a_rate(self):
        assert set(dict(RATE_TABLE.items())) == set(DAILY_FIELDS + WEEKLY_FIELDS)


class TestCategories:
    """Test category kind tags."""

    def test_direct_categories(self):
        direct = [c.label for c in Category if c.kind == UsageKind.DIRECT]
        assert direct == ["Showers", "Baths", "Toilet", "Faucets", "Laundry", "Dishes", "Garden"]

    def test_everything_else_is_virtual(self):
        virtual = [c.label for c in Category if c.kind == UsageKind.VIRTUAL]
        assert virtual == ["Clothing", "Diet", "Transport", "AI Usage", "Recycling", "Compost"]

    def test_credit_categories(self):
        assert {c for c in Category if c.is_credit} == {Category.RECYCLING, Category.COMPOST}


class TestHouseholdContext:
    """Test household divisor coercion."""

    @pytest.mark.parametrize("size", [0, -3, None])
    def test_invalid_size_becomes_one(self, size):
        assert HouseholdContext(size).divisor == 1

    def test_valid_size_is_kept(self):
        assert HouseholdContext(4).divisor == 4


class TestUsageInputs:
    """Test combining, splitting and clamping inputs."""

    def test_defaults(self):
        assert DEFAULT_INPUTS.shower_minutes == 8
        assert DEFAULT_INPUTS.baths == 1
        assert DEFAULT_INPUTS.ai_queries == 20

    def test_combine_and_split(self):
        inputs = UsageInputs.combine({"shower_minutes": 10}, {"meat_meals": 3})
        assert inputs.daily_values()["shower_minutes"] == 10
        assert inputs.weekly_values()["meat_meals"] == 3
        assert inputs.baths == 0

    def test_combine_rejects_misplaced_fields(self):
        with pytest.raises(ValueError, match="Unknown daily fields"):
            UsageInputs.combine({"meat_meals": 3}, {})

    def test_with_values_rejects_unknown_fields(self):
        with pytest.raises(ValueError, match="Unknown usage fields"):
            DEFAULT_INPUTS.with_values(showers=3)

    def test_inputs_are_immutable(self):
        with pytest.raises(AttributeError):
            DEFAULT_INPUTS.baths = 4

    def test_clamp_inputs(self):
        inputs = DEFAULT_INPUTS.with_values(shower_minutes=90, faucet_minutes=0, miles_driven=-10)
        clamped = clamp_inputs(inputs)
        assert clamped.shower_minutes == 25
        assert clamped.faucet_minutes == 1
        assert clamped.miles_driven == 0
        assert clamped.meat_meals == DEFAULT_INPUTS.meat_meals
