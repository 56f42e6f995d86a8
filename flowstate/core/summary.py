"""
Plain-text footprint summary for the chat assistant.
"""

from typing import List

from .footprint import FootprintResult, round_half_up
from .inputs import UsageInputs
from .rates import Category, UsageKind
from flowstate.storage.models import UserProfile


# Category -> (input field, unit description)
_INPUT_UNITS = {
    Category.SHOWERS: ("shower_minutes", "mins/day"),
    Category.BATHS: ("baths", "per week"),
    Category.TOILET: ("flushes", "flushes/day"),
    Category.FAUCETS: ("faucet_minutes", "mins/day"),
    Category.LAUNDRY: ("laundry_loads", "loads/week (shared)"),
    Category.DISHES: ("dishwasher_loads", "loads/week (shared)"),
    Category.GARDEN: ("garden_minutes", "mins/week (shared)"),
    Category.CLOTHING: ("new_clothing_items", "items/week"),
    Category.DIET: ("meat_meals", "meat meals/week"),
    Category.TRANSPORT: ("miles_driven", "miles/week"),
    Category.AI_USAGE: ("ai_queries", "queries/week"),
    Category.RECYCLING: ("recycling_items", "items recycled/week"),
    Category.COMPOST: ("compost_lbs", "lbs composted/week"),
}


def format_user_context(profile: UserProfile, result: FootprintResult, inputs: UsageInputs) -> str:
    """Summarize a user's weekly footprint as assistant context.

    Gallon figures are rounded to whole gallons; the order of lines is fixed.
    """
    lines: List[str] = [
        f"User Name: {profile.username}",
        f"Location: {_location(profile)}",
        f"Household Size: {profile.household_size} people",
        "",
        "WEEKLY WATER USAGE DATA (Calculated):",
    ]

    for kind, heading in (
        (UsageKind.DIRECT, "-- Direct Usage (Hygiene & Home) --"),
        (UsageKind.VIRTUAL, "-- Virtual & Lifestyle --"),
    ):
        lines.append("")
        lines.append(heading)
        for category, gallons in result.filter(kind).items():
            field, unit = _INPUT_UNITS[category]
            lines.append(
                f"- {category.label}: {getattr(inputs, field)} {unit} -> "
                f"{round_half_up(gallons)} gal/week"
            )

    lines.extend([
        "",
        "-- TOTALS --",
        f"Total Direct Usage: {round_half_up(result.direct_total)} gal/week",
        f"Total Virtual Usage: {round_half_up(result.virtual_total)} gal/week",
        f"Total Footprint: {round_half_up(result.grand_total)} gal/week",
        f"Impact Score: {result.score}/100",
    ])
    return "\n".join(lines)


def _location(profile: UserProfile) -> str:
    parts = [p for p in (profile.city, profile.country) if p]
    return ", ".join(parts) if parts else "Unknown"
