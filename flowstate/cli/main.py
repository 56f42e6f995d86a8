"""
CLI interface for FlowState.

Provides command-line access to the footprint calculator, daily and
weekly logging, the leaderboard and the assistant.
"""

import logging
import sys
from datetime import datetime
from typing import Dict, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from flowstate.config.loader import FlowStateConfig, load_config
from flowstate.core.footprint import FootprintResult, calculate_footprint
from flowstate.core.inputs import (
    DAILY_FIELDS,
    DEFAULT_INPUTS,
    WEEKLY_FIELDS,
    HouseholdContext,
    clamp_value,
)
from flowstate.core.rates import UsageKind
from flowstate.core.streak import DuplicateDailySubmission
from flowstate.core.submission import DashboardSession, PersistenceFailure
from flowstate.core.summary import format_user_context
from flowstate.demo.seed_demo_data import seed_demo_data
from flowstate.sdk.assistant import WaterAssistant
from flowstate.storage.models import UserProfile
from flowstate.storage.repository import StorageError, get_repository, initialize_schema

app = typer.Typer()
console = Console()
logger = logging.getLogger(__name__)

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

CATEGORY_FILTERS = {"all": None, "direct": UsageKind.DIRECT, "virtual": UsageKind.VIRTUAL}

# Usage option definitions shared by calculate, log-daily and log-weekly
ShowerOption = typer.Option(None, help="Shower minutes per day")
BathsOption = typer.Option(None, help="Baths per week")
FaucetOption = typer.Option(None, help="Faucet minutes per day")
FlushesOption = typer.Option(None, help="Toilet flushes per day")
LaundryOption = typer.Option(None, help="Laundry loads per week (household)")
DishwasherOption = typer.Option(None, help="Dishwasher loads per week (household)")
GardenOption = typer.Option(None, help="Garden watering minutes per week (household)")
MeatOption = typer.Option(None, help="Meat meals per week")
ClothingOption = typer.Option(None, help="New clothing items per week")
MilesOption = typer.Option(None, help="Miles driven per week")
RecyclingOption = typer.Option(None, help="Items recycled per week")
CompostOption = typer.Option(None, help="Pounds of food waste composted per week")
AIOption = typer.Option(None, help="AI queries per week")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
):
    """FlowState water footprint CLI."""
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid configuration:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    logging.basicConfig(
        level=logging.DEBUG if verbose else config.logging.numeric_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True
    )
    ctx.obj = config

    if ctx.invoked_subcommand is None:
        console.print("FlowState - Use --help to see available commands")


@app.command()
def init(ctx: typer.Context):
    """Initialize the FlowState database."""
    try:
        initialize_schema(_config(ctx).storage.db_path)
        console.print("[green]✓[/] Database initialized successfully")
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error initializing database:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def register(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User identity"),
    name: str = typer.Option(..., "--name", "-n", help="Display name"),
    household_size: int = typer.Option(1, "--household-size", help="People sharing the household"),
    city: str = typer.Option("", help="City"),
    country: str = typer.Option("", help="Country")
):
    """Create or update a user profile."""
    try:
        _repository(ctx).create_profile(UserProfile(
            user_id=user_id,
            username=name,
            household_size=household_size,
            city=city,
            country=country
        ))
        console.print(f"[green]✓[/] Profile saved for {name}")
        sys.exit(EXIT_CODE_PASS)
    except StorageError as e:
        console.print(f"[red]Error saving profile:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def calculate(
    household_size: int = typer.Option(1, "--household-size", help="People sharing the household"),
    category: str = typer.Option("all", "--category", help="Show all, direct or virtual categories"),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    shower_minutes: Optional[float] = ShowerOption,
    baths: Optional[float] = BathsOption,
    faucet_minutes: Optional[float] = FaucetOption,
    flushes: Optional[float] = FlushesOption,
    laundry_loads: Optional[float] = LaundryOption,
    dishwasher_loads: Optional[float] = DishwasherOption,
    garden_minutes: Optional[float] = GardenOption,
    meat_meals: Optional[float] = MeatOption,
    new_clothing_items: Optional[float] = ClothingOption,
    miles_driven: Optional[float] = MilesOption,
    recycling_items: Optional[float] = RecyclingOption,
    compost_lbs: Optional[float] = CompostOption,
    ai_queries: Optional[float] = AIOption
):
    """
    Estimate a weekly water footprint without storing anything.

    Unset inputs use the dashboard defaults. Values outside the input
    form ranges are clamped.
    """
    if category not in CATEGORY_FILTERS:
        console.print(f"[red]Error:[/] --category must be one of: {list(CATEGORY_FILTERS)}")
        sys.exit(EXIT_CODE_FAIL)

    values = _given(locals(), DAILY_FIELDS + WEEKLY_FIELDS)
    inputs = DEFAULT_INPUTS.with_values(**values)
    result = calculate_footprint(inputs, HouseholdContext(household_size))

    if json_output:
        console.print_json(data=result.to_dict())
    else:
        _display_footprint(result, CATEGORY_FILTERS[category])
    sys.exit(EXIT_CODE_PASS)


@app.command()
def status(ctx: typer.Context, user_id: str = typer.Argument(..., help="User identity")):
    """Show a user's streak, log status and footprint."""
    try:
        session = DashboardSession.load(_repository(ctx), user_id)
    except PersistenceFailure as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    now = datetime.now()
    streak = session.streak
    console.print("\n[bold]Daily Streak[/bold]")
    console.print(f"Current: {streak.current_streak} days")
    console.print(f"Longest: {streak.longest_streak} days")
    console.print(f"Points: {streak.total_points}")

    console.print(f"\nDaily log: {_window_label(session.daily_window(now).is_submitted)}")
    console.print(f"Weekly log: {_window_label(session.weekly_window(now).is_submitted)}")
    for prompt in session.prompts(now):
        console.print(f"[yellow]→[/] {prompt.value}")

    _display_footprint(session.footprint(), None)
    sys.exit(EXIT_CODE_PASS)


@app.command("log-daily")
def log_daily(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User identity"),
    shower_minutes: Optional[float] = ShowerOption,
    baths: Optional[float] = BathsOption,
    faucet_minutes: Optional[float] = FaucetOption,
    flushes: Optional[float] = FlushesOption
):
    """Submit today's hygiene log and update the streak."""
    values = _given(locals(), DAILY_FIELDS)
    try:
        session = DashboardSession.load(_repository(ctx), user_id)
        session.update_daily(**values)
        streak = session.submit_daily()
    except DuplicateDailySubmission:
        console.print("[yellow]You've already logged today! Your streak is maintained.[/]")
        sys.exit(EXIT_CODE_PASS)
    except PersistenceFailure as e:
        console.print(f"[red]Failed to save daily data:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    console.print("[green]✓[/] Daily log saved")
    console.print(f"Streak: {streak.current_streak} days (longest {streak.longest_streak})")
    console.print(f"Points: {streak.total_points}")
    sys.exit(EXIT_CODE_PASS)


@app.command("log-weekly")
def log_weekly(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User identity"),
    laundry_loads: Optional[float] = LaundryOption,
    dishwasher_loads: Optional[float] = DishwasherOption,
    garden_minutes: Optional[float] = GardenOption,
    meat_meals: Optional[float] = MeatOption,
    new_clothing_items: Optional[float] = ClothingOption,
    miles_driven: Optional[float] = MilesOption,
    recycling_items: Optional[float] = RecyclingOption,
    compost_lbs: Optional[float] = CompostOption,
    ai_queries: Optional[float] = AIOption
):
    """Submit the weekly household and lifestyle log."""
    values = _given(locals(), WEEKLY_FIELDS)
    try:
        session = DashboardSession.load(_repository(ctx), user_id)
        session.update_weekly(**values)
        monthly = session.submit_weekly()
    except PersistenceFailure as e:
        console.print(f"[red]Failed to save weekly data:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    console.print("[green]✓[/] Weekly log saved")
    console.print(f"Published monthly usage: {monthly:,} gal")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def leaderboard(
    ctx: typer.Context,
    limit: int = typer.Option(10, "--limit", "-l", help="Number of users to show")
):
    """Show users ranked by monthly usage (lower is better)."""
    try:
        entries = _repository(ctx).fetch_leaderboard(limit)
    except StorageError as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if not entries:
        console.print("\n[bold yellow]No published usage yet[/]")
        sys.exit(EXIT_CODE_PASS)

    table = Table(title="Leaderboard")
    table.add_column("Rank", justify="right")
    table.add_column("User")
    table.add_column("Monthly Usage", justify="right")
    for entry in entries:
        table.add_row(str(entry.rank), entry.username, f"{entry.monthly_usage:,} gal")
    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def ask(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User identity"),
    message: str = typer.Argument(..., help="Question for the assistant")
):
    """Ask the conservation assistant, with your footprint as context."""
    config = _config(ctx)
    try:
        repository = _repository(ctx)
        session = DashboardSession.load(repository, user_id)
        profile = repository.get_profile(user_id)
        context = format_user_context(profile, session.footprint(), session.inputs)
        reply = WaterAssistant(config.assistant).ask([], message, user_context=context)
    except (PersistenceFailure, StorageError) as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    except Exception as e:
        logger.exception("Assistant request failed")
        console.print(f"[red]The assistant is unavailable right now:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    console.print(reply)
    sys.exit(EXIT_CODE_PASS)


@app.command("seed-demo")
def seed_demo(ctx: typer.Context):
    """Insert demo leaderboard users."""
    try:
        count = seed_demo_data(_config(ctx).storage.db_path)
    except StorageError as e:
        console.print(f"[red]Error seeding demo data:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    console.print(f"[green]✓[/] Inserted {count} demo users")
    sys.exit(EXIT_CODE_PASS)


def _config(ctx: typer.Context) -> FlowStateConfig:
    return ctx.obj if isinstance(ctx.obj, FlowStateConfig) else load_config()


def _repository(ctx: typer.Context):
    return get_repository(_config(ctx).storage.db_path)


def _given(params: Dict[str, object], names) -> Dict[str, float]:
    """Usage options the user actually passed, clamped to the input form ranges."""
    given = {}
    for name in names:
        value = params.get(name)
        if value is not None:
            given[name] = clamp_value(name, value)
    return given


def _window_label(is_submitted: bool) -> str:
    return "[green]submitted[/]" if is_submitted else "[yellow]open[/]"


def _format_gallons(value: float) -> str:
    return f"{value:,.1f}"


def _format_trend(percent: float) -> str:
    return f"{'+' if percent >= 0 else ''}{percent:,.1f}%"


def _display_footprint(result: FootprintResult, kind: Optional[UsageKind]):
    """Display the weekly breakdown, totals and score."""
    table = Table(title="Weekly Water Footprint")
    table.add_column("Category")
    table.add_column("Type")
    table.add_column("Gallons/week", justify="right")
    table.add_column("Share", justify="right")

    for category, gallons in result.filter(kind).items():
        style = "green" if category.is_credit else ""
        table.add_row(
            category.label,
            category.kind.value,
            f"[{style}]{_format_gallons(gallons)}[/]" if style else _format_gallons(gallons),
            f"{result.share_of_total(category):.0f}%"
        )
    console.print(table)

    console.print(f"Direct usage: {_format_gallons(result.direct_total)} gal/week")
    console.print(f"Virtual usage: {_format_gallons(result.virtual_total)} gal/week")
    console.print(f"Total footprint: {_format_gallons(result.grand_total)} gal/week")
    console.print(f"Impact score: {result.score}/100")
    console.print(f"Vs national average: {_format_trend(result.trend_percent)}")


if __name__ == "__main__":
    app()
