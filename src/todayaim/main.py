import typer
from datetime import date
from rich.console import Console
from rich.table import Table

from . import db, tui, config
from .errors import FocusError
from .dayindex import aims_in_month
from .model import FilterCriterion, offset_in_range
from .navigation import YearMonth
from .state import CalendarSession, CommitDelete

app = typer.Typer(
    help="[bold magenta]TodayAim[/] - A calendar of your daily aims.",
    rich_markup_mode="rich",
    no_args_is_help=False
)
console = Console()

STATUS_STYLE = {"accomplished": "green", "missed": "red", "pending": "yellow"}


def parse_filter(value: str) -> FilterCriterion:
    try:
        return FilterCriterion.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def parse_month(value: str) -> YearMonth:
    try:
        year, month = (int(p) for p in value.split("-"))
        if not 1 <= month <= 12:
            raise ValueError
        return YearMonth(year, month)
    except ValueError:
        raise typer.BadParameter(f"Invalid month '{value}'. Use YYYY-MM")


def open_session(criterion: FilterCriterion = FilterCriterion.ALL) -> CalendarSession:
    return CalendarSession(db, criterion=criterion, delete_delay=0)


def require_aim(aim_id: int):
    aim = db.get_aim(aim_id)
    if aim is None:
        console.print(f"[bold red]Error:[/] No aim with id {aim_id}")
        raise typer.Exit(code=1)
    return aim


def focus_day_of(session: CalendarSession, aim):
    if not offset_in_range(aim.offset_from_today, session.today):
        console.print(
            f"[bold red]Error:[/] Aim {aim.id} has no calendar day (offset {aim.offset_from_today})")
        raise typer.Exit(code=1)
    session.select_day(aim.date_key(session.today))


@app.command(rich_help_panel="Data Entry")
def add(description: str,
        offset: int = typer.Option(0, help="Days from today (negative for the past)"),
        on: str = typer.Option(None, "--date", help="YYYY-MM-DD, overrides --offset")):
    """Add an aim for a day."""
    if on:
        try:
            offset = (date.fromisoformat(on) - date.today()).days
        except ValueError:
            raise typer.BadParameter(f"Invalid date '{on}'. Use YYYY-MM-DD")
    if not offset_in_range(offset):
        raise typer.BadParameter(f"Offset {offset} is outside the calendar")
    open_session().add_aim(description, offset)
    console.print(f"Added aim for {'today' if offset == 0 else f'{offset:+d} days'}")


@app.command("list", rich_help_panel="Browse")
def list_aims(filter_: str = typer.Option("all", "--filter", help="all | accomplished | favorited"),
              month: str = typer.Option(None, help="YYYY-MM, defaults to this month")):
    """Show the aims of a month, grouped by day."""
    session = open_session(parse_filter(filter_))
    year_month = parse_month(month) if month else session.cursor

    table = Table(title=f"{year_month.long_label} ({session.criterion.display_string})")
    table.add_column("Day", style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Aim")
    table.add_column("", justify="center")

    for key, aims in aims_in_month(session.day_index, year_month).items():
        for i, aim in enumerate(aims):
            style = STATUS_STYLE[aim.status()]
            table.add_row(key.isoformat() if i == 0 else "", str(aim.id),
                          f"[{style}]{aim.description}[/]",
                          "★" if aim.is_favorited else "")
    if table.row_count == 0:
        console.print(f"[yellow]No aims in {year_month.long_label}.[/]")
    else:
        console.print(table)


@app.command(rich_help_panel="Data Entry")
def done(aim_id: int):
    """Toggle whether an aim is accomplished."""
    aim = require_aim(aim_id)
    open_session().toggle_accomplished(aim)
    console.print(f"Aim {aim_id} {'reopened' if aim.is_accomplished else 'accomplished'}")


@app.command(rich_help_panel="Data Entry")
def favorite(aim_id: int):
    """Toggle the favorite flag of an accomplished aim."""
    aim = require_aim(aim_id)
    session = open_session()
    focus_day_of(session, aim)
    try:
        session.toggle_favorite(aim)
    except FocusError as e:
        console.print(f"[bold red]Error:[/] {e}")
        raise typer.Exit(code=1)
    console.print(f"Aim {aim_id} {'unfavorited' if aim.is_favorited else 'favorited'}")


@app.command(rich_help_panel="Data Entry")
def delete(aim_id: int):
    """Delete an aim."""
    aim = require_aim(aim_id)
    session = open_session()
    if offset_in_range(aim.offset_from_today, session.today):
        session.select_day(aim.date_key(session.today))
        session.request_delete(aim)
    else:
        # No day to focus; go straight to the store.
        session.dispatch(CommitDelete(aim.id))
    console.print(f"Deleted aim {aim_id}")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context,
         config_flag: bool = typer.Option(
             False, "--config", help="Edit configuration")):
    """
    Welcome to [bold magenta]TodayAim[/]!

    [yellow]Usage:[/yellow]
    1. Run [bold]todayaim[/] (no args) to launch the interactive calendar.
    2. Run [bold]todayaim [command] --help[/] to see options.
    """
    if config_flag:
        config.edit_config()
        return

    if ctx.invoked_subcommand is None:
        tui.run_tui()


def run():
    app()
