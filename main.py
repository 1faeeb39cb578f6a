"""Entry point for the daily challenge calendar.

Usage:
    python main.py show                    # Print the current month
    python main.py show --month 2026-09    # Browse back to a month
    python main.py play                    # Play today (or the nearest open day)
    python main.py play --day 3            # Play day 3 of the viewed month
    python main.py complete                # Mark today's level completed
    python main.py countdown --once        # Wait for the next daily level
    python main.py --verbose show          # Verbose logging
"""

from __future__ import annotations

import asyncio
import calendar
import logging
import sys
from datetime import date, datetime

import click

from daily.calendar_utils import same_year_month
from daily.clock import FixedClock
from daily.errors import DailyError
from lobby.config import load_config
from lobby.core import DailyLobbyApp
from lobby.presenter import MonthView, PlayResult, TileState


def _setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=fmt, handlers=handlers)


_TILE_MARKS = {
    TileState.LOCKED: " . ",
    TileState.AVAILABLE: "[ ]",
    TileState.IN_PROGRESS: "[>]",
    TileState.COMPLETED: "[x]",
}


def render_month(view: MonthView) -> str:
    """Plain-text month grid, one week per line."""
    lines = [f"{calendar.month_name[view.viewed.month]} {view.viewed.year}"]
    row: list[str] = []
    for tile in view.tiles:
        today = "*" if tile.is_today else " "
        row.append(f"{tile.day:2d}{today}{_TILE_MARKS[tile.state]}")
        if len(row) == 7:
            lines.append("  ".join(row))
            row = []
    if row:
        lines.append("  ".join(row))

    nav = []
    if view.can_go_previous:
        nav.append("< previous")
    if view.can_go_next:
        nav.append("next >")
    lines.append(f"Progress: {view.progress:.0%}   Selected: day {view.scroll_target}   {'  '.join(nav)}")
    return "\n".join(lines)


def _parse_month(raw: str) -> date:
    try:
        return datetime.strptime(raw, "%Y-%m").date()
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM, got {raw!r}") from None


def _go_to_month(app: DailyLobbyApp, target: date) -> MonthView:
    view = app.lobby.show()
    while not same_year_month(view.viewed, target):
        before = view.viewed
        if (target.year, target.month) < (before.year, before.month):
            view = app.lobby.previous_month()
        else:
            view = app.lobby.next_month()
        if view.viewed == before:
            click.echo(f"Cannot navigate past {before:%Y-%m}.", err=True)
            break
    return view


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option("--config-dir", type=click.Path(), default=None, help="Config directory")
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_dir: str | None) -> None:
    """Daily challenge calendar for the game lobby."""
    cfg = load_config(config_dir)

    log_file = cfg.get("storage", {}).get("log_file")
    _setup_logging(verbose=verbose, log_file=log_file)

    ctx.obj = cfg


@main.command()
@click.option("--month", default=None, help="Month to show, as YYYY-MM")
@click.pass_obj
def show(cfg: dict, month: str | None) -> None:
    """Print the month grid with progress."""
    with DailyLobbyApp(cfg) as app:
        view = _go_to_month(app, _parse_month(month)) if month else app.lobby.show()
        click.echo(render_month(view))


@main.command()
@click.option("--day", type=int, default=None, help="Day of the viewed month to play")
@click.option("--month", default=None, help="Month to play in, as YYYY-MM")
@click.pass_obj
def play(cfg: dict, day: int | None, month: str | None) -> None:
    """Start (or resume) a daily level."""
    with DailyLobbyApp(cfg) as app:
        view = _go_to_month(app, _parse_month(month)) if month else app.lobby.show()
        if day is not None:
            if not 1 <= day <= view.visible_days:
                raise click.BadParameter(f"day must be between 1 and {view.visible_days}")
            app.lobby.select_day(day)

        try:
            outcome = app.lobby.play()
        except DailyError as e:
            click.echo(f"Cannot start daily level: {e}", err=True)
            sys.exit(1)

    if outcome.result == PlayResult.STARTED:
        launch = outcome.launch
        verb = "Resumed" if launch.resumed else "Started"
        click.echo(f"{verb} level {launch.level_id} ({launch.game_mode.value}) for {launch.day}")
    elif outcome.result == PlayResult.COMPLETED:
        click.echo(f"{outcome.day} is already completed.")
    else:
        click.echo("Every daily level is completed. Back to journey mode.")


@main.command()
@click.option("--date", "day", default=None, help="Day to complete, as YYYY-MM-DD (default: today)")
@click.pass_obj
def complete(cfg: dict, day: str | None) -> None:
    """Mark a started daily level as completed."""
    with DailyLobbyApp(cfg) as app:
        try:
            target = datetime.strptime(day, "%Y-%m-%d").date() if day else app.clock.today()
        except ValueError:
            raise click.BadParameter(f"expected YYYY-MM-DD, got {day!r}") from None

        try:
            record = app.ledger.mark_completed(target)
        except DailyError as e:
            click.echo(f"Cannot complete {target}: {e}", err=True)
            sys.exit(1)

        click.echo(f"Completed level {record.level_id} for {target}.")
        click.echo(f"Month progress: {app.ledger.month_progress(target):.0%}")


async def _run_countdown(app: DailyLobbyApp, once: bool) -> None:
    app.lobby.show()
    countdown = app.lobby.countdown
    while countdown is not None and countdown.task is not None:
        await countdown.task
        if once:
            break
    click.echo(render_month(app.lobby.view))


@main.command()
@click.option("--once", is_flag=True, help="Stop after the next day boundary")
@click.pass_obj
def countdown(cfg: dict, once: bool) -> None:
    """Wait for the next daily level, refreshing at midnight UTC."""
    with DailyLobbyApp(cfg, with_countdown=True) as app:
        # A pinned clock never reaches midnight.
        if isinstance(app.clock, FixedClock):
            click.echo("Countdown needs the system clock; unset DAILY_FIXED_NOW.", err=True)
            sys.exit(1)
        try:
            asyncio.run(_run_countdown(app, once))
        except KeyboardInterrupt:
            click.echo("\nCountdown stopped.")


if __name__ == "__main__":
    main()
