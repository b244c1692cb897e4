"""Command-line interface for the goal tracker."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import NoReturn, Optional
from uuid import UUID

import typer

from .aggregation import sessions_between, total_seconds
from .calendar import CalendarAdapter
from .commands import (
    CancelActiveSession,
    Command,
    DeleteGoal,
    DeleteSession,
    Environment,
    GoalSet,
    MutationResult,
    SessionCancelled,
    SessionStarted,
    SessionStopped,
    SetGoal,
    ToggleSession,
)
from .config import TrackerSettings
from .errors import GoalieError
from .models import Topic, TopicWeek
from .paths import get_db_path
from .projection import CompletionState, project_today, project_week
from .reporting import format_duration, parse_duration
from .store import TopicStore
from .weeks import day_interval, shift_week, week_of

app = typer.Typer(help="Track time against a daily goal.")

_COMPLETION_MARKS = {
    CompletionState.NONE: "·",
    CompletionState.EMPTY: "○",
    CompletionState.PARTIAL: "◐",
    CompletionState.COMPLETE: "●",
}


@dataclass(slots=True)
class CliState:
    settings: TrackerSettings
    calendar: CalendarAdapter
    db_path: Path

    def open_store(self) -> TopicStore:
        return TopicStore(self.db_path, Environment(calendar=self.calendar))


@app.callback(no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the topic SQLite database."
    ),
    timezone: Optional[str] = typer.Option(
        None, "--tz", help="IANA timezone for day boundaries (defaults to $TZ or UTC)."
    ),
    iso_weeks: bool = typer.Option(
        False, "--iso-weeks", help="Start weeks on Monday and number them per ISO-8601."
    ),
    clamp_active: bool = typer.Option(
        False,
        "--clamp-active",
        help="Count a running session only inside the queried day.",
    ),
    topic: Optional[str] = typer.Option(None, "--topic", help="Topic id to work on."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        topic_id = UUID(topic) if topic else None
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid topic id: {topic}") from exc
    settings = TrackerSettings.from_options(
        timezone=timezone,
        iso_weeks=iso_weeks,
        clamp_active_session=clamp_active,
        topic_id=topic_id,
    )
    try:
        calendar = settings.calendar()
    except GoalieError as exc:
        raise typer.BadParameter(str(exc), param_hint="--tz") from exc
    ctx.obj = CliState(
        settings=settings, calendar=calendar, db_path=db_path or get_db_path()
    )


@app.command()
def toggle(ctx: typer.Context) -> None:
    """Start a session, or stop the running one."""
    result = _apply(ctx.obj, ToggleSession())
    for event in result.events:
        if isinstance(event, SessionStarted):
            typer.echo(f"Started at {_clock(ctx.obj, event.start)}.")
        elif isinstance(event, SessionStopped):
            typer.echo(
                f"Stopped; recorded {format_duration(event.session.duration_seconds)}."
            )


@app.command()
def cancel(ctx: typer.Context) -> None:
    """Discard the running session."""
    result = _apply(ctx.obj, CancelActiveSession())
    if any(isinstance(event, SessionCancelled) for event in result.events):
        typer.echo("Running session discarded.")
    else:
        typer.echo("No session is running.")


@app.command()
def goal(
    ctx: typer.Context,
    duration: str = typer.Argument(
        ..., help="Daily goal as HH:MM[:SS] or seconds; 0 or 'off' clears it."
    ),
) -> None:
    """Set the daily goal from today onward."""
    if duration.strip().lower() in ("off", "none"):
        seconds: Optional[float] = None
    else:
        try:
            seconds = parse_duration(duration)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    result = _apply(ctx.obj, SetGoal(seconds))
    goal_events = [event for event in result.events if isinstance(event, GoalSet)]
    if not goal_events:
        typer.echo("Goal unchanged.")
    elif goal_events[0].goal.duration is None:
        typer.echo("Goal cleared.")
    else:
        typer.echo(f"Goal set to {format_duration(goal_events[0].goal.duration)}.")


@app.command()
def today(ctx: typer.Context) -> None:
    """Show today's tracked time against the current goal."""
    state: CliState = ctx.obj
    calendar = state.calendar
    topic = _get_topic(state)
    now = datetime.now(calendar.timezone)
    view = project_today(
        topic,
        calendar.start_of_day(now),
        now,
        clamp_active_session=state.settings.clamp_active_session,
    )
    status = "running" if view.is_running else "stopped"
    typer.echo(f"{view.timer_title} / {view.goal_title} ({status})")
    typer.echo(view.session_count_title)
    if view.is_goal_complete:
        typer.echo("Goal complete.")


@app.command()
def week(
    ctx: typer.Context,
    date: Optional[str] = typer.Option(
        None, "--date", help="Any date (YYYY-MM-DD) in the week. Defaults to today."
    ),
    offset: int = typer.Option(0, "--offset", help="Weeks to move; negative goes back."),
) -> None:
    """Print a day-by-day summary of one week."""
    state: CliState = ctx.obj
    calendar = state.calendar
    topic = _get_topic(state)
    now = datetime.now(calendar.timezone)
    try:
        target = week_of(_parse_day(date, calendar) if date else now, calendar)
        if offset:
            target = shift_week(target, calendar, offset)
    except GoalieError as exc:
        _fail(exc)
    view = project_week(
        TopicWeek(topic, target),
        now,
        clamp_active_session=state.settings.clamp_active_session,
    )
    typer.echo(f"{view.title}: {view.subtitle}")
    typer.echo("-" * 40)
    for day in view.days:
        mark = _COMPLETION_MARKS[day.completion]
        typer.echo(f"  {mark} {day.day_label}  {day.duration} / {day.goal_label}")


@app.command()
def sessions(
    ctx: typer.Context,
    date: Optional[str] = typer.Option(
        None, "--date", help="Day (YYYY-MM-DD) to list. Defaults to today."
    ),
) -> None:
    """List recorded sessions touching one day."""
    state: CliState = ctx.obj
    calendar = state.calendar
    topic = _get_topic(state)
    try:
        day_start = calendar.start_of_day(
            _parse_day(date, calendar) if date else datetime.now(calendar.timezone)
        )
        interval = day_interval(day_start, calendar)
    except GoalieError as exc:
        _fail(exc)
    matching = sessions_between(topic.sessions, interval.start_date, interval.end_date)
    if not matching:
        typer.echo("No sessions recorded for the selected day.")
        return
    for session in reversed(matching):
        typer.echo(
            f"  {session.id}  {_clock(state, session.start)} - {_clock(state, session.end)}"
            f"  {format_duration(session.duration_seconds)}"
        )
    typer.echo(f"Total: {format_duration(total_seconds(matching))}")


@app.command("delete-session")
def delete_session(
    ctx: typer.Context, session_id: str = typer.Argument(..., help="Session id.")
) -> None:
    """Delete a recorded session."""
    _apply(ctx.obj, DeleteSession(_parse_uuid(session_id)))
    typer.echo(f"Deleted session {session_id}.")


@app.command("delete-goal")
def delete_goal(
    ctx: typer.Context, goal_id: str = typer.Argument(..., help="Goal id.")
) -> None:
    """Delete an entry from the goal history."""
    _apply(ctx.obj, DeleteGoal(_parse_uuid(goal_id)))
    typer.echo(f"Deleted goal {goal_id}.")


@app.command()
def web(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the API."),
    port: int = typer.Option(8766, "--port", min=1, max=65535, help="TCP port for the API."),
    open_browser: bool = typer.Option(
        False,
        "--open-browser/--no-open-browser",
        help="Open today's view of the topic in your default browser.",
    ),
) -> None:
    """Serve the JSON API."""
    from .server_runner import run_server

    state: CliState = ctx.obj
    run_server(
        host=host,
        port=port,
        db_path=state.db_path,
        settings=state.settings,
        open_browser=open_browser,
    )


def _apply(state: CliState, command: Command) -> MutationResult:
    store = _open_store(state)
    try:
        return store.apply(state.settings.default_topic_id, command)
    except GoalieError as exc:
        _fail(exc)
    finally:
        store.close()


def _get_topic(state: CliState) -> Topic:
    store = _open_store(state)
    try:
        return store.get(state.settings.default_topic_id)
    except GoalieError as exc:
        _fail(exc)
    finally:
        store.close()


def _open_store(state: CliState) -> TopicStore:
    try:
        return state.open_store()
    except GoalieError as exc:
        _fail(exc)


def _fail(exc: Exception) -> NoReturn:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


def _parse_day(value: str, calendar: CalendarAdapter) -> datetime:
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise typer.BadParameter("Dates must look like YYYY-MM-DD.") from exc
    return calendar.localize(parsed)


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid id: {value}") from exc


def _clock(state: CliState, moment: datetime) -> str:
    return state.calendar.to_local(moment).strftime("%H:%M:%S")
