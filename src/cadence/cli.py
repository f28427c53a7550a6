"""Cadence CLI - recurring task scheduler."""

import json
import logging
import sys
from datetime import datetime

import click

from .adapters.file_store import TaskNotFoundError
from .config import load_config
from .core.dates import parse_date, serialize_date, truncate_ms
from .core.durations import OutOfRangeError, parse_duration, serialize_duration
from .core.repeat import ScheduleError, parse_repeat, serialize_repeat, upcoming
from .core.tasks import Action, Task, TaskState, task_to_dict
from .workflows import (
    InvalidFieldError,
    agenda,
    create_task,
    get_store,
    perform_action,
    resolve_task_id,
)

STATE_MARKERS = {
    TaskState.PENDING: " ",
    TaskState.STARTED: ">",
    TaskState.COMPLETED: "x",
}


def _parse_instant(ctx, param, value: str | None) -> datetime | None:
    """Click callback: parse an optional date option."""
    if value is None:
        return None
    instant = parse_date(value)
    if instant is None:
        raise click.BadParameter(f"not a valid date: {value}")
    return instant


def _format_task_line(task_id: str, task: Task) -> str:
    marker = STATE_MARKERS[task.state]
    return f"{task_id}  {task.format_date():10}  [{marker}] {task.name}  ({serialize_repeat(task.repeat)})"


def _task_json(task_id: str, task: Task) -> dict:
    return {"id": task_id, **task_to_dict(task)}


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Cadence - recurring task scheduler."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.argument("name")
@click.option("--date", "-d", "scheduled_date", default=None, help="Scheduled date (YYYY-MM-DD[THH:MM])")
@click.option("--repeat", "-r", default=None, help="Repeat rule, e.g. 'delay P7D'")
def add(name: str, scheduled_date: str | None, repeat: str | None):
    """Add a pending task."""
    config = load_config()
    store = get_store(config)
    try:
        task_id = create_task(store, name, scheduled_date, repeat or config.default_repeat)
    except InvalidFieldError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(_format_task_line(task_id, store.get(task_id)))


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--all", "show_all", is_flag=True, help="Include completed tasks")
def list_tasks(as_json: bool, show_all: bool):
    """List tasks by scheduled date."""
    config = load_config()
    tasks = agenda(get_store(config), include_completed=show_all or config.show_completed)

    if as_json:
        click.echo(json.dumps([_task_json(task_id, task) for task_id, task in tasks], indent=2))
        return

    if not tasks:
        click.echo("No tasks.")
        return

    for task_id, task in tasks:
        click.echo(_format_task_line(task_id, task))


@main.command()
@click.argument("task_id")
def show(task_id: str):
    """Show one task as JSON."""
    store = get_store(load_config())
    try:
        full_id = resolve_task_id(store, task_id)
    except TaskNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(_task_json(full_id, store.get(full_id)), indent=2))


def _run_action(task_id: str, action: Action, now: datetime | None) -> None:
    """Shared action logic: apply, commit, report."""
    store = get_store(load_config())
    now = now or truncate_ms(datetime.now())
    try:
        full_id = resolve_task_id(store, task_id)
        created = perform_action(store, full_id, action, now)
    except (TaskNotFoundError, ScheduleError, OutOfRangeError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if action is Action.DELETE:
        click.echo(f"Deleted {full_id}")
    else:
        click.echo(_format_task_line(full_id, store.get(full_id)))
    for new_id in created:
        click.echo(f"Next: {_format_task_line(new_id, store.get(new_id))}")


_now_option = click.option(
    "--now",
    default=None,
    callback=_parse_instant,
    help="Override the current time (YYYY-MM-DDTHH:MM)",
)


@main.command()
@click.argument("task_id")
@_now_option
def start(task_id: str, now: datetime | None):
    """Start working on a task."""
    _run_action(task_id, Action.START, now)


@main.command()
@click.argument("task_id")
@_now_option
def cancel(task_id: str, now: datetime | None):
    """Return a task to pending."""
    _run_action(task_id, Action.CANCEL, now)


@main.command()
@click.argument("task_id")
@_now_option
def complete(task_id: str, now: datetime | None):
    """Complete a task, scheduling the next one if it repeats."""
    _run_action(task_id, Action.COMPLETE, now)


@main.command()
@click.argument("task_id")
@_now_option
def back(task_id: str, now: datetime | None):
    """Move a task to its previous occurrence."""
    _run_action(task_id, Action.SEEK_BACK, now)


@main.command()
@click.argument("task_id")
@_now_option
def forward(task_id: str, now: datetime | None):
    """Move a task to its next occurrence."""
    _run_action(task_id, Action.SEEK_FORWARD, now)


@main.command()
@click.argument("task_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def delete(task_id: str, yes: bool):
    """Delete a task."""
    if not yes and not click.confirm(f"Delete task {task_id}?"):
        return
    _run_action(task_id, Action.DELETE, None)


@main.command()
@click.argument("kind", type=click.Choice(["duration", "date", "repeat"]))
@click.argument("text")
def check(kind: str, text: str):
    """Validate a field value and print its canonical form."""
    match kind:
        case "duration":
            duration = parse_duration(text)
            canonical = serialize_duration(duration) if duration is not None else None
        case "date":
            instant = parse_date(text)
            canonical = serialize_date(instant) if instant is not None else None
        case _:
            rule = parse_repeat(text)
            canonical = serialize_repeat(rule) if rule is not None else None

    if canonical is None:
        click.echo(f"Error: invalid {kind}: {text}", err=True)
        sys.exit(1)
    click.echo(canonical)


@main.command("next")
@click.argument("rule")
@click.option("--from", "origin", default=None, callback=_parse_instant, help="Start point (defaults to now)")
@click.option("--count", "-n", type=int, default=None, help="Number of occurrences")
def next_occurrences(rule: str, origin: datetime | None, count: int | None):
    """Preview upcoming occurrences of a repeat rule."""
    config = load_config()
    parsed = parse_repeat(rule)
    if parsed is None:
        click.echo(f"Error: invalid repeat: {rule}", err=True)
        sys.exit(1)

    origin = origin or truncate_ms(datetime.now())
    try:
        dates = upcoming(parsed, origin, count or config.preview_count)
    except (ScheduleError, OutOfRangeError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not dates:
        click.echo("No upcoming occurrences.")
        return

    for date in dates:
        click.echo(serialize_date(date))


if __name__ == "__main__":
    main()
