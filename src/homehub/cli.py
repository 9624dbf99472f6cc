"""Command-line interface for the Home Management Hub."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import httpx
import typer
from apscheduler.schedulers.blocking import BlockingScheduler

from homehub import factory
from homehub.config import get_settings
from homehub.domain import ShoppingList, TaskTracker, WeeklyPlanner
from homehub.errors import GitHubNotConfiguredError, GitHubUpstreamError, HomeHubError
from homehub.integrations.github import MealPublisher
from homehub.logging_utils import configure_from_settings
from homehub.models import HouseholdSettings, TaskKind
from homehub.notifications import NotificationMonitor
from homehub.store import DocumentStore
from homehub.utils import format_date, format_file_size, format_price, relative_time, truncate_text

app = typer.Typer(help="Home Management Hub household data commands.")

SUMMARY_TITLE_WIDTH = 40


def _store() -> DocumentStore:
    settings = get_settings()
    configure_from_settings(settings)
    return factory.build_document_store(settings)


@app.command()
def export(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Backup file to write (defaults to the dated backup name in the current directory).",
    ),
) -> None:
    """Write a JSON backup of all household data."""

    exported = _store().export()
    target = output or Path(exported.filename)
    target.write_bytes(exported.content)
    typer.echo(f"Exported household data to {target}")


@app.command("import")
def import_backup(path: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Replace household data with the contents of a backup file."""

    try:
        _store().import_bytes(path.read_bytes())
    except HomeHubError as exc:
        typer.secho(f"Import failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.echo("Data imported successfully!")


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", help="Answer yes to both confirmations."),
) -> None:
    """Delete all household data after two confirmations."""

    cleared = _store().clear(lambda prompt: yes or typer.confirm(prompt, default=False))
    if not cleared:
        typer.echo("Nothing was deleted.")
        raise typer.Exit(code=1)
    typer.echo("All data cleared.")


@app.command()
def info(pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print JSON.")) -> None:
    """Show storage usage and item counts."""

    payload = _store().storage_info().model_dump(mode="json", by_alias=True)
    typer.echo(json.dumps(payload, indent=2 if pretty else None, sort_keys=pretty))


@app.command()
def summary() -> None:
    """Print today's meals, due tasks, the shopping total and storage usage."""

    store = _store()
    planner = WeeklyPlanner(store)
    tracker = TaskTracker(store)
    shopping = ShoppingList(store)

    today = planner.today()
    meals = planner.get_planned_meals(today)
    typer.echo(f"{today.value}: {len(meals)} meal(s) planned")
    for meal in meals:
        typer.echo(f"  - {truncate_text(meal.title, SUMMARY_TITLE_WIDTH)}")

    due = [task for kind in TaskKind for task in tracker.get_due_tasks(kind)]
    typer.echo(f"Tasks due: {len(due)}")
    for task in due:
        name = truncate_text(task.name, SUMMARY_TITLE_WIDTH)
        typer.echo(f"  - {name} (due {format_date(task.due_date)})")

    typer.echo(f"Shopping list total: {format_price(shopping.get_total_cost())}")

    info = store.storage_info()
    typer.echo(f"Storage used: {format_file_size(info.bytes)} ({info.percent_used}%)")
    last_export = HouseholdSettings.model_validate(store.get("settings") or {}).last_export
    if last_export is None:
        typer.echo("Last backup: never")
    else:
        typer.echo(f"Last backup: {relative_time(last_export, now=store.clock())}")


@app.command("notify-check")
def notify_check(
    watch: bool = typer.Option(False, "--watch", help="Keep polling until interrupted."),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Override poll interval (seconds).",
    ),
) -> None:
    """Evaluate the reminder rules and show any due notifications."""

    settings = get_settings()
    store = _store()

    if not watch:
        center = factory.build_notification_center(store, settings)
        shown = NotificationMonitor(center).poll_once()
        typer.echo(f"Showed {shown} notification(s).")
        return

    scheduler = BlockingScheduler()
    center = factory.build_notification_center(store, settings, scheduler)
    monitor = NotificationMonitor(
        center,
        poll_interval=poll_interval or settings.notification_poll_interval,
    )
    monitor.start(scheduler)
    typer.echo("Watching for reminders. Press Ctrl+C to stop.")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        typer.echo("Stopping notification monitor…")


@app.command("save-meal")
def save_meal(path: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Commit a meal JSON file to the configured GitHub repository."""

    meal = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(meal, dict) or not meal.get("title") or not meal.get("type"):
        typer.secho("Meal JSON needs a title and a type.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    try:
        url = MealPublisher.from_settings().save_meal(meal)
    except (GitHubNotConfiguredError, GitHubUpstreamError, ValueError, httpx.HTTPError) as exc:
        typer.secho(f"Unable to save meal: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(url)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for `python -m homehub`."""
    app(prog_name="homehub", args=argv)


if __name__ == "__main__":
    main()
