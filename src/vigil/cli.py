"""Vigil CLI - visit monitoring dashboard."""

import asyncio
import json
import logging
import sys
from datetime import datetime

import click
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .adapters.http_api import HttpRecordAdapter
from .config import Config, load_config
from .core.errors import ApiError
from .core.projection import Columns
from .core.records import Bucket, format_display_date, format_identity, last_visit_label
from .core.selection import Selection
from .monitor import VisitMonitor

COLUMN_TITLES = {
    Bucket.OVERDUE: "Overdue",
    Bucket.URGENT: "Urgent",
    Bucket.SCHEDULED: "Scheduled",
}


def build_monitor(config: Config | None = None) -> VisitMonitor:
    """Wire the HTTP adapter into a monitor."""
    config = config or load_config()
    return VisitMonitor(HttpRecordAdapter(config), include_inactive=config.include_inactive)


def _fail(error: ApiError) -> None:
    click.echo(f"Error: {error.user_message} ({error.message})", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="vigil")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Vigil - track which monitored individuals are due a visit."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )


def _columns_to_json(columns: Columns) -> dict:
    return {
        bucket.value: [
            {
                "id": r.id,
                "name": r.name,
                "identity": format_identity(r.identity_code),
                "last_verified": r.last_verified,
                "next_due": r.next_due.isoformat(),
                "days_overdue": r.days_overdue,
                "days_remaining": r.days_remaining,
                "label": r.relative_label(),
            }
            for r in columns.column(bucket)
        ]
        for bucket in Bucket
    }


def _show_columns(columns: Columns, now: datetime, query: str = "") -> None:
    """Shared board display logic."""
    if query and columns.total == 0:
        click.echo(f"No records match '{query}'.")
        return

    for bucket in Bucket:
        records = columns.column(bucket)
        click.echo(f"### {COLUMN_TITLES[bucket]} ({len(records)})")
        if not records:
            click.echo("  (none)")
        for r in records:
            click.echo(
                f"  [{r.id:>4}] {r.name:30} {format_identity(r.identity_code):15}"
                f" next: {r.relative_label():18} last: {last_visit_label(r.last_verified_at, now)}"
            )
        click.echo()


@main.command()
@click.option("--search", "-s", "query", default="", help="Filter by name or identity digits")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def board(query: str, as_json: bool):
    """Show records grouped into overdue, urgent and scheduled."""
    monitor = build_monitor()
    asyncio.run(monitor.refresh())
    if monitor.error:
        _fail(monitor.error)

    columns = monitor.columns(query)
    if as_json:
        click.echo(json.dumps(_columns_to_json(columns), indent=2))
    else:
        _show_columns(columns, monitor.clock(), query)


@main.command()
@click.argument("record_ids", nargs=-1, type=int)
@click.option(
    "--bucket",
    "-b",
    "buckets",
    multiple=True,
    type=click.Choice([b.value for b in Bucket]),
    help="Select every record in a bucket (repeatable)",
)
@click.option("--yes", "-y", is_flag=True, help="Skip the batch confirmation")
def ack(record_ids: tuple[int, ...], buckets: tuple[str, ...], yes: bool):
    """Register a visit for one or more records."""
    monitor = build_monitor()
    selection = Selection()
    selection.enter()
    selection.select_all(list(record_ids))
    candidates = list(record_ids)

    if buckets:
        asyncio.run(monitor.refresh())
        if monitor.error:
            _fail(monitor.error)
        columns = monitor.columns()
        for name in buckets:
            bucket_ids = columns.ids(Bucket(name))
            selection.select_all(bucket_ids)
            candidates.extend(bucket_ids)

    ids = list(dict.fromkeys(selection.ordered(candidates)))
    selection.exit()

    if not ids:
        click.echo("Nothing to acknowledge.")
        return

    if len(ids) == 1:
        try:
            asyncio.run(monitor.acknowledge(ids[0]))
        except ApiError as e:
            _fail(e)
        click.echo(f"✓ Visit registered for {ids[0]}")
        return

    if not yes:
        click.confirm(f"Register visits for {len(ids)} records?", abort=True)

    result = asyncio.run(monitor.acknowledge_batch(ids))
    click.echo(f"✓ {len(result.succeeded)} visits registered")
    if result.failed:
        click.echo(f"✗ {len(result.failed)} failed:", err=True)
        for record_id in result.failed:
            click.echo(f"  [{record_id}] {result.errors[record_id].user_message}", err=True)
        sys.exit(1)


@main.command()
@click.option("--interval", "-i", type=int, default=None, help="Seconds between refreshes")
@click.option("--search", "-s", "query", default="", help="Filter by name or identity digits")
def watch(interval: int | None, query: str):
    """Keep the board on screen, refreshing periodically."""
    config = load_config()
    monitor = build_monitor(config)
    interval = interval or config.refresh_interval

    def render() -> None:
        asyncio.run(monitor.refresh())
        now = monitor.clock()
        click.clear()
        if monitor.error:
            click.echo(f"Error: {monitor.error.user_message}", err=True)
        _show_columns(monitor.columns(query), now, query)
        click.echo(f"Updated {format_display_date(now)} - every {interval}s, Ctrl+C to stop")

    scheduler = BlockingScheduler()
    scheduler.add_job(
        render,
        IntervalTrigger(seconds=interval),
        id="refresh_board",
        next_run_time=datetime.now(),
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        click.echo("\nStopped.")


if __name__ == "__main__":
    main()
