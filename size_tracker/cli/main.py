"""
CLI interface for Size Tracker.

Provides the CI entry point and a read-only view of the recorded sizes.
"""

import logging
import os
import platform
import sys
from datetime import timezone
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from size_tracker import __version__
from size_tracker.cancellation import Cancellation
from size_tracker.ci.context import load_ci_context
from size_tracker.config.loader import load_tracker_config
from size_tracker.core.comparator import format_bytes
from size_tracker.core.pipeline import SizeTracker
from size_tracker.core.trend import sort_records
from size_tracker.errors import NoRemoteHistory, RunCancelled, SizeTrackerError
from size_tracker.logging import configure_logging
from size_tracker.storage.git import GitClient
from size_tracker.storage.notes import DEFAULT_NOTES_REF, NotesRecordStore

app = typer.Typer()
console = Console()
logger = logging.getLogger("size_tracker.cli")

# Exit codes - "nothing to do" outcomes are successes
EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1
EXIT_CODE_CANCELLED = 130


def _version_callback(value: bool):
    if value:
        console.print(f"size-tracker {__version__}")
        console.print(f"Python {platform.python_version()} ({sys.executable})")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print version and build information and exit"
    ),
):
    """Size Tracker: lets you know how your code changes affect binary size."""
    if ctx.invoked_subcommand is None:
        console.print("Size Tracker - Use --help to see available commands")


@app.command()
def run(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file (action inputs take precedence)"
    ),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        "-l",
        help="Logging level"
    ),
):
    """
    Build the binary and record or compare its size.

    Pushes to the default branch record a new baseline in the repository's
    git notes. Pull requests and pushes to other branches compare against
    the recorded sizes and write a trend chart.
    """
    configure_logging(log_level)
    cancellation = Cancellation()
    cancellation.install_signal_handlers()
    logger.info("Starting size-tracker %s", __version__)

    try:
        config = load_tracker_config(config_path)
        context = load_ci_context(os.environ)
        git = GitClient(context.workspace, token=config.github_token, server_url=context.server_url)
        store = NotesRecordStore(
            git,
            ref=config.notes_ref,
            remote=config.remote,
            push_attempts=config.push_attempts
        )
        tracker = SizeTracker(config, context, store, git, cancellation=cancellation)
        result = tracker.run()
    except RunCancelled as e:
        logger.error("%s", e)
        sys.exit(EXIT_CODE_CANCELLED)
    except SizeTrackerError as e:
        logger.error("%s", e)
        sys.exit(EXIT_CODE_FAIL)

    logger.info("Finished: %s", result.outcome.value)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def history(
    notes_ref: str = typer.Option(
        DEFAULT_NOTES_REF,
        "--notes-ref",
        help="Notes ref holding the size records"
    ),
    remote: str = typer.Option(
        "origin",
        "--remote",
        help="Remote to fetch size records from"
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Number of most recent records to show"
    ),
    fetch: bool = typer.Option(
        True,
        "--fetch/--no-fetch",
        help="Fetch size records from the remote first"
    ),
):
    """
    Show recorded binary sizes, newest first.

    This is a read-only operation; nothing is built or written.
    """
    configure_logging("WARNING")
    try:
        git = GitClient(".", token=os.environ.get("GITHUB_TOKEN"))
        store = NotesRecordStore(git, ref=notes_ref, remote=remote)
        if fetch:
            store.sync_remote()
        records = sort_records(store.load_records())
    except NoRemoteHistory:
        records = []
    except (SizeTrackerError, ValueError) as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if not records:
        console.print("\n[bold yellow]No size records found[/]")
        console.print(f"\nRecords are added by `size-tracker run` on pushes to the default branch ({notes_ref}).\n")
        sys.exit(EXIT_CODE_PASS)

    _display_history(records, limit)
    sys.exit(EXIT_CODE_PASS)


def _format_change(before: Optional[int], after: int) -> str:
    """Format the size change from the previous record."""
    if before is None:
        return "-"
    delta = after - before
    if delta == 0:
        return "0 B"
    sign = "+" if delta > 0 else "-"
    return f"{sign}{format_bytes(abs(delta))}"


def _display_history(records, limit: int):
    """Display the most recent records in a table."""
    table = Table(title="Binary Size History")
    table.add_column("Commit")
    table.add_column("Commit Time (UTC)")
    table.add_column("Size", justify="right")
    table.add_column("Bytes", justify="right")
    table.add_column("Change", justify="right")

    rows = []
    previous = None
    for record in records:
        rows.append((record, _format_change(previous, record.size)))
        previous = record.size

    for record, change in reversed(rows[-limit:] if limit > 0 else rows):
        table.add_row(
            record.commit[:12],
            record.timestamp.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M"),
            format_bytes(record.size),
            f"{record.size:,}",
            change
        )

    console.print(table)


if __name__ == "__main__":
    app()
