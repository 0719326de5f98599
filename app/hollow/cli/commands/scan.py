"""Scan commands.

This module provides the `hollow scan` commands: running an invocation
of the resumable scan, firing due re-invocations, and inspecting or
discarding the scan in progress.
"""

import json
import time
from datetime import UTC, datetime
from typing import Annotated

import typer

from hollow.cli.types import (
    SetupError,
    build_checkpoint_store,
    build_controller,
    build_scheduler,
    get_config_path_option,
    require_config,
)
from hollow.core.checkpoint import CheckpointError
from hollow.core.config import HollowConfig
from hollow.core.controller import (
    CheckpointUnreadableError,
    InvocationOutcome,
    InvocationResult,
    ScanController,
    ScanProgress,
    read_progress,
    reset_scan,
)
from hollow.core.scheduler import RESUME_HANDLER, Scheduler, SchedulerError
from hollow.utils.formatting import (
    console,
    create_table,
    format_duration,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Run and manage the empty-folder scan.",
    no_args_is_help=True,
)

_SUCCESS_OUTCOMES = frozenset({InvocationOutcome.COMPLETED, InvocationOutcome.YIELDED})


@app.command()
def run(
    ctx: typer.Context,
    follow: Annotated[
        bool,
        typer.Option(
            "--follow",
            "-f",
            help="Keep running invocations until the scan completes.",
        ),
    ] = False,
) -> None:
    """Run one time-boxed invocation of the scan.

    Starts a new scan if none is in progress, otherwise resumes from the
    checkpoint. When the time budget runs out a re-invocation is
    scheduled; with --follow this command waits for it and keeps going
    until the scan completes.

    Examples:
        hollow scan run              # One invocation
        hollow scan run --follow     # Run to completion
    """
    config = require_config(get_config_path_option(ctx))
    scheduler = build_scheduler()
    controller = _require_controller(config, scheduler)

    try:
        result = controller.run()
        _print_result(result)
        while follow and result.outcome == InvocationOutcome.YIELDED:
            _wait_for_trigger(scheduler, config.reinvoke_delay_seconds)
            result = controller.run()
            _print_result(result)
    except KeyboardInterrupt:
        print_warning("Interrupted. Progress is saved; run 'hollow scan run' to resume.")
        raise typer.Exit(code=130) from None

    if result.outcome not in _SUCCESS_OUTCOMES:
        raise typer.Exit(code=1)


@app.command()
def tick(ctx: typer.Context) -> None:
    """Run the scan if a scheduled re-invocation is due.

    Meant for a cron job or systemd timer: does nothing until the
    previous invocation's re-invocation delay has passed.
    """
    config = require_config(get_config_path_option(ctx))
    scheduler = build_scheduler()

    try:
        trigger = scheduler.consume_due(RESUME_HANDLER)
    except SchedulerError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if trigger is None:
        print_info("No scan invocation is due.")
        return

    result = _require_controller(config, scheduler).run()
    _print_result(result)
    if result.outcome not in _SUCCESS_OUTCOMES:
        raise typer.Exit(code=1)


@app.command()
def status(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show progress of the scan in progress."""
    try:
        progress = read_progress(build_checkpoint_store(), build_scheduler())
    except (CheckpointUnreadableError, SchedulerError) as e:
        print_error(str(e))
        print_info("Run 'hollow scan reset' to discard the stored scan.")
        raise typer.Exit(code=1) from e

    if json_output:
        console.print(json.dumps(progress.to_dict() if progress else None, indent=2))
        return

    if progress is None:
        print_info("No scan in progress.")
        return

    _print_progress(progress)


@app.command()
def reset(
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
) -> None:
    """Discard the scan in progress and its scheduled re-invocation.

    Rows already written to the report are kept.
    """
    if not yes:
        confirm = typer.confirm("Discard the scan in progress?")
        if not confirm:
            print_info("Cancelled.")
            return

    try:
        existed = reset_scan(build_checkpoint_store(), build_scheduler())
    except (CheckpointError, SchedulerError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if existed:
        print_success("Scan state discarded.")
    else:
        print_info("No scan in progress.")


def _require_controller(config: HollowConfig, scheduler: Scheduler) -> ScanController:
    try:
        return build_controller(config, scheduler)
    except SetupError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def _wait_for_trigger(scheduler: Scheduler, fallback_delay: float) -> None:
    """Sleep until the next re-invocation is due, then consume it."""
    try:
        pending = scheduler.pending(RESUME_HANDLER)
    except SchedulerError as e:
        print_warning(f"{e}; retrying in {format_duration(fallback_delay)}")
        pending = []

    if pending:
        delay = (pending[0].due_at - datetime.now(UTC)).total_seconds()
    else:
        delay = fallback_delay

    if delay > 0:
        console.print(f"[muted]Next invocation in {format_duration(delay)}...[/]")
        time.sleep(delay)

    try:
        scheduler.consume_due(RESUME_HANDLER)
    except SchedulerError as e:
        print_warning(str(e))


def _print_result(result: InvocationResult) -> None:
    """Print a one-line summary of an invocation outcome."""
    if result.outcome == InvocationOutcome.COMPLETED and result.summary is not None:
        print_success(
            f"Scan complete: {result.summary.folders_visited} folders scanned, "
            f"{result.summary.empty_found} empty."
        )
    elif result.outcome == InvocationOutcome.YIELDED:
        queued = len(result.state.frontier) if result.state else 0
        print_info(
            f"Visited {result.visited} folders ({result.empty_found} empty) this run; "
            f"{queued} queued."
        )
        if result.message:
            print_warning(result.message)
    elif result.outcome == InvocationOutcome.NO_VALID_ROOTS:
        print_error("None of the configured roots could be resolved.")
        if result.validation is not None:
            for failure in result.validation.failures:
                console.print(f"  [muted]{failure.identifier}[/]: {failure.reason}")
    elif result.outcome == InvocationOutcome.CHECKPOINT_UNREADABLE:
        print_error(result.message)
        print_info("Run 'hollow scan reset' to discard the stored scan.")
    else:
        print_error(f"Scan invocation failed: {result.message}")


def _print_progress(progress: ScanProgress) -> None:
    table = create_table("Scan Progress")
    table.add_column("Field", style="muted")
    table.add_column("Value", style="text")

    table.add_row("Folders scanned", str(progress.folders_visited))
    table.add_row("Empty folders", f"[folder_empty]{progress.empty_found}[/]")
    table.add_row("Queued folders", str(progress.queue_depth))
    table.add_row("Roots seeded", f"{progress.roots_seeded}/{progress.roots_total}")
    table.add_row("Rows awaiting report", str(progress.pending_rows))
    table.add_row("Invocations", str(progress.invocations))
    table.add_row("Started", progress.started_at)
    table.add_row("Last checkpoint", progress.updated_at)
    table.add_row(
        "Next invocation",
        progress.next_wakeup.isoformat() if progress.next_wakeup else "[warning]not scheduled[/]",
    )

    console.print(table)
