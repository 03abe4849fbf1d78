"""Shared progress bar utilities for Rich console displays."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)


def create_export_progress(console: Console | None = None) -> Progress:
    """Create the progress bar shown while signatures are processed.

    Args:
        console: Rich console instance (optional)

    Returns:
        Configured Progress instance with a spinner, description, bar,
        M of N counter, emitted record count, elapsed and remaining time

    Example:
        ```python
        from solana_exporter.helpers.progress import create_export_progress

        progress = create_export_progress()
        with progress:
            task_id = progress.add_task("Processing", total=100, records=0)
            progress.update(task_id, advance=1, records=1)
        ```
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("• {task.fields[records]} records"),
        TextColumn("•"),
        TimeElapsedColumn(),
        TextColumn("•"),
        TimeRemainingColumn(),
        console=console,
    )


@contextmanager
def track_signatures(
    description: str,
    total: int,
    console: Console | None = None,
    *,
    enabled: bool = True,
) -> Iterator[Callable[[int], None]]:
    """Track per-signature progress, or do nothing when disabled.

    Yields a callback taking the number of records emitted so far; each call
    advances the bar by one signature.

    Args:
        description: Task description to display
        total: Number of signatures that will be processed
        console: Rich console instance (optional)
        enabled: Whether to render anything at all

    Example:
        ```python
        with track_signatures("Processing signatures", total=len(sigs)) as advance:
            for sig in sigs:
                ...
                advance(len(records))
        ```
    """
    if not enabled:
        yield lambda _records: None
        return

    progress = create_export_progress(console)
    with progress:
        task_id = progress.add_task(description, total=total, records=0)

        def advance(records: int) -> None:
            progress.update(task_id, advance=1, records=records)

        yield advance


__all__ = [
    "create_export_progress",
    "track_signatures",
]
