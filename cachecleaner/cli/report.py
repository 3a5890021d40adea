"""Rendering of cache status and sweep outcomes with rich."""

from datetime import datetime, timezone
from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table

from cachecleaner.cache import CacheRoot, Snapshot, SweepResult, usage_signal
from cachecleaner.cache.sweeper import Sweeper
from cachecleaner.constants import NEVER_USED


def format_signal(signal: int) -> str:
    if signal == NEVER_USED:
        return "never"
    return (
        datetime.fromtimestamp(signal / 1_000_000_000, tz=timezone.utc)
        .isoformat(timespec="seconds")
    )


def render_sweep_summary(
    result: SweepResult, console: Optional[Console] = None, details: bool = False
):
    """
    Print deleted/retained/failed counts per cache kind.

    With ``details`` a second table lists every entry and its outcome.
    """
    console = console or Console()
    table = Table(title="Cache cleanup")
    table.add_column("Kind")
    table.add_column("Deleted", justify="right")
    table.add_column("Retained", justify="right")
    table.add_column("Failed", justify="right")

    for kind, counts in result.summary().items():
        table.add_row(
            kind.value,
            str(counts["deleted"]),
            str(counts["retained"]),
            str(counts["failed"]),
        )
    console.print(table)

    if details:
        entries = Table(title="Cleaned entries")
        entries.add_column("Outcome")
        entries.add_column("Kind")
        entries.add_column("Entry", overflow="fold")
        for outcome, roots in (
            ("deleted", result.deleted),
            ("failed", [root for root, _ in result.failed]),
            ("retained", result.retained),
        ):
            for root in roots:
                entries.add_row(outcome, root.kind.value, root.identity)
        console.print(entries)

    for root, error in result.failed:
        console.print(f"[yellow]Could not delete {root.identity}: {error.cause}[/yellow]")


def render_roots(
    roots: Iterable[CacheRoot],
    snapshot: Optional[Snapshot],
    sweeper: Optional[Sweeper] = None,
    console: Optional[Console] = None,
):
    """
    Print every discovered cache root with its current usage signal.

    When a snapshot exists, each root is also labelled with what the next
    cleanup would do with it: ``new``, ``used`` (both kept) or ``stale``.
    """
    console = console or Console()
    table = Table(title="Cache entries")
    table.add_column("Kind")
    table.add_column("Entry")
    table.add_column("Last used")
    table.add_column("Since snapshot")

    count = 0
    for root in roots:
        verdict = "-"
        if snapshot is not None and sweeper is not None:
            verdict = sweeper.classify(root).value
        table.add_row(root.kind.value, root.identity, format_signal(usage_signal(root)), verdict)
        count += 1

    console.print(table)
    console.print(f"{count} cache entries")
