"""
Console output for batch evictions.
"""
from typing import Callable

import click

from batch_evict.eviction import (
    BatchEvent,
    BatchFinished,
    NamespaceFailed,
    NamespaceStarted,
    PodEvicted,
)

DRY_RUN_SUFFIX = " (dry run)"


class ConsoleReporter:
    """Turns batch events into console lines, in the order they arrive."""

    def __init__(self, echo: Callable[..., None] = click.echo):
        self.echo = echo

    def __call__(self, event: BatchEvent) -> None:
        if isinstance(event, NamespaceStarted):
            self.echo(f"evicting {event.pod_count} pods from namespace {event.namespace}{_suffix(event.dry_run)}")
        elif isinstance(event, PodEvicted):
            line = f"{event.outcome.pod.ref}{_suffix(event.dry_run)}"
            if not event.outcome.success:
                line += f": failed: {event.outcome.error}"
            self.echo(line)
        elif isinstance(event, NamespaceFailed):
            self.echo(str(event.failure.cause), err=True)
        elif isinstance(event, BatchFinished):
            self._summary(event)

    def _summary(self, event: BatchFinished) -> None:
        result = event.result
        if result.success:
            self.echo(f"evicted {len(result.evicted)} of {len(result.outcomes)} pods{_suffix(result.dry_run)}")
            return
        self.echo("failed to evict pods", err=True)
        for failure in result.failures:
            self.echo(f"  {failure.target}: {failure.cause}", err=True)


def _suffix(dry_run: bool) -> str:
    return DRY_RUN_SUFFIX if dry_run else ""
