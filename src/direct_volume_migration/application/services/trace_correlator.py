"""Correlate reconcile spans with the owning migration's trace."""

from __future__ import annotations

from typing import Protocol

from opentelemetry import trace
from opentelemetry.trace import Span, Tracer

from direct_volume_migration.domain.entities import MigrationTask


class MigrationSpanLookup(Protocol):
    """Lookup of root spans registered per migration UID."""

    def get(self, migration_uid: str) -> Span | None:
        """Return the registered root span, if any."""


class TraceCorrelator:
    """Start one span per reconcile as a child of the migration's root span."""

    def __init__(self, tracer: Tracer | None, span_lookup: MigrationSpanLookup) -> None:
        self._tracer = tracer
        self._span_lookup = span_lookup

    @property
    def enabled(self) -> bool:
        return self._tracer is not None

    def start_reconcile_span(self, task: MigrationTask) -> Span | None:
        """Return a started span, or None when tracing is off or no parent is known.

        The caller ends the span when the reconcile returns.
        """

        if self._tracer is None:
            return None
        owner = task.migration_owner()
        if owner is None:
            return None
        migration_span = self._span_lookup.get(owner.uid)
        if migration_span is None:
            return None

        return self._tracer.start_span(
            f"dvm-reconcile-{task.name}",
            context=trace.set_span_in_context(migration_span),
            attributes={
                "migration.uid": owner.uid,
                "migration_task.name": task.name,
                "migration_task.namespace": task.namespace,
                "migration_task.phase": task.status.phase,
            },
        )


__all__ = ["MigrationSpanLookup", "TraceCorrelator"]
