"""Registry of root spans started by the migration controller."""

from __future__ import annotations

from opentelemetry.trace import Span


class MigrationSpanRegistry:
    """Map migration UIDs to their root span.

    The controller that owns migrations registers each root span here,
    through the registry it passes in ``ControllerComponents``. Reconciles of
    tasks whose migration has no registered span are not traced.
    """

    def __init__(self) -> None:
        self._spans: dict[str, Span] = {}

    def register(self, migration_uid: str, span: Span) -> None:
        self._spans[migration_uid] = span

    def get(self, migration_uid: str) -> Span | None:
        return self._spans.get(migration_uid)


__all__ = ["MigrationSpanRegistry"]
