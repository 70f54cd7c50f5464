"""Transient execution context bound to one reconcile invocation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from direct_volume_migration.domain.entities import Condition, MigrationTask
from direct_volume_migration.domain.itinerary import Itinerary, PhaseFlag, phase_description
from direct_volume_migration.domain.phase_types import (
    DEFAULT_ENDPOINT_TYPE,
    EndpointType,
)
from direct_volume_migration.domain.plan_resources import PlanResources, SparseFileAdvisory

if TYPE_CHECKING:
    from opentelemetry.trace import Span


@dataclass(slots=True, frozen=True)
class PhaseOutcome:
    """Result of one phase step.

    ``done`` advances the itinerary. Otherwise the task stays in the phase and
    is polled again after ``requeue_seconds`` (or the phase default).
    """

    done: bool
    requeue_seconds: float | None = None

    @classmethod
    def advance(cls) -> PhaseOutcome:
        return cls(done=True)

    @classmethod
    def wait(cls, requeue_seconds: float | None = None) -> PhaseOutcome:
        return cls(done=False, requeue_seconds=requeue_seconds)


@dataclass(slots=True)
class Task:
    """Per-reconcile state handed to phase executors. Never persisted as a whole."""

    owner: MigrationTask
    itinerary: Itinerary
    phase: str
    plan_resources: PlanResources = field(default_factory=PlanResources)
    sparse_file_map: SparseFileAdvisory = field(default_factory=dict)
    endpoint_type: EndpointType = DEFAULT_ENDPOINT_TYPE
    span: Span | None = None
    now: datetime | None = None

    @property
    def phase_description(self) -> str:
        return phase_description(self.itinerary, self.phase)

    @property
    def flags(self) -> frozenset[PhaseFlag]:
        flags: set[PhaseFlag] = set()
        if self.endpoint_type is EndpointType.ROUTE:
            flags.add(PhaseFlag.ROUTE_ENDPOINT)
        if self.owner.spec.create_destination_namespaces:
            flags.add(PhaseFlag.CREATE_NAMESPACES)
        return frozenset(flags)

    @property
    def canceled(self) -> bool:
        migration = self.plan_resources.migration
        return self.owner.spec.canceled or (migration is not None and migration.canceled)

    def sparse_volumes(self) -> list[str]:
        """Return keys of the task's claims flagged with sparse files."""

        return [
            claim.key
            for claim in self.owner.spec.persistent_volume_claims
            if self.sparse_file_map.get(claim.key, False)
        ]

    def set_condition(self, condition: Condition) -> None:
        self.owner.status.set_condition(condition, now=self.now)


__all__ = ["PhaseOutcome", "Task"]
