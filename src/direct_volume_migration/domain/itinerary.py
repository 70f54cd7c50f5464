"""Itineraries: immutable, ordered phase sequences."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from direct_volume_migration.domain.entities import MigrationTask
from direct_volume_migration.domain.phase_types import PhaseName


class PhaseFlag(StrEnum):
    """Per-reconcile facts that decide whether a phase runs."""

    ROUTE_ENDPOINT = "RouteEndpoint"
    CREATE_NAMESPACES = "CreateNamespaces"


@dataclass(slots=True, frozen=True)
class Phase:
    """A named step in an itinerary.

    A phase is skipped unless every flag in ``requires`` is set for the
    current reconcile. ``requeue_seconds`` overrides the default poll
    interval while the phase is waiting on external work.
    """

    name: str
    description: str
    requires: frozenset[PhaseFlag] = frozenset()
    requeue_seconds: float | None = None

    def skipped(self, flags: frozenset[PhaseFlag]) -> bool:
        return not self.requires <= flags


@dataclass(slots=True, frozen=True)
class Itinerary:
    """Fixed ordered list of phases selected for a task's execution mode."""

    name: str
    phases: tuple[Phase, ...]

    def get(self, phase_name: str) -> Phase | None:
        for phase in self.phases:
            if phase.name == phase_name:
                return phase
        return None

    def index_of(self, phase_name: str) -> int | None:
        for index, phase in enumerate(self.phases):
            if phase.name == phase_name:
                return index
        return None

    def active_phases(self, flags: frozenset[PhaseFlag]) -> list[Phase]:
        return [phase for phase in self.phases if not phase.skipped(flags)]

    def first_phase(self, flags: frozenset[PhaseFlag]) -> str:
        active = self.active_phases(flags)
        if not active:
            return PhaseName.COMPLETED
        return active[0].name

    def next_phase(self, current: str, flags: frozenset[PhaseFlag]) -> str:
        """Return the next non-skipped phase after ``current``, or Completed."""

        index = self.index_of(current)
        if index is None:
            return PhaseName.COMPLETED
        for phase in self.phases[index + 1 :]:
            if not phase.skipped(flags):
                return phase.name
        return PhaseName.COMPLETED

    def progress_report(self, current: str, flags: frozenset[PhaseFlag]) -> tuple[str, int, int]:
        """Return ``(phase, step, total)`` counted over non-skipped phases."""

        active = self.active_phases(flags)
        index = self.index_of(current)
        if index is None:
            return current, 0, len(active)
        step = sum(1 for phase in self.phases[: index + 1] if not phase.skipped(flags))
        return current, max(step, 1), len(active)


_CREATED = Phase(PhaseName.CREATED, "Migration task created.")
_STARTED = Phase(PhaseName.STARTED, "Migration task started.")
_PREPARE = Phase(PhaseName.PREPARE, "Validating persistent volume claims to migrate.")
_CLEAN_STALE = Phase(
    PhaseName.CLEAN_STALE_TRANSFER_RESOURCES,
    "Deleting stale transfer resources left by previous migrations.",
)
_CREATE_NAMESPACES = Phase(
    PhaseName.CREATE_DESTINATION_NAMESPACES,
    "Creating namespaces on the destination cluster.",
    requires=frozenset({PhaseFlag.CREATE_NAMESPACES}),
)
_NAMESPACES_CREATED = Phase(
    PhaseName.DESTINATION_NAMESPACES_CREATED,
    "Waiting for destination namespaces to be created.",
    requires=frozenset({PhaseFlag.CREATE_NAMESPACES}),
)
_CREATE_PVCS = Phase(
    PhaseName.CREATE_DESTINATION_PVCS,
    "Creating persistent volume claims on the destination cluster.",
)
_PVCS_CREATED = Phase(
    PhaseName.DESTINATION_PVCS_CREATED,
    "Waiting for destination persistent volume claims to be created.",
)
_CREATE_ENDPOINTS = Phase(
    PhaseName.CREATE_TRANSFER_ENDPOINTS,
    "Creating transfer endpoints on the destination cluster.",
)
_ENDPOINTS_ADMITTED = Phase(
    PhaseName.ENSURE_TRANSFER_ENDPOINTS_ADMITTED,
    "Waiting for transfer routes to be admitted.",
    requires=frozenset({PhaseFlag.ROUTE_ENDPOINT}),
)
_CREATE_CLIENTS = Phase(
    PhaseName.CREATE_TRANSFER_CLIENTS,
    "Creating transfer clients on the source cluster.",
)
_CLIENTS_RUNNING = Phase(
    PhaseName.WAIT_FOR_TRANSFER_CLIENTS_RUNNING,
    "Waiting for transfer clients to start running.",
)
_RUN_TRANSFERS = Phase(
    PhaseName.RUN_TRANSFER_OPERATIONS,
    "Transferring persistent volume data to the destination cluster.",
    requeue_seconds=5.0,
)
_DELETE_RESOURCES = Phase(
    PhaseName.DELETE_TRANSFER_RESOURCES,
    "Deleting transfer resources on source and destination clusters.",
)
_RESOURCES_TERMINATED = Phase(
    PhaseName.WAIT_FOR_TRANSFER_RESOURCES_TERMINATED,
    "Waiting for transfer resources to terminate.",
)

VOLUME_MIGRATION_ITINERARY = Itinerary(
    name="VolumeMigration",
    phases=(
        _CREATED,
        _STARTED,
        _PREPARE,
        _CLEAN_STALE,
        _CREATE_NAMESPACES,
        _NAMESPACES_CREATED,
        _CREATE_PVCS,
        _PVCS_CREATED,
        _CREATE_ENDPOINTS,
        _ENDPOINTS_ADMITTED,
        _CREATE_CLIENTS,
        _CLIENTS_RUNNING,
        _RUN_TRANSFERS,
        _DELETE_RESOURCES,
        _RESOURCES_TERMINATED,
    ),
)

STANDALONE_ITINERARY = Itinerary(
    name="StandaloneVolumeMigration",
    phases=tuple(
        phase
        for phase in VOLUME_MIGRATION_ITINERARY.phases
        if phase.name != PhaseName.CLEAN_STALE_TRANSFER_RESOURCES
    ),
)

ITINERARIES: dict[str, Itinerary] = {
    itinerary.name: itinerary for itinerary in (VOLUME_MIGRATION_ITINERARY, STANDALONE_ITINERARY)
}

TERMINAL_PHASE_DESCRIPTIONS: dict[str, str] = {
    PhaseName.COMPLETED: "The migration task has completed.",
    PhaseName.MIGRATION_FAILED: "The migration task has failed. See status conditions for details.",
    PhaseName.CANCELED: "The migration task has been canceled.",
}


def phase_description(itinerary: Itinerary, phase_name: str) -> str:
    """Return the human readable description of a phase."""

    phase = itinerary.get(phase_name)
    if phase is not None:
        return phase.description
    return TERMINAL_PHASE_DESCRIPTIONS.get(phase_name, "")


def select_itinerary(task: MigrationTask) -> Itinerary:
    """Return the itinerary recorded on the task, or choose one for a new task.

    An unknown recorded name yields an empty itinerary carrying that name so
    the engine can fail the task without losing the recorded value.
    """

    recorded = task.status.itinerary
    if recorded:
        return ITINERARIES.get(recorded, Itinerary(name=recorded, phases=()))
    if task.migration_owner() is not None:
        return VOLUME_MIGRATION_ITINERARY
    return STANDALONE_ITINERARY


__all__ = [
    "ITINERARIES",
    "Itinerary",
    "Phase",
    "PhaseFlag",
    "STANDALONE_ITINERARY",
    "TERMINAL_PHASE_DESCRIPTIONS",
    "VOLUME_MIGRATION_ITINERARY",
    "phase_description",
    "select_itinerary",
]
