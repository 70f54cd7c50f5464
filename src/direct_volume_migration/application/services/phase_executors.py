"""Default phase executors backed by a transfer backend."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from direct_volume_migration.domain.entities import Condition
from direct_volume_migration.domain.errors import FatalPlanError
from direct_volume_migration.domain.phase_types import (
    CONDITION_TRUE,
    ConditionCategory,
    ConditionType,
    PhaseName,
)
from direct_volume_migration.domain.ports import PhaseExecutor, TransferBackend
from direct_volume_migration.domain.task import PhaseOutcome, Task

TaskAction = Callable[[Task], Awaitable[None]]
TaskCheck = Callable[[Task], Awaitable[bool]]


class PassThroughPhase:
    """Phase with no external work."""

    async def execute(self, task: Task) -> PhaseOutcome:
        _ = task
        return PhaseOutcome.advance()


class ActionPhase:
    """Run an idempotent action and advance."""

    def __init__(self, action: TaskAction) -> None:
        self._action = action

    async def execute(self, task: Task) -> PhaseOutcome:
        await self._action(task)
        return PhaseOutcome.advance()


class WaitPhase:
    """Advance once a readiness check passes, otherwise poll again."""

    def __init__(self, check: TaskCheck) -> None:
        self._check = check

    async def execute(self, task: Task) -> PhaseOutcome:
        if await self._check(task):
            return PhaseOutcome.advance()
        return PhaseOutcome.wait()


class PreparePhase:
    """Validate that the task describes claims that can be migrated."""

    async def execute(self, task: Task) -> PhaseOutcome:
        claims = task.owner.spec.persistent_volume_claims
        if not claims:
            raise FatalPlanError(
                f"Migration task '{task.owner.key}' has no persistent volume claims to migrate."
            )

        destinations: set[str] = set()
        for claim in claims:
            if not claim.name or not claim.namespace:
                raise FatalPlanError(
                    f"Migration task '{task.owner.key}' has a claim without name or namespace."
                )
            destination = f"{claim.destination_namespace}/{claim.destination_name}"
            if destination in destinations:
                raise FatalPlanError(
                    f"Migration task '{task.owner.key}' maps more than one claim to "
                    f"'{destination}'."
                )
            destinations.add(destination)
        return PhaseOutcome.advance()


class StartTransfersPhase:
    """Create transfer clients, passing the sparse-file advisory along."""

    def __init__(self, backend: TransferBackend) -> None:
        self._backend = backend

    async def execute(self, task: Task) -> PhaseOutcome:
        await self._backend.start_transfers(task, task.sparse_volumes())
        return PhaseOutcome.advance()


class RunTransferOperationsPhase:
    """Wait for transfers to finish and record failed volumes."""

    def __init__(self, backend: TransferBackend) -> None:
        self._backend = backend

    async def execute(self, task: Task) -> PhaseOutcome:
        status = await self._backend.get_transfer_status(task)
        if not status.finished:
            return PhaseOutcome.wait()

        if status.has_failures:
            task.set_condition(
                Condition(
                    type=ConditionType.FAILED,
                    status=CONDITION_TRUE,
                    reason=PhaseName.RUN_TRANSFER_OPERATIONS,
                    category=ConditionCategory.WARN,
                    message=(
                        "Failed to transfer persistent volume data for: "
                        + ", ".join(sorted(status.failed_volumes))
                    ),
                    durable=True,
                )
            )
        return PhaseOutcome.advance()


def build_phase_executors(backend: TransferBackend) -> dict[str, PhaseExecutor]:
    """Return the executor for every phase of the built-in itineraries."""

    async def ensure_endpoints(task: Task) -> None:
        await backend.ensure_endpoints(task, task.endpoint_type)

    return {
        PhaseName.CREATED: PassThroughPhase(),
        PhaseName.STARTED: PassThroughPhase(),
        PhaseName.PREPARE: PreparePhase(),
        PhaseName.CLEAN_STALE_TRANSFER_RESOURCES: ActionPhase(backend.delete_stale_resources),
        PhaseName.CREATE_DESTINATION_NAMESPACES: ActionPhase(
            backend.ensure_destination_namespaces
        ),
        PhaseName.DESTINATION_NAMESPACES_CREATED: WaitPhase(
            backend.destination_namespaces_ready
        ),
        PhaseName.CREATE_DESTINATION_PVCS: ActionPhase(backend.ensure_destination_pvcs),
        PhaseName.DESTINATION_PVCS_CREATED: WaitPhase(backend.destination_pvcs_bound),
        PhaseName.CREATE_TRANSFER_ENDPOINTS: ActionPhase(ensure_endpoints),
        PhaseName.ENSURE_TRANSFER_ENDPOINTS_ADMITTED: WaitPhase(backend.endpoints_admitted),
        PhaseName.CREATE_TRANSFER_CLIENTS: StartTransfersPhase(backend),
        PhaseName.WAIT_FOR_TRANSFER_CLIENTS_RUNNING: WaitPhase(backend.transfer_clients_running),
        PhaseName.RUN_TRANSFER_OPERATIONS: RunTransferOperationsPhase(backend),
        PhaseName.DELETE_TRANSFER_RESOURCES: ActionPhase(backend.delete_transfer_resources),
        PhaseName.WAIT_FOR_TRANSFER_RESOURCES_TERMINATED: WaitPhase(
            backend.transfer_resources_terminated
        ),
    }


__all__ = [
    "ActionPhase",
    "PassThroughPhase",
    "PreparePhase",
    "RunTransferOperationsPhase",
    "StartTransfersPhase",
    "WaitPhase",
    "build_phase_executors",
]
