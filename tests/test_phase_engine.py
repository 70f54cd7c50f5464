from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from direct_volume_migration.application.services import PhaseExecutionEngine, StatusProjector
from direct_volume_migration.domain.entities import (
    Condition,
    MigrationTask,
    MigrationTaskStatus,
)
from direct_volume_migration.domain.errors import (
    FatalPlanError,
    ResourceConflictError,
    TransferBackendError,
)
from direct_volume_migration.domain.itinerary import Itinerary, Phase, PhaseFlag
from direct_volume_migration.domain.phase_types import (
    CONDITION_TRUE,
    ConditionCategory,
    ConditionType,
    EndpointType,
    PhaseName,
)
from direct_volume_migration.domain.requeue import RequeueKind
from direct_volume_migration.domain.task import PhaseOutcome, Task

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

ITINERARY = Itinerary(
    name="Test",
    phases=(
        Phase("One", "first"),
        Phase("RoutesOnly", "routes", requires=frozenset({PhaseFlag.ROUTE_ENDPOINT})),
        Phase("Two", "second", requeue_seconds=7.0),
        Phase("Three", "third"),
    ),
)


class ScriptedExecutor:
    """Returns queued outcomes or raises queued errors, recording calls."""

    def __init__(self, *results: PhaseOutcome | Exception) -> None:
        self._results = list(results)
        self.calls = 0

    async def execute(self, task: Task) -> PhaseOutcome:
        self.calls += 1
        result = self._results.pop(0) if self._results else PhaseOutcome.advance()
        if isinstance(result, Exception):
            raise result
        return result


def make_task(phase: str = "", endpoint_type: EndpointType = EndpointType.ROUTE) -> Task:
    owner = MigrationTask(
        name="dvm-1",
        namespace="ns",
        uid="uid-1",
        status=MigrationTaskStatus(phase=phase, itinerary=ITINERARY.name),
    )
    return Task(
        owner=owner,
        itinerary=ITINERARY,
        phase=phase,
        endpoint_type=endpoint_type,
        now=NOW,
    )


def make_engine(**executors: ScriptedExecutor) -> PhaseExecutionEngine:
    defaults = {name: ScriptedExecutor() for name in ("One", "RoutesOnly", "Two", "Three")}
    defaults.update(executors)
    return PhaseExecutionEngine(
        defaults,
        fast_requeue_seconds=0.1,
        advance_requeue_seconds=0.2,
        poll_requeue_seconds=3.0,
    )


def failed_conditions(task: Task) -> list[Condition]:
    return [c for c in task.owner.status.conditions if c.type == ConditionType.FAILED]


def test_new_task_starts_at_first_phase_and_advances() -> None:
    task = make_task()

    result = asyncio.run(make_engine().run(task))

    assert task.phase == "RoutesOnly"
    assert result.requeue.kind is RequeueKind.AFTER
    assert result.requeue.delay_seconds == 0.2
    assert task.owner.status.start_timestamp == NOW


def test_advance_is_not_reported_as_fast_requeue() -> None:
    task = make_task("Two")

    result = asyncio.run(make_engine(Two=ScriptedExecutor(PhaseOutcome.advance())).run(task))

    assert task.phase == "Three"
    assert result.error_kind is None
    assert result.requeue.kind is RequeueKind.AFTER
    assert result.requeue.kind is not RequeueKind.FAST
    assert result.requeue.delay_seconds == 0.2


def test_start_timestamp_is_set_only_once() -> None:
    task = make_task("One")
    earlier = datetime(2024, 1, 1, tzinfo=UTC)
    task.owner.status.start_timestamp = earlier

    asyncio.run(make_engine().run(task))

    assert task.owner.status.start_timestamp == earlier


def test_phase_without_required_flag_is_skipped() -> None:
    task = make_task("One", endpoint_type=EndpointType.NODE_PORT)
    routes_only = ScriptedExecutor()

    asyncio.run(make_engine(RoutesOnly=routes_only).run(task))
    assert task.phase == "Two"

    task.phase = "RoutesOnly"
    asyncio.run(make_engine(RoutesOnly=routes_only).run(task))

    assert task.phase == "Two"
    assert routes_only.calls == 0


def test_waiting_phase_uses_phase_requeue_interval() -> None:
    task = make_task("Two")

    result = asyncio.run(make_engine(Two=ScriptedExecutor(PhaseOutcome.wait())).run(task))

    assert task.phase == "Two"
    assert result.requeue.kind is RequeueKind.AFTER
    assert result.requeue.delay_seconds == 7.0


def test_waiting_phase_falls_back_to_poll_interval() -> None:
    task = make_task("One")

    result = asyncio.run(make_engine(One=ScriptedExecutor(PhaseOutcome.wait())).run(task))

    assert result.requeue.kind is RequeueKind.AFTER
    assert result.requeue.delay_seconds == 3.0


def test_conflict_requeues_fast_without_failing_the_task() -> None:
    task = make_task("Two")
    conflict = TransferBackendError("write rejected")
    conflict.__cause__ = ResourceConflictError("stale version")

    result = asyncio.run(make_engine(Two=ScriptedExecutor(conflict)).run(task))

    assert result.conflict
    assert result.requeue.kind is RequeueKind.FAST
    assert task.phase == "Two"
    assert failed_conditions(task) == []


def test_fatal_plan_error_fails_task_with_critical_condition() -> None:
    task = make_task("Two")

    result = asyncio.run(
        make_engine(Two=ScriptedExecutor(FatalPlanError("bad mapping"))).run(task)
    )

    assert task.phase == PhaseName.MIGRATION_FAILED
    assert result.requeue.kind is RequeueKind.NONE
    [condition] = failed_conditions(task)
    assert condition.category is ConditionCategory.CRITICAL
    assert condition.reason == "Two"
    assert condition.durable
    assert condition.status == CONDITION_TRUE


def test_other_errors_fail_task_with_warn_condition() -> None:
    task = make_task("Three")

    result = asyncio.run(make_engine(Three=ScriptedExecutor(RuntimeError("boom"))).run(task))

    assert task.phase == PhaseName.MIGRATION_FAILED
    assert result.requeue.kind is RequeueKind.NONE
    [condition] = failed_conditions(task)
    assert condition.category is ConditionCategory.WARN
    assert condition.message == "boom"


def test_unknown_itinerary_fails_task() -> None:
    task = make_task("One")
    task.itinerary = Itinerary(name="Retired", phases=())

    asyncio.run(make_engine().run(task))

    assert task.phase == PhaseName.MIGRATION_FAILED
    [condition] = failed_conditions(task)
    assert condition.category is ConditionCategory.CRITICAL


def test_unknown_phase_fails_task() -> None:
    task = make_task("Vanished")

    asyncio.run(make_engine().run(task))

    assert task.phase == PhaseName.MIGRATION_FAILED
    assert failed_conditions(task)[0].category is ConditionCategory.CRITICAL


def test_missing_executor_fails_task() -> None:
    task = make_task("One")
    engine = PhaseExecutionEngine({}, fast_requeue_seconds=0.1)

    asyncio.run(engine.run(task))

    assert task.phase == PhaseName.MIGRATION_FAILED


def test_last_phase_completes_with_single_succeeded_condition() -> None:
    task = make_task("Three")
    projector = StatusProjector()

    result = asyncio.run(make_engine().run(task))
    projector.project(task)
    projector.project(task)

    assert task.phase == PhaseName.COMPLETED
    assert result.requeue.kind is RequeueKind.NONE
    status = task.owner.status
    assert [c.type for c in status.conditions] == [ConditionType.SUCCEEDED]
    assert status.find_condition(ConditionType.RUNNING) is None


def test_completed_with_failed_condition_has_no_succeeded() -> None:
    task = make_task("Three")
    task.set_condition(
        Condition(
            type=ConditionType.FAILED,
            status=CONDITION_TRUE,
            reason="RunTransferOperations",
            category=ConditionCategory.WARN,
            durable=True,
        )
    )

    asyncio.run(make_engine().run(task))
    StatusProjector().project(task)

    assert task.phase == PhaseName.COMPLETED
    assert task.owner.status.find_condition(ConditionType.SUCCEEDED) is None


def test_terminal_phase_is_not_executed_again() -> None:
    task = make_task(PhaseName.COMPLETED)
    three = ScriptedExecutor()

    result = asyncio.run(make_engine(Three=three).run(task))

    assert result.requeue.kind is RequeueKind.NONE
    assert three.calls == 0


def test_cancel_moves_task_to_canceled() -> None:
    task = make_task("Two")
    task.owner.spec.canceled = True
    two = ScriptedExecutor()

    result = asyncio.run(make_engine(Two=two).run(task))
    StatusProjector().project(task)

    assert task.phase == PhaseName.CANCELED
    assert result.requeue.kind is RequeueKind.NONE
    assert two.calls == 0
    canceled = task.owner.status.find_condition(ConditionType.CANCELED)
    assert canceled is not None and canceled.durable


def test_running_condition_reports_progress() -> None:
    task = make_task("One", endpoint_type=EndpointType.NODE_PORT)

    asyncio.run(make_engine().run(task))
    StatusProjector().project(task)

    running = task.owner.status.find_condition(ConditionType.RUNNING)
    assert running is not None
    assert running.reason == "Two"
    assert running.message == "2 of 3"
    assert task.owner.status.phase_description == "second"


def test_repeated_wait_leaves_status_unchanged() -> None:
    task = make_task("Two")
    engine = make_engine(Two=ScriptedExecutor(PhaseOutcome.wait(), PhaseOutcome.wait()))
    projector = StatusProjector()

    asyncio.run(engine.run(task))
    projector.project(task)
    first = [
        (c.type, c.status, c.reason, c.message, c.last_transition_time)
        for c in task.owner.status.conditions
    ]

    task.now = datetime(2024, 5, 1, 13, 0, tzinfo=UTC)
    asyncio.run(engine.run(task))
    projector.project(task)
    second = [
        (c.type, c.status, c.reason, c.message, c.last_transition_time)
        for c in task.owner.status.conditions
    ]

    assert first == second
