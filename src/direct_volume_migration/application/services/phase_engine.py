"""Resumable phase execution engine.

Each reconcile runs at most one phase step. The only state carried between
invocations is the phase and itinerary name persisted on the task status;
everything else is rebuilt by the caller before :meth:`PhaseExecutionEngine.run`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

from direct_volume_migration.domain.entities import Condition
from direct_volume_migration.domain.errors import (
    ErrorKind,
    FatalPlanError,
    classify_error,
    root_cause,
)
from direct_volume_migration.domain.phase_types import (
    CONDITION_TRUE,
    TERMINAL_PHASES,
    ConditionCategory,
    ConditionType,
    PhaseName,
)
from direct_volume_migration.domain.ports import PhaseExecutor
from direct_volume_migration.domain.requeue import (
    ADVANCE_REQUEUE_SECONDS,
    FAST_REQUEUE_SECONDS,
    POLL_REQUEUE_SECONDS,
    RequeueDirective,
)
from direct_volume_migration.domain.task import Task

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True, frozen=True)
class EngineResult:
    """Outcome of one engine invocation."""

    requeue: RequeueDirective
    error_kind: ErrorKind | None = None
    error: BaseException | None = None

    @property
    def conflict(self) -> bool:
        return self.error_kind is ErrorKind.CONFLICT


class PhaseExecutionEngine:
    """Execute one step of a task's itinerary and decide what happens next."""

    def __init__(
        self,
        executors: Mapping[str, PhaseExecutor],
        *,
        fast_requeue_seconds: float = FAST_REQUEUE_SECONDS,
        advance_requeue_seconds: float = ADVANCE_REQUEUE_SECONDS,
        poll_requeue_seconds: float = POLL_REQUEUE_SECONDS,
        clock: Clock | None = None,
    ) -> None:
        self._executors = dict(executors)
        self._fast_requeue_seconds = max(fast_requeue_seconds, 0.0)
        self._advance_requeue_seconds = max(advance_requeue_seconds, 0.0)
        self._poll_requeue_seconds = max(poll_requeue_seconds, 0.0)
        self._clock = clock or _utc_now

    async def run(self, task: Task) -> EngineResult:
        """Run the current phase and classify any failure."""

        status = task.owner.status
        if status.start_timestamp is None:
            logger.info("Marking migration task '%s' as started.", task.owner.key)
            status.start_timestamp = task.now or self._clock()

        if task.phase in TERMINAL_PHASES:
            return EngineResult(RequeueDirective.no_requeue())

        try:
            requeue = await self._step(task)
        except Exception as exc:
            kind = classify_error(exc)
            if kind is ErrorKind.CONFLICT:
                logger.debug(
                    "Conflict during phase '%s' of migration task '%s', requeueing.",
                    task.phase,
                    task.owner.key,
                )
                return EngineResult(RequeueDirective.fast(self._fast_requeue_seconds), kind, exc)

            logger.info(
                "Phase execution failed for migration task '%s' in phase '%s' (%s): %s",
                task.owner.key,
                task.phase,
                task.phase_description,
                root_cause(exc),
            )
            if kind is ErrorKind.FATAL_PLAN:
                self.fail(task, ConditionCategory.CRITICAL, exc)
            else:
                self.fail(task, ConditionCategory.WARN, exc)
            self._record_on_span(task, exc)
            return EngineResult(RequeueDirective.no_requeue(), kind, exc)

        return EngineResult(requeue)

    def fail(self, task: Task, category: ConditionCategory, error: BaseException) -> None:
        """Move the task to MigrationFailed and record a durable Failed condition."""

        failed_phase = task.phase or PhaseName.CREATED
        task.phase = PhaseName.MIGRATION_FAILED
        task.set_condition(
            Condition(
                type=ConditionType.FAILED,
                status=CONDITION_TRUE,
                reason=failed_phase,
                category=category,
                message=str(error),
                durable=True,
            )
        )

    async def _step(self, task: Task) -> RequeueDirective:
        itinerary = task.itinerary
        if not itinerary.phases:
            raise FatalPlanError(f"Itinerary '{itinerary.name}' is not defined.")

        flags = task.flags
        if not task.phase:
            task.phase = itinerary.first_phase(flags)

        if task.canceled:
            logger.info("Migration task '%s' canceled in phase '%s'.", task.owner.key, task.phase)
            task.phase = PhaseName.CANCELED
            return RequeueDirective.no_requeue()

        phase = itinerary.get(task.phase)
        if phase is None:
            raise FatalPlanError(
                f"Phase '{task.phase}' is not part of itinerary '{itinerary.name}'."
            )

        if phase.skipped(flags):
            task.phase = itinerary.next_phase(phase.name, flags)
            return self._after_advance(task)

        executor = self._executors.get(phase.name)
        if executor is None:
            raise FatalPlanError(f"No executor registered for phase '{phase.name}'.")

        outcome = await executor.execute(task)
        if not outcome.done:
            delay = outcome.requeue_seconds
            if delay is None:
                delay = phase.requeue_seconds
            if delay is None:
                delay = self._poll_requeue_seconds
            return RequeueDirective.after(delay)

        task.phase = itinerary.next_phase(phase.name, flags)
        logger.info(
            "Migration task '%s' advanced from phase '%s' to '%s'.",
            task.owner.key,
            phase.name,
            task.phase,
        )
        return self._after_advance(task)

    def _after_advance(self, task: Task) -> RequeueDirective:
        if task.phase == PhaseName.COMPLETED:
            return RequeueDirective.no_requeue()
        return RequeueDirective.after(self._advance_requeue_seconds)

    def _record_on_span(self, task: Task, error: BaseException) -> None:
        span = task.span
        if span is None:
            return
        span.record_exception(error)


__all__ = ["EngineResult", "PhaseExecutionEngine"]
