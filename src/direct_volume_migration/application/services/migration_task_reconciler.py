"""Level-triggered reconcile of one migration task."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from opentelemetry.trace import Span

from direct_volume_migration.application.services.endpoint_resolver import EndpointTypeResolver
from direct_volume_migration.application.services.phase_engine import PhaseExecutionEngine
from direct_volume_migration.application.services.plan_resource_resolver import (
    PlanResourceResolver,
)
from direct_volume_migration.application.services.sparse_file_advisory import (
    SparseFileAdvisoryResolver,
)
from direct_volume_migration.application.services.status_projector import StatusProjector
from direct_volume_migration.application.services.trace_correlator import TraceCorrelator
from direct_volume_migration.domain.entities import Condition, MigrationTask
from direct_volume_migration.domain.errors import ResolutionError, ResourceConflictError
from direct_volume_migration.domain.itinerary import select_itinerary
from direct_volume_migration.domain.phase_types import (
    CONDITION_TRUE,
    TERMINAL_PHASES,
    ConditionCategory,
    ConditionType,
)
from direct_volume_migration.domain.ports import MigrationTaskRepository
from direct_volume_migration.domain.requeue import FAST_REQUEUE_SECONDS, RequeueDirective
from direct_volume_migration.domain.task import Task

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class MigrationTaskReconciler:
    """Rebuild the task context, run one engine step, and persist the status."""

    def __init__(
        self,
        repository: MigrationTaskRepository,
        plan_resource_resolver: PlanResourceResolver,
        sparse_file_resolver: SparseFileAdvisoryResolver,
        endpoint_type_resolver: EndpointTypeResolver,
        engine: PhaseExecutionEngine,
        status_projector: StatusProjector,
        trace_correlator: TraceCorrelator,
        *,
        fast_requeue_seconds: float = FAST_REQUEUE_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._plan_resource_resolver = plan_resource_resolver
        self._sparse_file_resolver = sparse_file_resolver
        self._endpoint_type_resolver = endpoint_type_resolver
        self._engine = engine
        self._status_projector = status_projector
        self._trace_correlator = trace_correlator
        self._fast_requeue_seconds = fast_requeue_seconds
        self._clock = clock or _utc_now

    async def reconcile(self, namespace: str, name: str) -> RequeueDirective:
        """Reconcile one task.

        Resolution failures that can be retried propagate as
        :class:`ResolutionError` without touching the task status.
        """

        owner = await self._repository.get(namespace, name)
        if owner is None:
            logger.debug("Migration task '%s/%s' no longer exists.", namespace, name)
            return RequeueDirective.no_requeue()

        span = self._trace_correlator.start_reconcile_span(owner)
        try:
            return await self._reconcile_task(owner, span)
        finally:
            if span is not None:
                span.end()

    async def _reconcile_task(self, owner: MigrationTask, span: Span | None) -> RequeueDirective:
        if owner.status.phase in TERMINAL_PHASES:
            return RequeueDirective.no_requeue()

        task = Task(
            owner=owner,
            itinerary=select_itinerary(owner),
            phase=owner.status.phase,
            span=span,
            now=self._clock(),
        )
        try:
            task.plan_resources = await self._plan_resource_resolver.resolve(owner)
            task.sparse_file_map = await self._sparse_file_resolver.resolve(
                task.plan_resources.plan
            )
            task.endpoint_type = await self._endpoint_type_resolver.resolve(owner)
        except ResolutionError as exc:
            if span is not None:
                span.record_exception(exc)
            if exc.retryable:
                await self._record_resolution_failure(task, exc)
                raise
            owner.status.delete_condition(ConditionType.RESOLUTION_FAILED)
            self._engine.fail(task, ConditionCategory.CRITICAL, exc)
            return await self._write_status(task, RequeueDirective.no_requeue())

        owner.status.delete_condition(ConditionType.RESOLUTION_FAILED)
        result = await self._engine.run(task)
        if result.conflict:
            return result.requeue
        return await self._write_status(task, result.requeue)

    async def _record_resolution_failure(self, task: Task, error: ResolutionError) -> None:
        """Publish a retryable resolution failure without changing the phase."""

        condition = Condition(
            type=ConditionType.RESOLUTION_FAILED,
            status=CONDITION_TRUE,
            reason=error.step,
            category=ConditionCategory.WARN,
            message=str(error),
        )
        status = task.owner.status
        existing = status.find_condition(condition.type)
        if existing is not None and existing.same_assertion(condition):
            return

        status.set_condition(condition, now=task.now)
        try:
            await self._repository.update_status(task.owner)
        except ResourceConflictError:
            logger.debug(
                "Conflict recording resolution failure of migration task '%s'.", task.owner.key
            )

    async def _write_status(self, task: Task, requeue: RequeueDirective) -> RequeueDirective:
        self._status_projector.project(task)
        try:
            await self._repository.update_status(task.owner)
        except ResourceConflictError:
            logger.debug(
                "Conflict writing status of migration task '%s', requeueing.", task.owner.key
            )
            return RequeueDirective.fast(self._fast_requeue_seconds)
        return requeue


__all__ = ["MigrationTaskReconciler"]
