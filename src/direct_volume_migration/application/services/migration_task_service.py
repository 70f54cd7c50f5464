"""Management use cases for migration tasks."""

from __future__ import annotations

import logging
from uuid import uuid4

from direct_volume_migration.application.services.reconcile_loop import ReconcileLoop
from direct_volume_migration.domain.entities import MigrationTask
from direct_volume_migration.domain.errors import (
    MigrationTaskNotFoundError,
    MigrationTaskStateError,
)
from direct_volume_migration.domain.phase_types import ConditionType, PhaseName
from direct_volume_migration.domain.ports import MigrationTaskRepository
from direct_volume_migration.domain.status_models import (
    MigrationTaskCreateRequest,
    MigrationTaskInfoResponse,
    MigrationTaskListResponse,
    MigrationTaskSpecModel,
    MigrationTaskStatusModel,
    OwnerReferenceModel,
    ReconcileAcceptedResponse,
)

logger = logging.getLogger(__name__)


class MigrationTaskService:
    """Create, inspect and steer migration tasks."""

    def __init__(
        self,
        controller_id: str,
        repository: MigrationTaskRepository,
        reconcile_loop: ReconcileLoop,
    ) -> None:
        self._controller_id = controller_id
        self._repository = repository
        self._reconcile_loop = reconcile_loop

    @property
    def reconcile_loop(self) -> ReconcileLoop:
        return self._reconcile_loop

    async def startup(self) -> None:
        """Start reconcile workers."""

        await self._reconcile_loop.start()

    async def shutdown(self) -> None:
        """Stop reconcile workers."""

        await self._reconcile_loop.stop()

    async def create(self, request: MigrationTaskCreateRequest) -> MigrationTaskInfoResponse:
        """Store a new task and queue its first reconcile.

        Raises ``ResourceConflictError`` when the task already exists.
        """

        task = MigrationTask(
            name=request.name,
            namespace=request.namespace,
            uid=str(uuid4()),
            spec=request.spec.to_entity(),
            owner_references=request.owner_entities(),
        )
        stored = await self._repository.create(task)
        logger.info("Migration task '%s' created.", stored.key)
        self._reconcile_loop.enqueue(stored.namespace, stored.name)
        return self._to_info(stored)

    async def get_info(self, namespace: str, name: str) -> MigrationTaskInfoResponse:
        return self._to_info(await self._get_or_raise(namespace, name))

    async def list_tasks(self) -> MigrationTaskListResponse:
        tasks = await self._repository.list_tasks()
        return MigrationTaskListResponse(
            controller_id=self._controller_id,
            migration_tasks=[self._to_info(task) for task in tasks],
        )

    async def request_reconcile(self, namespace: str, name: str) -> ReconcileAcceptedResponse:
        """Queue a reconcile for an existing task."""

        task = await self._get_or_raise(namespace, name)
        self._reconcile_loop.enqueue(task.namespace, task.name)
        return ReconcileAcceptedResponse(name=task.name, namespace=task.namespace)

    async def cancel(self, namespace: str, name: str) -> ReconcileAcceptedResponse:
        """Mark the task canceled; the next reconcile moves it to Canceled."""

        task = await self._get_or_raise(namespace, name)
        if not task.spec.canceled:
            task.spec.canceled = True
            await self._repository.update_spec(task)
            logger.info("Cancel requested for migration task '%s'.", task.key)
        self._reconcile_loop.enqueue(task.namespace, task.name)
        return ReconcileAcceptedResponse(name=task.name, namespace=task.namespace)

    async def reset(self, namespace: str, name: str) -> ReconcileAcceptedResponse:
        """Restart a failed task from the beginning of its itinerary."""

        task = await self._get_or_raise(namespace, name)
        if task.status.phase != PhaseName.MIGRATION_FAILED:
            raise MigrationTaskStateError(
                f"Migration task '{task.key}' can only be reset from phase "
                f"'{PhaseName.MIGRATION_FAILED}', current phase is "
                f"'{task.status.phase or '<none>'}'."
            )

        status = task.status
        status.phase = ""
        status.phase_description = ""
        status.itinerary = ""
        status.start_timestamp = None
        status.delete_condition(
            ConditionType.FAILED,
            ConditionType.RUNNING,
            ConditionType.SUCCEEDED,
            ConditionType.RESOLUTION_FAILED,
        )
        await self._repository.update_status(task)
        logger.info("Migration task '%s' reset.", task.key)
        self._reconcile_loop.enqueue(task.namespace, task.name)
        return ReconcileAcceptedResponse(name=task.name, namespace=task.namespace)

    async def _get_or_raise(self, namespace: str, name: str) -> MigrationTask:
        task = await self._repository.get(namespace, name)
        if task is None:
            raise MigrationTaskNotFoundError(f"Migration task '{namespace}/{name}' not found.")
        return task

    def _to_info(self, task: MigrationTask) -> MigrationTaskInfoResponse:
        return MigrationTaskInfoResponse(
            name=task.name,
            namespace=task.namespace,
            uid=task.uid,
            resource_version=task.resource_version,
            owner_references=[
                OwnerReferenceModel(kind=owner.kind, name=owner.name, uid=owner.uid)
                for owner in task.owner_references
            ],
            spec=MigrationTaskSpecModel.from_entity(task.spec),
            status=MigrationTaskStatusModel.from_entity(task.status),
        )


__all__ = ["MigrationTaskService"]
