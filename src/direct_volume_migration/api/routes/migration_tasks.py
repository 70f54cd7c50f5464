"""Management routes for migration tasks."""

from __future__ import annotations

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Path

from direct_volume_migration.api.dependencies import get_migration_task_service
from direct_volume_migration.application.services import MigrationTaskService
from direct_volume_migration.domain.errors import (
    MigrationTaskNotFoundError,
    MigrationTaskStateError,
    MigrationTaskValidationError,
    ResourceConflictError,
)
from direct_volume_migration.domain.status_models import (
    MigrationTaskCreateRequest,
    MigrationTaskInfoResponse,
    MigrationTaskListResponse,
    ReconcileAcceptedResponse,
)

router = APIRouter(prefix="/migrationtasks", tags=["migration tasks"])


def _raise_http_exception(exc: Exception) -> NoReturn:
    if isinstance(exc, MigrationTaskNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (MigrationTaskStateError, ResourceConflictError)):
        raise HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, MigrationTaskValidationError):
        raise HTTPException(status_code=400, detail=str(exc))
    raise HTTPException(status_code=500, detail="Unexpected migration task error")


@router.get("", response_model=MigrationTaskListResponse, status_code=200)
async def list_migration_tasks(
    service: MigrationTaskService = Depends(get_migration_task_service),
) -> MigrationTaskListResponse:
    """List migration tasks with their status."""

    try:
        return await service.list_tasks()
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.post("", response_model=MigrationTaskInfoResponse, status_code=201)
async def create_migration_task(
    request: MigrationTaskCreateRequest,
    service: MigrationTaskService = Depends(get_migration_task_service),
) -> MigrationTaskInfoResponse:
    """Create a migration task and queue its first reconcile."""

    try:
        return await service.create(request)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.get("/{namespace}/{name}", response_model=MigrationTaskInfoResponse, status_code=200)
async def get_migration_task(
    namespace: str = Path(...),
    name: str = Path(...),
    service: MigrationTaskService = Depends(get_migration_task_service),
) -> MigrationTaskInfoResponse:
    """Get one migration task."""

    try:
        return await service.get_info(namespace, name)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.post(
    "/{namespace}/{name}/reconcile",
    response_model=ReconcileAcceptedResponse,
    status_code=202,
)
async def reconcile_migration_task(
    namespace: str = Path(...),
    name: str = Path(...),
    service: MigrationTaskService = Depends(get_migration_task_service),
) -> ReconcileAcceptedResponse:
    """Queue a reconcile."""

    try:
        return await service.request_reconcile(namespace, name)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.post(
    "/{namespace}/{name}/cancel",
    response_model=ReconcileAcceptedResponse,
    status_code=202,
)
async def cancel_migration_task(
    namespace: str = Path(...),
    name: str = Path(...),
    service: MigrationTaskService = Depends(get_migration_task_service),
) -> ReconcileAcceptedResponse:
    """Request cancellation."""

    try:
        return await service.cancel(namespace, name)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.post(
    "/{namespace}/{name}/reset",
    response_model=ReconcileAcceptedResponse,
    status_code=202,
)
async def reset_migration_task(
    namespace: str = Path(...),
    name: str = Path(...),
    service: MigrationTaskService = Depends(get_migration_task_service),
) -> ReconcileAcceptedResponse:
    """Restart a failed migration task."""

    try:
        return await service.reset(namespace, name)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


__all__ = ["router"]
