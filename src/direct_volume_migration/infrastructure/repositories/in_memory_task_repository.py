"""In-memory repository implementation for migration tasks."""

from __future__ import annotations

import asyncio
from copy import deepcopy

from direct_volume_migration.domain.entities import MigrationTask
from direct_volume_migration.domain.errors import ResourceConflictError
from direct_volume_migration.domain.ports import MigrationTaskRepository


class InMemoryMigrationTaskRepository(MigrationTaskRepository):
    """Simple repository for local development and tests.

    Stored tasks are copied on every read and write so callers never share
    state with the store.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, MigrationTask] = {}
        self._lock = asyncio.Lock()

    async def get(self, namespace: str, name: str) -> MigrationTask | None:
        """Return by namespace and name."""

        stored = self._tasks.get(f"{namespace}/{name}")
        if stored is None:
            return None
        return deepcopy(stored)

    async def list_tasks(self) -> list[MigrationTask]:
        """Return all tasks ordered by key."""

        return [deepcopy(self._tasks[key]) for key in sorted(self._tasks)]

    async def create(self, task: MigrationTask) -> MigrationTask:
        """Store a new task at version 1."""

        async with self._lock:
            if task.key in self._tasks:
                raise ResourceConflictError(f"Migration task '{task.key}' already exists.")
            stored = deepcopy(task)
            stored.resource_version = 1
            self._tasks[task.key] = stored
            return deepcopy(stored)

    async def update_status(self, task: MigrationTask) -> MigrationTask:
        """Replace the stored status if the caller's version is current."""

        async with self._lock:
            stored = self._current(task)
            stored.status = deepcopy(task.status)
            stored.resource_version += 1
            return deepcopy(stored)

    async def update_spec(self, task: MigrationTask) -> MigrationTask:
        """Replace the stored spec if the caller's version is current."""

        async with self._lock:
            stored = self._current(task)
            stored.spec = deepcopy(task.spec)
            stored.resource_version += 1
            return deepcopy(stored)

    def _current(self, task: MigrationTask) -> MigrationTask:
        stored = self._tasks.get(task.key)
        if stored is None:
            raise ResourceConflictError(f"Migration task '{task.key}' no longer exists.")
        if stored.resource_version != task.resource_version:
            raise ResourceConflictError(
                f"Migration task '{task.key}' was modified: expected version "
                f"{task.resource_version}, found {stored.resource_version}."
            )
        return stored


__all__ = ["InMemoryMigrationTaskRepository"]
