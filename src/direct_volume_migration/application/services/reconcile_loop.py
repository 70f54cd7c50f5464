"""Background workers that drive reconciles from the work queue."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from direct_volume_migration.application.services.migration_task_reconciler import (
    MigrationTaskReconciler,
)
from direct_volume_migration.domain.errors import ResolutionError
from direct_volume_migration.domain.ports import MigrationTaskRepository
from direct_volume_migration.infrastructure.runtime import ReconcileWorkQueue

_DEFAULT_WORKERS = 4

logger = logging.getLogger(__name__)


def task_key(namespace: str, name: str) -> str:
    return f"{namespace}/{name}"


def split_task_key(key: str) -> tuple[str, str]:
    namespace, _, name = key.partition("/")
    return namespace, name


class ReconcileLoop:
    """Run reconciles for different tasks concurrently and one task at a time."""

    def __init__(
        self,
        reconciler: MigrationTaskReconciler,
        repository: MigrationTaskRepository,
        queue: ReconcileWorkQueue | None = None,
        *,
        workers: int = _DEFAULT_WORKERS,
        resync_on_startup: bool = True,
    ) -> None:
        self._reconciler = reconciler
        self._repository = repository
        self._queue = queue or ReconcileWorkQueue()
        self._workers = max(workers, 1)
        self._resync_on_startup = resync_on_startup
        self._tasks: list[asyncio.Task[None]] = []
        self._lifecycle_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    @property
    def queue(self) -> ReconcileWorkQueue:
        return self._queue

    async def start(self) -> None:
        """Start worker tasks and queue every stored task once."""

        async with self._lifecycle_lock:
            if self.running:
                return
            self._queue.reopen()
            self._tasks = [
                asyncio.create_task(self._run_worker(), name=f"reconcile-worker-{index}")
                for index in range(self._workers)
            ]
            if self._resync_on_startup:
                for task in await self._repository.list_tasks():
                    self._queue.add(task_key(task.namespace, task.name))

    async def stop(self) -> None:
        """Stop workers after their current reconcile."""

        async with self._lifecycle_lock:
            self._queue.shutdown()
            tasks, self._tasks = self._tasks, []
            for task in tasks:
                task.cancel()
            for task in tasks:
                with suppress(asyncio.CancelledError):
                    await task

    def enqueue(self, namespace: str, name: str) -> None:
        """Request a reconcile for one task."""

        self._queue.add(task_key(namespace, name))

    async def reconcile_once(self, key: str) -> None:
        """Reconcile one key and schedule its follow-up."""

        namespace, name = split_task_key(key)
        try:
            directive = await self._reconciler.reconcile(namespace, name)
        except ResolutionError as exc:
            delay = self._queue.backoff(key)
            logger.warning(
                "Could not resolve inputs of migration task '%s', retrying in %.2fs: %s",
                key,
                delay,
                exc,
            )
            self._queue.add_after(key, delay)
            return
        except Exception:
            delay = self._queue.backoff(key)
            logger.exception(
                "Reconcile of migration task '%s' failed, retrying in %.2fs.", key, delay
            )
            self._queue.add_after(key, delay)
            return

        self._queue.forget(key)
        if directive.requeue:
            self._queue.add_after(key, directive.delay_seconds)

    async def _run_worker(self) -> None:
        while True:
            key = await self._queue.get()
            if key is None:
                return
            try:
                await self.reconcile_once(key)
            finally:
                self._queue.done(key)


__all__ = ["ReconcileLoop", "split_task_key", "task_key"]
