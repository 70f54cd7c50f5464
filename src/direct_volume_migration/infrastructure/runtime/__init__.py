"""Runtime primitives for reconcile scheduling."""

from direct_volume_migration.infrastructure.runtime.work_queue import ReconcileWorkQueue

__all__ = ["ReconcileWorkQueue"]
