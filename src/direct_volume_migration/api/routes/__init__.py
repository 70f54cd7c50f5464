"""Route modules public API."""

from direct_volume_migration.api.routes.health import router as health_router
from direct_volume_migration.api.routes.migration_tasks import router as migration_tasks_router

__all__ = ["health_router", "migration_tasks_router"]
