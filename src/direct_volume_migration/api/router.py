"""Top-level API router composition."""

from fastapi import APIRouter

from direct_volume_migration.api.routes import health_router, migration_tasks_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(migration_tasks_router)

__all__ = ["api_router"]
