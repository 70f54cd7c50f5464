"""Dependency providers for FastAPI routes."""

from functools import lru_cache

from direct_volume_migration.application.services import MigrationTaskService
from direct_volume_migration.bootstrap import build_migration_task_service
from direct_volume_migration.config import Settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return singleton settings."""

    return Settings()


@lru_cache(maxsize=1)
def get_migration_task_service() -> MigrationTaskService:
    """Return singleton service graph."""

    return build_migration_task_service(get_settings())


__all__ = ["get_migration_task_service", "get_settings"]
