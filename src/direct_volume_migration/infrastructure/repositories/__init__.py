"""Repository implementations."""

from direct_volume_migration.infrastructure.repositories.in_memory_task_repository import (
    InMemoryMigrationTaskRepository,
)
from direct_volume_migration.infrastructure.repositories.postgres_task_repository import (
    PostgresMigrationTaskRepository,
)

__all__ = ["InMemoryMigrationTaskRepository", "PostgresMigrationTaskRepository"]
