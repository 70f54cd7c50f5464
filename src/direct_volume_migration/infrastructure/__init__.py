"""Infrastructure layer public API."""

from direct_volume_migration.infrastructure.repositories import (
    InMemoryMigrationTaskRepository,
    PostgresMigrationTaskRepository,
)
from direct_volume_migration.infrastructure.resources import (
    InMemoryClusterClient,
    InMemoryResourceStore,
)
from direct_volume_migration.infrastructure.runtime import ReconcileWorkQueue
from direct_volume_migration.infrastructure.tracing import (
    MigrationSpanRegistry,
    build_tracer_provider,
)
from direct_volume_migration.infrastructure.transfers import (
    HttpTransferBackend,
    NoopTransferBackend,
)

__all__ = [
    "HttpTransferBackend",
    "InMemoryClusterClient",
    "InMemoryMigrationTaskRepository",
    "InMemoryResourceStore",
    "MigrationSpanRegistry",
    "NoopTransferBackend",
    "PostgresMigrationTaskRepository",
    "ReconcileWorkQueue",
    "build_tracer_provider",
]
