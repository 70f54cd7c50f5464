"""Resource store and cluster client adapters."""

from direct_volume_migration.infrastructure.resources.in_memory_resource_store import (
    InMemoryClusterClient,
    InMemoryResourceStore,
)

__all__ = ["InMemoryClusterClient", "InMemoryResourceStore"]
