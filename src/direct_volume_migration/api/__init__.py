"""HTTP API."""

from direct_volume_migration.api.router import api_router

__all__ = ["api_router"]
