"""Tracing adapters."""

from direct_volume_migration.infrastructure.tracing.provider import (
    TRACER_NAME,
    build_tracer_provider,
)
from direct_volume_migration.infrastructure.tracing.span_registry import MigrationSpanRegistry

__all__ = ["MigrationSpanRegistry", "TRACER_NAME", "build_tracer_provider"]
