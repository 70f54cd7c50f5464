"""OpenTelemetry tracer provider construction."""

from __future__ import annotations

from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)

TRACER_NAME = "direct_volume_migration"


def build_tracer_provider(
    service_name: str,
    *,
    console_export: bool = False,
    exporters: list[SpanExporter] | None = None,
) -> TracerProvider:
    """Return a provider that exports to the given exporters.

    The provider is not installed as the global provider; callers pass the
    tracer they obtain from it explicitly.
    """

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    selected = list(exporters or [])
    if console_export:
        selected.append(ConsoleSpanExporter())
    for exporter in selected:
        provider.add_span_processor(SimpleSpanProcessor(exporter))
    return provider


__all__ = ["TRACER_NAME", "build_tracer_provider"]
