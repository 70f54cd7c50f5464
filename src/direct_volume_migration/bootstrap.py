"""Application bootstrap/wiring."""

import logging
from dataclasses import dataclass

from opentelemetry.trace import Tracer

from direct_volume_migration.application.services import (
    EndpointTypeResolver,
    MigrationTaskReconciler,
    MigrationTaskService,
    PhaseExecutionEngine,
    PlanResourceResolver,
    ReconcileLoop,
    SparseFileAdvisoryResolver,
    StatusProjector,
    TraceCorrelator,
    build_phase_executors,
)
from direct_volume_migration.config import RepositoryBackend, Settings, TransferBackendKind
from direct_volume_migration.domain.ports import (
    ClusterClientFactory,
    MigrationTaskRepository,
    ResourceStore,
    TransferBackend,
)
from direct_volume_migration.infrastructure.repositories import (
    InMemoryMigrationTaskRepository,
    PostgresMigrationTaskRepository,
)
from direct_volume_migration.infrastructure.resources import InMemoryResourceStore
from direct_volume_migration.infrastructure.runtime import ReconcileWorkQueue
from direct_volume_migration.infrastructure.tracing import (
    TRACER_NAME,
    MigrationSpanRegistry,
    build_tracer_provider,
)
from direct_volume_migration.infrastructure.transfers import (
    HttpTransferBackend,
    NoopTransferBackend,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ControllerComponents:
    """Adapters shared by the reconciler and the management service.

    Tests and embedding controllers pass their own store and backend to
    :func:`build_migration_task_service`. The owning migration controller
    registers root spans in ``span_registry`` so reconciles join its trace.
    """

    resource_store: ResourceStore
    cluster_client_factory: ClusterClientFactory
    transfer_backend: TransferBackend
    span_registry: MigrationSpanRegistry


def _build_repository(settings: Settings) -> MigrationTaskRepository:
    if settings.repository_backend == RepositoryBackend.POSTGRES:
        if settings.postgres_dsn is None:
            raise ValueError("DVM_POSTGRES_DSN is required when DVM_REPOSITORY_BACKEND=postgres.")
        return PostgresMigrationTaskRepository(
            dsn=settings.postgres_dsn,
            min_pool_size=settings.postgres_pool_min_size,
            max_pool_size=settings.postgres_pool_max_size,
        )
    return InMemoryMigrationTaskRepository()


def _build_transfer_backend(settings: Settings) -> TransferBackend:
    if settings.transfer_backend == TransferBackendKind.HTTP:
        if settings.transfer_agent_endpoint is None:
            raise ValueError(
                "DVM_TRANSFER_AGENT_ENDPOINT is required when DVM_TRANSFER_BACKEND=http."
            )
        return HttpTransferBackend(
            base_url=settings.transfer_agent_endpoint,
            timeout_seconds=settings.transfer_agent_timeout_seconds,
        )
    return NoopTransferBackend()


def _build_tracer(settings: Settings) -> Tracer | None:
    if not settings.tracing_enabled:
        return None
    provider = build_tracer_provider(
        settings.tracing_service_name,
        console_export=settings.tracing_console_export,
    )
    return provider.get_tracer(TRACER_NAME)


def build_default_components(settings: Settings) -> ControllerComponents:
    """Return adapters for a standalone controller process."""

    store = InMemoryResourceStore()
    logger.warning(
        "No cluster resource adapter configured, using an in-memory resource store."
    )
    return ControllerComponents(
        resource_store=store,
        cluster_client_factory=store,
        transfer_backend=_build_transfer_backend(settings),
        span_registry=MigrationSpanRegistry(),
    )


def build_reconciler(
    settings: Settings,
    repository: MigrationTaskRepository,
    components: ControllerComponents,
    tracer: Tracer | None = None,
) -> MigrationTaskReconciler:
    """Compose the per-task reconcile pipeline."""

    engine = PhaseExecutionEngine(
        build_phase_executors(components.transfer_backend),
        fast_requeue_seconds=settings.fast_requeue_seconds,
        advance_requeue_seconds=settings.advance_requeue_seconds,
        poll_requeue_seconds=settings.poll_requeue_seconds,
    )
    return MigrationTaskReconciler(
        repository=repository,
        plan_resource_resolver=PlanResourceResolver(components.resource_store),
        sparse_file_resolver=SparseFileAdvisoryResolver(
            components.resource_store,
            plan_label=settings.analytics_plan_label,
        ),
        endpoint_type_resolver=EndpointTypeResolver(
            components.resource_store,
            components.cluster_client_factory,
            config_namespace=settings.cluster_config_namespace,
            config_name=settings.cluster_config_name,
            config_key=settings.endpoint_type_config_key,
        ),
        engine=engine,
        status_projector=StatusProjector(),
        trace_correlator=TraceCorrelator(tracer, components.span_registry),
        fast_requeue_seconds=settings.fast_requeue_seconds,
    )


def build_migration_task_service(
    settings: Settings,
    components: ControllerComponents | None = None,
    repository: MigrationTaskRepository | None = None,
) -> MigrationTaskService:
    """Compose service graph."""

    repository = repository or _build_repository(settings)
    components = components or build_default_components(settings)
    tracer = _build_tracer(settings)

    reconciler = build_reconciler(settings, repository, components, tracer=tracer)
    reconcile_loop = ReconcileLoop(
        reconciler,
        repository,
        ReconcileWorkQueue(
            backoff_base_seconds=settings.error_backoff_base_seconds,
            backoff_max_seconds=settings.error_backoff_max_seconds,
        ),
        workers=settings.reconcile_workers,
        resync_on_startup=settings.resync_on_startup,
    )
    return MigrationTaskService(
        controller_id=settings.controller_id,
        repository=repository,
        reconcile_loop=reconcile_loop,
    )


__all__ = [
    "ControllerComponents",
    "build_default_components",
    "build_migration_task_service",
    "build_reconciler",
]
