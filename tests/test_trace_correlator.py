from __future__ import annotations

import asyncio

import pytest
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from direct_volume_migration.application.services import TraceCorrelator
from direct_volume_migration.bootstrap import ControllerComponents, build_reconciler
from direct_volume_migration.config import Settings
from direct_volume_migration.domain.entities import (
    MigrationTask,
    MigrationTaskSpec,
    ObjectReference,
    OwnerReference,
    PersistentVolumeClaimMapping,
)
from direct_volume_migration.domain.errors import ResolutionError
from direct_volume_migration.domain.plan_resources import Cluster, Migration, Plan
from direct_volume_migration.infrastructure.repositories import InMemoryMigrationTaskRepository
from direct_volume_migration.infrastructure.resources import InMemoryResourceStore
from direct_volume_migration.infrastructure.tracing import (
    TRACER_NAME,
    MigrationSpanRegistry,
    build_tracer_provider,
)
from direct_volume_migration.infrastructure.transfers import NoopTransferBackend

NAMESPACE = "openshift-migration"


def owned_task() -> MigrationTask:
    return MigrationTask(
        name="dvm-1",
        namespace=NAMESPACE,
        uid="task-uid",
        spec=MigrationTaskSpec(
            destination_cluster_ref=ObjectReference(NAMESPACE, "dest"),
            persistent_volume_claims=[PersistentVolumeClaimMapping(name="data", namespace="app")],
        ),
        owner_references=[OwnerReference(kind="Migration", name="mig-1", uid="mig-uid")],
    )


def resource_store(*, plan_ready: bool = True) -> InMemoryResourceStore:
    store = InMemoryResourceStore()
    store.put_migration(
        Migration(
            name="mig-1",
            namespace=NAMESPACE,
            uid="mig-uid",
            plan_ref=ObjectReference(NAMESPACE, "plan-1"),
        )
    )
    store.put_plan(Plan(name="plan-1", namespace=NAMESPACE, uid="plan-uid", ready=plan_ready))
    dest = store.put_cluster(Cluster(name="dest", namespace=NAMESPACE))
    dest.put_config_map(NAMESPACE, "migration-cluster-config", {})
    return store


@pytest.fixture
def exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


def test_reconcile_span_is_child_of_migration_span(exporter: InMemorySpanExporter) -> None:
    provider = build_tracer_provider("DirectVolumeMigration", exporters=[exporter])
    tracer = provider.get_tracer(TRACER_NAME)
    registry = MigrationSpanRegistry()
    root = tracer.start_span("migration")
    registry.register("mig-uid", root)

    store = resource_store()
    repository = InMemoryMigrationTaskRepository()
    reconciler = build_reconciler(
        Settings(),
        repository,
        ControllerComponents(
            resource_store=store,
            cluster_client_factory=store,
            transfer_backend=NoopTransferBackend(),
            span_registry=registry,
        ),
        tracer=tracer,
    )

    async def scenario() -> None:
        await repository.create(owned_task())
        await reconciler.reconcile(NAMESPACE, "dvm-1")

    asyncio.run(scenario())

    [span] = exporter.get_finished_spans()
    assert span.name == "dvm-reconcile-dvm-1"
    assert span.parent is not None
    assert span.parent.span_id == root.get_span_context().span_id
    assert span.context.trace_id == root.get_span_context().trace_id
    assert span.attributes is not None
    assert span.attributes["migration.uid"] == "mig-uid"


def test_resolution_failure_is_recorded_on_span(exporter: InMemorySpanExporter) -> None:
    provider = build_tracer_provider("DirectVolumeMigration", exporters=[exporter])
    tracer = provider.get_tracer(TRACER_NAME)
    registry = MigrationSpanRegistry()
    registry.register("mig-uid", tracer.start_span("migration"))

    store = resource_store(plan_ready=False)
    repository = InMemoryMigrationTaskRepository()
    reconciler = build_reconciler(
        Settings(),
        repository,
        ControllerComponents(
            resource_store=store,
            cluster_client_factory=store,
            transfer_backend=NoopTransferBackend(),
            span_registry=registry,
        ),
        tracer=tracer,
    )

    async def scenario() -> None:
        await repository.create(owned_task())
        with pytest.raises(ResolutionError):
            await reconciler.reconcile(NAMESPACE, "dvm-1")

    asyncio.run(scenario())

    [span] = exporter.get_finished_spans()
    assert [event.name for event in span.events] == ["exception"]


def test_no_span_without_registered_migration_span(exporter: InMemorySpanExporter) -> None:
    provider = build_tracer_provider("DirectVolumeMigration", exporters=[exporter])
    correlator = TraceCorrelator(provider.get_tracer(TRACER_NAME), MigrationSpanRegistry())

    assert correlator.enabled
    assert correlator.start_reconcile_span(owned_task()) is None
    assert exporter.get_finished_spans() == ()


def test_no_span_when_tracing_is_disabled() -> None:
    registry = MigrationSpanRegistry()
    correlator = TraceCorrelator(None, registry)

    assert not correlator.enabled
    assert correlator.start_reconcile_span(owned_task()) is None


def test_no_span_for_standalone_task(exporter: InMemorySpanExporter) -> None:
    provider = build_tracer_provider("DirectVolumeMigration", exporters=[exporter])
    tracer = provider.get_tracer(TRACER_NAME)
    registry = MigrationSpanRegistry()
    registry.register("mig-uid", tracer.start_span("migration"))
    task = owned_task()
    task.owner_references = []

    assert TraceCorrelator(tracer, registry).start_reconcile_span(task) is None
