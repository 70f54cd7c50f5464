from __future__ import annotations

import asyncio

import pytest

from direct_volume_migration.application.services import (
    EndpointTypeResolver,
    PlanResourceResolver,
    SparseFileAdvisoryResolver,
)
from direct_volume_migration.domain.entities import (
    MigrationTask,
    MigrationTaskSpec,
    ObjectReference,
    OwnerReference,
)
from direct_volume_migration.domain.errors import (
    FatalPlanError,
    ResolutionError,
    ResourceNotFoundError,
    ResourceNotReadyError,
    root_cause,
)
from direct_volume_migration.domain.phase_types import EndpointType
from direct_volume_migration.domain.plan_resources import (
    AnalyticNamespace,
    AnalyticPersistentVolume,
    AnalyticRecord,
    Cluster,
    Migration,
    Plan,
)
from direct_volume_migration.infrastructure.resources import InMemoryResourceStore

CONFIG_NAMESPACE = "openshift-migration"
CONFIG_NAME = "migration-cluster-config"


def owned_task(migration_name: str = "mig-1") -> MigrationTask:
    return MigrationTask(
        name="dvm-1",
        namespace="openshift-migration",
        uid="task-uid-1",
        spec=MigrationTaskSpec(
            destination_cluster_ref=ObjectReference("openshift-migration", "dest"),
        ),
        owner_references=[OwnerReference(kind="Migration", name=migration_name, uid="mig-uid")],
    )


def store_with_plan(*, ready: bool = True) -> InMemoryResourceStore:
    store = InMemoryResourceStore()
    store.put_migration(
        Migration(
            name="mig-1",
            namespace="openshift-migration",
            uid="mig-uid",
            plan_ref=ObjectReference("openshift-migration", "plan-1"),
        )
    )
    store.put_plan(
        Plan(
            name="plan-1",
            namespace="openshift-migration",
            uid="plan-uid",
            ready=ready,
            source_cluster_ref=ObjectReference("openshift-migration", "host"),
            destination_cluster_ref=ObjectReference("openshift-migration", "dest"),
        )
    )
    store.put_cluster(Cluster(name="host", namespace="openshift-migration", is_host=True))
    store.put_cluster(Cluster(name="dest", namespace="openshift-migration"))
    return store


def test_plan_resources_are_empty_for_standalone_task() -> None:
    task = owned_task()
    task.owner_references = []

    resources = asyncio.run(PlanResourceResolver(InMemoryResourceStore()).resolve(task))

    assert resources.is_empty
    assert resources.migration is None


def test_plan_resources_follow_migration_to_plan_and_clusters() -> None:
    resources = asyncio.run(PlanResourceResolver(store_with_plan()).resolve(owned_task()))

    assert resources.migration is not None
    assert resources.migration.name == "mig-1"
    assert resources.plan is not None
    assert resources.plan.name == "plan-1"
    assert resources.source_cluster is not None and resources.source_cluster.is_host
    assert resources.destination_cluster is not None
    assert resources.destination_cluster.name == "dest"


def test_missing_migration_is_a_retryable_not_found_error() -> None:
    with pytest.raises(ResolutionError) as exc_info:
        asyncio.run(PlanResourceResolver(store_with_plan()).resolve(owned_task("other")))

    assert exc_info.value.retryable
    assert exc_info.value.step == "get migration"
    assert isinstance(root_cause(exc_info.value), ResourceNotFoundError)


def test_plan_not_ready_is_a_retryable_error() -> None:
    with pytest.raises(ResolutionError) as exc_info:
        asyncio.run(PlanResourceResolver(store_with_plan(ready=False)).resolve(owned_task()))

    assert exc_info.value.retryable
    assert isinstance(root_cause(exc_info.value), ResourceNotReadyError)


def test_sparse_advisory_only_counts_extended_capacity_analytics() -> None:
    store = store_with_plan()
    store.put_analytic(
        AnalyticRecord(
            name="analytic-1",
            namespace="openshift-migration",
            labels={"migplan": "plan-1"},
            analyze_extended_pv_capacity=True,
            namespaces=[
                AnalyticNamespace(
                    namespace="app",
                    persistent_volumes=[
                        AnalyticPersistentVolume(name="data", sparse_files_found=True),
                        AnalyticPersistentVolume(name="logs", sparse_files_found=False),
                    ],
                )
            ],
        )
    )
    store.put_analytic(
        AnalyticRecord(
            name="analytic-2",
            namespace="openshift-migration",
            labels={"migplan": "plan-1"},
            analyze_extended_pv_capacity=False,
            namespaces=[
                AnalyticNamespace(
                    namespace="app",
                    persistent_volumes=[
                        AnalyticPersistentVolume(name="cache", sparse_files_found=True)
                    ],
                )
            ],
        )
    )
    store.put_analytic(
        AnalyticRecord(
            name="analytic-other-plan",
            namespace="openshift-migration",
            labels={"migplan": "plan-2"},
            analyze_extended_pv_capacity=True,
            namespaces=[
                AnalyticNamespace(
                    namespace="app",
                    persistent_volumes=[
                        AnalyticPersistentVolume(name="other", sparse_files_found=True)
                    ],
                )
            ],
        )
    )
    plan = asyncio.run(store.get_plan("openshift-migration", "plan-1"))

    advisory = asyncio.run(SparseFileAdvisoryResolver(store).resolve(plan))

    assert advisory == {"app/data": True}


def test_sparse_advisory_is_empty_without_plan() -> None:
    advisory = asyncio.run(SparseFileAdvisoryResolver(InMemoryResourceStore()).resolve(None))

    assert advisory == {}


def _endpoint_resolver(store: InMemoryResourceStore) -> EndpointTypeResolver:
    return EndpointTypeResolver(
        store,
        store,
        config_namespace=CONFIG_NAMESPACE,
        config_name=CONFIG_NAME,
        config_key="RSYNC_ENDPOINT_TYPE",
    )


@pytest.mark.parametrize(
    ("config", "expected"),
    [
        ({}, EndpointType.ROUTE),
        ({"RSYNC_ENDPOINT_TYPE": "NodePort"}, EndpointType.NODE_PORT),
        ({"RSYNC_ENDPOINT_TYPE": "ClusterIP"}, EndpointType.CLUSTER_IP),
        ({"RSYNC_ENDPOINT_TYPE": "LoadBalancer"}, EndpointType.ROUTE),
        ({"RSYNC_ENDPOINT_TYPE": "bogus"}, EndpointType.ROUTE),
    ],
)
def test_endpoint_type_comes_from_destination_cluster_config(
    config: dict[str, str],
    expected: EndpointType,
) -> None:
    store = store_with_plan()
    store.cluster_client("openshift-migration", "dest").put_config_map(
        CONFIG_NAMESPACE, CONFIG_NAME, config
    )

    assert asyncio.run(_endpoint_resolver(store).resolve(owned_task())) is expected


def test_missing_cluster_config_map_is_an_error() -> None:
    with pytest.raises(ResolutionError) as exc_info:
        asyncio.run(_endpoint_resolver(store_with_plan()).resolve(owned_task()))

    assert exc_info.value.step == "get cluster config"
    assert isinstance(root_cause(exc_info.value), ResourceNotFoundError)


def test_missing_destination_cluster_is_an_error() -> None:
    task = owned_task()
    task.spec.destination_cluster_ref = ObjectReference("openshift-migration", "unknown")

    with pytest.raises(ResolutionError) as exc_info:
        asyncio.run(_endpoint_resolver(store_with_plan()).resolve(task))

    assert exc_info.value.step == "get destination cluster"


def test_missing_destination_reference_is_not_retryable() -> None:
    task = owned_task()
    task.spec.destination_cluster_ref = None

    with pytest.raises(ResolutionError) as exc_info:
        asyncio.run(_endpoint_resolver(store_with_plan()).resolve(task))

    assert not exc_info.value.retryable
    assert isinstance(root_cause(exc_info.value), FatalPlanError)
