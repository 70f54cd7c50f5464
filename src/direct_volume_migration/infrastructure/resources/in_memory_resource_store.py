"""In-memory resource store and cluster clients for development and tests."""

from __future__ import annotations

from copy import deepcopy

from direct_volume_migration.domain.errors import ClusterClientError
from direct_volume_migration.domain.plan_resources import (
    AnalyticRecord,
    Cluster,
    Migration,
    Plan,
    PlanResources,
)
from direct_volume_migration.domain.ports import (
    ClusterClient,
    ClusterClientFactory,
    ResourceStore,
)


def _key(namespace: str, name: str) -> str:
    return f"{namespace}/{name}"


class InMemoryClusterClient(ClusterClient):
    """Cluster client serving config maps from a dictionary."""

    def __init__(self, cluster_name: str) -> None:
        self.cluster_name = cluster_name
        self._config_maps: dict[str, dict[str, str]] = {}

    def put_config_map(self, namespace: str, name: str, data: dict[str, str]) -> None:
        self._config_maps[_key(namespace, name)] = dict(data)

    def delete_config_map(self, namespace: str, name: str) -> None:
        self._config_maps.pop(_key(namespace, name), None)

    async def get_config_map(self, namespace: str, name: str) -> dict[str, str] | None:
        data = self._config_maps.get(_key(namespace, name))
        if data is None:
            return None
        return dict(data)


class InMemoryResourceStore(ResourceStore, ClusterClientFactory):
    """Holds migrations, plans, clusters and analytics in dictionaries.

    Also acts as the cluster client factory: every registered cluster gets an
    :class:`InMemoryClusterClient`, reachable through :meth:`cluster_client`.
    """

    def __init__(self) -> None:
        self._migrations: dict[str, Migration] = {}
        self._plans: dict[str, Plan] = {}
        self._clusters: dict[str, Cluster] = {}
        self._analytics: dict[str, AnalyticRecord] = {}
        self._clients: dict[str, InMemoryClusterClient] = {}

    def put_migration(self, migration: Migration) -> None:
        self._migrations[_key(migration.namespace, migration.name)] = deepcopy(migration)

    def put_plan(self, plan: Plan) -> None:
        self._plans[_key(plan.namespace, plan.name)] = deepcopy(plan)

    def put_cluster(self, cluster: Cluster) -> InMemoryClusterClient:
        """Register a cluster and return its client."""

        key = _key(cluster.namespace, cluster.name)
        self._clusters[key] = deepcopy(cluster)
        return self._clients.setdefault(key, InMemoryClusterClient(cluster.name))

    def put_analytic(self, record: AnalyticRecord) -> None:
        self._analytics[_key(record.namespace, record.name)] = deepcopy(record)

    def cluster_client(self, namespace: str, name: str) -> InMemoryClusterClient:
        try:
            return self._clients[_key(namespace, name)]
        except KeyError as exc:
            raise ClusterClientError(
                f"Cluster '{_key(namespace, name)}' is not registered."
            ) from exc

    async def get_migration(self, namespace: str, name: str) -> Migration | None:
        migration = self._migrations.get(_key(namespace, name))
        return None if migration is None else deepcopy(migration)

    async def get_plan(self, namespace: str, name: str) -> Plan | None:
        plan = self._plans.get(_key(namespace, name))
        return None if plan is None else deepcopy(plan)

    async def get_plan_resources(self, plan: Plan) -> PlanResources:
        """Return the plan and its registered source and destination clusters."""

        resources = PlanResources(plan=deepcopy(plan))
        if plan.source_cluster_ref is not None:
            resources.source_cluster = await self.get_cluster(
                plan.source_cluster_ref.namespace, plan.source_cluster_ref.name
            )
        if plan.destination_cluster_ref is not None:
            resources.destination_cluster = await self.get_cluster(
                plan.destination_cluster_ref.namespace, plan.destination_cluster_ref.name
            )
        return resources

    async def list_analytics(
        self,
        namespace: str,
        labels: dict[str, str],
    ) -> list[AnalyticRecord]:
        return [
            deepcopy(record)
            for _, record in sorted(self._analytics.items())
            if record.namespace == namespace
            and all(record.labels.get(label) == value for label, value in labels.items())
        ]

    async def get_cluster(self, namespace: str, name: str) -> Cluster | None:
        cluster = self._clusters.get(_key(namespace, name))
        return None if cluster is None else deepcopy(cluster)

    async def client_for(self, cluster: Cluster) -> ClusterClient:
        return self.cluster_client(cluster.namespace, cluster.name)


__all__ = ["InMemoryClusterClient", "InMemoryResourceStore"]
