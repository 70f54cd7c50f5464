"""Ports for task persistence, cluster resources, phases and transfers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from direct_volume_migration.domain.entities import MigrationTask
from direct_volume_migration.domain.phase_types import EndpointType
from direct_volume_migration.domain.plan_resources import (
    AnalyticRecord,
    Cluster,
    Migration,
    Plan,
    PlanResources,
)
from direct_volume_migration.domain.task import PhaseOutcome, Task
from direct_volume_migration.domain.transfer_models import TransferStatus


class MigrationTaskRepository(Protocol):
    """Persistence port for migration tasks with version-checked writes."""

    async def get(self, namespace: str, name: str) -> MigrationTask | None:
        """Return a task by namespace and name."""

    async def list_tasks(self) -> list[MigrationTask]:
        """Return all known tasks."""

    async def create(self, task: MigrationTask) -> MigrationTask:
        """Store a new task and return the stored copy."""

    async def update_status(self, task: MigrationTask) -> MigrationTask:
        """Write the task status if ``task.resource_version`` is current."""

    async def update_spec(self, task: MigrationTask) -> MigrationTask:
        """Write the task spec if ``task.resource_version`` is current."""


class ResourceStore(Protocol):
    """Read-only access to migrations, plans, clusters and analytics."""

    async def get_migration(self, namespace: str, name: str) -> Migration | None:
        """Return a migration or None."""

    async def get_plan(self, namespace: str, name: str) -> Plan | None:
        """Return a plan or None."""

    async def get_plan_resources(self, plan: Plan) -> PlanResources:
        """Return resources referenced by a plan."""

    async def list_analytics(
        self,
        namespace: str,
        labels: dict[str, str],
    ) -> list[AnalyticRecord]:
        """Return analytics records matching all labels exactly."""

    async def get_cluster(self, namespace: str, name: str) -> Cluster | None:
        """Return a cluster registration or None."""


class ClusterClient(Protocol):
    """Client bound to one cluster."""

    async def get_config_map(self, namespace: str, name: str) -> dict[str, str] | None:
        """Return config map data or None if absent."""


class ClusterClientFactory(Protocol):
    """Builds clients for registered clusters."""

    async def client_for(self, cluster: Cluster) -> ClusterClient:
        """Return a client for the cluster."""


@runtime_checkable
class PhaseExecutor(Protocol):
    """Executes one step of a phase."""

    async def execute(self, task: Task) -> PhaseOutcome:
        """Run the step against the reconcile's task context."""


class TransferBackend(Protocol):
    """External collaborator that performs the actual volume transfers."""

    async def delete_stale_resources(self, task: Task) -> None:
        """Delete transfer resources left behind by earlier migrations."""

    async def ensure_destination_namespaces(self, task: Task) -> None:
        """Create missing namespaces on the destination cluster."""

    async def destination_namespaces_ready(self, task: Task) -> bool:
        """Return whether destination namespaces exist."""

    async def ensure_destination_pvcs(self, task: Task) -> None:
        """Create destination persistent volume claims."""

    async def destination_pvcs_bound(self, task: Task) -> bool:
        """Return whether destination claims exist and are usable."""

    async def ensure_endpoints(self, task: Task, endpoint_type: EndpointType) -> None:
        """Expose transfer endpoints on the destination cluster."""

    async def endpoints_admitted(self, task: Task) -> bool:
        """Return whether exposed endpoints are reachable."""

    async def start_transfers(self, task: Task, sparse_volumes: list[str]) -> None:
        """Create transfer clients for every claim of the task."""

    async def transfer_clients_running(self, task: Task) -> bool:
        """Return whether all transfer clients started."""

    async def get_transfer_status(self, task: Task) -> TransferStatus:
        """Return aggregate transfer state."""

    async def delete_transfer_resources(self, task: Task) -> None:
        """Delete transfer resources created for the task."""

    async def transfer_resources_terminated(self, task: Task) -> bool:
        """Return whether all transfer resources are gone."""


__all__ = [
    "ClusterClient",
    "ClusterClientFactory",
    "MigrationTaskRepository",
    "PhaseExecutor",
    "ResourceStore",
    "TransferBackend",
]
