"""Transfer backend that completes every step immediately."""

from __future__ import annotations

import logging

from direct_volume_migration.domain.phase_types import EndpointType
from direct_volume_migration.domain.ports import TransferBackend
from direct_volume_migration.domain.task import Task
from direct_volume_migration.domain.transfer_models import TransferStatus

logger = logging.getLogger(__name__)


class NoopTransferBackend(TransferBackend):
    """Record requested operations and report everything ready."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    async def delete_stale_resources(self, task: Task) -> None:
        self._record("delete_stale_resources", task)

    async def ensure_destination_namespaces(self, task: Task) -> None:
        self._record("ensure_destination_namespaces", task)

    async def destination_namespaces_ready(self, task: Task) -> bool:
        return True

    async def ensure_destination_pvcs(self, task: Task) -> None:
        self._record("ensure_destination_pvcs", task)

    async def destination_pvcs_bound(self, task: Task) -> bool:
        return True

    async def ensure_endpoints(self, task: Task, endpoint_type: EndpointType) -> None:
        self._record(f"ensure_endpoints:{endpoint_type}", task)

    async def endpoints_admitted(self, task: Task) -> bool:
        return True

    async def start_transfers(self, task: Task, sparse_volumes: list[str]) -> None:
        self._record("start_transfers", task)
        if sparse_volumes:
            logger.debug(
                "Noop transfer for task '%s' would use sparse copy for: %s",
                task.owner.key,
                ", ".join(sparse_volumes),
            )

    async def transfer_clients_running(self, task: Task) -> bool:
        return True

    async def get_transfer_status(self, task: Task) -> TransferStatus:
        return TransferStatus(
            finished=True,
            succeeded_volumes=tuple(
                claim.key for claim in task.owner.spec.persistent_volume_claims
            ),
        )

    async def delete_transfer_resources(self, task: Task) -> None:
        self._record("delete_transfer_resources", task)

    async def transfer_resources_terminated(self, task: Task) -> bool:
        return True

    def _record(self, operation: str, task: Task) -> None:
        self.calls.append((operation, task.owner.key))
        logger.debug("Noop transfer backend: %s for task '%s'.", operation, task.owner.key)


__all__ = ["NoopTransferBackend"]
