"""Endpoint exposure mode lookup on the destination cluster."""

from __future__ import annotations

import logging

from direct_volume_migration.domain.entities import MigrationTask
from direct_volume_migration.domain.errors import (
    FatalPlanError,
    ResourceNotFoundError,
    resolution_step,
)
from direct_volume_migration.domain.phase_types import (
    DEFAULT_ENDPOINT_TYPE,
    EndpointType,
    parse_endpoint_type,
)
from direct_volume_migration.domain.ports import ClusterClientFactory, ResourceStore

_RESOLVER = "endpoint type"
_DEFAULT_CONFIG_NAMESPACE = "openshift-migration"
_DEFAULT_CONFIG_NAME = "migration-cluster-config"
_DEFAULT_CONFIG_KEY = "RSYNC_ENDPOINT_TYPE"

logger = logging.getLogger(__name__)


class EndpointTypeResolver:
    """Read the configured endpoint type, falling back to Route."""

    def __init__(
        self,
        store: ResourceStore,
        client_factory: ClusterClientFactory,
        *,
        config_namespace: str = _DEFAULT_CONFIG_NAMESPACE,
        config_name: str = _DEFAULT_CONFIG_NAME,
        config_key: str = _DEFAULT_CONFIG_KEY,
    ) -> None:
        self._store = store
        self._client_factory = client_factory
        self._config_namespace = config_namespace
        self._config_name = config_name
        self._config_key = config_key

    async def resolve(self, task: MigrationTask) -> EndpointType:
        """Return the effective endpoint type for the task's destination cluster."""

        with resolution_step(_RESOLVER, "get destination cluster"):
            reference = task.spec.destination_cluster_ref
            if reference is None:
                raise FatalPlanError(
                    f"Migration task '{task.key}' has no destination cluster reference."
                )
            cluster = await self._store.get_cluster(reference.namespace, reference.name)
            if cluster is None:
                raise ResourceNotFoundError(f"Cluster '{reference.key}' not found.")

        with resolution_step(_RESOLVER, "build destination client"):
            client = await self._client_factory.client_for(cluster)

        with resolution_step(_RESOLVER, "get cluster config"):
            config = await client.get_config_map(self._config_namespace, self._config_name)
            if config is None:
                raise ResourceNotFoundError(
                    f"Config map '{self._config_namespace}/{self._config_name}' not found "
                    f"on cluster '{cluster.name}'."
                )

        value = config.get(self._config_key)
        if value is None:
            return DEFAULT_ENDPOINT_TYPE

        endpoint_type = parse_endpoint_type(value)
        if endpoint_type is None:
            logger.info(
                "Invalid endpoint type '%s' specified, using default '%s'.",
                value,
                DEFAULT_ENDPOINT_TYPE,
            )
            return DEFAULT_ENDPOINT_TYPE
        return endpoint_type


__all__ = ["EndpointTypeResolver"]
