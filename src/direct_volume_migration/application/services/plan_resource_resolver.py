"""Resolution of plan-derived resources through the ownership chain."""

from __future__ import annotations

import logging

from direct_volume_migration.domain.entities import MigrationTask
from direct_volume_migration.domain.errors import (
    ResourceNotFoundError,
    ResourceNotReadyError,
    resolution_step,
)
from direct_volume_migration.domain.plan_resources import PlanResources
from direct_volume_migration.domain.ports import ResourceStore

_RESOLVER = "plan resources"

logger = logging.getLogger(__name__)


class PlanResourceResolver:
    """Walk task -> migration -> plan and gather the plan's resources."""

    def __init__(self, store: ResourceStore) -> None:
        self._store = store

    async def resolve(self, task: MigrationTask) -> PlanResources:
        """Return plan resources, or an empty set for standalone tasks."""

        owner = task.migration_owner()
        if owner is None:
            return PlanResources()

        with resolution_step(_RESOLVER, "get migration"):
            migration = await self._store.get_migration(task.namespace, owner.name)
            if migration is None:
                logger.info(
                    "Migration '%s' not found for migration task '%s'.", owner.name, task.key
                )
                raise ResourceNotFoundError(
                    f"Migration '{task.namespace}/{owner.name}' not found."
                )

        with resolution_step(_RESOLVER, "get plan"):
            plan = await self._store.get_plan(migration.plan_ref.namespace, migration.plan_ref.name)
            if plan is None:
                raise ResourceNotFoundError(f"Plan '{migration.plan_ref.key}' not found.")

        if not plan.is_ready():
            logger.info("Plan '%s' not ready for migration task '%s'.", plan.name, task.key)
            with resolution_step(_RESOLVER, "check plan readiness"):
                raise ResourceNotReadyError(
                    f"Plan '{plan.namespace}/{plan.name}' is not ready."
                )

        with resolution_step(_RESOLVER, "get plan resources"):
            resources = await self._store.get_plan_resources(plan)
        resources.migration = migration
        return resources


__all__ = ["PlanResourceResolver"]
