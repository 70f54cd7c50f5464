"""Sparse-file advisory built from plan analytics."""

from __future__ import annotations

from direct_volume_migration.domain.errors import resolution_step
from direct_volume_migration.domain.plan_resources import Plan, SparseFileAdvisory
from direct_volume_migration.domain.ports import ResourceStore

_DEFAULT_PLAN_LABEL = "migplan"


class SparseFileAdvisoryResolver:
    """Aggregate per-volume sparse-file findings for a plan."""

    def __init__(self, store: ResourceStore, plan_label: str = _DEFAULT_PLAN_LABEL) -> None:
        self._store = store
        self._plan_label = plan_label

    async def resolve(self, plan: Plan | None) -> SparseFileAdvisory:
        """Return ``{"namespace/volume": True}`` for volumes with sparse files."""

        advisory: SparseFileAdvisory = {}
        if plan is None:
            return advisory

        with resolution_step("sparse file advisory", "list analytics"):
            analytics = await self._store.list_analytics(
                plan.namespace,
                {self._plan_label: plan.name},
            )

        for analytic in analytics:
            if not analytic.analyze_extended_pv_capacity:
                continue
            for namespace in analytic.namespaces:
                for volume in namespace.persistent_volumes:
                    if volume.sparse_files_found:
                        advisory[f"{namespace.namespace}/{volume.name}"] = True
        return advisory


__all__ = ["SparseFileAdvisoryResolver"]
