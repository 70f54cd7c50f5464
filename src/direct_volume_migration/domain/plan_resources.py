"""Read-only resources gathered from the owning migration and plan."""

from __future__ import annotations

from dataclasses import dataclass, field

from direct_volume_migration.domain.entities import ObjectReference


@dataclass(slots=True)
class Migration:
    """Parent migration that owns nested migration tasks."""

    name: str
    namespace: str
    uid: str
    plan_ref: ObjectReference
    canceled: bool = False


@dataclass(slots=True)
class Plan:
    """Migration plan referenced by a migration."""

    name: str
    namespace: str
    uid: str
    ready: bool = False
    source_cluster_ref: ObjectReference | None = None
    destination_cluster_ref: ObjectReference | None = None
    namespaces: list[str] = field(default_factory=list)

    def is_ready(self) -> bool:
        return self.ready


@dataclass(slots=True)
class Cluster:
    """Cluster registration used to reach a source or destination cluster."""

    name: str
    namespace: str
    url: str | None = None
    is_host: bool = False


@dataclass(slots=True)
class PlanResources:
    """Resources derived from the parent plan for one reconcile."""

    migration: Migration | None = None
    plan: Plan | None = None
    source_cluster: Cluster | None = None
    destination_cluster: Cluster | None = None

    @property
    def is_empty(self) -> bool:
        return self.plan is None


@dataclass(slots=True)
class AnalyticPersistentVolume:
    """Per-volume analytics result."""

    name: str
    sparse_files_found: bool = False


@dataclass(slots=True)
class AnalyticNamespace:
    """Per-namespace analytics result."""

    namespace: str
    persistent_volumes: list[AnalyticPersistentVolume] = field(default_factory=list)


@dataclass(slots=True)
class AnalyticRecord:
    """Previously computed plan analytics."""

    name: str
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)
    analyze_extended_pv_capacity: bool = False
    namespaces: list[AnalyticNamespace] = field(default_factory=list)


SparseFileAdvisory = dict[str, bool]


__all__ = [
    "AnalyticNamespace",
    "AnalyticPersistentVolume",
    "AnalyticRecord",
    "Cluster",
    "Migration",
    "Plan",
    "PlanResources",
    "SparseFileAdvisory",
]
