"""Domain entities for migration tasks."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from direct_volume_migration.domain.phase_types import ConditionCategory

MIGRATION_OWNER_KIND = "Migration"


@dataclass(slots=True, frozen=True)
class ObjectReference:
    """Namespaced reference to another resource."""

    namespace: str
    name: str

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(slots=True, frozen=True)
class OwnerReference:
    """Reference to the object that owns a migration task."""

    kind: str
    name: str
    uid: str


@dataclass(slots=True)
class Condition:
    """Typed status assertion published on a migration task."""

    type: str
    status: str
    reason: str = ""
    category: ConditionCategory = ConditionCategory.ADVISORY
    message: str = ""
    durable: bool = False
    last_transition_time: datetime | None = None

    def same_assertion(self, other: Condition) -> bool:
        """Return whether both conditions assert the same thing, ignoring timestamps."""

        return (
            self.type == other.type
            and self.status == other.status
            and self.reason == other.reason
            and self.category == other.category
            and self.message == other.message
            and self.durable == other.durable
        )


@dataclass(slots=True)
class PersistentVolumeClaimMapping:
    """One source PVC and the destination it is migrated to."""

    name: str
    namespace: str
    target_name: str | None = None
    target_namespace: str | None = None
    storage_class: str | None = None
    access_modes: list[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Identity used by analytics lookups."""

        return f"{self.namespace}/{self.name}"

    @property
    def destination_name(self) -> str:
        return self.target_name or self.name

    @property
    def destination_namespace(self) -> str:
        return self.target_namespace or self.namespace


@dataclass(slots=True)
class MigrationTaskSpec:
    """Declarative part of a migration task."""

    source_cluster_ref: ObjectReference | None = None
    destination_cluster_ref: ObjectReference | None = None
    persistent_volume_claims: list[PersistentVolumeClaimMapping] = field(default_factory=list)
    create_destination_namespaces: bool = False
    canceled: bool = False


@dataclass(slots=True)
class MigrationTaskStatus:
    """Externally visible status written by the controller."""

    phase: str = ""
    phase_description: str = ""
    itinerary: str = ""
    conditions: list[Condition] = field(default_factory=list)
    start_timestamp: datetime | None = None

    def find_condition(self, condition_type: str) -> Condition | None:
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return None

    def has_condition(self, *condition_types: str) -> bool:
        return any(self.find_condition(condition_type) for condition_type in condition_types)

    def set_condition(self, condition: Condition, now: datetime | None = None) -> None:
        """Add or replace the condition of the same type."""

        existing = self.find_condition(condition.type)
        if existing is not None and existing.same_assertion(condition):
            return

        if existing is not None and existing.status == condition.status:
            transition_time = existing.last_transition_time
        else:
            transition_time = now or datetime.now(tz=UTC)
        updated = replace(condition, last_transition_time=transition_time)

        if existing is None:
            self.conditions.append(updated)
            return
        self.conditions[self.conditions.index(existing)] = updated

    def delete_condition(self, *condition_types: str) -> None:
        self.conditions = [
            condition for condition in self.conditions if condition.type not in condition_types
        ]


@dataclass(slots=True)
class MigrationTask:
    """User-facing declarative migration task."""

    name: str
    namespace: str
    uid: str
    spec: MigrationTaskSpec = field(default_factory=MigrationTaskSpec)
    owner_references: list[OwnerReference] = field(default_factory=list)
    resource_version: int = 0
    status: MigrationTaskStatus = field(default_factory=MigrationTaskStatus)

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    def migration_owner(self) -> OwnerReference | None:
        """Return the owning migration reference, if any."""

        for owner in self.owner_references:
            if owner.kind == MIGRATION_OWNER_KIND:
                return owner
        return None


__all__ = [
    "Condition",
    "MIGRATION_OWNER_KIND",
    "MigrationTask",
    "MigrationTaskSpec",
    "MigrationTaskStatus",
    "ObjectReference",
    "OwnerReference",
    "PersistentVolumeClaimMapping",
]
