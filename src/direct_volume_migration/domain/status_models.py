"""Pydantic models for the management API and persisted documents."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from direct_volume_migration.domain.entities import (
    Condition,
    MigrationTaskSpec,
    MigrationTaskStatus,
    ObjectReference,
    OwnerReference,
    PersistentVolumeClaimMapping,
)
from direct_volume_migration.domain.phase_types import ConditionCategory


class ManagementModel(BaseModel):
    """Base model for management routes."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ObjectReferenceModel(ManagementModel):
    namespace: str
    name: str

    def to_entity(self) -> ObjectReference:
        return ObjectReference(namespace=self.namespace, name=self.name)

    @classmethod
    def from_entity(cls, reference: ObjectReference | None) -> ObjectReferenceModel | None:
        if reference is None:
            return None
        return cls(namespace=reference.namespace, name=reference.name)


class OwnerReferenceModel(ManagementModel):
    kind: str
    name: str
    uid: str


class PersistentVolumeClaimModel(ManagementModel):
    """Source claim and its destination overrides."""

    name: str = Field(min_length=1)
    namespace: str = Field(min_length=1)
    target_name: str | None = Field(default=None, alias="targetName")
    target_namespace: str | None = Field(default=None, alias="targetNamespace")
    storage_class: str | None = Field(default=None, alias="storageClass")
    access_modes: list[str] = Field(default_factory=list, alias="accessModes")


class MigrationTaskSpecModel(ManagementModel):
    """Declarative migration task fields."""

    source_cluster_ref: ObjectReferenceModel | None = Field(
        default=None, alias="srcMigClusterRef"
    )
    destination_cluster_ref: ObjectReferenceModel | None = Field(
        default=None, alias="destMigClusterRef"
    )
    persistent_volume_claims: list[PersistentVolumeClaimModel] = Field(
        default_factory=list, alias="persistentVolumeClaims"
    )
    create_destination_namespaces: bool = Field(
        default=False, alias="createDestinationNamespaces"
    )
    canceled: bool = False

    def to_entity(self) -> MigrationTaskSpec:
        return MigrationTaskSpec(
            source_cluster_ref=(
                None if self.source_cluster_ref is None else self.source_cluster_ref.to_entity()
            ),
            destination_cluster_ref=(
                None
                if self.destination_cluster_ref is None
                else self.destination_cluster_ref.to_entity()
            ),
            persistent_volume_claims=[
                PersistentVolumeClaimMapping(
                    name=claim.name,
                    namespace=claim.namespace,
                    target_name=claim.target_name,
                    target_namespace=claim.target_namespace,
                    storage_class=claim.storage_class,
                    access_modes=list(claim.access_modes),
                )
                for claim in self.persistent_volume_claims
            ],
            create_destination_namespaces=self.create_destination_namespaces,
            canceled=self.canceled,
        )

    @classmethod
    def from_entity(cls, spec: MigrationTaskSpec) -> MigrationTaskSpecModel:
        return cls(
            source_cluster_ref=ObjectReferenceModel.from_entity(spec.source_cluster_ref),
            destination_cluster_ref=ObjectReferenceModel.from_entity(spec.destination_cluster_ref),
            persistent_volume_claims=[
                PersistentVolumeClaimModel(
                    name=claim.name,
                    namespace=claim.namespace,
                    target_name=claim.target_name,
                    target_namespace=claim.target_namespace,
                    storage_class=claim.storage_class,
                    access_modes=list(claim.access_modes),
                )
                for claim in spec.persistent_volume_claims
            ],
            create_destination_namespaces=spec.create_destination_namespaces,
            canceled=spec.canceled,
        )


class ConditionModel(ManagementModel):
    type: str
    status: str
    reason: str = ""
    category: ConditionCategory = ConditionCategory.ADVISORY
    message: str = ""
    durable: bool = False
    last_transition_time: datetime | None = Field(default=None, alias="lastTransitionTime")


class MigrationTaskStatusModel(ManagementModel):
    """Externally visible task status."""

    phase: str = ""
    phase_description: str = Field(default="", alias="phaseDescription")
    itinerary: str = ""
    conditions: list[ConditionModel] = Field(default_factory=list)
    start_timestamp: datetime | None = Field(default=None, alias="startTimestamp")

    def to_entity(self) -> MigrationTaskStatus:
        return MigrationTaskStatus(
            phase=self.phase,
            phase_description=self.phase_description,
            itinerary=self.itinerary,
            conditions=[
                Condition(
                    type=condition.type,
                    status=condition.status,
                    reason=condition.reason,
                    category=condition.category,
                    message=condition.message,
                    durable=condition.durable,
                    last_transition_time=condition.last_transition_time,
                )
                for condition in self.conditions
            ],
            start_timestamp=self.start_timestamp,
        )

    @classmethod
    def from_entity(cls, status: MigrationTaskStatus) -> MigrationTaskStatusModel:
        return cls(
            phase=status.phase,
            phase_description=status.phase_description,
            itinerary=status.itinerary,
            conditions=[
                ConditionModel(
                    type=condition.type,
                    status=condition.status,
                    reason=condition.reason,
                    category=condition.category,
                    message=condition.message,
                    durable=condition.durable,
                    last_transition_time=condition.last_transition_time,
                )
                for condition in status.conditions
            ],
            start_timestamp=status.start_timestamp,
        )


class MigrationTaskCreateRequest(ManagementModel):
    """Create request for a migration task."""

    name: str = Field(min_length=1)
    namespace: str = Field(min_length=1)
    owner_references: list[OwnerReferenceModel] = Field(
        default_factory=list, alias="ownerReferences"
    )
    spec: MigrationTaskSpecModel = Field(default_factory=MigrationTaskSpecModel)

    def owner_entities(self) -> list[OwnerReference]:
        return [
            OwnerReference(kind=owner.kind, name=owner.name, uid=owner.uid)
            for owner in self.owner_references
        ]


class MigrationTaskInfoResponse(ManagementModel):
    """Single task management payload."""

    name: str
    namespace: str
    uid: str
    resource_version: int = Field(alias="resourceVersion")
    owner_references: list[OwnerReferenceModel] = Field(
        default_factory=list, alias="ownerReferences"
    )
    spec: MigrationTaskSpecModel
    status: MigrationTaskStatusModel


class MigrationTaskListResponse(ManagementModel):
    """Collection wrapper for the task list endpoint."""

    controller_id: str = Field(alias="controllerId")
    migration_tasks: list[MigrationTaskInfoResponse] = Field(alias="migrationTasks")


class ReconcileAcceptedResponse(ManagementModel):
    """Acknowledgement that a task was queued for reconciliation."""

    name: str
    namespace: str
    queued: bool = True


__all__ = [
    "ConditionModel",
    "ManagementModel",
    "MigrationTaskCreateRequest",
    "MigrationTaskInfoResponse",
    "MigrationTaskListResponse",
    "MigrationTaskSpecModel",
    "MigrationTaskStatusModel",
    "ObjectReferenceModel",
    "OwnerReferenceModel",
    "PersistentVolumeClaimModel",
    "ReconcileAcceptedResponse",
]
