"""Domain public API."""

from direct_volume_migration.domain.entities import (
    Condition,
    MigrationTask,
    MigrationTaskSpec,
    MigrationTaskStatus,
    ObjectReference,
    OwnerReference,
    PersistentVolumeClaimMapping,
)
from direct_volume_migration.domain.errors import (
    ErrorKind,
    FatalPlanError,
    MigrationError,
    MigrationTaskNotFoundError,
    MigrationTaskStateError,
    MigrationTaskValidationError,
    ResolutionError,
    ResourceConflictError,
    ResourceNotFoundError,
    ResourceNotReadyError,
    classify_error,
)
from direct_volume_migration.domain.itinerary import (
    STANDALONE_ITINERARY,
    VOLUME_MIGRATION_ITINERARY,
    Itinerary,
    Phase,
    PhaseFlag,
)
from direct_volume_migration.domain.phase_types import (
    ConditionCategory,
    ConditionType,
    EndpointType,
    PhaseName,
)
from direct_volume_migration.domain.plan_resources import (
    AnalyticNamespace,
    AnalyticPersistentVolume,
    AnalyticRecord,
    Cluster,
    Migration,
    Plan,
    PlanResources,
)
from direct_volume_migration.domain.ports import (
    ClusterClient,
    ClusterClientFactory,
    MigrationTaskRepository,
    PhaseExecutor,
    ResourceStore,
    TransferBackend,
)
from direct_volume_migration.domain.requeue import RequeueDirective, RequeueKind
from direct_volume_migration.domain.task import PhaseOutcome, Task
from direct_volume_migration.domain.transfer_models import TransferStatus

__all__ = [
    "AnalyticNamespace",
    "AnalyticPersistentVolume",
    "AnalyticRecord",
    "Cluster",
    "ClusterClient",
    "ClusterClientFactory",
    "Condition",
    "ConditionCategory",
    "ConditionType",
    "EndpointType",
    "ErrorKind",
    "FatalPlanError",
    "Itinerary",
    "Migration",
    "MigrationError",
    "MigrationTask",
    "MigrationTaskNotFoundError",
    "MigrationTaskRepository",
    "MigrationTaskSpec",
    "MigrationTaskStateError",
    "MigrationTaskStatus",
    "MigrationTaskValidationError",
    "ObjectReference",
    "OwnerReference",
    "PersistentVolumeClaimMapping",
    "Phase",
    "PhaseExecutor",
    "PhaseFlag",
    "PhaseName",
    "PhaseOutcome",
    "Plan",
    "PlanResources",
    "RequeueDirective",
    "RequeueKind",
    "ResolutionError",
    "ResourceConflictError",
    "ResourceNotFoundError",
    "ResourceNotReadyError",
    "ResourceStore",
    "STANDALONE_ITINERARY",
    "Task",
    "TransferBackend",
    "TransferStatus",
    "VOLUME_MIGRATION_ITINERARY",
    "classify_error",
]
