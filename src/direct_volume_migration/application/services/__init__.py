"""Application services public API."""

from direct_volume_migration.application.services.endpoint_resolver import EndpointTypeResolver
from direct_volume_migration.application.services.migration_task_reconciler import (
    MigrationTaskReconciler,
)
from direct_volume_migration.application.services.migration_task_service import (
    MigrationTaskService,
)
from direct_volume_migration.application.services.phase_engine import (
    EngineResult,
    PhaseExecutionEngine,
)
from direct_volume_migration.application.services.phase_executors import build_phase_executors
from direct_volume_migration.application.services.plan_resource_resolver import (
    PlanResourceResolver,
)
from direct_volume_migration.application.services.reconcile_loop import ReconcileLoop
from direct_volume_migration.application.services.sparse_file_advisory import (
    SparseFileAdvisoryResolver,
)
from direct_volume_migration.application.services.status_projector import StatusProjector
from direct_volume_migration.application.services.trace_correlator import TraceCorrelator

__all__ = [
    "EndpointTypeResolver",
    "EngineResult",
    "MigrationTaskReconciler",
    "MigrationTaskService",
    "PhaseExecutionEngine",
    "PlanResourceResolver",
    "ReconcileLoop",
    "SparseFileAdvisoryResolver",
    "StatusProjector",
    "TraceCorrelator",
    "build_phase_executors",
]
