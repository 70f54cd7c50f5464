"""Phase, condition and endpoint vocabularies."""

from enum import StrEnum


class PhaseName(StrEnum):
    """Known migration task phases."""

    CREATED = "Created"
    STARTED = "Started"
    PREPARE = "Prepare"
    CLEAN_STALE_TRANSFER_RESOURCES = "CleanStaleTransferResources"
    CREATE_DESTINATION_NAMESPACES = "CreateDestinationNamespaces"
    DESTINATION_NAMESPACES_CREATED = "DestinationNamespacesCreated"
    CREATE_DESTINATION_PVCS = "CreateDestinationPVCs"
    DESTINATION_PVCS_CREATED = "DestinationPVCsCreated"
    CREATE_TRANSFER_ENDPOINTS = "CreateTransferEndpoints"
    ENSURE_TRANSFER_ENDPOINTS_ADMITTED = "EnsureTransferEndpointsAdmitted"
    CREATE_TRANSFER_CLIENTS = "CreateTransferClients"
    WAIT_FOR_TRANSFER_CLIENTS_RUNNING = "WaitForTransferClientsRunning"
    RUN_TRANSFER_OPERATIONS = "RunTransferOperations"
    DELETE_TRANSFER_RESOURCES = "DeleteTransferResources"
    WAIT_FOR_TRANSFER_RESOURCES_TERMINATED = "WaitForTransferResourcesTerminated"
    COMPLETED = "Completed"
    MIGRATION_FAILED = "MigrationFailed"
    CANCELED = "Canceled"


TERMINAL_PHASES = frozenset({PhaseName.COMPLETED, PhaseName.MIGRATION_FAILED, PhaseName.CANCELED})


class ConditionType(StrEnum):
    """Status condition types written by the controller."""

    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    CANCELED = "Canceled"
    RESOLUTION_FAILED = "ResolutionFailed"


class ConditionCategory(StrEnum):
    """Condition severities."""

    CRITICAL = "Critical"
    ERROR = "Error"
    WARN = "Warn"
    REQUIRED = "Required"
    ADVISORY = "Advisory"


class EndpointType(StrEnum):
    """Exposure modes for transfer endpoints on the destination cluster."""

    ROUTE = "Route"
    CLUSTER_IP = "ClusterIP"
    NODE_PORT = "NodePort"


DEFAULT_ENDPOINT_TYPE = EndpointType.ROUTE

CONDITION_TRUE = "True"
CONDITION_FALSE = "False"

SUCCEEDED_MESSAGE = "The migration has completed successfully."
CANCELED_MESSAGE = "The migration has been canceled."
RUNNING_MESSAGE = "{step} of {total}"


def parse_endpoint_type(value: str | None) -> EndpointType | None:
    """Return the matching endpoint type, or None for unknown values."""

    if value is None:
        return None
    try:
        return EndpointType(value)
    except ValueError:
        return None


__all__ = [
    "CANCELED_MESSAGE",
    "CONDITION_FALSE",
    "CONDITION_TRUE",
    "ConditionCategory",
    "ConditionType",
    "DEFAULT_ENDPOINT_TYPE",
    "EndpointType",
    "PhaseName",
    "RUNNING_MESSAGE",
    "SUCCEEDED_MESSAGE",
    "TERMINAL_PHASES",
    "parse_endpoint_type",
]
