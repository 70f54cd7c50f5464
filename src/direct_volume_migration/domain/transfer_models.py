"""Transfer backend result models and transfer-agent wire payloads."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field


@dataclass(slots=True, frozen=True)
class TransferStatus:
    """Aggregate state of the volume transfers driven for one task."""

    finished: bool = False
    succeeded_volumes: tuple[str, ...] = ()
    failed_volumes: tuple[str, ...] = ()
    running_volumes: tuple[str, ...] = ()
    details: dict[str, str] = field(default_factory=dict)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_volumes)


class TransferAgentModel(BaseModel):
    """Base model for transfer-agent payloads."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ClaimPayload(TransferAgentModel):
    name: str
    namespace: str
    target_name: str = Field(alias="targetName")
    target_namespace: str = Field(alias="targetNamespace")
    storage_class: str | None = Field(default=None, alias="storageClass")
    access_modes: list[str] = Field(default_factory=list, alias="accessModes")


class NamespacesRequest(TransferAgentModel):
    namespaces: list[str]


class ClaimsRequest(TransferAgentModel):
    claims: list[ClaimPayload]


class EndpointsRequest(TransferAgentModel):
    endpoint_type: str = Field(alias="endpointType")


class TransfersRequest(TransferAgentModel):
    """Transfer client creation request."""

    claims: list[ClaimPayload]
    sparse_volumes: list[str] = Field(default_factory=list, alias="sparseVolumes")
    source_cluster: str | None = Field(default=None, alias="sourceCluster")
    destination_cluster: str | None = Field(default=None, alias="destinationCluster")


class ReadinessResponse(TransferAgentModel):
    ready: bool = False


class TransferStatusResponse(TransferAgentModel):
    """Aggregate transfer state reported by the agent."""

    finished: bool = False
    succeeded_volumes: list[str] = Field(default_factory=list, alias="succeededVolumes")
    failed_volumes: list[str] = Field(default_factory=list, alias="failedVolumes")
    running_volumes: list[str] = Field(default_factory=list, alias="runningVolumes")
    details: dict[str, str] = Field(default_factory=dict)

    def to_status(self) -> TransferStatus:
        return TransferStatus(
            finished=self.finished,
            succeeded_volumes=tuple(self.succeeded_volumes),
            failed_volumes=tuple(self.failed_volumes),
            running_volumes=tuple(self.running_volumes),
            details=dict(self.details),
        )


__all__ = [
    "ClaimPayload",
    "ClaimsRequest",
    "EndpointsRequest",
    "NamespacesRequest",
    "ReadinessResponse",
    "TransferAgentModel",
    "TransferStatus",
    "TransferStatusResponse",
    "TransfersRequest",
]
