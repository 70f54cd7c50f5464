"""Transfer backend that drives an external transfer agent over HTTP."""

from __future__ import annotations

from typing import Any, TypeVar, cast
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from direct_volume_migration.domain.errors import TransferBackendError
from direct_volume_migration.domain.phase_types import EndpointType
from direct_volume_migration.domain.ports import TransferBackend
from direct_volume_migration.domain.task import Task
from direct_volume_migration.domain.transfer_models import (
    ClaimPayload,
    ClaimsRequest,
    EndpointsRequest,
    NamespacesRequest,
    ReadinessResponse,
    TransferAgentModel,
    TransferStatus,
    TransferStatusResponse,
    TransfersRequest,
)

_ResponseModel = TypeVar("_ResponseModel", bound=BaseModel)


class HttpTransferBackend(TransferBackend):
    """Wrapper around the transfer-agent task endpoints (`/tasks/{uid}/...`)."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = self._normalize_base_url(base_url)
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def delete_stale_resources(self, task: Task) -> None:
        """Call `DELETE /tasks/{uid}/stale-resources`."""

        await self._request("DELETE", task, "/stale-resources")

    async def ensure_destination_namespaces(self, task: Task) -> None:
        """Call `PUT /tasks/{uid}/namespaces`."""

        namespaces = sorted(
            {claim.destination_namespace for claim in task.owner.spec.persistent_volume_claims}
        )
        await self._request("PUT", task, "/namespaces", NamespacesRequest(namespaces=namespaces))

    async def destination_namespaces_ready(self, task: Task) -> bool:
        return await self._ready(task, "/namespaces")

    async def ensure_destination_pvcs(self, task: Task) -> None:
        """Call `PUT /tasks/{uid}/pvcs`."""

        await self._request("PUT", task, "/pvcs", ClaimsRequest(claims=self._claims(task)))

    async def destination_pvcs_bound(self, task: Task) -> bool:
        return await self._ready(task, "/pvcs")

    async def ensure_endpoints(self, task: Task, endpoint_type: EndpointType) -> None:
        """Call `PUT /tasks/{uid}/endpoints`."""

        await self._request(
            "PUT", task, "/endpoints", EndpointsRequest(endpoint_type=endpoint_type.value)
        )

    async def endpoints_admitted(self, task: Task) -> bool:
        return await self._ready(task, "/endpoints")

    async def start_transfers(self, task: Task, sparse_volumes: list[str]) -> None:
        """Call `PUT /tasks/{uid}/transfers`."""

        resources = task.plan_resources
        request = TransfersRequest(
            claims=self._claims(task),
            sparse_volumes=sparse_volumes,
            source_cluster=(
                None if resources.source_cluster is None else resources.source_cluster.name
            ),
            destination_cluster=(
                None
                if resources.destination_cluster is None
                else resources.destination_cluster.name
            ),
        )
        await self._request("PUT", task, "/transfers", request)

    async def transfer_clients_running(self, task: Task) -> bool:
        return await self._ready(task, "/transfers/clients")

    async def get_transfer_status(self, task: Task) -> TransferStatus:
        """Call `GET /tasks/{uid}/transfers`."""

        response = await self._request("GET", task, "/transfers")
        return self._parse(response, TransferStatusResponse).to_status()

    async def delete_transfer_resources(self, task: Task) -> None:
        """Call `DELETE /tasks/{uid}/transfers`."""

        await self._request("DELETE", task, "/transfers")

    async def transfer_resources_terminated(self, task: Task) -> bool:
        return await self._ready(task, "/transfers/terminated")

    async def _ready(self, task: Task, path: str) -> bool:
        response = await self._request("GET", task, path)
        return self._parse(response, ReadinessResponse).ready

    async def _request(
        self,
        method: str,
        task: Task,
        path: str,
        payload: TransferAgentModel | None = None,
    ) -> httpx.Response:
        url = self._endpoint(task, path)
        body: dict[str, Any] | None = (
            None if payload is None else payload.model_dump(by_alias=True, exclude_none=True)
        )
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                transport=self._transport,
            ) as http_client:
                response = await http_client.request(method, url, json=body)
        except httpx.HTTPError as exc:
            raise TransferBackendError(f"{method} {url} failed: {exc}") from exc
        self._ensure_success(response)
        return response

    def _parse(self, response: httpx.Response, model: type[_ResponseModel]) -> _ResponseModel:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TransferBackendError(
                f"{response.request.method} {response.request.url} returned an invalid payload: "
                f"{exc}"
            ) from exc

    def _claims(self, task: Task) -> list[ClaimPayload]:
        return [
            ClaimPayload(
                name=claim.name,
                namespace=claim.namespace,
                target_name=claim.destination_name,
                target_namespace=claim.destination_namespace,
                storage_class=claim.storage_class,
                access_modes=list(claim.access_modes),
            )
            for claim in task.owner.spec.persistent_volume_claims
        ]

    def _endpoint(self, task: Task, path: str) -> str:
        uid = quote(task.owner.uid, safe="")
        return f"{self._base_url}/tasks/{uid}{path}"

    def _ensure_success(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        message = self._detail_from_response(response)
        raise TransferBackendError(
            f"{response.request.method} {response.request.url} failed: "
            f"{response.status_code} {message}"
        )

    def _detail_from_response(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            text = response.text.strip()
            return text or "<no response body>"

        if isinstance(payload, dict):
            detail = cast(dict[str, object], payload).get("detail")
            if isinstance(detail, str):
                return detail
        return str(payload)

    def _normalize_base_url(self, base_url: str) -> str:
        normalized = base_url.strip().rstrip("/")
        if not normalized:
            raise TransferBackendError("Transfer agent endpoint cannot be empty.")
        return normalized


__all__ = ["HttpTransferBackend"]
