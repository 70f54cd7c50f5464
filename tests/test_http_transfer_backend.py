from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from direct_volume_migration.domain.entities import (
    MigrationTask,
    MigrationTaskSpec,
    PersistentVolumeClaimMapping,
)
from direct_volume_migration.domain.errors import TransferBackendError
from direct_volume_migration.domain.itinerary import STANDALONE_ITINERARY
from direct_volume_migration.domain.phase_types import EndpointType
from direct_volume_migration.domain.task import Task
from direct_volume_migration.infrastructure.transfers import HttpTransferBackend


def make_task() -> Task:
    owner = MigrationTask(
        name="dvm-1",
        namespace="openshift-migration",
        uid="uid-1",
        spec=MigrationTaskSpec(
            persistent_volume_claims=[
                PersistentVolumeClaimMapping(
                    name="data",
                    namespace="app",
                    target_namespace="app-copy",
                )
            ]
        ),
    )
    return Task(owner=owner, itinerary=STANDALONE_ITINERARY, phase="")


def test_ensure_endpoints_puts_endpoint_type() -> None:
    seen: list[tuple[str, str, dict[str, object]]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(204)

    backend = HttpTransferBackend(
        "http://agent.local/api/",
        transport=httpx.MockTransport(handler),
    )
    asyncio.run(backend.ensure_endpoints(make_task(), EndpointType.NODE_PORT))

    assert seen == [("PUT", "/api/tasks/uid-1/endpoints", {"endpointType": "NodePort"})]


def test_start_transfers_sends_claims_and_sparse_volumes() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(202, json={})

    backend = HttpTransferBackend("http://agent.local", transport=httpx.MockTransport(handler))
    asyncio.run(backend.start_transfers(make_task(), ["app/data"]))

    assert bodies == [
        {
            "claims": [
                {
                    "name": "data",
                    "namespace": "app",
                    "targetName": "data",
                    "targetNamespace": "app-copy",
                    "accessModes": [],
                }
            ],
            "sparseVolumes": ["app/data"],
        }
    ]


def test_transfer_status_is_parsed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/tasks/uid-1/transfers"
        return httpx.Response(
            200,
            json={"finished": True, "failedVolumes": ["app/data"], "succeededVolumes": []},
        )

    backend = HttpTransferBackend("http://agent.local", transport=httpx.MockTransport(handler))
    status = asyncio.run(backend.get_transfer_status(make_task()))

    assert status.finished
    assert status.failed_volumes == ("app/data",)
    assert status.has_failures


def test_readiness_checks_read_ready_flag() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ready": request.url.path.endswith("/pvcs")})

    backend = HttpTransferBackend("http://agent.local", transport=httpx.MockTransport(handler))

    assert asyncio.run(backend.destination_pvcs_bound(make_task()))
    assert not asyncio.run(backend.endpoints_admitted(make_task()))


def test_error_response_raises_backend_error_with_detail() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "agent unavailable"})

    backend = HttpTransferBackend("http://agent.local", transport=httpx.MockTransport(handler))

    with pytest.raises(TransferBackendError, match="agent unavailable"):
        asyncio.run(backend.delete_transfer_resources(make_task()))


def test_transport_error_raises_backend_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    backend = HttpTransferBackend("http://agent.local", transport=httpx.MockTransport(handler))

    with pytest.raises(TransferBackendError):
        asyncio.run(backend.transfer_clients_running(make_task()))


def test_invalid_payload_raises_backend_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not json")

    backend = HttpTransferBackend("http://agent.local", transport=httpx.MockTransport(handler))

    with pytest.raises(TransferBackendError):
        asyncio.run(backend.get_transfer_status(make_task()))


def test_empty_endpoint_is_rejected() -> None:
    with pytest.raises(TransferBackendError):
        HttpTransferBackend("  ")
