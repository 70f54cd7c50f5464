from __future__ import annotations

from fastapi.testclient import TestClient

from direct_volume_migration.api.dependencies import get_migration_task_service, get_settings
from direct_volume_migration.main import app


def _create_payload(name: str = "dvm-1") -> dict[str, object]:
    return {
        "name": name,
        "namespace": "openshift-migration",
        "ownerReferences": [],
        "spec": {
            "srcMigClusterRef": {"namespace": "openshift-migration", "name": "host"},
            "destMigClusterRef": {"namespace": "openshift-migration", "name": "dest"},
            "persistentVolumeClaims": [
                {
                    "name": "data",
                    "namespace": "app",
                    "targetNamespace": "app-copy",
                    "accessModes": ["ReadWriteOnce"],
                }
            ],
            "createDestinationNamespaces": True,
        },
    }


def _clear_dependencies() -> None:
    get_migration_task_service.cache_clear()
    get_settings.cache_clear()


def test_healthz() -> None:
    _clear_dependencies()

    with TestClient(app) as client:
        response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_and_get_migration_task() -> None:
    _clear_dependencies()

    with TestClient(app) as client:
        created = client.post("/migrationtasks", json=_create_payload())
        fetched = client.get("/migrationtasks/openshift-migration/dvm-1")

    assert created.status_code == 201
    body = created.json()
    assert body["resourceVersion"] == 1
    assert body["spec"]["destMigClusterRef"]["name"] == "dest"
    assert body["spec"]["persistentVolumeClaims"][0]["targetNamespace"] == "app-copy"
    assert body["spec"]["createDestinationNamespaces"] is True

    assert fetched.status_code == 200
    assert fetched.json()["uid"] == body["uid"]
    assert "phaseDescription" in fetched.json()["status"]


def test_create_duplicate_returns_conflict() -> None:
    _clear_dependencies()

    with TestClient(app) as client:
        assert client.post("/migrationtasks", json=_create_payload()).status_code == 201
        duplicate = client.post("/migrationtasks", json=_create_payload())

    assert duplicate.status_code == 409


def test_create_rejects_unknown_fields() -> None:
    _clear_dependencies()
    payload = _create_payload()
    payload["unexpected"] = True

    with TestClient(app) as client:
        response = client.post("/migrationtasks", json=payload)

    assert response.status_code == 422


def test_list_migration_tasks() -> None:
    _clear_dependencies()

    with TestClient(app) as client:
        client.post("/migrationtasks", json=_create_payload("dvm-a"))
        client.post("/migrationtasks", json=_create_payload("dvm-b"))
        response = client.get("/migrationtasks")

    assert response.status_code == 200
    body = response.json()
    assert body["controllerId"] == "dvm-controller-local"
    assert [task["name"] for task in body["migrationTasks"]] == ["dvm-a", "dvm-b"]


def test_unknown_task_returns_not_found() -> None:
    _clear_dependencies()

    with TestClient(app) as client:
        fetched = client.get("/migrationtasks/openshift-migration/absent")
        reconcile = client.post("/migrationtasks/openshift-migration/absent/reconcile")

    assert fetched.status_code == 404
    assert reconcile.status_code == 404


def test_reconcile_and_cancel_are_accepted() -> None:
    _clear_dependencies()

    with TestClient(app) as client:
        client.post("/migrationtasks", json=_create_payload())
        reconcile = client.post("/migrationtasks/openshift-migration/dvm-1/reconcile")
        cancel = client.post("/migrationtasks/openshift-migration/dvm-1/cancel")
        fetched = client.get("/migrationtasks/openshift-migration/dvm-1")

    assert reconcile.status_code == 202
    assert reconcile.json() == {"name": "dvm-1", "namespace": "openshift-migration", "queued": True}
    assert cancel.status_code == 202
    assert fetched.json()["spec"]["canceled"] is True


def test_reset_of_task_that_has_not_failed_returns_conflict() -> None:
    _clear_dependencies()

    with TestClient(app) as client:
        client.post("/migrationtasks", json=_create_payload())
        response = client.post("/migrationtasks/openshift-migration/dvm-1/reset")

    assert response.status_code == 409
