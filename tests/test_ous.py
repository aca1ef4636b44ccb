import json
from typing import Iterator
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from ou_provisioner.api.deps import get_directory_session
from ou_provisioner.core.config import settings
from ou_provisioner.core.exceptions import TransportError
from ou_provisioner.core.security import JWTHandler
from ou_provisioner.main import app
from ou_provisioner.services.audit_service import AuditService, get_audit_service
from ou_provisioner.services.directory import DirectorySession

from conftest import FakeDirectory

PARENT = "OU=Missing,DC=corp,DC=com"
CHILD = "OU=Child,OU=Missing,DC=corp,DC=com"


@pytest.fixture
def audit_path(tmp_path) -> str:
    return str(tmp_path / "audit" / "audit.jsonl")


@pytest.fixture
def client(directory: FakeDirectory, audit_path: str) -> Iterator[TestClient]:
    app.dependency_overrides[get_directory_session] = lambda: directory
    app.dependency_overrides[get_audit_service] = lambda: AuditService(audit_path)
    token = JWTHandler.create_token({"sub": "tester", "username": "tester"})
    with TestClient(app, headers={"Authorization": f"Bearer {token}"}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def read_audit(path: str) -> list[dict]:
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f]


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_routes_require_token(directory: FakeDirectory) -> None:
    app.dependency_overrides[get_directory_session] = lambda: directory
    try:
        response = TestClient(app).get(f"/organizational-units/{PARENT}")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code in (401, 403)


def test_login_issues_token() -> None:
    response = TestClient(app).post(
        "/auth/login",
        json={
            "username": settings.local_auth_username,
            "password": settings.local_auth_password,
        },
    )
    assert response.status_code == 200
    payload = JWTHandler.verify_token(response.json()["access_token"])
    assert payload["username"] == settings.local_auth_username


def test_login_rejects_bad_password() -> None:
    response = TestClient(app).post(
        "/auth/login", json={"username": "admin", "password": "wrong-password!"}
    )
    assert response.status_code == 401


def test_create_with_parents(
    client: TestClient, directory: FakeDirectory, audit_path: str
) -> None:
    response = client.post(
        "/organizational-units",
        json={"distinguished_name": CHILD, "create_parents": True},
    )
    assert response.status_code == 201
    assert response.json() == {"distinguished_name": CHILD, "ou": "Child"}
    assert directory.added_dns == [PARENT, CHILD]

    events = read_audit(audit_path)
    assert len(events) == 1
    assert events[0]["action"] == "create_ou"
    assert events[0]["actor"] == "tester"
    assert events[0]["status"] == "success"
    assert events[0]["details"] == {"create_parents": True}


def test_create_missing_parent(
    client: TestClient, directory: FakeDirectory, audit_path: str
) -> None:
    response = client.post("/organizational-units", json={"distinguished_name": CHILD})
    assert response.status_code == 422
    assert "does not exist" in response.json()["detail"]
    assert directory.adds == []
    assert read_audit(audit_path)[0]["status"] == "failure"


def test_create_outside_base(client: TestClient, directory: FakeDirectory) -> None:
    response = client.post(
        "/organizational-units", json={"distinguished_name": "OU=X,DC=evil"}
    )
    assert response.status_code == 403
    assert directory.adds == []


def test_create_existing(client: TestClient, directory: FakeDirectory) -> None:
    directory.entries.append(PARENT)
    response = client.post(
        "/organizational-units", json={"distinguished_name": PARENT}
    )
    assert response.status_code == 409


def test_create_non_ou_leaf(client: TestClient, directory: FakeDirectory) -> None:
    response = client.post(
        "/organizational-units", json={"distinguished_name": "CN=Users,DC=corp,DC=com"}
    )
    assert response.status_code == 400
    assert directory.adds == []


def test_read_existing(client: TestClient, directory: FakeDirectory) -> None:
    directory.entries.append(PARENT)
    response = client.get(f"/organizational-units/{PARENT}")
    assert response.status_code == 200
    assert response.json() == {"distinguished_name": PARENT, "ou": "Missing"}


def test_read_missing(client: TestClient) -> None:
    response = client.get(f"/organizational-units/{PARENT}")
    assert response.status_code == 404
    assert "non-existent" in response.json()["detail"]


def test_read_ambiguous(client: TestClient, directory: FakeDirectory) -> None:
    directory.entries.extend([PARENT, PARENT])
    response = client.get(f"/organizational-units/{PARENT}")
    assert response.status_code == 500


def test_delete_twice(
    client: TestClient, directory: FakeDirectory, audit_path: str
) -> None:
    directory.entries.append(PARENT)
    assert client.delete(f"/organizational-units/{PARENT}").status_code == 204
    assert client.delete(f"/organizational-units/{PARENT}").status_code == 204
    assert directory.deletes == [PARENT]
    assert [event["status"] for event in read_audit(audit_path)] == [
        "success",
        "success",
    ]


def test_create_transport_failure(
    client: TestClient, directory: FakeDirectory, audit_path: str
) -> None:
    directory.fail_add_for.add(PARENT)
    response = client.post("/organizational-units", json={"distinguished_name": PARENT})
    assert response.status_code == 502
    assert "insufficientAccessRights" in response.json()["detail"]
    events = read_audit(audit_path)
    assert events[0]["action"] == "create_ou"
    assert events[0]["status"] == "failure"


def test_delete_transport_failure(
    client: TestClient, directory: FakeDirectory, audit_path: str
) -> None:
    directory.entries.append(PARENT)
    directory.fail_delete_for.add(PARENT)
    response = client.delete(f"/organizational-units/{PARENT}")
    assert response.status_code == 502
    assert "notAllowedOnNonLeaf" in response.json()["detail"]
    events = read_audit(audit_path)
    assert events[0]["action"] == "delete_ou"
    assert events[0]["status"] == "failure"
    assert "notAllowedOnNonLeaf" in events[0]["message"]


@patch.object(DirectorySession, "connect")
def test_connect_failure_is_bad_gateway(mock_connect, audit_path: str) -> None:
    mock_connect.side_effect = TransportError("Unable to bind to ldap.corp.com")
    app.dependency_overrides[get_audit_service] = lambda: AuditService(audit_path)
    token = JWTHandler.create_token({"sub": "tester", "username": "tester"})
    try:
        response = TestClient(app).get(
            f"/organizational-units/{PARENT}",
            headers={"Authorization": f"Bearer {token}"},
        )
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 502
    assert "Unable to bind" in response.json()["detail"]


def test_session_dependency_closes_session(directory: FakeDirectory) -> None:
    with patch.object(DirectorySession, "connect", return_value=directory):
        dependency = get_directory_session()
        assert next(dependency) is directory
        dependency.close()
    assert directory.closed is True


def test_dn_with_slash_in_path(client: TestClient, directory: FakeDirectory) -> None:
    dn = "OU=R/D,DC=corp,DC=com"
    directory.entries.append(dn)
    response = client.get(f"/organizational-units/{dn}")
    assert response.status_code == 200
    assert response.json() == {"distinguished_name": dn, "ou": "R/D"}
    assert client.delete(f"/organizational-units/{dn}").status_code == 204
    assert directory.deletes == [dn]
