"""End-to-end tests for the user HTTP API."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app import app
from core.database import get_db
from models import UserRoleModel


@pytest.fixture()
def client(db: Session, rbac: dict):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _register(client: TestClient, email: str = "alice@example.com", **extra) -> dict:
    payload = {"email": email, "password": "Sup3rSecret!", "password1": "Sup3rSecret!"}
    payload.update(extra)
    response = client.post("/api/users", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_and_get_user(client: TestClient) -> None:
    user = _register(client, name="alice")

    assert "password" not in user
    assert "password1" not in user

    fetched = client.get(f"/api/users/{user['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "alice"


def test_duplicate_registration_conflicts(client: TestClient) -> None:
    _register(client)

    response = client.post(
        "/api/users",
        json={"email": "alice@example.com", "password": "Another123"},
    )
    assert response.status_code == 409


def test_mismatched_confirmation_is_rejected_by_validation(client: TestClient) -> None:
    response = client.post(
        "/api/users",
        json={"email": "bob@example.com", "password": "Sup3rSecret!", "password1": "nope123"},
    )
    assert response.status_code == 422


def test_list_users_pagination(client: TestClient) -> None:
    for i in range(3):
        _register(client, f"user{i}@example.com")

    response = client.get("/api/users", params={"page": 1, "limit": 2, "sort": "email"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert body["page"] == 1
    assert body["limit"] == 2
    assert [u["email"] for u in body["items"]] == ["user0@example.com", "user1@example.com"]


def test_list_users_bad_sort_field(client: TestClient) -> None:
    response = client.get("/api/users", params={"sort": "password"})
    assert response.status_code == 400


def test_update_user(client: TestClient) -> None:
    user = _register(client)

    response = client.patch(f"/api/users/{user['id']}", json={"display_name": "Al"})
    assert response.status_code == 200
    assert response.json()["display_name"] == "Al"

    mismatch = client.patch(
        f"/api/users/{user['id']}",
        json={"password": "aaaaaa", "password1": "bbbbbb"},
    )
    assert mismatch.status_code == 400

    missing = client.patch("/api/users/missing", json={"name": "x"})
    assert missing.status_code == 404

    null_email = client.patch(f"/api/users/{user['id']}", json={"email": None})
    assert null_email.status_code == 400


def test_delete_user(client: TestClient) -> None:
    user = _register(client)

    response = client.delete(f"/api/users/{user['id']}")
    assert response.status_code == 200
    assert response.json()["email"] == "alice@example.com"

    assert client.get(f"/api/users/{user['id']}").status_code == 404
    assert client.delete(f"/api/users/{user['id']}").status_code == 404


def test_verify_email(client: TestClient) -> None:
    _register(client)

    first = client.post("/api/users/verify-email", json={"email": "alice@example.com"})
    second = client.post("/api/users/verify-email", json={"email": "alice@example.com"})

    assert first.status_code == 200
    assert first.json()["email_verified_at"] is not None
    assert second.json()["email_verified_at"] == first.json()["email_verified_at"]

    unknown = client.post("/api/users/verify-email", json={"email": "nobody@example.com"})
    assert unknown.status_code == 409


def test_user_resources_and_profile(client: TestClient, db: Session) -> None:
    user = _register(client)
    db.add(UserRoleModel(user_id=user["id"], role_id="role-admin"))
    db.commit()

    resources = client.get("/api/users/by-email/alice@example.com/resources")
    assert resources.status_code == 200
    body = resources.json()
    assert {r["id"] for r in body["items"]} == {"r1", "r3"}
    assert body["total"] == body["limit"] == 2
    assert body["page"] == 1

    profile = client.get(f"/api/users/{user['id']}/profile")
    assert profile.status_code == 200
    assert sorted(profile.json()["role_names"]) == ["admin", "user"]
    assert "password" not in profile.json()

    assert client.get("/api/users/by-email/nobody@example.com/resources").status_code == 404
    assert client.get("/api/users/missing/profile").status_code == 404


def test_update_account(client: TestClient) -> None:
    _register(client)

    response = client.patch(
        "/api/users/accounts/credentials/alice@example.com",
        json={"scope": "profile"},
    )
    assert response.status_code == 200
    assert response.json()["scope"] == "profile"

    missing = client.patch("/api/users/accounts/github/nope", json={"scope": "x"})
    assert missing.status_code == 404
