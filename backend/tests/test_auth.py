"""
Tests for staff login and token checks.
"""
from datetime import timedelta

from fastapi.testclient import TestClient

from conftest import STAFF_EMAIL, STAFF_PASSWORD
from orderdesk.core.config import settings
from orderdesk.core.security import (
    authenticate_staff,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_login(client: TestClient):
    response = client.post(
        "/api/auth/login",
        json={"email": STAFF_EMAIL.upper(), "password": STAFF_PASSWORD},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["expiresIn"] == 12 * 3600
    payload = decode_access_token(body["accessToken"])
    assert payload["sub"] == STAFF_EMAIL
    assert payload["role"] == "staff"


def test_login_wrong_password(client: TestClient):
    response = client.post(
        "/api/auth/login",
        json={"email": STAFF_EMAIL, "password": "wrong"},
    )

    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"


def test_issued_token_opens_api(client: TestClient):
    token = client.post(
        "/api/auth/login",
        json={"email": STAFF_EMAIL, "password": STAFF_PASSWORD},
    ).json()["accessToken"]

    response = client.get(
        "/api/products",
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 200


def test_garbage_token(client: TestClient):
    response = client.get("/api/products", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401


def test_expired_token(client: TestClient):
    token = create_access_token(
        {"sub": STAFF_EMAIL, "role": "staff"},
        expires_delta=timedelta(seconds=-10),
    )

    response = client.get("/api/products", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_without_staff_role(client: TestClient):
    token = create_access_token({"sub": "someone"})

    response = client.get("/api/products", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_health_is_public(client: TestClient):
    assert client.get("/health").status_code == 200


def test_hash_password_produces_usable_staff_hash(monkeypatch):
    hashed = hash_password("correct horse")

    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)

    monkeypatch.setattr(settings, "staff_password_hash", hashed)
    assert authenticate_staff(STAFF_EMAIL, "correct horse")
    assert not authenticate_staff(STAFF_EMAIL, "wrong horse")
