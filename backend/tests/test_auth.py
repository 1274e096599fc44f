"""Registration, login and profile tests."""

from datetime import timedelta

import pytest

from fintrack.core.security import create_access_token, hash_password, verify_password


@pytest.mark.asyncio
async def test_register_returns_201(client):
    response = await client.post(
        "/api/register",
        json={"name": "Bob", "email": "bob@example.com", "password": "pw"},
    )
    assert response.status_code == 201
    assert response.json() == {"message": "User registered successfully"}


@pytest.mark.asyncio
async def test_register_duplicate_email_is_generic_failure(client):
    body = {"name": "Bob", "email": "bob@example.com", "password": "pw"}
    await client.post("/api/register", json=body)
    response = await client.post("/api/register", json=body)
    assert response.status_code == 500
    assert response.json() == {"error": "Registration failed"}


@pytest.mark.asyncio
async def test_login_returns_token(client, token):
    assert isinstance(token, str)
    assert token.count(".") == 2


@pytest.mark.asyncio
async def test_login_wrong_password(client, token):
    response = await client.post(
        "/api/login", json={"email": "alice@example.com", "password": "nope"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_login_unknown_user_looks_like_wrong_password(client):
    response = await client.post(
        "/api/login", json={"email": "ghost@example.com", "password": "nope"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_profile_excludes_password(client, auth_headers):
    response = await client.get("/api/profile", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Alice"
    assert data["email"] == "alice@example.com"
    assert "password" not in data
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_profile_without_token(client):
    response = await client.get("/api/profile")
    assert response.status_code == 401
    assert response.json() == {"error": "Access denied"}


@pytest.mark.asyncio
async def test_profile_with_garbage_token(client):
    response = await client.get("/api/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


@pytest.mark.asyncio
async def test_profile_with_expired_token(client, token):
    expired = create_access_token(1, expires_delta=timedelta(minutes=-5))
    response = await client.get("/api/profile", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_profile_for_deleted_user(client):
    orphan = create_access_token(999)
    response = await client.get("/api/profile", headers={"Authorization": f"Bearer {orphan}"})
    assert response.status_code == 401


def test_password_hash_roundtrip():
    hashed = hash_password("hunter2")
    assert hashed != "hunter2"
    assert verify_password("hunter2", hashed)
    assert not verify_password("hunter3", hashed)


def test_verify_password_rejects_non_bcrypt_hash():
    assert not verify_password("hunter2", "plaintext")
