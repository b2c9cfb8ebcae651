import pytest
from datetime import timedelta
from httpx import AsyncClient

from routes.deps import create_access_token

pytestmark = pytest.mark.asyncio

async def test_app_health(async_client: AsyncClient):
    response = await async_client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "online"

async def test_auth_token_format(auth_headers: dict):
    assert "Authorization" in auth_headers
    assert auth_headers["Authorization"].startswith("Bearer ")

async def test_me_returns_principal(async_client: AsyncClient, auth_headers: dict, test_user):
    response = await async_client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == test_user.id
    assert data["email"] == test_user.email
    assert data["role"] == "user"

async def test_missing_token(async_client: AsyncClient, db):
    response = await async_client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["error"] is True
    assert response.json()["message"]

async def test_garbage_token(async_client: AsyncClient, db):
    response = await async_client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401

async def test_expired_token(async_client: AsyncClient, test_user):
    token = create_access_token({"sub": test_user.id}, expires_delta=timedelta(minutes=-5))
    response = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

async def test_token_for_unknown_user(async_client: AsyncClient, db):
    token = create_access_token({"sub": "nobody"})
    response = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["message"] == "User not found. Please sign in again."

async def test_token_without_subject(async_client: AsyncClient, db):
    token = create_access_token({"role": "admin"})
    response = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

async def test_request_id_header(async_client: AsyncClient, auth_headers: dict):
    response = await async_client.get("/api/auth/me", headers=auth_headers)
    assert response.headers.get("X-Request-ID")
