"""Tests for bearer-token authentication on the notes API."""

import uuid

import pytest

from collabnotes.core.repositories import UserRepository
from collabnotes.security.jwt import create_access_token


class TestAuthMiddleware:

    @pytest.mark.asyncio
    async def test_missing_token(self, async_client):
        response = await async_client.get("/api/notes/")
        assert response.status_code in (401, 403)
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_invalid_token(self, async_client):
        response = await async_client.get(
            "/api/notes/", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 403
        assert response.json() == {"message": "Invalid token or expired token"}

    @pytest.mark.asyncio
    async def test_unknown_user(self, async_client):
        token = create_access_token({"sub": str(uuid.uuid4())})
        response = await async_client.get(
            "/api/notes/", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "User not found or inactive"

    @pytest.mark.asyncio
    async def test_inactive_user(self, async_client, test_session, auth_headers):
        user = await UserRepository(test_session).create_user(
            {"name": "Gone", "email": "gone@example.com", "is_active": False}
        )
        response = await async_client.get("/api/notes/", headers=auth_headers(user))
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_token(self, async_client, alice, auth_headers):
        response = await async_client.get("/api/notes/", headers=auth_headers(alice))
        assert response.status_code == 200
