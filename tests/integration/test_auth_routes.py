"""Integration tests for authentication endpoints."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient


@pytest.fixture
def organization() -> dict:
    return {
        "kind": "organization",
        "name": "Harbor Food Bank",
        "email": "team@harbor.org",
        "password": "harbor-password",
        "description": "Weekly food distribution",
    }


class TestRegisterEndpoint:
    async def test_register_success(self, async_client: AsyncClient, organization: dict) -> None:
        response = await async_client.post("/auth/register", json=organization)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "Registration successful"
        assert data["account"]["kind"] == "organization"
        assert data["account"]["description"] == "Weekly food distribution"
        assert "password_hash" not in data["account"]
        assert data["token"]["token_type"] == "bearer"

    async def test_register_duplicate_email(
        self, async_client: AsyncClient, organization: dict
    ) -> None:
        await async_client.post("/auth/register", json=organization)

        response = await async_client.post("/auth/register", json=organization)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "already exists" in response.json()["detail"]

    async def test_register_unknown_kind(self, async_client: AsyncClient, organization: dict) -> None:
        response = await async_client.post(
            "/auth/register", json={**organization, "kind": "admin"}
        )

        assert response.status_code == 422


class TestLoginEndpoint:
    async def test_login_success_and_me(self, async_client: AsyncClient, organization: dict) -> None:
        await async_client.post("/auth/register", json=organization)

        response = await async_client.post(
            "/auth/login",
            json={"kind": "organization", "email": organization["email"], "password": "harbor-password"},
        )

        assert response.status_code == status.HTTP_200_OK
        token = response.json()["token"]["access_token"]
        me = await async_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == status.HTTP_200_OK
        assert me.json()["account"]["email"] == organization["email"]

    async def test_login_wrong_password(self, async_client: AsyncClient, organization: dict) -> None:
        await async_client.post("/auth/register", json=organization)

        response = await async_client.post(
            "/auth/login",
            json={"kind": "organization", "email": organization["email"], "password": "nope-nope"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid email or password"


class TestMeEndpoint:
    async def test_me_without_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_me_with_invalid_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/auth/me", headers={"Authorization": "Bearer junk"})

        assert response.status_code == status.HTTP_403_FORBIDDEN
