"""
Integration tests for health check endpoints.

Tests the /health endpoint and the API root.
"""

from unittest.mock import AsyncMock, patch

import pytest


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_health_endpoint(self, async_client):
        """Test /health endpoint returns 200 OK."""
        response = await async_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Service is healthy"
        assert body["data"]["status"] == "healthy"
        assert body["data"]["database"] == "connected"
        assert "version" in body["data"]
        assert "environment" in body["data"]

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_health_database_unavailable(self, app, async_client):
        """Test /health endpoint when database is unavailable."""
        with patch.object(app.state.db, "test_connection", AsyncMock(return_value=False)):
            response = await async_client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["errorCode"] == "SERVICE_UNAVAILABLE_503"
        assert body["message"] == "Database unavailable"


class TestRootEndpoint:
    """Tests for the API root."""

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_root_welcome(self, async_client, api_prefix):
        response = await async_client.get(f"{api_prefix}/")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "SUCCESS - Welcome to the Monash API"
        assert set(body["data"]) == {"version", "environment", "timestamp"}
