"""Tests for the liveness endpoint."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health_returns_200(self, bare_client: AsyncClient):
        resp = await bare_client.get("/health")
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_health_includes_status_and_version(self, bare_client: AsyncClient):
        resp = await bare_client.get("/health")
        body = resp.json()
        assert body["status"] == "ok"
        assert body["version"] == "0.1.0"

    @pytest.mark.asyncio
    async def test_health_echoes_request_id(self, bare_client: AsyncClient):
        resp = await bare_client.get("/health", headers={"X-Request-ID": "probe-1"})
        assert resp.headers["X-Request-ID"] == "probe-1"
