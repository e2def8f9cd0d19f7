"""
Tests for application-level endpoints and error formatting.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_root(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


@pytest.mark.asyncio
async def test_health_reports_cache_disabled(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_request_id_header_is_echoed(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Response-Time"].endswith("ms")


@pytest.mark.asyncio
async def test_metrics_exposed(client: AsyncClient, event_form, image_file):
    await client.post("/api/v1/events/", data=event_form, files=image_file)

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "event_creations_total" in response.text
    assert "booking_attempts_total" in response.text
