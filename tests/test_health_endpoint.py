import pytest
from httpx import ASGITransport, AsyncClient


@pytest.mark.asyncio
async def test_readyz_reports_component_statuses(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/readyz")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ready"
    components = payload["components"]
    assert components["database"]["status"] == "ready"
    assert components["courtesy_notifications"]["status"] in {"disabled", "ready"}


@pytest.mark.asyncio
async def test_root_healthz_includes_version(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        root = await client.get("/healthz")
        versioned = await client.get("/api/v1/healthz")

    assert root.status_code == 200
    assert root.json()["status"] == "ok"
    assert root.json()["version"] == "0.1.0"
    assert versioned.json() == {"status": "ok"}
