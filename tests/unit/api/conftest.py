"""Fixtures for API unit tests: fresh metrics registry, AsyncClient over ASGITransport."""

import pytest
from httpx import ASGITransport, AsyncClient

from guid_sharder.main import app
from guid_sharder.observability.metrics import MetricsCollector


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def app_with_overrides(metrics):
    """App with the metrics registry isolated per test."""
    from guid_sharder.api import dependencies

    app.dependency_overrides[dependencies.get_metrics] = lambda: metrics
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
