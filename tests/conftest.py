"""Shared test fixtures."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from brain_enricher.app import create_app
from brain_enricher.config import Settings
from brain_enricher.fetch import SafeFetcher

PUBLIC_IP = "93.184.216.34"


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment: in-memory store, no background loop."""
    return Settings(
        _env_file=None,
        database_url="memory://",
        enrichment_enabled=False,
        scheduler_secret="test-secret",
        youtube_api_key="yt-test-key",
        github_token="",
    )


@pytest.fixture
def client(settings: Settings):
    """TestClient with the lifespan running (store, registries, scheduler wired)."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def public_dns():
    """Make every hostname resolve to a public address."""
    with patch(
        "brain_enricher.fetch.ssrf.resolve_host",
        new=AsyncMock(return_value=[PUBLIC_IP]),
    ) as mock_resolve:
        yield mock_resolve


@pytest.fixture
def fetcher(public_dns) -> SafeFetcher:
    """SafeFetcher over a real httpx client; pair with respx to mock the network."""
    return SafeFetcher(timeout=5.0)


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
