"""Shared fixtures."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from webprint.app import build_app
from webprint.config import Settings, init_settings, reset_settings

from .fakes import FakeEngine


@pytest.fixture
def settings() -> Generator[Settings, None, None]:
    """Settings with short budgets so timeout paths finish quickly."""
    reset_settings()
    test_settings = Settings(
        cors_origins=["http://localhost:3000", "https://app.example.com"],
        max_html_bytes=1024,
        max_pdf_bytes=10_000,
        max_body_bytes=8192,
        readiness_timeout_ms=300,
        readiness_poll_interval_ms=10,
        settle_delay_ms=0,
        hydration_delay_ms=0,
        pdf_timeout_ms=2000,
        max_concurrent_renders=2,
    )
    init_settings(test_settings)
    yield test_settings
    reset_settings()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def client(settings: Settings, engine: FakeEngine) -> Generator[TestClient, None, None]:
    """Test client backed by the fake engine."""
    app = build_app(settings, engine=engine)
    with TestClient(app) as test_client:
        yield test_client
