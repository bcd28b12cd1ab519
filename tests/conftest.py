"""Pytest configuration and fixtures."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from fintrack.core.config import Settings, get_settings
from fintrack.main import create_app

if TYPE_CHECKING:
    from collections.abc import Generator

    from fastapi import FastAPI


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with AI extraction disabled."""
    return Settings(
        gemini_api_key="",
        offline_fallback_enabled=True,
        debug=True,
    )


@pytest.fixture
def fixed_now() -> datetime:
    """A fixed 'current time' for date fallback assertions."""
    return datetime(2025, 6, 1, 9, 30, tzinfo=UTC)


@pytest.fixture
def mock_gemini_service() -> MagicMock:
    """Create a mock Gemini service."""
    service = MagicMock()
    service.extract_transactions = AsyncMock()
    return service


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    """Create test FastAPI app."""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    return app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Create test client."""
    with TestClient(app) as test_client:
        yield test_client
