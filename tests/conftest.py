"""Shared test fixtures and configuration for the life grid test suite.

This module provides reusable fixtures for common test scenarios including:
- Logger mocking
- API and grid configuration objects
- Profiles and annotation stores
- A recording save callback for the debounce scheduler
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from unittest.mock import Mock

import pytest
from lifegrid.editor.annotations import Annotation, AnnotationStore
from lifegrid.editor.client import ProfileData
from lifegrid.editor.config import ApiConfig, GridConfig

# ============================================================================
# Pytest Configuration
# ============================================================================


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio backend for async tests."""
    return "asyncio"


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing.

    Returns a Mock with spec=logging.Logger to ensure only valid
    logger methods can be called.
    """
    return Mock(spec=logging.Logger)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def api_config():
    """API configuration pointing at a local test server."""
    return ApiConfig(
        base_url="http://lifegrid.test",
        session_id="session-abc",
        verify_ssl=True,
        timeout=5.0,
    )


@pytest.fixture
def grid_config():
    """Standard 80 year grid with a very short debounce window."""
    return GridConfig(expected_life_years=80, save_debounce_seconds=0.02)


# ============================================================================
# Profile / Store Fixtures
# ============================================================================


@pytest.fixture
def profile():
    """Profile born in March 1990 with two annotated months."""
    return ProfileData(
        username="alice",
        date_of_birth=date(1990, 3, 15),
        cell_data={
            "0-18": Annotation(color="#3B82F6", label="College"),
            "1-18": Annotation(color="#3B82F6", label="College"),
        },
    )


@pytest.fixture
def store():
    return AnnotationStore()


# ============================================================================
# Persistence Fixtures
# ============================================================================


class RecordingSaver:
    """Save callback that records payloads and can be told to fail or block."""

    def __init__(self) -> None:
        self.calls: list[dict[str, dict[str, str]]] = []
        self.result = True
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, payload: dict[str, dict[str, str]]) -> bool:
        self.calls.append(payload)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.error is not None:
                raise self.error
            return self.result
        finally:
            self.in_flight -= 1


@pytest.fixture
def saver():
    return RecordingSaver()
