"""Shared pytest fixtures for all tests."""

import pytest
from datetime import datetime
from unittest.mock import patch

from snowfall.orchestrator import DisplayOrchestrator
from snowfall.page import Page, Viewport
from snowfall.preferences import OriginStorage
from snowfall.throttle import VirtualClock
from snowfall.worker import MockWorkerPort

WINTER_DAY = datetime(2025, 12, 25, 18, 30)
SUMMER_DAY = datetime(2025, 7, 1, 9, 0)


@pytest.fixture
def clock():
    """Manually advanced clock for throttle tests."""
    return VirtualClock()


@pytest.fixture
def worker_port():
    """Worker port that records every message."""
    return MockWorkerPort()


@pytest.fixture
def origin():
    """In-memory origin storage shared by all tabs of a test."""
    return OriginStorage()


@pytest.fixture
def make_page():
    """Factory for fresh pages."""
    def _make(title: str = "Blog", width: int = 1024, height: int = 768) -> Page:
        return Page(title, Viewport(width, height))
    return _make


@pytest.fixture
def make_orchestrator(origin, clock, make_page):
    """
    Factory for initialized orchestrators, one per simulated tab.

    Each call opens a new tab on the shared origin storage and gets its own
    page and worker port.
    """
    def _make(now: datetime = WINTER_DAY, port: MockWorkerPort = None, page: Page = None,
              initialize: bool = True) -> DisplayOrchestrator:
        orchestrator = DisplayOrchestrator(
            page or make_page(),
            port or MockWorkerPort(),
            origin.open_tab(),
            clock,
            now=lambda: now,
            throttle_ms=33,
        )
        if initialize:
            orchestrator.initialize()
        return orchestrator
    return _make


@pytest.fixture
def disable_mqtt():
    """Disable MQTT for tests that don't need it."""
    with patch('snowfall.main.MQTT_ENABLED', False):
        yield
