"""
Pytest configuration and shared fixtures for the test suite.
"""

import pytest

from tests.helpers import FakeChatClient


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def chat_client() -> FakeChatClient:
    """Create a recording fake chat client."""
    return FakeChatClient()


@pytest.fixture
def fast_scheduler() -> dict:
    """Scheduler overrides for quick, unthrottled tests."""
    return {"flush_interval": 0.01, "min_chars_delta": 1, "max_updates_per_minute": 0}
