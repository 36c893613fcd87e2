"""Shared pytest configuration and fixtures for the test suite.

This module centralizes:
- Path setup (so ``cybergraph`` and ``scripts`` import without installation)
- Pytest markers for test categorization (unit, integration, property)
- Fake collaborators (query service, mutator) and a wired controller
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest


# ==============================================================================
# Path Setup
# ==============================================================================

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cybergraph.config import GraphSettings  # noqa: E402
from cybergraph.controller import FollowGraphController  # noqa: E402
from cybergraph.models import Network  # noqa: E402
from tests.helpers.fake_services import FakeQueryService, RecordingMutator, USER  # noqa: E402


# ==============================================================================
# Pytest Configuration
# ==============================================================================

def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "unit: Fast tests with no I/O (fake collaborators)",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests spanning several components or the HTTP transport",
    )
    config.addinivalue_line(
        "markers",
        "property: Hypothesis property-based tests over generated inputs",
    )


# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture
def settings():
    """Small pages so pagination is exercised with a handful of identities."""
    return GraphSettings(
        endpoint="https://indexer.test/graphql",
        namespace="CyberConnect",
        network=Network.ETH,
        page_size=2,
        timeout_seconds=5.0,
    )


@pytest.fixture
def fake_query():
    return FakeQueryService()


@pytest.fixture
def mutator():
    return RecordingMutator()


@pytest.fixture
def controller(fake_query, mutator, settings):
    """Controller wired to fakes; the wallet is not connected yet.

    Example:
        def test_something(controller, fake_query):
            fake_query.set_view(USER, make_view(...))
            asyncio.run(controller.connect_wallet(USER))
    """
    return FollowGraphController(fake_query, mutator, settings=settings)


@pytest.fixture
def user_address():
    return USER
