"""Fixtures for integration tests.

Provides an orchestrator wired to the scripted backends in ``fakes``,
so full research runs execute without network access.
"""

import pytest

from neuro_scholar.graphs.streaming import CollectingEventSink
from neuro_scholar.research.orchestrator import ResearchOrchestrator

from .fakes import ScriptedGateway, ScriptedSearch


# =============================================================================
# Orchestrator Fixtures
# =============================================================================


@pytest.fixture
def gateway():
    """Scripted gateway with a two-section plan."""
    return ScriptedGateway()


@pytest.fixture
def search(source_factory):
    """Search returning two sources for every query."""
    return ScriptedSearch(default=[
        source_factory("10.1000/alpha", title="Alpha study", authors=["Ann Smith"], year=2020),
        source_factory("10.1000/beta", title="Beta study", authors=["Bo Jones", "Cy Lee"], year=2022),
    ])


@pytest.fixture
def sink():
    """Event sink that records everything."""
    return CollectingEventSink()


@pytest.fixture
def make_orchestrator(gateway, search, memory_store, sink, fast_settings):
    """Factory for orchestrators wired to the scripted backends."""

    def _make(**overrides) -> ResearchOrchestrator:
        kwargs = {
            "gateway": gateway,
            "search": search,
            "store": memory_store,
            "sink": sink,
            "settings": fast_settings,
        }
        kwargs.update(overrides)
        return ResearchOrchestrator(**kwargs)

    return _make


@pytest.fixture
def orchestrator(make_orchestrator):
    """Orchestrator with the default scripted backends."""
    return make_orchestrator()
