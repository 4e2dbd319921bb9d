"""Test configuration and shared fixtures."""

import pytest

from neuro_scholar.config import Settings
from neuro_scholar.memory import InMemorySessionStore
from neuro_scholar.state.enums import SourceProvenance
from neuro_scholar.state.models import AcademicSource


# Configure pytest-asyncio
pytest_plugins = ['pytest_asyncio']


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio as the async backend."""
    return "asyncio"


def make_source(
    doi: str,
    title: str = "A study",
    authors: list[str] | None = None,
    year: int = 2021,
    journal: str = "Journal of Tests",
    provenance: SourceProvenance = SourceProvenance.PUBMED,
) -> AcademicSource:
    """Build an AcademicSource with sensible defaults."""
    return AcademicSource(
        title=title,
        authors=["Jane Smith"] if authors is None else authors,
        journal=journal,
        year=year,
        doi=doi,
        provenance=provenance,
    )


@pytest.fixture
def source_factory():
    """Factory fixture for AcademicSource records."""
    return make_source


@pytest.fixture
def memory_store():
    """Fresh in-memory session store."""
    return InMemorySessionStore()


@pytest.fixture
def fast_settings():
    """Settings with a short pause poll interval and validation off."""
    return Settings(
        anthropic_api_key="test-key",
        tavily_api_key="",
        enable_citation_validation=False,
        pause_poll_interval=0.01,
    )
