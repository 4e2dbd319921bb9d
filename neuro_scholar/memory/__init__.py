"""Persistence for research sessions and conversations."""

from neuro_scholar.memory.session_store import (
    InMemorySessionStore,
    SessionStore,
    SqliteSessionStore,
    get_session_store,
)

__all__ = [
    "InMemorySessionStore",
    "SessionStore",
    "SqliteSessionStore",
    "get_session_store",
]
