"""Run control, session ownership and per-run runtime.

The orchestrator is imported from ``neuro_scholar.research.orchestrator``.
"""

from neuro_scholar.research.control import RunControl
from neuro_scholar.research.session_manager import SessionManager
from neuro_scholar.research.runtime import (
    RUNTIME_KEY,
    ChatGateway,
    SearchGateway,
    MetadataLookup,
    ResearchRuntime,
    get_runtime,
)

__all__ = [
    "RunControl",
    "SessionManager",
    "RUNTIME_KEY",
    "ChatGateway",
    "SearchGateway",
    "MetadataLookup",
    "ResearchRuntime",
    "get_runtime",
]
