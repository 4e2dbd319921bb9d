"""Graph definitions for Neuro Scholar.

This module provides:
- Progress events and event sinks
- Routing functions for the research graph

The graph factory lives in ``neuro_scholar.graphs.research_workflow``.
"""

from neuro_scholar.graphs.streaming import (
    ResearchEvent,
    EventSink,
    CallbackEventSink,
    QueueEventSink,
    CollectingEventSink,
    NullEventSink,
    TERMINAL_EVENTS,
    safe_emit,
    format_for_sse,
)
from neuro_scholar.graphs.routers import (
    route_after_planner,
    route_after_section,
    route_after_synthesis,
)

__all__ = [
    "ResearchEvent",
    "EventSink",
    "CallbackEventSink",
    "QueueEventSink",
    "CollectingEventSink",
    "NullEventSink",
    "TERMINAL_EVENTS",
    "safe_emit",
    "format_for_sse",
    "route_after_planner",
    "route_after_section",
    "route_after_synthesis",
]
