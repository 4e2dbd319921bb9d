"""Progress events for the research pipeline.

The orchestrator pushes tagged events to a sink injected at construction.
Sinks decide how events reach the UI: a callback, an asyncio queue that
a web handler drains, or nowhere at all.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Callable, Protocol

from neuro_scholar.state.enums import EventType

logger = logging.getLogger(__name__)


# =============================================================================
# Types
# =============================================================================


@dataclass
class ResearchEvent:
    """A progress event.
    
    Attributes:
        event_type: Event tag
        message: Human-readable text (status, paused, cancelled, error)
        data: Structured payload
    """
    event_type: EventType
    message: str | None = None
    data: dict[str, Any] | None = None
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.
        
        Keys that carry no value are omitted.
        """
        payload: dict[str, Any] = {"event_type": self.event_type.value}
        if self.message is not None:
            payload["message"] = self.message
        if self.data is not None:
            payload["data"] = self.data
        return payload
    
    @property
    def is_terminal(self) -> bool:
        return self.event_type in TERMINAL_EVENTS


# Events after which a run emits nothing further.
TERMINAL_EVENTS = frozenset({EventType.COMPLETED, EventType.CANCELLED, EventType.ERROR})


class EventSink(Protocol):
    """Receives progress events."""
    
    def emit(self, event: ResearchEvent) -> None: ...


# =============================================================================
# Sinks
# =============================================================================


class CallbackEventSink:
    """Forwards each event's dict form to a callback."""
    
    def __init__(self, callback: Callable[[dict[str, Any]], None]):
        self.callback = callback
    
    def emit(self, event: ResearchEvent) -> None:
        self.callback(event.to_dict())


class QueueEventSink:
    """Buffers events on an asyncio queue for an async consumer.
    
    Example:
        ```python
        sink = QueueEventSink()
        orchestrator = ResearchOrchestrator(..., sink=sink)
        await orchestrator.start(chat_id, query)
        async for event in sink.stream():
            await websocket.send_json(event.to_dict())
        ```
    """
    
    def __init__(self, maxsize: int = 0):
        self.queue: asyncio.Queue[ResearchEvent] = asyncio.Queue(maxsize=maxsize)
    
    def emit(self, event: ResearchEvent) -> None:
        self.queue.put_nowait(event)
    
    async def stream(self) -> AsyncGenerator[ResearchEvent, None]:
        """Yield events until a terminal event has been yielded."""
        while True:
            event = await self.queue.get()
            yield event
            if event.is_terminal:
                return


class CollectingEventSink:
    """Keeps every event in a list."""
    
    def __init__(self):
        self.events: list[ResearchEvent] = []
    
    def emit(self, event: ResearchEvent) -> None:
        self.events.append(event)
    
    def of_type(self, event_type: EventType) -> list[ResearchEvent]:
        return [e for e in self.events if e.event_type == event_type]


class NullEventSink:
    """Discards events."""
    
    def emit(self, event: ResearchEvent) -> None:
        pass


def safe_emit(sink: EventSink, event: ResearchEvent) -> None:
    """Deliver ``event``. Sink failures are logged and never propagate."""
    try:
        sink.emit(event)
    except Exception as e:
        logger.warning(f"EVENTS: sink failed on {event.event_type.value}: {e}")


# =============================================================================
# Transport Formatting
# =============================================================================


def format_for_sse(event: ResearchEvent) -> str:
    """
    Format a ResearchEvent for Server-Sent Events.
    
    Args:
        event: ResearchEvent to format
        
    Returns:
        SSE-formatted string
    """
    data = json.dumps(event.to_dict(), ensure_ascii=False)
    return f"event: {event.event_type.value}\ndata: {data}\n\n"
