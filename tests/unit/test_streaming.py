"""Unit tests for progress events and sinks."""

import json

import pytest

from neuro_scholar.graphs import (
    CallbackEventSink,
    CollectingEventSink,
    QueueEventSink,
    ResearchEvent,
    format_for_sse,
    safe_emit,
)
from neuro_scholar.state.enums import EventType


class TestResearchEvent:
    """Tests for ResearchEvent."""
    
    def test_to_dict_omits_empty_keys(self):
        assert ResearchEvent(EventType.STATUS, message="Working").to_dict() == {
            "event_type": "status",
            "message": "Working",
        }
        assert ResearchEvent(EventType.RESEARCH_STARTED, data={"section_index": 0}).to_dict() == {
            "event_type": "research_started",
            "data": {"section_index": 0},
        }
    
    @pytest.mark.parametrize("event_type, terminal", [
        (EventType.COMPLETED, True),
        (EventType.CANCELLED, True),
        (EventType.ERROR, True),
        (EventType.PAUSED, False),
        (EventType.REPORT_CHUNK, False),
    ])
    def test_is_terminal(self, event_type, terminal):
        assert ResearchEvent(event_type).is_terminal is terminal
    
    def test_format_for_sse(self):
        event = ResearchEvent(EventType.REPORT_CHUNK, data={"chunk": "요약", "final": True})
        formatted = format_for_sse(event)
        
        header, data_line, *_ = formatted.split("\n")
        assert header == "event: report_chunk"
        assert json.loads(data_line.removeprefix("data: ")) == event.to_dict()
        assert formatted.endswith("\n\n")
        assert "요약" in formatted


class TestSinks:
    """Tests for the event sinks."""
    
    def test_callback_sink_receives_dict(self):
        received = []
        sink = CallbackEventSink(received.append)
        sink.emit(ResearchEvent(EventType.PAUSED, message="Research paused"))
        assert received == [{"event_type": "paused", "message": "Research paused"}]
    
    def test_collecting_sink_filters(self):
        sink = CollectingEventSink()
        sink.emit(ResearchEvent(EventType.STATUS, message="a"))
        sink.emit(ResearchEvent(EventType.SOURCE_FOUND, data={"doi": "10.1/a"}))
        assert [e.data for e in sink.of_type(EventType.SOURCE_FOUND)] == [{"doi": "10.1/a"}]
    
    @pytest.mark.asyncio
    async def test_queue_sink_stream_stops_after_terminal(self):
        sink = QueueEventSink()
        sink.emit(ResearchEvent(EventType.STATUS, message="a"))
        sink.emit(ResearchEvent(EventType.COMPLETED, data={"report_preview": "r"}))
        sink.emit(ResearchEvent(EventType.STATUS, message="late"))
        
        events = [event async for event in sink.stream()]
        
        assert [e.event_type for e in events] == [EventType.STATUS, EventType.COMPLETED]
    
    def test_safe_emit_swallows_sink_failure(self, caplog):
        def broken(_payload):
            raise RuntimeError("socket closed")
        
        safe_emit(CallbackEventSink(broken), ResearchEvent(EventType.STATUS, message="x"))
        
        assert "socket closed" in caplog.text
