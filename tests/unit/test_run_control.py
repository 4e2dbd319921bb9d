"""Unit tests for cooperative run control and session ownership."""

import asyncio

import pytest

from neuro_scholar.errors import ResearchCancelledError, SessionStateError
from neuro_scholar.research import RunControl, SessionManager
from neuro_scholar.state.models import ResearchSession


class TestRunControl:
    """Tests for RunControl.checkpoint."""
    
    @pytest.mark.asyncio
    async def test_checkpoint_passes_when_idle(self):
        control = RunControl("s1", poll_interval=0.01)
        await control.checkpoint()
    
    @pytest.mark.asyncio
    async def test_checkpoint_raises_when_cancelled(self):
        control = RunControl("s1", poll_interval=0.01)
        control.cancel()
        with pytest.raises(ResearchCancelledError) as exc_info:
            await control.checkpoint()
        assert exc_info.value.session_id == "s1"
    
    @pytest.mark.asyncio
    async def test_checkpoint_waits_while_paused(self):
        control = RunControl("s1", poll_interval=0.01)
        control.pause()
        
        waiter = asyncio.create_task(control.checkpoint())
        await asyncio.sleep(0.05)
        assert not waiter.done()
        
        control.resume()
        await asyncio.wait_for(waiter, timeout=1.0)
        assert control.paused is False
    
    @pytest.mark.asyncio
    async def test_cancel_during_pause_raises(self):
        """Cancellation wins over resuming once observed in the wait loop."""
        control = RunControl("s1", poll_interval=0.01)
        control.pause()
        
        waiter = asyncio.create_task(control.checkpoint())
        await asyncio.sleep(0.03)
        control.cancel()
        
        with pytest.raises(ResearchCancelledError):
            await asyncio.wait_for(waiter, timeout=1.0)
        assert control.paused is True


class TestSessionManager:
    """Tests for SessionManager."""
    
    def test_begin_and_end(self):
        manager = SessionManager()
        session = ResearchSession(chat_id="c", query="q")
        control = RunControl(session.id)
        
        manager.begin(session, control)
        
        assert manager.active_session is session
        assert manager.is_active(session.id)
        assert manager.control_for(session.id) is control
        assert manager.control_for("other") is None
        
        manager.end(session.id)
        assert manager.active_session is None
        assert manager.control_for(session.id) is None
    
    def test_second_begin_rejected(self):
        manager = SessionManager()
        first = ResearchSession(chat_id="c", query="q")
        manager.begin(first, RunControl(first.id))
        
        second = ResearchSession(chat_id="c", query="q2")
        with pytest.raises(SessionStateError) as exc_info:
            manager.begin(second, RunControl(second.id))
        assert exc_info.value.session_id == first.id
    
    def test_end_for_other_session_is_ignored(self):
        manager = SessionManager()
        session = ResearchSession(chat_id="c", query="q")
        manager.begin(session, RunControl(session.id))
        
        manager.end("someone-else")
        
        assert manager.active_session is session
    
    def test_sequential_sessions(self):
        manager = SessionManager()
        for query in ("one", "two"):
            session = ResearchSession(chat_id="c", query=query)
            manager.begin(session, RunControl(session.id))
            manager.end()
        assert manager.active_session is None
