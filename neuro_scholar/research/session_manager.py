"""Ownership of the single active research run."""

import asyncio
import logging

from neuro_scholar.errors.exceptions import SessionStateError
from neuro_scholar.research.control import RunControl
from neuro_scholar.state.models import ResearchSession

logger = logging.getLogger(__name__)


class SessionManager:
    """Holds at most one in-flight session with its control and task.
    
    Starting a second run while one is active is rejected rather than
    silently interleaving two pipelines.
    """
    
    def __init__(self):
        self._session: ResearchSession | None = None
        self._control: RunControl | None = None
        self._task: asyncio.Task | None = None
    
    @property
    def active_session(self) -> ResearchSession | None:
        return self._session
    
    @property
    def task(self) -> asyncio.Task | None:
        return self._task
    
    def is_active(self, session_id: str) -> bool:
        return self._session is not None and self._session.id == session_id
    
    def begin(self, session: ResearchSession, control: RunControl) -> None:
        """Claim the active slot for ``session``.
        
        Raises:
            SessionStateError: Another session is still active.
        """
        if self._session is not None:
            raise SessionStateError(
                f"Research session {self._session.id} is still active",
                session_id=self._session.id,
                details={"requested_session_id": session.id},
            )
        self._session = session
        self._control = control
        logger.debug(f"SESSIONS: session {session.id} is now active")
    
    def attach_task(self, task: asyncio.Task) -> None:
        self._task = task
    
    def control_for(self, session_id: str) -> RunControl | None:
        """The run control, only if ``session_id`` is the active session."""
        return self._control if self.is_active(session_id) else None
    
    def end(self, session_id: str | None = None) -> None:
        """Release the active slot.
        
        With ``session_id`` given, only that session is released.
        """
        if session_id is not None and not self.is_active(session_id):
            return
        if self._session is not None:
            logger.debug(f"SESSIONS: session {self._session.id} released")
        self._session = None
        self._control = None
        self._task = None
