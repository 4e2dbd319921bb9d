"""Cooperative pause and cancellation for a research run.

A run only observes these signals at its checkpoints (the top of each
section, before report synthesis, and every tick while paused). Calls
already in flight to the model or a search backend run to completion.
"""

import asyncio
import logging
import threading

from neuro_scholar.config import settings
from neuro_scholar.errors.exceptions import ResearchCancelledError

logger = logging.getLogger(__name__)


class RunControl:
    """Cancellation token plus paused flag for one run.
    
    Both flags are ``threading.Event`` objects, so pause, resume and
    cancel may be signalled from any thread.
    """
    
    def __init__(self, session_id: str | None = None, poll_interval: float | None = None):
        self.session_id = session_id
        self.poll_interval = settings.pause_poll_interval if poll_interval is None else poll_interval
        self._cancelled = threading.Event()
        self._paused = threading.Event()
    
    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()
    
    @property
    def paused(self) -> bool:
        return self._paused.is_set()
    
    def pause(self) -> None:
        self._paused.set()
    
    def resume(self) -> None:
        self._paused.clear()
    
    def cancel(self) -> None:
        self._cancelled.set()
    
    def _raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise ResearchCancelledError(session_id=self.session_id)
    
    async def checkpoint(self) -> None:
        """Yield point for pause and cancellation.
        
        Raises:
            ResearchCancelledError: If cancellation was requested before
                or during the wait.
        """
        self._raise_if_cancelled()
        if self._paused.is_set():
            logger.info(f"CONTROL: session {self.session_id} paused, waiting")
        while self._paused.is_set():
            await asyncio.sleep(self.poll_interval)
            self._raise_if_cancelled()
