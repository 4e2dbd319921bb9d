"""Research orchestrator: starts runs and relays pause, resume and cancel.

The orchestrator owns no pipeline logic itself. It creates the session,
builds the per-run ``ResearchRuntime`` and drives the compiled research
graph as a background task, translating the outcome into a terminal
session status and event.
"""

import asyncio
import logging

from neuro_scholar.config import Settings, settings as default_settings
from neuro_scholar.errors.exceptions import DataValidationError, ResearchCancelledError
from neuro_scholar.errors.handlers import create_error_response, error_message, log_error_with_context
from neuro_scholar.graphs.research_workflow import create_research_workflow
from neuro_scholar.graphs.streaming import EventSink, NullEventSink, ResearchEvent, safe_emit
from neuro_scholar.memory.session_store import SessionStore
from neuro_scholar.nodes.prompts import (
    CANCELLED_MESSAGE,
    PAUSED_MESSAGE,
    QUERY_UPDATED_MESSAGE,
    RESUMED_MESSAGE,
)
from neuro_scholar.research.control import RunControl
from neuro_scholar.research.runtime import (
    ChatGateway,
    MetadataLookup,
    ResearchRuntime,
    SearchGateway,
)
from neuro_scholar.research.session_manager import SessionManager
from neuro_scholar.state.enums import EventType, MessageRole, ReportLanguage, SessionStatus
from neuro_scholar.state.models import ResearchSession, SessionRecord
from neuro_scholar.state.schema import create_initial_state

logger = logging.getLogger(__name__)


class ResearchOrchestrator:
    """
    Entry point for research runs.
    
    One orchestrator runs at most one session at a time. Progress is
    reported through the injected event sink and every status change is
    written to the session store.
    
    Example:
        orchestrator = ResearchOrchestrator(gateway, search, store, sink)
        session_id = await orchestrator.start(chat_id, "microglia in AD")
        await orchestrator.wait_for_completion()
    """
    
    def __init__(
        self,
        gateway: ChatGateway,
        search: SearchGateway,
        store: SessionStore,
        sink: EventSink | None = None,
        settings: Settings | None = None,
        session_manager: SessionManager | None = None,
        metadata_lookup: MetadataLookup | None = None,
        recover_sessions: bool = False,
    ):
        self.gateway = gateway
        self.search = search
        self.store = store
        self.sink = sink or NullEventSink()
        self.settings = settings or default_settings
        self.sessions = session_manager or SessionManager()
        self.metadata_lookup = metadata_lookup
        self.workflow = create_research_workflow()
        self._last_task: asyncio.Task | None = None
        # Event-safe description of the most recent failed run.
        self.last_error: dict | None = None
        
        if recover_sessions:
            recovered = self.store.recover_interrupted_sessions()
            if recovered:
                logger.warning(f"ORCHESTRATOR: marked {len(recovered)} interrupted session(s) as cancelled")
    
    def _emit(self, event_type: EventType, message: str | None = None, data: dict | None = None) -> None:
        safe_emit(self.sink, ResearchEvent(event_type, message=message, data=data))
    
    # =========================================================================
    # Run lifecycle
    # =========================================================================
    
    async def start(
        self,
        chat_id: str,
        query: str,
        model: str | None = None,
        language: ReportLanguage | str = ReportLanguage.EN,
    ) -> str:
        """
        Start a research run in the background.
        
        Args:
            chat_id: Conversation that owns the session.
            query: Research question.
            model: Model id, defaults to the configured model.
            language: Report language ("en" or "ko").
            
        Returns:
            The new session id.
            
        Raises:
            DataValidationError: The query is empty.
            SessionStateError: Another session is still active.
        """
        if not query or not query.strip():
            raise DataValidationError("Research query must not be empty", field="query", value=query)
        
        lang = ReportLanguage.coerce(language)
        session = ResearchSession(chat_id=chat_id, query=query)
        control = RunControl(session.id, poll_interval=self.settings.pause_poll_interval)
        self.sessions.begin(session, control)
        
        try:
            self.store.create_session(session)
            self.store.append_message(chat_id, MessageRole.USER, query)
            runtime = ResearchRuntime(
                gateway=self.gateway,
                search=self.search,
                store=self.store,
                sink=self.sink,
                control=control,
                session=session,
                model=model or self.settings.default_model,
                language=lang,
                settings=self.settings,
                metadata_lookup=self.metadata_lookup,
            )
            runtime.set_status(SessionStatus.RUNNING)
        except Exception:
            self.sessions.end(session.id)
            raise
        
        self.last_error = None
        task = asyncio.create_task(self._run(runtime), name=f"research-{session.id}")
        task.add_done_callback(_consume_task_exception)
        self.sessions.attach_task(task)
        self._last_task = task
        logger.info(f"ORCHESTRATOR: started session {session.id} ({lang.value}, {runtime.model})")
        return session.id
    
    async def _run(self, runtime: ResearchRuntime) -> None:
        session = runtime.session
        state = create_initial_state(session.id, session.chat_id, session.query, runtime.language.value)
        try:
            await self.workflow.ainvoke(state, runtime.as_config())
        except ResearchCancelledError:
            runtime.set_status(SessionStatus.CANCELLED)
            runtime.emit(EventType.CANCELLED, message=CANCELLED_MESSAGE)
            logger.info(f"ORCHESTRATOR: session {session.id} cancelled")
        except Exception as e:
            # Failed runs still close as completed; the error event carries the failure.
            runtime.set_status(SessionStatus.COMPLETED)
            runtime.emit(EventType.ERROR, message=error_message(e))
            self.last_error = create_error_response(e, node=getattr(e, "node", None))
            log_error_with_context(e, context={"session_id": session.id})
            raise
        finally:
            self.sessions.end(session.id)
    
    async def wait_for_completion(self) -> None:
        """Await the most recently started run, re-raising its failure."""
        if self._last_task is not None:
            await self._last_task
    
    # =========================================================================
    # Control
    # =========================================================================
    
    def pause(self, session_id: str) -> bool:
        """Pause the active run at its next checkpoint.
        
        Returns:
            True if the request applied to the active, running session.
        """
        session = self.sessions.active_session
        control = self.sessions.control_for(session_id)
        if control is None or session.status != SessionStatus.RUNNING:
            return False
        control.pause()
        session.set_status(SessionStatus.PAUSED)
        self.store.update_session(session_id, status=SessionStatus.PAUSED)
        self._emit(EventType.PAUSED, message=PAUSED_MESSAGE)
        return True
    
    def resume(self, session_id: str) -> bool:
        """Resume a paused run."""
        session = self.sessions.active_session
        control = self.sessions.control_for(session_id)
        if control is None or session.status != SessionStatus.PAUSED:
            return False
        control.resume()
        session.set_status(SessionStatus.RUNNING)
        self.store.update_session(session_id, status=SessionStatus.RUNNING)
        self._emit(EventType.STATUS, message=RESUMED_MESSAGE)
        return True
    
    def cancel(self, session_id: str) -> bool:
        """Signal cancellation; the run stops at its next checkpoint."""
        control = self.sessions.control_for(session_id)
        if control is None:
            return False
        control.cancel()
        return True
    
    async def update_query(self, session_id: str, new_query: str) -> bool:
        """Cancel the run and tell listeners to restart with ``new_query``.

        Only the active session can be updated; any other id is ignored
        and returns False.
        """
        if not self.cancel(session_id):
            return False
        self._emit(EventType.STATUS, message=QUERY_UPDATED_MESSAGE, data={"newQuery": new_query})
        return True
    
    # =========================================================================
    # Queries
    # =========================================================================
    
    def get_active_session(self) -> ResearchSession | None:
        return self.sessions.active_session
    
    def get_session(self, session_id: str) -> SessionRecord | None:
        return self.store.get_session(session_id)


def _consume_task_exception(task: asyncio.Task) -> None:
    # Failures are already logged and emitted by the run itself.
    if not task.cancelled():
        task.exception()


def create_orchestrator(
    sink: EventSink | None = None,
    settings: Settings | None = None,
    store: SessionStore | None = None,
) -> ResearchOrchestrator:
    """
    Wire an orchestrator with the production backends.
    
    PubMed is the primary search backend, Tavily the secondary one when a
    key is configured, Anthropic the language model and SQLite the
    session store. Interrupted sessions from a previous process are
    closed on startup.
    """
    from neuro_scholar.citations.metadata import SemanticScholarClient
    from neuro_scholar.llm.gateway import LanguageModelGateway
    from neuro_scholar.memory.session_store import get_session_store
    from neuro_scholar.tools.academic_search import AcademicSearchGateway, PubMedSearcher
    from neuro_scholar.tools.web_search import TavilyWebSearch
    
    settings = settings or default_settings
    for problem in settings.validate():
        logger.warning(f"ORCHESTRATOR: {problem}")
    
    search = AcademicSearchGateway(
        primary=PubMedSearcher(
            api_key=settings.ncbi_api_key,
            max_results=settings.max_search_results,
            timeout=settings.http_timeout,
            abstract_max_chars=settings.abstract_max_chars,
        ),
        secondary=TavilyWebSearch(api_key=settings.tavily_api_key),
        max_results=settings.max_search_results,
        min_primary_results=settings.min_primary_results,
    )
    metadata_lookup = None
    if settings.enable_citation_validation:
        metadata_lookup = SemanticScholarClient(
            api_key=settings.semantic_scholar_api_key,
            timeout=settings.http_timeout,
        )
    return ResearchOrchestrator(
        gateway=LanguageModelGateway(),
        search=search,
        store=store or get_session_store(persistent=True, db_path=settings.database_path),
        sink=sink,
        settings=settings,
        metadata_lookup=metadata_lookup,
        recover_sessions=True,
    )
