"""Dependencies shared by the graph nodes of one research run."""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from langchain_core.runnables import RunnableConfig

from neuro_scholar.config import Settings, settings as default_settings
from neuro_scholar.errors.exceptions import WorkflowError
from neuro_scholar.graphs.streaming import EventSink, ResearchEvent, safe_emit
from neuro_scholar.memory.session_store import SessionStore
from neuro_scholar.research.control import RunControl
from neuro_scholar.state.enums import EventType, ReportLanguage, SessionStatus
from neuro_scholar.state.models import AcademicSource, ChatMessage, ChatResponse, ResearchSession

logger = logging.getLogger(__name__)

RUNTIME_KEY = "runtime"


class ChatGateway(Protocol):
    async def chat(self, model: str | None, messages: list[ChatMessage]) -> ChatResponse: ...


class SearchGateway(Protocol):
    async def search(self, query: str) -> list[AcademicSource]: ...


class MetadataLookup(Protocol):
    async def validate_dois(self, dois: list[str]) -> dict[str, Any]: ...


@dataclass
class ResearchRuntime:
    """Everything a node needs besides the graph state.
    
    Passed to the compiled graph through
    ``config["configurable"]["runtime"]`` so that nodes stay plain
    functions of ``(state, config)``.
    """
    
    gateway: ChatGateway
    search: SearchGateway
    store: SessionStore
    sink: EventSink
    control: RunControl
    session: ResearchSession
    model: str
    language: ReportLanguage = ReportLanguage.EN
    settings: Settings = field(default_factory=lambda: default_settings)
    metadata_lookup: MetadataLookup | None = None
    
    def emit(
        self,
        event_type: EventType,
        message: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        safe_emit(self.sink, ResearchEvent(event_type, message=message, data=data))
    
    def status(self, message: str) -> None:
        self.emit(EventType.STATUS, message=message)
    
    def persist(self, **fields: Any) -> None:
        """Write session fields to the store."""
        self.store.update_session(self.session.id, **fields)
    
    def set_status(self, status: SessionStatus) -> None:
        self.session.set_status(status)
        self.persist(status=status)
    
    async def chat(self, messages: list[ChatMessage]) -> ChatResponse:
        return await self.gateway.chat(self.model, messages)
    
    def as_config(self) -> RunnableConfig:
        return {
            "configurable": {RUNTIME_KEY: self, "thread_id": self.session.id},
            "recursion_limit": self.settings.recursion_limit,
        }


def get_runtime(config: RunnableConfig | None) -> ResearchRuntime:
    """Fetch the runtime a node was invoked with.
    
    Raises:
        WorkflowError: The graph was invoked without a runtime.
    """
    runtime = ((config or {}).get("configurable") or {}).get(RUNTIME_KEY)
    if not isinstance(runtime, ResearchRuntime):
        raise WorkflowError(
            "Research graph invoked without a runtime in config['configurable']",
            state_key=RUNTIME_KEY,
            recoverable=False,
        )
    return runtime
