"""Enums and constants for Neuro Scholar research sessions."""

from enum import Enum


class SessionStatus(str, Enum):
    """Persisted status of a research session."""
    
    PENDING = "pending"
    RUNNING = "running"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    
    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.CANCELLED, SessionStatus.COMPLETED)
    
    def can_transition_to(self, target: "SessionStatus") -> bool:
        """Whether moving from this status to ``target`` is allowed."""
        return target in _STATUS_TRANSITIONS[self]


_STATUS_TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.PENDING: frozenset({SessionStatus.RUNNING, SessionStatus.CANCELLED}),
    SessionStatus.RUNNING: frozenset(
        {SessionStatus.PAUSED, SessionStatus.COMPLETED, SessionStatus.CANCELLED}
    ),
    # An in-flight call may still fail after a pause was requested.
    SessionStatus.PAUSED: frozenset(
        {SessionStatus.RUNNING, SessionStatus.COMPLETED, SessionStatus.CANCELLED}
    ),
    SessionStatus.CANCELLED: frozenset(),
    SessionStatus.COMPLETED: frozenset(),
}


class ResearchPhase(str, Enum):
    """Position of a run inside the research pipeline."""
    
    PLANNING = "planning"
    RESEARCHING = "researching"
    SYNTHESIZING = "synthesizing"
    VALIDATING = "validating"
    DONE = "done"
    CANCELLED = "cancelled"


class ReportLanguage(str, Enum):
    """Language of prompts, headings and status messages."""
    
    EN = "en"
    KO = "ko"
    
    @classmethod
    def coerce(cls, value: "str | ReportLanguage | None") -> "ReportLanguage":
        """Map a free-form language tag onto a supported language.
        
        Unknown tags fall back to English.
        """
        if isinstance(value, cls):
            return value
        tag = (value or "").strip().lower()
        if tag.startswith("ko"):
            return cls.KO
        return cls.EN


class EventType(str, Enum):
    """Tags carried by progress events."""
    
    STATUS = "status"
    PLAN_CREATED = "plan_created"
    RESEARCH_STARTED = "research_started"
    TOOL_START = "tool_start"
    SOURCE_FOUND = "source_found"
    REPORT_CHUNK = "report_chunk"
    REPORT_REPLACE = "report_replace"
    COMPLETED = "completed"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    ERROR = "error"


class ToolName(str, Enum):
    """Tools announced through ``tool_start`` events."""
    
    KEYWORD_GENERATION = "keyword_generation"
    ACADEMIC_SEARCH = "academic_search"


class SourceProvenance(str, Enum):
    """Backend that produced a literature record."""
    
    PUBMED = "pubmed"
    SCHOLAR = "scholar"
    WEB = "web"


class MessageRole(str, Enum):
    """Roles for chat messages and stored conversation messages."""
    
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


# Section titles reserved for auto-generated report content.
RESERVED_SECTION_TITLES: tuple[str, ...] = (
    "executive summary",
    "summary",
    "references",
    "bibliography",
    "works cited",
    "요약",
    "참고문헌",
)
