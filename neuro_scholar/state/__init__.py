"""State definitions for Neuro Scholar research sessions."""

from neuro_scholar.state.enums import (
    EventType,
    MessageRole,
    RESERVED_SECTION_TITLES,
    ReportLanguage,
    ResearchPhase,
    SessionStatus,
    SourceProvenance,
    ToolName,
)
from neuro_scholar.state.models import (
    AcademicSource,
    BibliographicInfo,
    ChatMessage,
    ChatResponse,
    CitationProcessingResult,
    PlanSection,
    ReferenceFallbackInfo,
    ResearchPlan,
    ResearchSession,
    SectionResult,
    SessionRecord,
    StoredMessage,
    UploadedFile,
    is_reserved_title,
)
from neuro_scholar.state.schema import ResearchState, create_initial_state

__all__ = [
    # Enums
    "EventType",
    "MessageRole",
    "RESERVED_SECTION_TITLES",
    "ReportLanguage",
    "ResearchPhase",
    "SessionStatus",
    "SourceProvenance",
    "ToolName",
    # Models
    "AcademicSource",
    "BibliographicInfo",
    "ChatMessage",
    "ChatResponse",
    "CitationProcessingResult",
    "PlanSection",
    "ReferenceFallbackInfo",
    "ResearchPlan",
    "ResearchSession",
    "SectionResult",
    "SessionRecord",
    "StoredMessage",
    "UploadedFile",
    "is_reserved_title",
    # Schema
    "ResearchState",
    "create_initial_state",
]
