"""Pydantic models for Neuro Scholar research sessions.

These models describe the records that flow through the research
pipeline: literature sources, the research plan, the in-memory session,
and the results of citation processing.
"""

import re
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from neuro_scholar.errors.exceptions import SessionStateError
from neuro_scholar.state.enums import (
    MessageRole,
    RESERVED_SECTION_TITLES,
    SessionStatus,
    SourceProvenance,
)


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


# Leading "1.", "2)" or "IV." style numbering on a planned title.
_TITLE_NUMBERING = re.compile(r"^(?:\d+|[ivx]+)[.)]\s*")


def is_reserved_title(title: str) -> bool:
    """Whether a section title is reserved for generated content.
    
    The whole title must match a reserved name once numbering, case and
    trailing punctuation are ignored. "2. References:" is reserved,
    "Summary Statistics in GWAS" is not.
    """
    normalized = _TITLE_NUMBERING.sub("", (title or "").strip().casefold())
    normalized = normalized.rstrip(" .:;-").strip()
    return normalized in RESERVED_SECTION_TITLES


# =============================================================================
# Literature Models
# =============================================================================


class AcademicSource(BaseModel):
    """A DOI-bearing literature record returned by the search gateway."""
    
    title: str = Field(default="", description="Article title")
    authors: list[str] = Field(
        default_factory=list,
        description="Author names in the order the backend reported them",
    )
    journal: str = Field(default="", description="Journal or venue name")
    year: int = Field(default=0, ge=0, description="Publication year, 0 if unknown")
    doi: str = Field(..., min_length=1, description="Digital Object Identifier")
    abstract: str = Field(default="", description="Abstract text, may be empty")
    url: str = Field(default="", description="Resolvable doi.org URL")
    provenance: SourceProvenance = Field(default=SourceProvenance.PUBMED)
    
    @field_validator("doi")
    @classmethod
    def doi_must_normalize(cls, v: str) -> str:
        from neuro_scholar.citations.doi import normalize_doi

        normalized = normalize_doi(v)
        if not normalized:
            raise ValueError("doi must not be empty")
        return normalized
    
    @model_validator(mode="after")
    def derive_url(self) -> "AcademicSource":
        from neuro_scholar.citations.doi import to_doi_url

        if not self.url:
            self.url = to_doi_url(self.doi)
        return self
    
    @property
    def identity_key(self) -> str:
        """Key used to deduplicate sources within a session."""
        from neuro_scholar.citations.doi import normalize_doi

        return normalize_doi(self.doi).lower()
    
    def to_event_payload(self) -> dict[str, str]:
        """Projection carried by ``source_found`` events."""
        return {
            "title": self.title,
            "url": self.url,
            "doi": self.doi,
            "journal": self.journal,
        }


class ReferenceFallbackInfo(BaseModel):
    """Minimal bibliographic projection of a retrieved source."""
    
    authors: list[str] = Field(default_factory=list)
    year: int = 0
    title: str = ""
    journal: str = ""
    
    @classmethod
    def from_source(cls, source: AcademicSource) -> "ReferenceFallbackInfo":
        return cls(
            authors=list(source.authors),
            year=source.year,
            title=source.title,
            journal=source.journal,
        )


class BibliographicInfo(BaseModel):
    """Metadata returned by the secondary bibliographic lookup."""
    
    doi: str
    title: str = ""
    authors: list[str] = Field(default_factory=list)
    year: int = 0
    journal: str = ""
    url: str = ""
    is_valid: bool = True


# =============================================================================
# Plan Models
# =============================================================================


class PlanSection(BaseModel):
    """One entry of the research plan."""
    
    title: str = Field(..., min_length=1)
    description: str = ""
    
    @field_validator("title", "description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()


class ResearchPlan(BaseModel):
    """Ordered outline produced once per session."""
    
    sections: list[PlanSection] = Field(..., min_length=1)
    
    @property
    def titles(self) -> list[str]:
        return [section.title for section in self.sections]
    
    def content_sections(self) -> list[PlanSection]:
        """Sections that are not reserved for generated content."""
        return [s for s in self.sections if not is_reserved_title(s.title)]


class SectionResult(BaseModel):
    """Synthesized prose for one plan section."""
    
    title: str
    content: str = ""
    sources: list[AcademicSource] = Field(default_factory=list)


# =============================================================================
# Session Models
# =============================================================================


class ResearchSession(BaseModel):
    """In-memory state of one research run.
    
    Mutated only by the run that owns it. Pause, resume and cancel
    requests from other callers go through the run's control object
    rather than this record.
    """
    
    id: str = Field(default_factory=_new_id)
    chat_id: str
    status: SessionStatus = SessionStatus.PENDING
    query: str
    plan: ResearchPlan | None = None
    current_step: int = 0
    sources: list[AcademicSource] = Field(default_factory=list)
    report_content: str = ""
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)
    
    def set_status(self, status: SessionStatus) -> None:
        """Move to ``status``, enforcing the lifecycle rules.
        
        Raises:
            SessionStateError: If the transition is not allowed.
        """
        if status == self.status:
            return
        if not self.status.can_transition_to(status):
            raise SessionStateError(
                f"Cannot move session from {self.status.value} to {status.value}",
                session_id=self.id,
            )
        self.status = status
        self.updated_at = _utc_now()
    
    def advance_to(self, step: int) -> None:
        """Record the section being processed. Steps never go backwards."""
        if step < self.current_step:
            raise SessionStateError(
                f"current_step cannot decrease ({self.current_step} -> {step})",
                session_id=self.id,
            )
        self.current_step = step
        self.updated_at = _utc_now()
    
    def add_sources(self, sources: list[AcademicSource]) -> list[AcademicSource]:
        """Append sources not already present.
        
        Returns:
            The sources that were actually added, in order.
        """
        seen = {s.identity_key for s in self.sources}
        added = []
        for source in sources:
            if source.identity_key in seen:
                continue
            seen.add(source.identity_key)
            self.sources.append(source)
            added.append(source)
        return added


class CitationProcessingResult(BaseModel):
    """Outcome of rewriting citations against the retrieved sources."""
    
    processed_content: str
    cited_dois: list[str] = Field(default_factory=list)
    removed_dois: list[str] = Field(default_factory=list)


# =============================================================================
# Language-Model and Conversation Models
# =============================================================================


class ChatMessage(BaseModel):
    """One message sent to the language-model gateway."""
    
    role: MessageRole
    content: str


class ChatResponse(BaseModel):
    """Completed response from the language-model gateway."""
    
    content: str = ""
    thinking: str | None = None


class UploadedFile(BaseModel):
    """A document previously attached to a conversation."""
    
    id: str = Field(default_factory=_new_id)
    chat_id: str
    filename: str
    file_type: str = "md"
    content: str = ""
    created_at: datetime = Field(default_factory=_utc_now)
    
    @field_validator("file_type")
    @classmethod
    def validate_file_type(cls, v: str) -> str:
        v = v.lower().lstrip(".")
        if v not in ("pdf", "md", "qmd"):
            raise ValueError(f"Unsupported file type: {v}")
        return v


class StoredMessage(BaseModel):
    """A conversation message as persisted by the session store."""
    
    id: str = Field(default_factory=_new_id)
    chat_id: str
    role: MessageRole
    content: str
    metadata: dict[str, Any] | None = None
    created_at: datetime = Field(default_factory=_utc_now)


class SessionRecord(BaseModel):
    """Persisted view of a research session."""
    
    id: str
    chat_id: str
    status: SessionStatus
    query: str
    plan: ResearchPlan | None = None
    current_step: int = 0
    created_at: str
    updated_at: str
