"""Custom exception types for Neuro Scholar.

This module defines a hierarchy of exceptions for categorizing errors
throughout the research pipeline, so that each phase can decide whether
a failure is fatal to the session or degrades locally.
"""

from typing import Any


class NeuroScholarError(Exception):
    """Base exception for all Neuro Scholar errors.
    
    Attributes:
        message: Human-readable error description
        details: Additional error context
        recoverable: Whether the pipeline can recover from this error
    """
    
    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        super().__init__(message)
    
    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Workflow-Level Errors
# =============================================================================


class WorkflowError(NeuroScholarError):
    """Error at the pipeline orchestration level.
    
    Raised when graph state is missing something a node depends on.
    """
    
    def __init__(
        self,
        message: str,
        node: str | None = None,
        state_key: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        details = details or {}
        if node:
            details["node"] = node
        if state_key:
            details["state_key"] = state_key
        super().__init__(message, details, recoverable)
        self.node = node
        self.state_key = state_key


class NodeExecutionError(NeuroScholarError):
    """Error during node execution."""
    
    def __init__(
        self,
        message: str,
        node: str,
        phase: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        details = details or {}
        details["node"] = node
        if phase:
            details["phase"] = phase
        super().__init__(message, details, recoverable)
        self.node = node
        self.phase = phase


class PlanningError(NodeExecutionError):
    """The research plan could not be produced or parsed.
    
    Always fatal: the session aborts rather than guessing a plan.
    """
    
    def __init__(
        self,
        message: str = "Failed to create research plan",
        response_excerpt: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if response_excerpt:
            details["response_excerpt"] = response_excerpt[:200]
        super().__init__(
            message,
            node="planner",
            phase="planning",
            details=details,
            recoverable=False,
        )


class SynthesisError(NodeExecutionError):
    """A section or summary synthesis call failed."""
    
    def __init__(
        self,
        message: str,
        section: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if section:
            details["section"] = section
        super().__init__(
            message,
            node="section_researcher" if section else "report_synthesizer",
            phase="synthesis",
            details=details,
            recoverable=False,
        )
        self.section = section


# =============================================================================
# Session Control Errors
# =============================================================================


class ResearchCancelledError(NeuroScholarError):
    """The user cancelled the run.
    
    Raised at cooperative checkpoints. This is not a failure and is
    reported as a cancellation, never as an error event.
    """
    
    def __init__(self, message: str = "Research cancelled by user", session_id: str | None = None):
        details = {"session_id": session_id} if session_id else {}
        super().__init__(message, details, recoverable=False)
        self.session_id = session_id


class SessionStateError(NeuroScholarError):
    """A session lifecycle precondition was violated.
    
    For example starting a run while another one is still active, or
    moving a session backwards through its status lifecycle.
    """
    
    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if session_id:
            details["session_id"] = session_id
        super().__init__(message, details, recoverable=False)
        self.session_id = session_id


# =============================================================================
# API-Related Errors
# =============================================================================


class APIError(NeuroScholarError):
    """Error from external API calls."""
    
    def __init__(
        self,
        message: str,
        service: str,
        status_code: int | None = None,
        response_body: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        details = details or {}
        details["service"] = service
        if status_code:
            details["status_code"] = status_code
        if response_body:
            details["response_body"] = response_body[:500]  # Truncate
        super().__init__(message, details, recoverable)
        self.service = service
        self.status_code = status_code


class RateLimitError(APIError):
    """Rate limit exceeded on an external API.
    
    Attributes:
        retry_after: Seconds to wait before retrying (if provided)
    """
    
    def __init__(
        self,
        message: str,
        service: str,
        retry_after: float | None = None,
        status_code: int = 429,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if retry_after:
            details["retry_after"] = retry_after
        super().__init__(
            message,
            service=service,
            status_code=status_code,
            details=details,
            recoverable=True,
        )
        self.retry_after = retry_after


# =============================================================================
# Domain-Specific Errors
# =============================================================================


class DataValidationError(NeuroScholarError):
    """Error validating caller input or intermediate data."""
    
    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]  # Truncate
        if constraint:
            details["constraint"] = constraint
        super().__init__(message, details, recoverable)
        self.field = field
        self.constraint = constraint


class SearchError(NeuroScholarError):
    """Error during search operations.
    
    Base class for literature and web search errors.
    """
    
    def __init__(
        self,
        message: str,
        query: str | None = None,
        source: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        details = details or {}
        if query:
            details["query"] = query[:200]  # Truncate
        if source:
            details["source"] = source
        super().__init__(message, details, recoverable)
        self.query = query
        self.source = source


class LiteratureSearchError(SearchError):
    """Error from a bibliographic backend such as PubMed."""
    
    def __init__(
        self,
        message: str,
        query: str | None = None,
        source: str = "unknown",
        papers_found: int = 0,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        details = details or {}
        details["papers_found"] = papers_found
        super().__init__(message, query, source, details, recoverable)
        self.papers_found = papers_found


class CitationProcessingError(NeuroScholarError):
    """Error while rewriting citations or building the reference list."""
    
    def __init__(
        self,
        message: str,
        doi: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if doi:
            details["doi"] = doi
        super().__init__(message, details, recoverable=True)
        self.doi = doi
