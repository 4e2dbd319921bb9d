"""Error handling for Neuro Scholar.

This module provides:
- Custom exception types for pipeline errors
- RetryPolicy configuration for HTTP search backends
- Handlers for logging and event-safe error payloads
"""

from neuro_scholar.errors.exceptions import (
    NeuroScholarError,
    WorkflowError,
    NodeExecutionError,
    PlanningError,
    SynthesisError,
    ResearchCancelledError,
    SessionStateError,
    APIError,
    RateLimitError,
    DataValidationError,
    SearchError,
    LiteratureSearchError,
    CitationProcessingError,
)
from neuro_scholar.errors.policies import (
    RetryPolicy,
    create_search_retry_policy,
    SEARCH_RETRY_POLICY,
)
from neuro_scholar.errors.handlers import (
    create_error_response,
    error_message,
    handle_api_error,
    log_error_with_context,
)

__all__ = [
    # Exceptions
    "NeuroScholarError",
    "WorkflowError",
    "NodeExecutionError",
    "PlanningError",
    "SynthesisError",
    "ResearchCancelledError",
    "SessionStateError",
    "APIError",
    "RateLimitError",
    "DataValidationError",
    "SearchError",
    "LiteratureSearchError",
    "CitationProcessingError",
    # Policies
    "RetryPolicy",
    "create_search_retry_policy",
    "SEARCH_RETRY_POLICY",
    # Handlers
    "create_error_response",
    "error_message",
    "handle_api_error",
    "log_error_with_context",
]
