"""Error handlers for logging and event-safe error payloads."""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any

import httpx

from neuro_scholar.errors.exceptions import (
    NeuroScholarError,
    APIError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Error Response Creation
# =============================================================================


def create_error_response(
    error: Exception,
    node: str | None = None,
    include_traceback: bool = False,
) -> dict[str, Any]:
    """Create a standardized error response dictionary.
    
    The default form carries no traceback so it can be pushed to the UI
    as-is.
    
    Args:
        error: The exception that occurred
        node: Node where the error occurred
        include_traceback: Whether to include full traceback
        
    Returns:
        Standardized error response dictionary
    """
    if isinstance(error, NeuroScholarError):
        response = {
            "error_type": error.__class__.__name__,
            "message": error.message,
            "details": error.details,
            "recoverable": error.recoverable,
        }
    else:
        response = {
            "error_type": error.__class__.__name__,
            "message": str(error),
            "details": {},
            "recoverable": True,
        }
    
    if node:
        response["node"] = node
    
    response["timestamp"] = datetime.now(timezone.utc).isoformat()
    
    if include_traceback:
        response["traceback"] = traceback.format_exc()
    
    return response


def error_message(error: BaseException) -> str:
    """Human-readable message for an exception, never empty."""
    if isinstance(error, NeuroScholarError):
        return error.message
    return str(error) or error.__class__.__name__


# =============================================================================
# Error Logging
# =============================================================================


def log_error_with_context(
    error: Exception,
    node: str | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with full context.
    
    Args:
        error: The exception that occurred
        node: Node where the error occurred
        context: Additional context to log
        level: Logging level (default: ERROR)
    """
    parts = [f"Error: {error.__class__.__name__}: {error}"]
    
    if node:
        parts.append(f"Node: {node}")
    
    if isinstance(error, NeuroScholarError):
        if error.details:
            parts.append(f"Details: {error.details}")
        parts.append(f"Recoverable: {error.recoverable}")
    
    if context:
        parts.append(f"Context: {context}")
    
    logger.log(level, " | ".join(parts))
    
    # Log traceback at debug level
    logger.debug(f"Traceback:\n{traceback.format_exc()}")


# =============================================================================
# API Error Mapping
# =============================================================================


def handle_api_error(error: Exception, service: str) -> APIError:
    """Map a transport-level exception into the APIError hierarchy.
    
    Args:
        error: The exception raised by httpx or a provider SDK
        service: Name of the API service
        
    Returns:
        An APIError (or RateLimitError) describing the failure
    """
    if isinstance(error, APIError):
        return error
    
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 429:
            retry_after = error.response.headers.get("retry-after")
            try:
                retry_seconds = float(retry_after) if retry_after else None
            except ValueError:
                retry_seconds = None
            return RateLimitError(
                f"{service} rate limit reached",
                service=service,
                retry_after=retry_seconds,
            )
        return APIError(
            f"{service} returned HTTP {status}",
            service=service,
            status_code=status,
            response_body=error.response.text,
        )
    
    if isinstance(error, httpx.RequestError):
        return APIError(
            f"Connection to {service} failed: {error.__class__.__name__}",
            service=service,
        )
    
    status_code = getattr(error, "status_code", None)
    if status_code == 429:
        return RateLimitError(f"{service} rate limit reached", service=service)
    return APIError(
        f"{service} error: {str(error)[:200]}",
        service=service,
        status_code=status_code if isinstance(status_code, int) else None,
    )
