"""Tests for the error handling module.

This module tests:
- Custom exception hierarchy
- RetryPolicy configuration
- Error handlers
"""

import logging

import httpx
import pytest

from neuro_scholar.errors import (
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
    RetryPolicy,
    create_search_retry_policy,
    create_error_response,
    error_message,
    handle_api_error,
    log_error_with_context,
)


def _status_error(status: int, headers: dict | None = None) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.org")
    response = httpx.Response(status, headers=headers, request=request, text="body")
    return httpx.HTTPStatusError("error", request=request, response=response)


# =============================================================================
# Exception Tests
# =============================================================================


class TestExceptionHierarchy:
    """Tests for the exception classes."""
    
    def test_base_error(self):
        error = NeuroScholarError("Test error", details={"key": "value"})
        assert str(error) == "Test error"
        assert error.recoverable is True
        assert error.to_dict() == {
            "type": "NeuroScholarError",
            "message": "Test error",
            "details": {"key": "value"},
            "recoverable": True,
        }
    
    def test_planning_error_is_fatal(self):
        error = PlanningError(response_excerpt="x" * 500)
        assert isinstance(error, NodeExecutionError)
        assert error.message == "Failed to create research plan"
        assert error.recoverable is False
        assert error.node == "planner"
        assert len(error.details["response_excerpt"]) == 200
    
    def test_synthesis_error_node(self):
        assert SynthesisError("x", section="Background").node == "section_researcher"
        assert SynthesisError("x").node == "report_synthesizer"
    
    def test_cancelled_error(self):
        error = ResearchCancelledError(session_id="s1")
        assert error.message == "Research cancelled by user"
        assert error.details == {"session_id": "s1"}
    
    def test_session_state_error(self):
        error = SessionStateError("busy", session_id="s1")
        assert error.session_id == "s1"
        assert error.recoverable is False
    
    def test_workflow_error_details(self):
        error = WorkflowError("missing", node="planner", state_key="plan")
        assert error.details == {"node": "planner", "state_key": "plan"}
    
    def test_rate_limit_error(self):
        error = RateLimitError("slow down", service="pubmed", retry_after=2.5)
        assert isinstance(error, APIError)
        assert error.status_code == 429
        assert error.details["retry_after"] == 2.5
    
    def test_data_validation_error_truncates_value(self):
        error = DataValidationError("bad", field="query", value="q" * 300)
        assert len(error.details["value"]) == 100
    
    def test_literature_search_error(self):
        error = LiteratureSearchError("down", query="q", source="pubmed")
        assert isinstance(error, SearchError)
        assert error.details["papers_found"] == 0
        assert error.source == "pubmed"
    
    def test_citation_processing_error(self):
        assert CitationProcessingError("x", doi="10.1/a").details == {"doi": "10.1/a"}


# =============================================================================
# Retry Policy Tests
# =============================================================================


class TestRetryPolicy:
    """Tests for RetryPolicy."""
    
    def test_exponential_delay_capped(self):
        policy = RetryPolicy(initial_interval=1.0, backoff_factor=2.0, max_interval=5.0, jitter=False)
        assert [policy.get_delay(a) for a in range(4)] == [1.0, 2.0, 4.0, 5.0]
    
    def test_jitter_bounds(self):
        policy = RetryPolicy(initial_interval=1.0, jitter=True)
        assert 1.0 <= policy.get_delay(0) <= 1.5
    
    def test_retry_after_header_overrides_backoff(self):
        policy = RetryPolicy(initial_interval=1.0, max_interval=10.0, jitter=True)
        assert policy.get_delay(0, _status_error(429, {"retry-after": "3"})) == 3.0
        assert policy.get_delay(0, _status_error(429, {"retry-after": "120"})) == 10.0

    def test_rate_limit_error_retry_after(self):
        policy = RetryPolicy(jitter=False)
        error = RateLimitError("slow down", service="semantic_scholar", retry_after=2.5)
        assert policy.get_delay(3, error) == 2.5
        assert policy.get_delay(1, _status_error(429, {"retry-after": "soon"})) == 2.0

    def test_max_attempts(self):
        policy = RetryPolicy(max_attempts=2)
        assert policy.should_attempt_retry(ValueError(), 0) is True
        assert policy.should_attempt_retry(ValueError(), 1) is False


class TestSearchRetryPolicy:
    """Tests for the search retry policy."""
    
    def test_retries_rate_limits(self):
        policy = create_search_retry_policy()
        assert policy.should_attempt_retry(_status_error(429), 0)
        assert policy.should_attempt_retry(RateLimitError("x", service="pubmed"), 0)
    
    def test_retries_transport_errors(self):
        policy = create_search_retry_policy()
        assert policy.should_attempt_retry(httpx.ConnectError("refused"), 0)
    
    def test_does_not_retry_other_statuses(self):
        policy = create_search_retry_policy()
        assert not policy.should_attempt_retry(_status_error(500), 0)
        assert not policy.should_attempt_retry(_status_error(404), 0)
    
    def test_does_not_retry_literature_errors(self):
        policy = create_search_retry_policy()
        assert not policy.should_attempt_retry(LiteratureSearchError("x"), 0)


# =============================================================================
# Handler Tests
# =============================================================================


class TestHandlers:
    """Tests for error handlers."""
    
    def test_error_response_for_domain_error(self):
        response = create_error_response(PlanningError(), node="planner")
        assert response["error_type"] == "PlanningError"
        assert response["message"] == "Failed to create research plan"
        assert response["recoverable"] is False
        assert response["node"] == "planner"
        assert "traceback" not in response
        assert "timestamp" in response
    
    def test_error_response_for_generic_error(self):
        response = create_error_response(ValueError("boom"))
        assert response["error_type"] == "ValueError"
        assert response["message"] == "boom"
        assert response["recoverable"] is True
    
    def test_error_message(self):
        assert error_message(PlanningError()) == "Failed to create research plan"
        assert error_message(ValueError("boom")) == "boom"
        assert error_message(ValueError()) == "ValueError"
    
    def test_log_error_with_context(self, caplog):
        with caplog.at_level(logging.WARNING, logger="neuro_scholar.errors.handlers"):
            log_error_with_context(
                SearchError("down", source="pubmed"),
                node="academic_search",
                context={"query": "q"},
                level=logging.WARNING,
            )
        message = caplog.records[-1].getMessage()
        assert "SearchError: down" in message
        assert "Node: academic_search" in message
        assert "Context: {'query': 'q'}" in message
    
    def test_handle_429_with_retry_after(self):
        error = handle_api_error(_status_error(429, {"retry-after": "3"}), "pubmed")
        assert isinstance(error, RateLimitError)
        assert error.retry_after == 3.0
    
    def test_handle_http_status(self):
        error = handle_api_error(_status_error(503), "pubmed")
        assert type(error) is APIError
        assert error.status_code == 503
        assert error.details["response_body"] == "body"
    
    def test_handle_request_error(self):
        error = handle_api_error(httpx.ConnectError("refused"), "anthropic")
        assert error.message == "Connection to anthropic failed: ConnectError"
    
    def test_handle_sdk_error_with_status(self):
        class ProviderError(Exception):
            status_code = 429
        
        error = handle_api_error(ProviderError("busy"), "anthropic")
        assert isinstance(error, RateLimitError)
    
    def test_api_error_passthrough(self):
        original = APIError("x", service="s")
        assert handle_api_error(original, "other") is original
