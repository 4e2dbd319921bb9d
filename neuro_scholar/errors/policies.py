"""Retry policies for the bibliographic HTTP backends.

Only PubMed and Semantic Scholar requests retry. Language-model calls are
awaited once; a failure there is handled by the node that made the call.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Type

import httpx

from neuro_scholar.errors.exceptions import (
    RateLimitError,
    LiteratureSearchError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# RetryPolicy
# =============================================================================


@dataclass
class RetryPolicy:
    """When and how long to wait before repeating a failed request.

    Attributes:
        max_attempts: Total attempts, the first request included
        initial_interval: Delay after the first failure, in seconds
        backoff_factor: Growth of the delay per further failure
        max_interval: Upper bound for any single delay, in seconds
        jitter: Stretch each delay by a random 0-50%
        retry_on: Exception types retried when ``should_retry`` is unset
        should_retry: Predicate ``(error, attempt)`` overriding ``retry_on``
    """

    max_attempts: int = 3
    initial_interval: float = 1.0
    backoff_factor: float = 2.0
    max_interval: float = 60.0
    jitter: bool = True
    retry_on: tuple[Type[Exception], ...] = field(
        default_factory=lambda: (Exception,)
    )
    should_retry: Callable[[Exception, int], bool] | None = None

    def get_delay(self, attempt: int, error: Exception | None = None) -> float:
        """Seconds to wait before attempt ``attempt + 1``.

        A server-provided ``Retry-After`` (from a 429 response or a
        ``RateLimitError``) replaces the computed backoff, still capped by
        ``max_interval``.
        """
        retry_after = _retry_after(error)
        if retry_after is not None:
            return min(retry_after, self.max_interval)

        delay = min(self.initial_interval * self.backoff_factor ** attempt, self.max_interval)
        if self.jitter:
            delay *= 1 + random.random() * 0.5
        return delay

    def should_attempt_retry(self, error: Exception, attempt: int) -> bool:
        """Whether ``error`` on the 0-indexed ``attempt`` warrants another try."""
        if attempt >= self.max_attempts - 1:
            return False
        if self.should_retry is not None:
            return self.should_retry(error, attempt)
        return isinstance(error, self.retry_on)


def _retry_after(error: Exception | None) -> float | None:
    if isinstance(error, RateLimitError):
        return error.retry_after
    if isinstance(error, httpx.HTTPStatusError) and error.response.status_code == 429:
        value = error.response.headers.get("retry-after")
        try:
            return max(float(value), 0.0) if value else None
        except ValueError:
            return None
    return None


# =============================================================================
# Search Backends
# =============================================================================


def create_search_retry_policy(
    max_attempts: int = 4,
    initial_interval: float = 1.0,
) -> RetryPolicy:
    """Policy for PubMed E-utilities and Semantic Scholar.

    Rate limits (HTTP 429) and transport failures are retried. Any other
    HTTP status goes straight back to the caller, since a 4xx or 5xx from
    these APIs does not clear up within a few seconds.

    Args:
        max_attempts: Total attempts per request
        initial_interval: First backoff delay in seconds

    Returns:
        Configured RetryPolicy
    """
    return RetryPolicy(
        max_attempts=max_attempts,
        initial_interval=initial_interval,
        backoff_factor=2.0,
        max_interval=30.0,
        jitter=False,
        retry_on=(
            RateLimitError,
            httpx.TransportError,
        ),
        should_retry=_is_transient_search_error,
    )


def _is_transient_search_error(error: Exception, attempt: int) -> bool:
    if isinstance(error, LiteratureSearchError):
        return False
    if isinstance(error, RateLimitError):
        logger.info(f"SEARCH: rate limited, retrying (attempt {attempt + 2})")
        return True
    if isinstance(error, httpx.HTTPStatusError):
        if error.response.status_code == 429:
            logger.info(f"SEARCH: HTTP 429 from {error.request.url.host}, retrying (attempt {attempt + 2})")
            return True
        return False
    if isinstance(error, (httpx.TransportError, TimeoutError, ConnectionError)):
        logger.info(f"SEARCH: {error.__class__.__name__}, retrying (attempt {attempt + 2})")
        return True
    return False


SEARCH_RETRY_POLICY = create_search_retry_policy()
"""Default retry policy for PubMed and Semantic Scholar requests."""
