"""Shared HTTP helper for the bibliographic backends."""

import asyncio
import logging
from typing import Any

import httpx

from neuro_scholar.errors.policies import RetryPolicy, SEARCH_RETRY_POLICY

logger = logging.getLogger(__name__)


async def request_with_retry(
    client: httpx.AsyncClient,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    policy: RetryPolicy = SEARCH_RETRY_POLICY,
) -> httpx.Response:
    """GET ``url`` with exponential backoff on rate limits and transport errors.
    
    Args:
        client: Open async client
        url: Request URL
        params: Query parameters
        headers: Extra request headers
        policy: Retry policy deciding which failures are retried
        
    Returns:
        The successful (2xx) response.
        
    Raises:
        httpx.HTTPStatusError: Non-retryable status, or retries exhausted.
        httpx.RequestError: Transport failure after retries.
    """
    attempt = 0
    while True:
        try:
            response = await client.get(url, params=params, headers=headers)
            response.raise_for_status()
            return response
        except (httpx.HTTPStatusError, httpx.TransportError) as e:
            if not policy.should_attempt_retry(e, attempt):
                raise
            delay = policy.get_delay(attempt, e)
            logger.debug(f"Retrying {url} in {delay:.1f}s after {e.__class__.__name__}")
            await asyncio.sleep(delay)
            attempt += 1
