"""Secondary bibliographic metadata lookup via Semantic Scholar.

Used only to enrich the references section when citation validation is
enabled in settings. It never decides whether a citation is allowed;
that is the job of the retrieved-source allow-list.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import httpx

from neuro_scholar.citations.doi import normalize_doi, to_doi_url
from neuro_scholar.config import settings
from neuro_scholar.errors.policies import create_search_retry_policy
from neuro_scholar.state.models import BibliographicInfo
from neuro_scholar.tools.http import request_with_retry

logger = logging.getLogger(__name__)

SEMANTIC_SCHOLAR_PAPER_API = "https://api.semanticscholar.org/graph/v1/paper"
METADATA_FIELDS = "title,authors,year,venue,externalIds"
BATCH_SIZE = 5
BATCH_DELAY = 0.1  # seconds between batches


class SemanticScholarClient:
    """Looks up DOIs on Semantic Scholar, caching results per process."""
    
    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = settings.semantic_scholar_api_key if api_key is None else api_key
        self.timeout = timeout or settings.http_timeout
        self._client = client
        self._cache: dict[str, BibliographicInfo] = {}
        # At most one retry per DOI, the lookup is best-effort.
        self._policy = create_search_retry_policy(max_attempts=2)
    
    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers
    
    @staticmethod
    def _parse(doi: str, data: dict[str, Any]) -> BibliographicInfo:
        authors = [
            a.get("name", "") for a in data.get("authors") or [] if a.get("name")
        ]
        return BibliographicInfo(
            doi=doi,
            title=data.get("title") or "",
            authors=authors,
            year=int(data.get("year") or 0),
            journal=data.get("venue") or "",
            url=to_doi_url(doi),
            is_valid=True,
        )
    
    async def fetch_bibliographic_info(self, doi: str) -> BibliographicInfo | None:
        """Fetch metadata for one DOI.
        
        Returns:
            BibliographicInfo, or None if the DOI is unknown or the
            request failed.
        """
        doi = normalize_doi(doi)
        if doi in self._cache:
            return self._cache[doi]
        
        url = f"{SEMANTIC_SCHOLAR_PAPER_API}/DOI:{quote(doi, safe='/')}"
        params = {"fields": METADATA_FIELDS}
        try:
            if self._client is not None:
                response = await request_with_retry(
                    self._client, url, params, self._headers(), self._policy
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await request_with_retry(
                        client, url, params, self._headers(), self._policy
                    )
            info = self._parse(doi, response.json())
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.info(f"CITATIONS: DOI not found in Semantic Scholar: {doi}")
            else:
                logger.warning(
                    f"CITATIONS: Semantic Scholar error {e.response.status_code} for {doi}"
                )
            return None
        except (httpx.RequestError, ValueError) as e:
            logger.warning(f"CITATIONS: metadata lookup failed for {doi}: {e}")
            return None
        
        self._cache[doi] = info
        return info
    
    async def validate_dois(
        self,
        dois: list[str],
        batch_size: int = BATCH_SIZE,
    ) -> dict[str, BibliographicInfo]:
        """Look up many DOIs in small concurrent batches.
        
        Args:
            dois: DOIs to look up
            batch_size: Concurrent lookups per batch
            
        Returns:
            Mapping of normalized DOI to metadata, for DOIs that resolved.
        """
        unique = list(dict.fromkeys(normalize_doi(d) for d in dois if d))
        results: dict[str, BibliographicInfo] = {}
        for start in range(0, len(unique), batch_size):
            batch = unique[start:start + batch_size]
            infos = await asyncio.gather(
                *(self.fetch_bibliographic_info(doi) for doi in batch)
            )
            for doi, info in zip(batch, infos):
                if info is not None:
                    results[doi] = info
            if start + batch_size < len(unique):
                await asyncio.sleep(BATCH_DELAY)
        logger.info(f"CITATIONS: resolved metadata for {len(results)}/{len(unique)} DOIs")
        return results
