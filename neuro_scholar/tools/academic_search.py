"""Academic literature search for research sections.

Searches PubMed first, broadening a comma-separated keyword query in
fixed tiers until a tier returns results, and tops up from a general web
search when PubMed returns too little. Only DOI-bearing records survive,
deduplicated by normalized DOI.

Supported backends:
- PubMed E-utilities: esearch, esummary and efetch (abstracts)
- Web search (Tavily): DOIs pattern-matched from result URLs and snippets
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, Protocol

import httpx

from neuro_scholar.citations.doi import DOI_REGEX, normalize_doi, to_doi_url
from neuro_scholar.config import settings
from neuro_scholar.errors.exceptions import LiteratureSearchError
from neuro_scholar.errors.handlers import log_error_with_context
from neuro_scholar.errors.policies import RetryPolicy, SEARCH_RETRY_POLICY
from neuro_scholar.state.enums import SourceProvenance
from neuro_scholar.state.models import AcademicSource
from neuro_scholar.tools.http import request_with_retry
from neuro_scholar.tools.web_search import TavilyWebSearch

logger = logging.getLogger(__name__)


# =============================================================================
# Query Construction
# =============================================================================


def split_keywords(query: str) -> list[str]:
    """Split a comma-separated keyword string into terms.
    
    A query without at least two non-empty terms is kept whole as a
    single atomic term.
    """
    terms = [t.strip() for t in (query or "").split(",") if t.strip()]
    if len(terms) <= 1:
        whole = (query or "").strip()
        return [whole] if whole else []
    return terms


def build_tiered_queries(keywords: list[str]) -> list[str]:
    """Build progressively broader boolean queries.
    
    Tier 1 ANDs every term. Tier 2 (three or more terms only) requires
    the first term AND any of the rest. Tier 3 ORs every term.
    
    Example:
        >>> build_tiered_queries(["a", "b", "c"])
        ['(a) AND (b) AND (c)', '(a) AND ((b) OR (c))', '(a) OR (b) OR (c)']
    """
    if not keywords:
        return []
    if len(keywords) == 1:
        return [keywords[0]]
    
    quoted = [f"({k})" for k in keywords]
    queries = [" AND ".join(quoted)]
    if len(keywords) > 2:
        queries.append(f"{quoted[0]} AND ({' OR '.join(quoted[1:])})")
    queries.append(" OR ".join(quoted))
    return queries


# =============================================================================
# PubMed
# =============================================================================

PUBMED_SEARCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esearch.fcgi"
PUBMED_SUMMARY_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esummary.fcgi"
PUBMED_FETCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/efetch.fcgi"

_YEAR = re.compile(r"\d{4}")


def parse_esummary(pmids: list[str], data: dict[str, Any]) -> list[tuple[str, AcademicSource]]:
    """Turn an esummary JSON payload into (pmid, source) pairs.
    
    Records without a ``doi`` article id are skipped. Order follows
    ``pmids`` (esearch relevance order).
    """
    result = data.get("result") or {}
    parsed = []
    for pmid in pmids:
        article = result.get(pmid)
        if not article or article.get("error"):
            continue
        
        doi = ""
        for article_id in article.get("articleids") or []:
            if article_id.get("idtype") == "doi":
                doi = normalize_doi(article_id.get("value", ""))
                break
        if not doi:
            continue
        
        pub_date = article.get("pubdate") or article.get("sortpubdate") or ""
        year_match = _YEAR.search(pub_date)
        parsed.append((
            pmid,
            AcademicSource(
                title=article.get("title", "") or "",
                authors=[a.get("name", "") for a in article.get("authors") or [] if a.get("name")],
                journal=article.get("fulljournalname") or article.get("source") or "",
                year=int(year_match.group(0)) if year_match else 0,
                doi=doi,
                url=to_doi_url(doi),
                provenance=SourceProvenance.PUBMED,
            ),
        ))
    return parsed


def parse_efetch_abstracts(xml_text: str, max_chars: int | None = None) -> dict[str, str]:
    """Extract abstracts keyed by PMID from an efetch XML payload.
    
    Structured abstracts keep their section labels ("Methods: ...").
    """
    abstracts: dict[str, str] = {}
    root = ET.fromstring(xml_text)
    for article in root.findall(".//PubmedArticle"):
        pmid = (article.findtext(".//MedlineCitation/PMID") or "").strip()
        if not pmid:
            continue
        parts = []
        for node in article.findall(".//Abstract/AbstractText"):
            text = "".join(node.itertext()).strip()
            if not text:
                continue
            label = node.get("Label")
            parts.append(f"{label}: {text}" if label else text)
        if parts:
            abstract = " ".join(parts)
            abstracts[pmid] = abstract[:max_chars] if max_chars else abstract
    return abstracts


class PubMedSearcher:
    """PubMed E-utilities client with tiered query broadening."""
    
    name = SourceProvenance.PUBMED.value
    
    def __init__(
        self,
        api_key: str | None = None,
        max_results: int | None = None,
        timeout: float | None = None,
        abstract_max_chars: int | None = None,
        retry_policy: RetryPolicy = SEARCH_RETRY_POLICY,
    ):
        self.api_key = settings.ncbi_api_key if api_key is None else api_key
        self.max_results = max_results or settings.max_search_results
        self.timeout = timeout or settings.http_timeout
        self.abstract_max_chars = abstract_max_chars or settings.abstract_max_chars
        self.retry_policy = retry_policy
    
    def _params(self, **params: Any) -> dict[str, Any]:
        params["db"] = "pubmed"
        if self.api_key:
            params["api_key"] = self.api_key
        return params
    
    async def _get(self, client: httpx.AsyncClient, url: str, params: dict[str, Any], term: str) -> httpx.Response:
        try:
            return await request_with_retry(client, url, params, policy=self.retry_policy)
        except httpx.HTTPStatusError as e:
            raise LiteratureSearchError(
                f"PubMed request failed: HTTP {e.response.status_code}",
                query=term,
                source=self.name,
            ) from e
    
    async def search(self, query: str) -> list[AcademicSource]:
        """Search PubMed, stopping at the first tier that returns results.
        
        Args:
            query: Comma-separated keywords or free text
            
        Returns:
            DOI-bearing sources in relevance order.
            
        Raises:
            LiteratureSearchError: PubMed answered with a non-2xx status.
            httpx.RequestError: Transport failure after retries.
        """
        tiers = build_tiered_queries(split_keywords(query))
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for term in tiers:
                logger.debug(f"SEARCH: PubMed trying query: {term}")
                results = await self._execute(client, term)
                if results:
                    logger.info(f"SEARCH: PubMed got {len(results)} results with query: {term}")
                    return results
        return []
    
    async def _execute(self, client: httpx.AsyncClient, term: str) -> list[AcademicSource]:
        search_response = await self._get(
            client,
            PUBMED_SEARCH_URL,
            self._params(term=term, retmax=self.max_results, retmode="json", sort="relevance"),
            term,
        )
        pmids = (search_response.json().get("esearchresult") or {}).get("idlist") or []
        if not pmids:
            return []
        
        summary_response = await self._get(
            client,
            PUBMED_SUMMARY_URL,
            self._params(id=",".join(pmids), retmode="json"),
            term,
        )
        parsed = parse_esummary(pmids, summary_response.json())
        if not parsed:
            return []
        
        abstracts = await self._fetch_abstracts(client, [pmid for pmid, _ in parsed])
        for pmid, source in parsed:
            source.abstract = abstracts.get(pmid, "")
        return [source for _, source in parsed]
    
    async def _fetch_abstracts(self, client: httpx.AsyncClient, pmids: list[str]) -> dict[str, str]:
        """Best-effort abstract lookup. Failures leave abstracts empty."""
        try:
            response = await request_with_retry(
                client,
                PUBMED_FETCH_URL,
                self._params(id=",".join(pmids), retmode="xml", rettype="abstract"),
                policy=self.retry_policy,
            )
            return parse_efetch_abstracts(response.text, self.abstract_max_chars)
        except (httpx.HTTPError, ET.ParseError) as e:
            logger.warning(f"SEARCH: failed to fetch PubMed abstracts: {e}")
            return {}


# =============================================================================
# Web Search (secondary)
# =============================================================================

SECONDARY_QUERY_SUFFIX = "academic research paper"

_SNIPPET_YEAR = re.compile(r"\b(?:19|20)\d{2}\b")
_SCHOLAR_TITLE_SUFFIX = re.compile(r"\s*-\s*Google Scholar.*$")


def parse_web_results(items: list[dict[str, str]]) -> list[AcademicSource]:
    """Keep web results whose URL or snippet carries a DOI."""
    sources = []
    for item in items:
        url = item.get("url", "")
        snippet = item.get("snippet", "")
        match = DOI_REGEX.search(f"{url} {snippet}")
        doi = normalize_doi(match.group(0)) if match else ""
        if not doi:
            continue
        year_match = _SNIPPET_YEAR.search(snippet)
        sources.append(AcademicSource(
            title=_SCHOLAR_TITLE_SUFFIX.sub("", item.get("title", "")),
            authors=[],
            journal="",
            year=int(year_match.group(0)) if year_match else 0,
            doi=doi,
            abstract=snippet,
            url=to_doi_url(doi),
            provenance=SourceProvenance.SCHOLAR,
        ))
    return sources


class WebSearchBackend(Protocol):
    """Anything that can run a general web search."""
    
    @property
    def available(self) -> bool: ...
    
    async def search(self, query: str) -> list[dict[str, str]]: ...


class LiteratureBackend(Protocol):
    """A primary bibliographic backend."""
    
    async def search(self, query: str) -> list[AcademicSource]: ...


# =============================================================================
# Gateway
# =============================================================================


def merge_search_results(
    *result_lists: list[AcademicSource],
    max_results: int,
) -> list[AcademicSource]:
    """Merge backend results: DOI-bearing only, first DOI wins, capped."""
    merged: list[AcademicSource] = []
    seen: set[str] = set()
    for results in result_lists:
        for source in results:
            key = source.identity_key
            if not key or key in seen:
                continue
            seen.add(key)
            merged.append(source)
    return merged[:max_results]


class AcademicSearchGateway:
    """Searches all literature backends for one keyword query.
    
    A failing backend contributes no results; it never aborts the search.
    """
    
    def __init__(
        self,
        primary: LiteratureBackend | None = None,
        secondary: WebSearchBackend | None = None,
        max_results: int | None = None,
        min_primary_results: int | None = None,
    ):
        self.primary = primary if primary is not None else PubMedSearcher()
        self.secondary = secondary if secondary is not None else TavilyWebSearch()
        self.max_results = max_results or settings.max_search_results
        self.min_primary_results = (
            settings.min_primary_results if min_primary_results is None else min_primary_results
        )
    
    async def search(self, query: str) -> list[AcademicSource]:
        """
        Search for DOI-bearing academic sources.
        
        Args:
            query: Comma-separated keywords (most important first)
            
        Returns:
            Sources in backend order (primary first), deduplicated by
            normalized DOI, at most ``max_results``.
        """
        primary_results: list[AcademicSource] = []
        try:
            primary_results = await self.primary.search(query)
            logger.info(f"SEARCH: PubMed returned {len(primary_results)} results")
        except Exception as e:
            log_error_with_context(
                e, node="academic_search", context={"backend": "pubmed", "query": query[:200]},
                level=logging.WARNING,
            )
        
        secondary_results: list[AcademicSource] = []
        if len(primary_results) < self.min_primary_results and self.secondary.available:
            secondary_query = f"{query} {SECONDARY_QUERY_SUFFIX}"
            try:
                items = await self.secondary.search(secondary_query)
                secondary_results = parse_web_results(items)
                logger.info(f"SEARCH: web search returned {len(secondary_results)} DOI-bearing results")
            except Exception as e:
                log_error_with_context(
                    e, node="academic_search", context={"backend": "web", "query": secondary_query[:200]},
                    level=logging.WARNING,
                )
        
        merged = merge_search_results(
            primary_results, secondary_results, max_results=self.max_results
        )
        logger.info(f"SEARCH: {len(merged)} unique DOI-bearing sources for: {query[:80]}")
        return merged
