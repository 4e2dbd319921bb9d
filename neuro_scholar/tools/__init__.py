"""Literature search tools."""

from neuro_scholar.tools.academic_search import (
    AcademicSearchGateway,
    PubMedSearcher,
    build_tiered_queries,
    merge_search_results,
    parse_efetch_abstracts,
    parse_esummary,
    parse_web_results,
    split_keywords,
)
from neuro_scholar.tools.http import request_with_retry
from neuro_scholar.tools.web_search import TavilyWebSearch

__all__ = [
    "AcademicSearchGateway",
    "PubMedSearcher",
    "TavilyWebSearch",
    "build_tiered_queries",
    "merge_search_results",
    "parse_efetch_abstracts",
    "parse_esummary",
    "parse_web_results",
    "request_with_retry",
    "split_keywords",
]
