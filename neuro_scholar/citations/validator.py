"""Allow-list rewriting of DOI citations in generated text.

Generated prose may cite any DOI it likes; only DOIs that belong to a
source retrieved during the session survive. Verified citations become
author-year links to doi.org, everything else is deleted.
"""

import logging
import re

from neuro_scholar.citations.doi import doi_key, normalize_doi
from neuro_scholar.citations.formatter import format_inline_citation_link
from neuro_scholar.citations.patterns import (
    CITATION_FORMS,
    CITATION_GRAMMAR,
    CitationForm,
    compile_citation_grammar,
    match_form,
)
from neuro_scholar.state.models import (
    AcademicSource,
    CitationProcessingResult,
    ReferenceFallbackInfo,
)

logger = logging.getLogger(__name__)

FallbackMap = dict[str, ReferenceFallbackInfo]


def build_fallback_map(sources: list[AcademicSource]) -> FallbackMap:
    """Project retrieved sources into the DOI allow-list.
    
    Keys are normalized DOIs. The first source seen for a DOI wins.
    """
    fallback: FallbackMap = {}
    seen: set[str] = set()
    for source in sources:
        doi = normalize_doi(source.doi)
        if not doi or doi.lower() in seen:
            continue
        seen.add(doi.lower())
        fallback[doi] = ReferenceFallbackInfo.from_source(source)
    return fallback


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def filter_and_format_citations_with_source_dois(
    text: str,
    fallback_by_doi: FallbackMap,
    forms: tuple[CitationForm, ...] = CITATION_FORMS,
) -> CitationProcessingResult:
    """Rewrite or remove every inline DOI citation in ``text``.
    
    Args:
        text: Report text containing citation markers
        fallback_by_doi: Allow-list keyed by normalized DOI
        forms: Recognized citation forms, in priority order
        
    Returns:
        CitationProcessingResult with the rewritten text, the DOIs that
        were kept (``cited_dois``) and the DOIs that were dropped
        (``removed_dois``), each deduplicated in first-seen order.
    """
    grammar = CITATION_GRAMMAR if forms is CITATION_FORMS else compile_citation_grammar(forms)
    # DOIs are case-insensitive, the map keeps the source's own spelling.
    by_key = {doi_key(doi): (doi, info) for doi, info in fallback_by_doi.items()}
    cited: list[str] = []
    removed: list[str] = []
    
    def replace(match: re.Match[str]) -> str:
        form, raw_doi = match_form(match, forms)
        doi = normalize_doi(raw_doi)
        entry = by_key.get(doi.lower())
        if entry is None:
            removed.append(doi)
            return ""
        canonical, info = entry
        cited.append(canonical)
        return format_inline_citation_link(canonical, info, parenthesized=form.parenthesized)
    
    processed = grammar.sub(replace, text or "")
    result = CitationProcessingResult(
        processed_content=processed,
        cited_dois=_dedupe(cited),
        removed_dois=_dedupe(removed),
    )
    if result.removed_dois:
        logger.info(
            f"CITATIONS: removed {len(result.removed_dois)} unverified DOI(s): "
            f"{', '.join(result.removed_dois)}"
        )
    return result
