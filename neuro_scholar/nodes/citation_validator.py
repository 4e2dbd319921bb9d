"""CITATION_VALIDATOR node: DOI allow-list rewrite and references section."""

import logging
from typing import Any

from langchain_core.runnables import RunnableConfig

from neuro_scholar.citations.reference_list import generate_references_section
from neuro_scholar.citations.validator import (
    FallbackMap,
    build_fallback_map,
    filter_and_format_citations_with_source_dois,
)
from neuro_scholar.errors.exceptions import CitationProcessingError
from neuro_scholar.errors.handlers import log_error_with_context
from neuro_scholar.nodes.prompts import status_message
from neuro_scholar.research.runtime import ResearchRuntime, get_runtime
from neuro_scholar.state.enums import EventType, ResearchPhase
from neuro_scholar.state.models import CitationProcessingResult
from neuro_scholar.state.schema import ResearchState

logger = logging.getLogger(__name__)


async def _validated_metadata(runtime: ResearchRuntime, dois: list[str]) -> dict[str, Any]:
    if not runtime.settings.enable_citation_validation or runtime.metadata_lookup is None:
        return {}
    if not dois:
        return {}
    try:
        return await runtime.metadata_lookup.validate_dois(dois)
    except Exception as e:
        raise CitationProcessingError(f"Metadata lookup failed: {e}") from e


async def process_citations(
    runtime: ResearchRuntime,
    report: str,
    fallback: FallbackMap,
) -> tuple[CitationProcessingResult, str]:
    """Rewrite citations and render references, enriched when enabled."""
    result = filter_and_format_citations_with_source_dois(report, fallback)
    validated = await _validated_metadata(runtime, result.cited_dois)
    references = generate_references_section(
        result.cited_dois, validated, fallback, runtime.language
    )
    return result, references


def process_citations_degraded(
    runtime: ResearchRuntime,
    report: str,
    fallback: FallbackMap,
) -> tuple[CitationProcessingResult, str]:
    """Allow-list rewrite with references built from source records only."""
    result = filter_and_format_citations_with_source_dois(report, fallback)
    references = generate_references_section(result.cited_dois, {}, fallback, runtime.language)
    return result, references


async def citation_validator_node(state: ResearchState, config: RunnableConfig) -> dict[str, Any]:
    """
    CITATION_VALIDATOR node.
    
    Rewrites every inline DOI citation in the assembled report against
    the sources retrieved during the run. DOIs outside that set are
    removed. If the enriched pass fails, the report is processed again
    without external metadata.
    
    Args:
        state: Current research state.
        config: Runnable config carrying the run's runtime.
        
    Returns:
        State updates with the final report and citation result.
    """
    runtime = get_runtime(config)
    runtime.status(status_message("validating", runtime.language))
    
    report = state.get("report_content", "")
    sources = list(runtime.session.sources)
    fallback = build_fallback_map(sources)
    
    try:
        result, references = await process_citations(runtime, report, fallback)
    except Exception as e:
        log_error_with_context(
            e, node="citation_validator", context={"sources": len(sources)}, level=logging.WARNING
        )
        result, references = process_citations_degraded(runtime, report, fallback)
    
    final_report = result.processed_content + references
    logger.info(
        f"CITATIONS: kept {len(result.cited_dois)} DOI(s), removed {len(result.removed_dois)}"
    )
    
    # The replace carries the references too; no chunk may follow it.
    runtime.emit(EventType.REPORT_REPLACE, data={"content": final_report})

    runtime.session.sources = sources
    runtime.session.report_content = final_report
    
    return {
        "report_content": final_report,
        "citation_result": result,
        "phase": ResearchPhase.DONE,
    }
