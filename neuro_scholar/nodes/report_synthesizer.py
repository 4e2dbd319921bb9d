"""REPORT_SYNTHESIZER node: executive summary plus per-section assembly."""

import logging
from typing import Any

from langchain_core.runnables import RunnableConfig

from neuro_scholar.errors.exceptions import SynthesisError
from neuro_scholar.errors.handlers import error_message
from neuro_scholar.nodes.prompts import (
    NO_SOURCES_REPORTS,
    SUMMARY_HEADINGS,
    build_summary_messages,
    status_message,
)
from neuro_scholar.research.runtime import get_runtime
from neuro_scholar.state.enums import EventType, ResearchPhase
from neuro_scholar.state.models import AcademicSource, SectionResult
from neuro_scholar.state.schema import ResearchState
from neuro_scholar.style.report_cleanup import clean_section_content, filter_reserved_sections

logger = logging.getLogger(__name__)


def collect_sources(results: list[SectionResult]) -> list[AcademicSource]:
    """Union of the sources of every section, first occurrence kept."""
    seen: set[str] = set()
    sources = []
    for result in results:
        for source in result.sources:
            if source.identity_key in seen:
                continue
            seen.add(source.identity_key)
            sources.append(source)
    return sources


def format_report_section(title: str, content: str) -> str:
    return f"## {title}\n\n{content}\n\n"


async def report_synthesizer_node(state: ResearchState, config: RunnableConfig) -> dict[str, Any]:
    """
    REPORT_SYNTHESIZER node.
    
    This node:
    1. Drops sections whose titles are reserved for generated content
    2. Short-circuits to a localized placeholder when no source was found
    3. Writes the executive summary
    4. Streams the summary and each section as ``report_chunk`` events
    
    Args:
        state: Current research state.
        config: Runnable config carrying the run's runtime.
        
    Returns:
        State updates with the assembled report, or ``no_sources`` set.
    """
    runtime = get_runtime(config)
    language = runtime.language
    
    await runtime.control.checkpoint()
    runtime.status(status_message("synthesizing", language))
    
    results = state.get("section_results", [])
    sections = filter_reserved_sections(results)
    if len(sections) < len(results):
        logger.info(f"SYNTHESIS: skipped {len(results) - len(sections)} reserved section(s)")
    sources = collect_sources(results)
    
    if not sources:
        report = NO_SOURCES_REPORTS[language]
        logger.warning("SYNTHESIS: no DOI-verified sources, returning placeholder report")
        runtime.session.sources = []
        runtime.session.report_content = report
        runtime.emit(EventType.REPORT_CHUNK, data={"chunk": report, "final": True})
        return {
            "report_content": report,
            "no_sources": True,
            "phase": ResearchPhase.DONE,
        }
    
    runtime.status(status_message("summary", language))
    messages = build_summary_messages(
        state["query"],
        sections,
        sources,
        language,
        preview_chars=runtime.settings.section_preview_chars,
    )
    try:
        response = await runtime.chat(messages)
    except Exception as e:
        raise SynthesisError(f"Failed to write executive summary: {error_message(e)}") from e
    summary = f"{SUMMARY_HEADINGS[language]}\n\n{clean_section_content(response.content)}\n\n"
    runtime.emit(EventType.REPORT_CHUNK, data={"chunk": summary})
    
    chunks = [summary]
    for section in sections:
        chunk = format_report_section(section.title, clean_section_content(section.content))
        runtime.emit(EventType.REPORT_CHUNK, data={"chunk": chunk})
        chunks.append(chunk)
    
    report = "".join(chunks)
    runtime.session.report_content = report
    
    return {
        "report_content": report,
        "no_sources": False,
        "phase": ResearchPhase.VALIDATING,
    }
