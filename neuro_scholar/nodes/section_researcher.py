"""SECTION_RESEARCHER node: keywords, search and prose for one section.

The graph runs this node once per plan section, strictly in order.
"""

import logging
import re
from typing import Any

from langchain_core.runnables import RunnableConfig

from neuro_scholar.errors.exceptions import SynthesisError, WorkflowError
from neuro_scholar.errors.handlers import error_message, log_error_with_context
from neuro_scholar.nodes.prompts import build_keyword_messages, build_section_messages
from neuro_scholar.research.runtime import ResearchRuntime, get_runtime
from neuro_scholar.state.enums import EventType, ToolName
from neuro_scholar.state.models import AcademicSource, PlanSection, SectionResult
from neuro_scholar.state.schema import ResearchState

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def clean_keywords(content: str) -> str:
    """Flatten a keyword response onto one comma-separated line."""
    return _WHITESPACE.sub(" ", content.replace("\n", ", ")).strip()


def fallback_keywords(section: PlanSection) -> str:
    return f"{section.title} {section.description}".strip()


async def generate_search_keywords(runtime: ResearchRuntime, section: PlanSection) -> str:
    """
    Ask the model for four search keywords, most important first.
    
    Any failure, or an empty answer, falls back to the section's title
    and description so the run never stalls on keyword generation.
    """
    try:
        response = await runtime.chat(build_keyword_messages(section, runtime.language))
        keywords = clean_keywords(response.content)
    except Exception as e:
        log_error_with_context(
            e, node="section_researcher", context={"section": section.title, "step": "keywords"},
            level=logging.WARNING,
        )
        return fallback_keywords(section)
    if not keywords.strip(" ,"):
        return fallback_keywords(section)
    logger.info(f'RESEARCH: keywords for "{section.title}": {keywords}')
    return keywords


async def synthesize_section(
    runtime: ResearchRuntime,
    section: PlanSection,
    sources: list[AcademicSource],
) -> str:
    """Write the section body citing only the given sources.
    
    Raises:
        SynthesisError: The model call failed. This ends the run.
    """
    try:
        response = await runtime.chat(build_section_messages(section, sources, runtime.language))
    except Exception as e:
        raise SynthesisError(
            f"Failed to write section \"{section.title}\": {error_message(e)}",
            section=section.title,
        ) from e
    return response.content


async def section_researcher_node(state: ResearchState, config: RunnableConfig) -> dict[str, Any]:
    """
    SECTION_RESEARCHER node.
    
    This node:
    1. Waits at the pause/cancel checkpoint
    2. Records the step and emits ``research_started``
    3. Generates keywords (with fallback) and searches the literature
    4. Emits ``source_found`` for each returned source
    5. Synthesizes the section prose
    
    Args:
        state: Current research state.
        config: Runnable config carrying the run's runtime.
        
    Returns:
        State updates appending one SectionResult and advancing the index.
    """
    runtime = get_runtime(config)
    plan = state.get("plan")
    index = state.get("section_index", 0)
    if plan is None or index >= len(plan.sections):
        raise WorkflowError(
            "No plan section left to research",
            node="section_researcher",
            state_key="section_index",
            recoverable=False,
        )
    section = plan.sections[index]
    
    await runtime.control.checkpoint()
    
    runtime.session.advance_to(index)
    runtime.persist(current_step=index)
    runtime.emit(
        EventType.RESEARCH_STARTED,
        data={"section_index": index, "topic": section.title},
    )
    
    runtime.emit(
        EventType.TOOL_START,
        data={"tool": ToolName.KEYWORD_GENERATION.value, "section": section.title},
    )
    search_query = await generate_search_keywords(runtime, section)
    
    runtime.emit(
        EventType.TOOL_START,
        data={"tool": ToolName.ACADEMIC_SEARCH.value, "query": search_query},
    )
    sources = await runtime.search.search(search_query)
    runtime.session.add_sources(sources)
    for source in sources:
        runtime.emit(EventType.SOURCE_FOUND, data=source.to_event_payload())
    logger.info(f'RESEARCH: section {index + 1}/{len(plan.sections)} "{section.title}": {len(sources)} sources')
    
    content = await synthesize_section(runtime, section, sources)
    
    return {
        "section_results": [SectionResult(title=section.title, content=content, sources=sources)],
        "section_index": index + 1,
    }
