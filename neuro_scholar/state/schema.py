"""ResearchState schema for the research graph.

The state flows through the planner, the per-section loop, report
synthesis, citation validation and the finalizer. Section results
accumulate through an append reducer, one entry per section.
"""

import operator
from typing import Annotated

from typing_extensions import TypedDict

from neuro_scholar.state.enums import ResearchPhase
from neuro_scholar.state.models import (
    CitationProcessingResult,
    ResearchPlan,
    SectionResult,
)


class ResearchState(TypedDict, total=False):
    """
    Graph state for one research run.
    
    Groups:
    1. Request - session, chat, query and language
    2. Plan - the outline and the loop position
    3. Results - per-section prose and the assembled report
    4. Citations - outcome of the allow-list rewrite
    """
    
    # Request
    session_id: str
    chat_id: str
    query: str
    enhanced_query: str
    language: str
    
    # Plan
    plan: ResearchPlan
    section_index: int
    phase: ResearchPhase
    
    # Results
    section_results: Annotated[list[SectionResult], operator.add]
    no_sources: bool
    report_content: str
    
    # Citations
    citation_result: CitationProcessingResult | None


def create_initial_state(
    session_id: str,
    chat_id: str,
    query: str,
    language: str = "en",
) -> ResearchState:
    """Initial state for a new run."""
    return ResearchState(
        session_id=session_id,
        chat_id=chat_id,
        query=query,
        enhanced_query=query,
        language=language,
        section_index=0,
        phase=ResearchPhase.PLANNING,
        section_results=[],
        no_sources=False,
        report_content="",
        citation_result=None,
    )
