"""Routing functions for the research workflow graph.

Kept apart from the graph definition so each decision can be tested
against a plain state dict.
"""

import logging
from typing import Literal

from neuro_scholar.state.schema import ResearchState

logger = logging.getLogger(__name__)


def route_after_planner(state: ResearchState) -> Literal["section_researcher", "report_synthesizer"]:
    """
    Route after the PLANNER node.
    
    A validated plan always has at least one section, the second branch
    only guards against a state built by hand.
    """
    plan = state.get("plan")
    if plan is None or not plan.sections:
        logger.warning("ROUTER: plan has no sections, skipping to synthesis")
        return "report_synthesizer"
    return "section_researcher"


def route_after_section(state: ResearchState) -> Literal["section_researcher", "report_synthesizer"]:
    """
    Route after the SECTION_RESEARCHER node.
    
    Loops until every plan section (reserved titles included) has been
    researched.
    """
    plan = state.get("plan")
    index = state.get("section_index", 0)
    if plan is not None and index < len(plan.sections):
        return "section_researcher"
    return "report_synthesizer"


def route_after_synthesis(state: ResearchState) -> Literal["citation_validator", "finalizer"]:
    """Skip citation processing when the report is the no-sources placeholder."""
    if state.get("no_sources"):
        return "finalizer"
    return "citation_validator"
