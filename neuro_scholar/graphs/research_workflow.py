"""Research workflow graph assembly.

This module provides the factory that wires the research nodes into a
compiled LangGraph graph.
"""

import logging
from dataclasses import dataclass

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.graph import END, START, StateGraph

from neuro_scholar.graphs.routers import (
    route_after_planner,
    route_after_section,
    route_after_synthesis,
)
from neuro_scholar.nodes import (
    citation_validator_node,
    finalizer_node,
    planner_node,
    report_synthesizer_node,
    section_researcher_node,
)
from neuro_scholar.state.schema import ResearchState

logger = logging.getLogger(__name__)


# All nodes in workflow order
WORKFLOW_NODES = [
    "planner",
    "section_researcher",
    "report_synthesizer",
    "citation_validator",
    "finalizer",
]


@dataclass
class WorkflowConfig:
    """Configuration for research workflow compilation.
    
    Attributes:
        checkpointer: Checkpoint saver (optional). Sessions are persisted
            through the session store, so runs do not need one.
        debug: Enable debug logging
    """
    checkpointer: BaseCheckpointSaver | None = None
    debug: bool = False


def create_research_workflow(config: WorkflowConfig | None = None):
    """
    Create the research workflow graph.
    
    PLANNER → SECTION_RESEARCHER (once per section) → REPORT_SYNTHESIZER
        → [sources found] CITATION_VALIDATOR → FINALIZER
        → [no sources] FINALIZER
    
    Every node expects a ``ResearchRuntime`` under
    ``config["configurable"]["runtime"]`` at invocation time.
    
    Args:
        config: Workflow configuration (optional, uses defaults if not provided)
        
    Returns:
        Compiled graph ready for ``ainvoke``
    """
    if config is None:
        config = WorkflowConfig()
    
    if config.debug:
        logger.setLevel(logging.DEBUG)
        logger.debug("Creating research workflow with debug enabled")
    
    workflow = StateGraph(ResearchState)
    
    workflow.add_node("planner", planner_node)
    workflow.add_node("section_researcher", section_researcher_node)
    workflow.add_node("report_synthesizer", report_synthesizer_node)
    workflow.add_node("citation_validator", citation_validator_node)
    workflow.add_node("finalizer", finalizer_node)
    
    workflow.add_edge(START, "planner")
    workflow.add_conditional_edges(
        "planner",
        route_after_planner,
        {
            "section_researcher": "section_researcher",
            "report_synthesizer": "report_synthesizer",
        },
    )
    workflow.add_conditional_edges(
        "section_researcher",
        route_after_section,
        {
            "section_researcher": "section_researcher",
            "report_synthesizer": "report_synthesizer",
        },
    )
    workflow.add_conditional_edges(
        "report_synthesizer",
        route_after_synthesis,
        {
            "citation_validator": "citation_validator",
            "finalizer": "finalizer",
        },
    )
    workflow.add_edge("citation_validator", "finalizer")
    workflow.add_edge("finalizer", END)
    
    compile_kwargs = {}
    if config.checkpointer is not None:
        compile_kwargs["checkpointer"] = config.checkpointer
    
    logger.info(f"Compiling workflow with config: {list(compile_kwargs.keys())}")
    return workflow.compile(**compile_kwargs)
