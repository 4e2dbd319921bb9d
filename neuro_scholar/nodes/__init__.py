"""Graph nodes for the research workflow."""

from neuro_scholar.nodes.planner import planner_node
from neuro_scholar.nodes.section_researcher import section_researcher_node
from neuro_scholar.nodes.report_synthesizer import report_synthesizer_node
from neuro_scholar.nodes.citation_validator import citation_validator_node
from neuro_scholar.nodes.finalizer import finalizer_node

__all__ = [
    "planner_node",
    "section_researcher_node",
    "report_synthesizer_node",
    "citation_validator_node",
    "finalizer_node",
]
