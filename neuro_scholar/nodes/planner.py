"""PLANNER node: turns the query into an ordered research plan."""

import logging
from typing import Any

from langchain_core.runnables import RunnableConfig
from pydantic import ValidationError

from neuro_scholar.errors.exceptions import PlanningError
from neuro_scholar.llm.gateway import parse_json_object
from neuro_scholar.nodes.prompts import build_plan_messages, status_message
from neuro_scholar.research.runtime import get_runtime
from neuro_scholar.state.enums import EventType, ResearchPhase
from neuro_scholar.state.models import ResearchPlan, UploadedFile
from neuro_scholar.state.schema import ResearchState

logger = logging.getLogger(__name__)


def build_enhanced_query(query: str, files: list[UploadedFile], max_chars: int = 2000) -> str:
    """
    Append truncated uploaded-document text to the query.
    
    Args:
        query: The user's query.
        files: Documents attached to the chat.
        max_chars: Characters kept from each document.
        
    Returns:
        The query unchanged when there are no documents, otherwise the
        query followed by a "Context from uploaded documents" block.
    """
    if not files:
        return query
    file_context = "\n\n".join(
        f"--- {f.filename} ---\n{f.content[:max_chars]}" for f in files
    )
    return f"{query}\n\nContext from uploaded documents:\n{file_context}"


def parse_research_plan(content: str) -> ResearchPlan:
    """
    Parse the planner's response into a ResearchPlan.
    
    Raises:
        PlanningError: No JSON object, or it does not describe at least
            one titled section.
    """
    data = parse_json_object(content)
    if data is None:
        raise PlanningError(response_excerpt=content)
    try:
        return ResearchPlan.model_validate(data)
    except ValidationError as e:
        raise PlanningError(
            response_excerpt=content,
            details={"validation_errors": e.error_count()},
        ) from e


async def planner_node(state: ResearchState, config: RunnableConfig) -> dict[str, Any]:
    """
    PLANNER node.
    
    This node:
    1. Enriches the query with uploaded-document context
    2. Asks the model for a JSON outline
    3. Persists the plan and broadcasts ``plan_created``
    
    Args:
        state: Current research state.
        config: Runnable config carrying the run's runtime.
        
    Returns:
        State updates with the plan and the loop reset to section 0.
        
    Raises:
        PlanningError: The response could not be parsed as a plan.
    """
    runtime = get_runtime(config)
    language = runtime.language
    query = state["query"]
    
    files = runtime.store.list_uploaded_files(state["chat_id"])
    enhanced_query = build_enhanced_query(query, files, runtime.settings.file_context_chars)
    if files:
        logger.info(f"PLANNER: added context from {len(files)} uploaded document(s)")
    
    runtime.status(status_message("planning", language))
    response = await runtime.chat(build_plan_messages(enhanced_query, language))
    plan = parse_research_plan(response.content)
    
    runtime.session.plan = plan
    runtime.persist(plan=plan)
    runtime.emit(
        EventType.PLAN_CREATED,
        data={"toc": plan.titles, "full_plan": plan.model_dump(mode="json")},
    )
    logger.info(f"PLANNER: plan with {len(plan.sections)} sections")
    
    return {
        "plan": plan,
        "enhanced_query": enhanced_query,
        "section_index": 0,
        "phase": ResearchPhase.RESEARCHING,
    }
