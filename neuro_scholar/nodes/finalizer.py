"""FINALIZER node: completion, conversation message and chat title."""

import logging
from typing import Any

from langchain_core.runnables import RunnableConfig

from neuro_scholar.errors.handlers import log_error_with_context
from neuro_scholar.nodes.prompts import build_title_messages
from neuro_scholar.research.runtime import ResearchRuntime, get_runtime
from neuro_scholar.state.enums import EventType, MessageRole, ResearchPhase, SessionStatus
from neuro_scholar.state.schema import ResearchState

logger = logging.getLogger(__name__)


def clean_title(raw: str) -> str:
    return raw.strip().strip("\"'“”").strip()


async def generate_chat_title(runtime: ResearchRuntime, query: str) -> str | None:
    """Best-effort short title for the chat. Failures are logged, never raised."""
    try:
        response = await runtime.chat(build_title_messages(query))
        title = clean_title(response.content)
        if not title:
            return None
        runtime.store.update_chat_title(runtime.session.chat_id, title)
    except Exception as e:
        log_error_with_context(e, node="finalizer", context={"step": "title"}, level=logging.WARNING)
        return None
    return title


async def finalizer_node(state: ResearchState, config: RunnableConfig) -> dict[str, Any]:
    """
    FINALIZER node.
    
    This node:
    1. Marks the session completed and emits ``completed``
    2. Stores the report as an assistant message with its sources
    3. Generates a chat title
    
    Args:
        state: Current research state.
        config: Runnable config carrying the run's runtime.
        
    Returns:
        State updates closing the run.
    """
    runtime = get_runtime(config)
    session = runtime.session
    report = state.get("report_content", session.report_content)
    
    runtime.set_status(SessionStatus.COMPLETED)
    runtime.emit(
        EventType.COMPLETED,
        data={"report_preview": report[: runtime.settings.report_preview_chars]},
    )
    
    runtime.store.append_message(
        session.chat_id,
        MessageRole.ASSISTANT,
        report,
        {"sources": [s.model_dump(mode="json") for s in session.sources]},
    )
    
    title = await generate_chat_title(runtime, state["query"])
    if title:
        runtime.emit(EventType.STATUS, data={"title_generated": title})
        logger.info(f'FINALIZER: chat titled "{title}"')
    
    return {"phase": ResearchPhase.DONE}
