"""Language-model gateway.

The pipeline only needs one thing from the model: given a list of
system/user/assistant messages, return the completed text. This module
wraps LangChain's Anthropic chat model behind that contract.
"""

import json
import logging
import re
from typing import Any, Callable

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from neuro_scholar.config import settings
from neuro_scholar.errors.exceptions import NeuroScholarError
from neuro_scholar.errors.handlers import handle_api_error
from neuro_scholar.state.enums import MessageRole
from neuro_scholar.state.models import ChatMessage, ChatResponse

logger = logging.getLogger(__name__)

ModelFactory = Callable[[str], BaseChatModel]

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def default_model_factory(model: str) -> BaseChatModel:
    """Build the Anthropic chat model for ``model``."""
    return ChatAnthropic(
        model=model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        api_key=settings.anthropic_api_key,
    )


def to_langchain_messages(messages: list[ChatMessage]) -> list[BaseMessage]:
    converted: list[BaseMessage] = []
    for message in messages:
        if message.role == MessageRole.SYSTEM:
            converted.append(SystemMessage(content=message.content))
        elif message.role == MessageRole.ASSISTANT:
            converted.append(AIMessage(content=message.content))
        else:
            converted.append(HumanMessage(content=message.content))
    return converted


def extract_text_and_thinking(raw_content: Any) -> tuple[str, str | None]:
    """Split model output into answer text and optional thinking text.
    
    Handles both plain string content and the structured block list that
    Anthropic returns when extended thinking is on.
    """
    if not isinstance(raw_content, list):
        return str(raw_content or ""), None
    
    text_parts: list[str] = []
    thinking_parts: list[str] = []
    for item in raw_content:
        if isinstance(item, str):
            text_parts.append(item)
        elif isinstance(item, dict):
            if item.get("type") == "thinking":
                thinking_parts.append(item.get("thinking", ""))
            elif item.get("type", "text") == "text":
                text_parts.append(item.get("text", ""))
    thinking = "\n".join(p for p in thinking_parts if p) or None
    return "".join(text_parts), thinking


def parse_json_object(text: str) -> dict[str, Any] | None:
    """Parse the outermost ``{...}`` block of a model response.
    
    Returns:
        The decoded object, or None if there is none or it is invalid.
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        return None
    try:
        value = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


class LanguageModelGateway:
    """Issues complete (non-streaming) chat requests.
    
    Chat model instances are cached per model id.
    """
    
    def __init__(self, model_factory: ModelFactory | None = None):
        self._factory = model_factory or default_model_factory
        self._models: dict[str, BaseChatModel] = {}
    
    def _get_model(self, model: str) -> BaseChatModel:
        if model not in self._models:
            self._models[model] = self._factory(model)
        return self._models[model]
    
    async def chat(self, model: str | None, messages: list[ChatMessage]) -> ChatResponse:
        """
        Send ``messages`` and await the full completion.
        
        Args:
            model: Model id; the configured default is used when empty.
            messages: Ordered system/user/assistant messages.
            
        Returns:
            ChatResponse with the answer text and any thinking text.
            
        Raises:
            APIError: The provider call failed.
        """
        model_id = model or settings.default_model
        chat_model = self._get_model(model_id)
        try:
            response = await chat_model.ainvoke(to_langchain_messages(messages))
        except NeuroScholarError:
            raise
        except Exception as e:
            raise handle_api_error(e, service="anthropic") from e
        
        content, thinking = extract_text_and_thinking(response.content)
        logger.debug(f"LLM: {model_id} returned {len(content)} chars")
        return ChatResponse(content=content, thinking=thinking)
