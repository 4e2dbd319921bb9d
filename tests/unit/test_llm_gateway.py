"""Unit tests for the language-model gateway."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from neuro_scholar.errors import APIError
from neuro_scholar.llm import (
    LanguageModelGateway,
    extract_text_and_thinking,
    parse_json_object,
    to_langchain_messages,
)
from neuro_scholar.state.enums import MessageRole
from neuro_scholar.state.models import ChatMessage


def _fake_model(content):
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content=content))
    return model


class TestMessageConversion:
    """Tests for role mapping and content flattening."""
    
    def test_roles(self):
        converted = to_langchain_messages([
            ChatMessage(role=MessageRole.SYSTEM, content="s"),
            ChatMessage(role=MessageRole.USER, content="u"),
            ChatMessage(role=MessageRole.ASSISTANT, content="a"),
        ])
        assert [type(m) for m in converted] == [SystemMessage, HumanMessage, AIMessage]
        assert [m.content for m in converted] == ["s", "u", "a"]
    
    def test_plain_string_content(self):
        assert extract_text_and_thinking("hello") == ("hello", None)
    
    def test_block_content_with_thinking(self):
        content = [
            {"type": "thinking", "thinking": "Let me plan."},
            {"type": "text", "text": "Answer "},
            {"type": "text", "text": "text."},
        ]
        assert extract_text_and_thinking(content) == ("Answer text.", "Let me plan.")


class TestParseJsonObject:
    """Tests for parse_json_object."""
    
    def test_fenced_json(self):
        text = 'Here is the plan:\n```json\n{"sections": [{"title": "A"}]}\n```'
        assert parse_json_object(text) == {"sections": [{"title": "A"}]}
    
    @pytest.mark.parametrize("text", ["", "no json here", "{not: valid}", "[1, 2]"])
    def test_invalid(self, text):
        assert parse_json_object(text) is None


class TestLanguageModelGateway:
    """Tests for LanguageModelGateway.chat."""
    
    @pytest.mark.asyncio
    async def test_chat_returns_text(self):
        model = _fake_model("The answer.")
        factory = MagicMock(return_value=model)
        gateway = LanguageModelGateway(model_factory=factory)
        
        response = await gateway.chat(
            "claude-test", [ChatMessage(role=MessageRole.USER, content="Q?")]
        )
        
        assert response.content == "The answer."
        assert response.thinking is None
        factory.assert_called_once_with("claude-test")
        sent = model.ainvoke.await_args.args[0]
        assert isinstance(sent[0], HumanMessage)
    
    @pytest.mark.asyncio
    async def test_models_cached_per_id(self):
        factory = MagicMock(side_effect=lambda model_id: _fake_model(model_id))
        gateway = LanguageModelGateway(model_factory=factory)
        message = [ChatMessage(role=MessageRole.USER, content="x")]
        
        await gateway.chat("m1", message)
        await gateway.chat("m1", message)
        second = await gateway.chat("m2", message)
        
        assert factory.call_count == 2
        assert second.content == "m2"
    
    @pytest.mark.asyncio
    async def test_provider_error_wrapped(self):
        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=RuntimeError("overloaded"))
        gateway = LanguageModelGateway(model_factory=lambda _: model)
        
        with pytest.raises(APIError) as exc_info:
            await gateway.chat("m", [ChatMessage(role=MessageRole.USER, content="x")])
        
        assert exc_info.value.service == "anthropic"
        assert "overloaded" in exc_info.value.message
