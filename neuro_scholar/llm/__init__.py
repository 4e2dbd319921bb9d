"""Language-model access."""

from neuro_scholar.llm.gateway import (
    LanguageModelGateway,
    default_model_factory,
    extract_text_and_thinking,
    parse_json_object,
    to_langchain_messages,
)

__all__ = [
    "LanguageModelGateway",
    "default_model_factory",
    "extract_text_and_thinking",
    "parse_json_object",
    "to_langchain_messages",
]
