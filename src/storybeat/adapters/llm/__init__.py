"""LLM provider adapters."""

from storybeat.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from storybeat.adapters.llm.openai import OpenAIProvider
from storybeat.adapters.llm.stub import StubLLMProvider

__all__ = [
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
    "StubLLMProvider",
]
