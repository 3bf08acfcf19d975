"""Adapters for external services."""

from storybeat.adapters.image_gen.base import ImageGenProvider
from storybeat.adapters.llm.base import LLMProvider
from storybeat.adapters.stock.base import StockSearchProvider
from storybeat.adapters.voiceover.base import VoiceoverProvider

__all__ = [
    "ImageGenProvider",
    "LLMProvider",
    "StockSearchProvider",
    "VoiceoverProvider",
]
