"""Image generation adapters for AI-generated beat visuals."""

from storybeat.adapters.image_gen.base import (
    GeneratedImage,
    ImageGenProvider,
    ImageGenRequest,
    ImageGenResult,
)
from storybeat.adapters.image_gen.openai_dalle import OpenAIDalleProvider
from storybeat.adapters.image_gen.stub import StubImageGenProvider

__all__ = [
    "GeneratedImage",
    "ImageGenProvider",
    "ImageGenRequest",
    "ImageGenResult",
    "OpenAIDalleProvider",
    "StubImageGenProvider",
]
