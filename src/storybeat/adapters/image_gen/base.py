"""Base interface for AI image generation providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

# Pixel sizes per aspect ratio (DALL-E 3 supported sizes)
ASPECT_RATIO_SIZES = {
    "16:9": "1792x1024",
    "9:16": "1024x1792",
    "1:1": "1024x1024",
}
DEFAULT_SIZE = "1024x1024"


@dataclass
class ImageGenRequest:
    """Request for image generation."""

    prompt: str
    aspect_ratio: str = "16:9"
    count: int = 1
    quality: str = "standard"  # hd or standard
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class GeneratedImage:
    """A single generated image."""

    url: str
    width: int
    height: int
    revised_prompt: str | None = None


@dataclass
class ImageGenResult:
    """Result from image generation.

    On failure ``images`` is always empty; providers never return partial sets.
    """

    success: bool
    images: list[GeneratedImage] = field(default_factory=list)
    error_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, message: str, **metadata: Any) -> "ImageGenResult":
        return cls(success=False, error_message=message, metadata=metadata)


class ImageGenProvider(ABC):
    """Abstract base class for image generation providers.

    Implementations:
    - StubImageGenProvider: Returns placeholder images for testing
    - OpenAIDalleProvider: Uses DALL-E 3
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def generate(self, request: ImageGenRequest) -> ImageGenResult:
        """Generate ``request.count`` images from the given request.

        Args:
            request: Image generation request with prompt and parameters

        Returns:
            ImageGenResult with all images, or a failure with none
        """
        ...

    async def health_check(self) -> bool:
        """Check if the provider is available.

        Returns:
            True if provider is operational
        """
        return True

    def get_aspect_ratio_size(self, aspect_ratio: str) -> str:
        """Convert aspect ratio to pixel dimensions.

        Args:
            aspect_ratio: Ratio string like "9:16"

        Returns:
            Size string like "1024x1792"
        """
        return ASPECT_RATIO_SIZES.get(aspect_ratio, DEFAULT_SIZE)

    @staticmethod
    def parse_size(size: str) -> tuple[int, int]:
        """Split a "WxH" size string into integers."""
        width, height = size.split("x")
        return int(width), int(height)
