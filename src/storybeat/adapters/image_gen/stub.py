"""Stub image generation provider for testing."""

import asyncio
from urllib.parse import quote_plus
from uuid import uuid4

from storybeat.adapters.image_gen.base import (
    GeneratedImage,
    ImageGenProvider,
    ImageGenRequest,
    ImageGenResult,
)
from storybeat.logging import get_logger

logger = get_logger(__name__)


class StubImageGenProvider(ImageGenProvider):
    """Stub provider that returns placeholder images for testing.

    Simulates image generation without making API calls.
    """

    def __init__(self, latency_ms: int = 0, fail_with: str | None = None) -> None:
        """Initialize the stub provider.

        Args:
            latency_ms: Simulated latency in milliseconds
            fail_with: If set, every request fails with this error message
        """
        self.latency_ms = latency_ms
        self.fail_with = fail_with
        self.requests: list[ImageGenRequest] = []

    @property
    def name(self) -> str:
        return "stub"

    async def generate(self, request: ImageGenRequest) -> ImageGenResult:
        """Return placeholder images for testing."""
        self.requests.append(request)

        if self.latency_ms:
            await asyncio.sleep(self.latency_ms / 1000)

        if self.fail_with:
            logger.warning("stub_image_generation_failed", error=self.fail_with)
            return ImageGenResult.failure(self.fail_with, provider=self.name)

        size = self.get_aspect_ratio_size(request.aspect_ratio)
        width, height = self.parse_size(size)
        text = quote_plus(request.prompt[:30]) if request.prompt else "image"

        images = [
            GeneratedImage(
                url=f"https://placehold.co/{size}/1a1a1a/ffffff?text={text}&id={uuid4().hex[:8]}",
                width=width,
                height=height,
            )
            for _ in range(request.count)
        ]

        logger.info(
            "stub_images_generated",
            prompt_length=len(request.prompt),
            aspect_ratio=request.aspect_ratio,
            count=len(images),
        )

        return ImageGenResult(
            success=True,
            images=images,
            metadata={"provider": self.name, "is_placeholder": True},
        )
