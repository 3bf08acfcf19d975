"""OpenAI DALL-E 3 image generation provider."""

import httpx

from storybeat.adapters.image_gen.base import (
    GeneratedImage,
    ImageGenProvider,
    ImageGenRequest,
    ImageGenResult,
)
from storybeat.config import get_settings
from storybeat.logging import get_logger

logger = get_logger(__name__)

PROMPT_SUFFIX = "High quality, professional, cinematic lighting."


class OpenAIDalleProvider(ImageGenProvider):
    """DALL-E 3 image generation via OpenAI API.

    DALL-E 3 only accepts ``n=1``, so a request for several images issues one
    API call per image. Any failed call fails the whole request.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "dall-e-3",
        base_url: str = "https://api.openai.com/v1",
    ) -> None:
        """Initialize the DALL-E provider.

        Args:
            api_key: OpenAI API key. If None, uses config setting.
            model: Model to use (dall-e-3 or dall-e-2)
            base_url: OpenAI API base URL
        """
        settings = get_settings()
        self.api_key = api_key or settings.openai_api_key
        self.model = model
        self.base_url = base_url

        if not self.api_key:
            logger.warning("OpenAI API key not configured for DALL-E provider")

    @property
    def name(self) -> str:
        return "dalle3"

    def _build_prompt(self, request: ImageGenRequest) -> str:
        return f"{request.prompt}. {PROMPT_SUFFIX}"

    async def generate(self, request: ImageGenRequest) -> ImageGenResult:
        """Generate images using DALL-E 3."""
        if not self.api_key:
            return ImageGenResult.failure("OpenAI API key not configured", provider=self.name)

        full_prompt = self._build_prompt(request)
        size = self.get_aspect_ratio_size(request.aspect_ratio)
        width, height = self.parse_size(size)

        logger.info(
            "dalle_generation_started",
            prompt_length=len(full_prompt),
            size=size,
            count=request.count,
            model=self.model,
        )

        images: list[GeneratedImage] = []
        try:
            async with httpx.AsyncClient(timeout=120.0) as client:
                for _ in range(request.count):
                    response = await client.post(
                        f"{self.base_url}/images/generations",
                        headers={
                            "Authorization": f"Bearer {self.api_key}",
                            "Content-Type": "application/json",
                        },
                        json={
                            "model": self.model,
                            "prompt": full_prompt,
                            "n": 1,
                            "size": size,
                            "quality": request.quality,
                        },
                    )

                    if response.status_code != 200:
                        error_msg = (
                            response.json().get("error", {}).get("message", "Unknown error")
                        )
                        logger.error(
                            "dalle_generation_failed",
                            status_code=response.status_code,
                            error=error_msg,
                        )
                        return ImageGenResult.failure(
                            f"DALL-E API error: {error_msg}", provider=self.name
                        )

                    data = response.json().get("data") or [{}]
                    url = data[0].get("url")
                    if not url:
                        return ImageGenResult.failure(
                            "No image URL in response", provider=self.name
                        )
                    images.append(
                        GeneratedImage(
                            url=url,
                            width=width,
                            height=height,
                            revised_prompt=data[0].get("revised_prompt"),
                        )
                    )

        except httpx.TimeoutException:
            logger.error("dalle_generation_timeout")
            return ImageGenResult.failure("DALL-E API timeout", provider=self.name)
        except httpx.HTTPError as e:
            logger.error("dalle_generation_exception", error=str(e))
            return ImageGenResult.failure(f"DALL-E API exception: {e}", provider=self.name)

        logger.info("dalle_generation_completed", count=len(images))

        return ImageGenResult(
            success=True,
            images=images,
            metadata={
                "provider": self.name,
                "model": self.model,
                "size": size,
                "quality": request.quality,
            },
        )

    async def health_check(self) -> bool:
        """Check if the OpenAI API is accessible."""
        if not self.api_key:
            return False

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                return response.status_code == 200
        except httpx.HTTPError:
            return False
