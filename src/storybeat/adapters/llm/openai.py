"""OpenAI chat completions provider for script authoring."""

from typing import Any

import httpx

from storybeat.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from storybeat.config import settings
from storybeat.logging import get_logger

logger = get_logger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"

# Long scripts (30 minutes of narration) can take a while to stream back
COMPLETION_TIMEOUT_SECONDS = 120.0
HEALTH_TIMEOUT_SECONDS = 10.0


class OpenAIProvider(LLMProvider):
    """Writes scripts with an OpenAI chat model (``gpt-4o-mini`` by default)."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = OPENAI_BASE_URL,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.base_url = base_url.rstrip("/")

        if not self.api_key:
            logger.warning("openai_api_key_missing", model=self.model)

    @property
    def name(self) -> str:
        return f"openai:{self.model}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> LLMResponse:
        """Run one chat completion.

        Raises:
            ValueError: If no API key is configured
            httpx.HTTPError: On transport errors or a non-2xx response
        """
        if not self.api_key:
            raise ValueError("OpenAI API key not configured")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        async with httpx.AsyncClient(timeout=COMPLETION_TIMEOUT_SECONDS) as client:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                headers=self._headers(),
                json=payload,
            )
            response.raise_for_status()
            data = response.json()

        return self._to_response(data, max_tokens)

    def _to_response(self, data: dict[str, Any], max_tokens: int) -> LLMResponse:
        choice = data["choices"][0]
        finish_reason = choice.get("finish_reason")
        usage = {
            key: data.get("usage", {}).get(key, 0)
            for key in ("prompt_tokens", "completion_tokens", "total_tokens")
        }

        if finish_reason == "length":
            # The model ran out of budget mid-script
            logger.warning(
                "openai_completion_truncated",
                model=self.model,
                max_tokens=max_tokens,
                completion_tokens=usage["completion_tokens"],
            )
        else:
            logger.info(
                "openai_completion_received",
                model=self.model,
                total_tokens=usage["total_tokens"],
            )

        return LLMResponse(
            content=choice["message"].get("content") or "",
            model=data.get("model", self.model),
            usage=usage,
            raw_response=data,
            finish_reason=finish_reason,
        )

    async def health_check(self) -> bool:
        """Check the configured model is reachable with this key."""
        if not self.api_key:
            return False

        try:
            async with httpx.AsyncClient(timeout=HEALTH_TIMEOUT_SECONDS) as client:
                response = await client.get(
                    f"{self.base_url}/models/{self.model}", headers=self._headers()
                )
        except httpx.HTTPError as e:
            logger.error("openai_health_check_failed", error=str(e))
            return False
        return response.is_success
