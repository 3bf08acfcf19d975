"""Stub voiceover provider for testing."""

import asyncio

from storybeat.adapters.voiceover.base import (
    VoiceoverProvider,
    VoiceoverRequest,
    VoiceoverResult,
)
from storybeat.logging import get_logger

logger = get_logger(__name__)


class StubVoiceoverProvider(VoiceoverProvider):
    """Stub provider that simulates narration without external calls.

    Reports a duration of 2.5 words per second so timelines built on stub
    audio line up with the pipeline's own estimates.
    """

    def __init__(self, latency_ms: int = 0, fail_with: str | None = None) -> None:
        self.latency_ms = latency_ms
        self.fail_with = fail_with
        self.requests: list[VoiceoverRequest] = []

    @property
    def name(self) -> str:
        return "stub"

    async def generate(self, request: VoiceoverRequest) -> VoiceoverResult:
        """Simulate narration synthesis."""
        self.requests.append(request)

        if self.latency_ms:
            await asyncio.sleep(self.latency_ms / 1000)

        if self.fail_with:
            logger.warning("stub_voiceover_failed", error=self.fail_with)
            return VoiceoverResult(success=False, error_message=self.fail_with)

        fake_audio = b"STUB_AUDIO_DATA_" + request.text.encode()[:100]
        duration = len(request.text.split()) / 2.5

        logger.info(
            "stub_voiceover_generated",
            text_length=len(request.text),
            duration=duration,
        )

        return VoiceoverResult(
            success=True,
            audio_data=fake_audio,
            duration_seconds=duration,
            duration_measured=True,
            metadata={"provider": self.name, "voice_id": request.voice_id or "default"},
        )
