"""ElevenLabs narration provider."""

import base64
from typing import Any

import httpx

from storybeat.adapters.voiceover.base import (
    VoiceoverProvider,
    VoiceoverRequest,
    VoiceoverResult,
)
from storybeat.config import settings
from storybeat.logging import get_logger

logger = get_logger(__name__)


class ElevenLabsProvider(VoiceoverProvider):
    """ElevenLabs text-to-speech with character timestamps.

    Uses the ``with-timestamps`` endpoint so the spoken duration is read from
    the alignment rather than guessed from the word count.
    """

    VOICE_ALIASES = {
        "narrator": "21m00Tcm4TlvDq8ikWAM",  # Rachel - calm narrator
        "dramatic": "29vD33N1CtxCmqQRPOHJ",  # Drew - dramatic male
        "energetic": "ErXwobaYiN019PkySvjV",  # Antoni - energetic
        "deep": "VR6AewLTigWG4xSOukaG",  # Arnold - deep voice
    }

    def __init__(
        self,
        api_key: str | None = None,
        voice_id: str | None = None,
        model_id: str = "eleven_multilingual_v2",
        base_url: str = "https://api.elevenlabs.io/v1",
    ) -> None:
        self.api_key = api_key or settings.elevenlabs_api_key
        self.default_voice = voice_id or settings.elevenlabs_voice_id or "narrator"
        self.model_id = model_id
        self.base_url = base_url

        if not self.api_key:
            logger.warning("ElevenLabs API key not configured")

    @property
    def name(self) -> str:
        return "elevenlabs"

    def _resolve_voice(self, voice: str | None) -> str:
        voice = voice or self.default_voice
        return self.VOICE_ALIASES.get(voice, voice)

    async def generate(self, request: VoiceoverRequest) -> VoiceoverResult:
        """Narrate text using the ElevenLabs API."""
        if not self.api_key:
            return VoiceoverResult(
                success=False,
                error_message="ElevenLabs API key not configured",
            )

        voice_id = self._resolve_voice(request.voice_id)
        payload: dict[str, Any] = {
            "text": request.text,
            "model_id": self.model_id,
            "voice_settings": {
                "stability": 0.5,
                "similarity_boost": 0.75,
            },
        }

        logger.info(
            "elevenlabs_generation_started",
            text_length=len(request.text),
            voice_id=voice_id,
            model=self.model_id,
        )

        try:
            async with httpx.AsyncClient(timeout=120.0) as client:
                response = await client.post(
                    f"{self.base_url}/text-to-speech/{voice_id}/with-timestamps",
                    headers={"xi-api-key": self.api_key, "Content-Type": "application/json"},
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            error_msg = f"ElevenLabs API error: {e.response.status_code}"
            logger.error("elevenlabs_api_error", error=error_msg)
            return VoiceoverResult(success=False, error_message=error_msg)
        except httpx.HTTPError as e:
            logger.error("elevenlabs_generation_error", error=str(e))
            return VoiceoverResult(success=False, error_message=str(e))

        audio_b64 = data.get("audio_base64")
        if not audio_b64:
            return VoiceoverResult(success=False, error_message="No audio in ElevenLabs response")

        audio_data = base64.b64decode(audio_b64)
        duration = self._alignment_duration(data.get("alignment"))
        measured = duration is not None
        if duration is None:
            # ~150 words per minute
            duration = len(request.text.split()) / 2.5

        logger.info(
            "elevenlabs_generation_completed",
            audio_size=len(audio_data),
            duration=duration,
            measured=measured,
        )

        return VoiceoverResult(
            success=True,
            audio_data=audio_data,
            duration_seconds=duration,
            duration_measured=measured,
            metadata={
                "provider": self.name,
                "voice_id": voice_id,
                "model_id": self.model_id,
            },
        )

    @staticmethod
    def _alignment_duration(alignment: dict[str, Any] | None) -> float | None:
        if not alignment:
            return None
        end_times = alignment.get("character_end_times_seconds") or []
        if not end_times:
            return None
        return float(end_times[-1])

    async def health_check(self) -> bool:
        """Check if ElevenLabs API is accessible."""
        if not self.api_key:
            return False

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(
                    f"{self.base_url}/user",
                    headers={"xi-api-key": self.api_key},
                )
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error("elevenlabs_health_check_failed", error=str(e))
            return False
