"""Beat narration: synthesize voice audio and store it."""

from dataclasses import dataclass
from uuid import UUID

from storybeat.adapters.voiceover.base import VoiceoverProvider, VoiceoverRequest
from storybeat.config import settings
from storybeat.domain.errors import CollaboratorError
from storybeat.domain.models import Beat
from storybeat.logging import get_logger
from storybeat.services.duration import duration_for_word_count
from storybeat.services.providers import get_voiceover_provider
from storybeat.services.storage import StorageService

logger = get_logger(__name__)


@dataclass
class NarrationResult:
    """Stored narration for one beat."""

    audio_url: str
    measured_duration_seconds: float


class NarrationService:
    """Narrates beats through a voiceover provider."""

    def __init__(
        self,
        provider: VoiceoverProvider | None = None,
        storage: StorageService | None = None,
        voice_id: str | None = None,
    ) -> None:
        self.provider = provider or get_voiceover_provider()
        self.storage = storage or StorageService()
        self.voice_id = voice_id or settings.elevenlabs_voice_id

    async def narrate(self, project_id: UUID, beat: Beat) -> NarrationResult:
        """Synthesize and store narration for a beat.

        Raises:
            CollaboratorError: If synthesis fails, yields no audio or cannot be stored
        """
        request = VoiceoverRequest(text=beat.text, voice_id=self.voice_id)

        try:
            result = await self.provider.generate(request)
        except Exception as e:
            logger.error("narration_exception", beat_id=str(beat.id), error=str(e))
            raise CollaboratorError("voice", str(e)) from e

        if not result.success or not result.audio_data:
            message = result.error_message or "no audio returned"
            logger.warning("narration_failed", beat_id=str(beat.id), error=message)
            raise CollaboratorError("voice", message)

        duration = result.duration_seconds
        if duration is None:
            duration = duration_for_word_count(len(beat.text.split()))

        try:
            stored = self.storage.store_audio(
                result.audio_data,
                project_id=project_id,
                beat_id=beat.id,
                output_format=request.output_format,
            )
        except OSError as e:
            logger.error("narration_store_failed", beat_id=str(beat.id), error=str(e))
            raise CollaboratorError("voice", f"storing audio failed: {e}") from e

        logger.info(
            "narration_completed",
            beat_id=str(beat.id),
            duration=duration,
            measured=result.duration_measured,
            provider=self.provider.name,
        )
        return NarrationResult(audio_url=stored.url, measured_duration_seconds=duration)
