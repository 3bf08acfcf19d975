"""Base interface for narration (text-to-speech) providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class VoiceoverRequest:
    """Request to narrate one beat's text."""

    text: str
    voice_id: str | None = None  # Provider-specific voice identifier or alias
    output_format: str = "mp3"


@dataclass
class VoiceoverResult:
    """Result from narration synthesis."""

    success: bool
    audio_data: bytes | None = None
    duration_seconds: float | None = None
    # False when the provider could only estimate the length from the text
    duration_measured: bool = False
    error_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class VoiceoverProvider(ABC):
    """Abstract base class for narration providers.

    Implementations:
    - ElevenLabsProvider: AI voices via the ElevenLabs API
    - StubVoiceoverProvider: Fake audio for testing
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def generate(self, request: VoiceoverRequest) -> VoiceoverResult:
        """Synthesize narration audio for the request text.

        Args:
            request: Text and voice settings

        Returns:
            VoiceoverResult with audio bytes and spoken duration, or an error
        """
        ...

    async def health_check(self) -> bool:
        """Check if the provider is available and healthy."""
        return True
