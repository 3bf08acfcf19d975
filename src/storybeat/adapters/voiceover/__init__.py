"""Narration (text-to-speech) adapters."""

from storybeat.adapters.voiceover.base import (
    VoiceoverProvider,
    VoiceoverRequest,
    VoiceoverResult,
)
from storybeat.adapters.voiceover.elevenlabs import ElevenLabsProvider
from storybeat.adapters.voiceover.stub import StubVoiceoverProvider

__all__ = [
    "ElevenLabsProvider",
    "StubVoiceoverProvider",
    "VoiceoverProvider",
    "VoiceoverRequest",
    "VoiceoverResult",
]
