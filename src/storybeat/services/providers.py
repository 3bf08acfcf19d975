"""Provider selection from configuration."""

from storybeat.adapters.image_gen.base import ImageGenProvider
from storybeat.adapters.image_gen.stub import StubImageGenProvider
from storybeat.adapters.llm.base import LLMProvider
from storybeat.adapters.llm.stub import StubLLMProvider
from storybeat.adapters.stock.base import StockSearchProvider
from storybeat.adapters.stock.stub import StubStockSearchProvider
from storybeat.adapters.voiceover.base import VoiceoverProvider
from storybeat.adapters.voiceover.stub import StubVoiceoverProvider
from storybeat.config import settings
from storybeat.logging import get_logger

logger = get_logger(__name__)


def get_llm_provider() -> LLMProvider:
    """Get the configured LLM provider for script authoring."""
    provider_name = settings.llm_provider.lower()

    if provider_name == "stub":
        return StubLLMProvider()
    if provider_name == "openai" and settings.openai_api_key:
        from storybeat.adapters.llm.openai import OpenAIProvider

        return OpenAIProvider()

    logger.warning("llm_provider_fallback", requested=provider_name, using="stub")
    return StubLLMProvider()


def get_image_gen_provider() -> ImageGenProvider:
    """Get the configured AI image provider."""
    provider_name = settings.image_gen_provider.lower()

    if provider_name == "stub":
        return StubImageGenProvider()
    if provider_name in ("dalle3", "openai"):
        from storybeat.adapters.image_gen.openai_dalle import OpenAIDalleProvider

        return OpenAIDalleProvider()

    logger.warning("image_gen_provider_fallback", requested=provider_name, using="stub")
    return StubImageGenProvider()


def get_stock_provider() -> StockSearchProvider:
    """Get the configured stock search provider."""
    provider_name = settings.stock_provider.lower()

    if provider_name == "stub":
        return StubStockSearchProvider()
    if provider_name == "pexels":
        from storybeat.adapters.stock.pexels import PexelsStockProvider

        return PexelsStockProvider()

    logger.warning("stock_provider_fallback", requested=provider_name, using="stub")
    return StubStockSearchProvider()


def get_voiceover_provider() -> VoiceoverProvider:
    """Get the configured narration provider."""
    provider_name = settings.voiceover_provider.lower()

    if provider_name == "stub":
        return StubVoiceoverProvider()
    if provider_name == "elevenlabs":
        from storybeat.adapters.voiceover.elevenlabs import ElevenLabsProvider

        return ElevenLabsProvider()

    logger.warning("voiceover_provider_fallback", requested=provider_name, using="stub")
    return StubVoiceoverProvider()
