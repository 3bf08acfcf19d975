"""Narration script authoring over an LLM provider."""

from dataclasses import dataclass

from storybeat.adapters.llm.base import LLMMessage, LLMProvider
from storybeat.domain.enums import ContentTemplate, Tone
from storybeat.domain.errors import CollaboratorError
from storybeat.logging import get_logger
from storybeat.presets.templates import get_template_preset, get_tone_preset
from storybeat.services.duration import (
    count_words,
    duration_for_word_count,
    words_for_duration,
)
from storybeat.services.providers import get_llm_provider

logger = get_logger(__name__)

MAX_COMPLETION_TOKENS = 4000


@dataclass
class GeneratedScript:
    """A narration script and its size."""

    text: str
    word_count: int
    estimated_duration_seconds: float


class ScriptGenerator:
    """Writes narration scripts sized to a target runtime."""

    SYSTEM_PROMPT = (
        "You are a professional scriptwriter specializing in engaging video content. "
        "Create scripts that are perfectly paced for voiceover and visual storytelling."
    )

    def __init__(self, llm_provider: LLMProvider | None = None) -> None:
        self.llm = llm_provider or get_llm_provider()

    @property
    def name(self) -> str:
        return self.llm.name

    def build_user_prompt(
        self,
        topic: str,
        template: ContentTemplate | str,
        tone: Tone | str,
        target_duration_seconds: float,
    ) -> str:
        """Build the authoring prompt for a topic."""
        template_preset = get_template_preset(template)
        tone_preset = get_tone_preset(tone)
        target_words = words_for_duration(target_duration_seconds)
        minutes = int(target_duration_seconds // 60)

        return f"""{template_preset.format_prompt(topic)}

{tone_preset.modifier}

Target length: approximately {target_words} words ({minutes} minutes).

Structure the script with clear narrative beats that build engagement throughout. Each section should flow naturally to the next while maintaining viewer interest.

Topic: {topic}

Write a compelling script:"""

    async def generate(
        self,
        topic: str,
        template: ContentTemplate | str,
        tone: Tone | str,
        target_duration_seconds: float,
    ) -> GeneratedScript:
        """Author a script for the topic.

        Raises:
            CollaboratorError: If the LLM call fails or returns no text
        """
        target_words = words_for_duration(target_duration_seconds)
        messages = [
            LLMMessage(role="system", content=self.SYSTEM_PROMPT),
            LLMMessage(
                role="user",
                content=self.build_user_prompt(topic, template, tone, target_duration_seconds),
            ),
        ]

        logger.info(
            "script_generation_started",
            topic=topic[:100],
            template=str(template),
            tone=str(tone),
            target_words=target_words,
            llm_provider=self.llm.name,
        )

        try:
            response = await self.llm.complete(
                messages,
                temperature=0.7,
                max_tokens=min(MAX_COMPLETION_TOKENS, target_words * 2),
            )
        except Exception as e:
            logger.error("script_generation_failed", error=str(e))
            raise CollaboratorError("script", f"generation failed: {e}") from e

        text = response.content.strip()
        if not text:
            logger.error("script_generation_empty", model=response.model)
            raise CollaboratorError("script", "generation failed: empty script")

        word_count = count_words(text)
        script = GeneratedScript(
            text=text,
            word_count=word_count,
            estimated_duration_seconds=duration_for_word_count(word_count),
        )

        logger.info(
            "script_generation_completed",
            word_count=script.word_count,
            estimated_duration=script.estimated_duration_seconds,
        )
        return script

    async def health_check(self) -> bool:
        return await self.llm.health_check()
