"""Script template and tone presets.

Each content template carries the prompt used to author its scripts; each
tone carries a modifier appended to that prompt.
"""

from dataclasses import dataclass

from storybeat.domain.enums import ContentTemplate, Tone


@dataclass(frozen=True)
class TemplatePreset:
    """Script authoring preset for a content template.

    Attributes:
        template: Template this preset belongs to
        display_name: Human-readable name
        prompt: Authoring instructions with a ``{topic}`` placeholder
    """

    template: ContentTemplate
    display_name: str
    prompt: str

    def format_prompt(self, topic: str) -> str:
        return self.prompt.replace("{topic}", topic)


@dataclass(frozen=True)
class TonePreset:
    """Delivery modifier for a tone."""

    tone: Tone
    display_name: str
    modifier: str


TEMPLATE_PRESETS: dict[ContentTemplate, TemplatePreset] = {
    ContentTemplate.HORROR: TemplatePreset(
        template=ContentTemplate.HORROR,
        display_name="Horror (True Stories)",
        prompt=(
            "Create a spine-chilling script about {topic}. Use vivid, atmospheric "
            "descriptions that build suspense. Include mysterious elements and "
            "unexpected twists."
        ),
    ),
    ContentTemplate.TRUE_CRIME: TemplatePreset(
        template=ContentTemplate.TRUE_CRIME,
        display_name="True Crime",
        prompt=(
            "Write an investigative script about {topic}. Present facts methodically, "
            "include timeline details, and maintain objectivity while engaging the "
            "audience."
        ),
    ),
    ContentTemplate.EXPLAINER: TemplatePreset(
        template=ContentTemplate.EXPLAINER,
        display_name="Explainers (Interesting Facts)",
        prompt=(
            "Create an educational script about {topic}. Break down complex concepts "
            "into digestible parts with clear examples and practical applications."
        ),
    ),
    ContentTemplate.HISTORY: TemplatePreset(
        template=ContentTemplate.HISTORY,
        display_name="History Mini-Docs",
        prompt=(
            "Write a historical narrative script about {topic}. Include key dates, "
            "important figures, and contextual background that brings the past to life."
        ),
    ),
    ContentTemplate.SPORTS: TemplatePreset(
        template=ContentTemplate.SPORTS,
        display_name="Sports Data Stories",
        prompt=(
            "Create a data-driven sports story about {topic}. Include statistics, "
            "player performances, and analytical insights that reveal deeper patterns."
        ),
    ),
}

TONE_PRESETS: dict[Tone, TonePreset] = {
    Tone.CINEMATIC: TonePreset(
        tone=Tone.CINEMATIC,
        display_name="Cinematic & Suspenseful",
        modifier="Use cinematic language with rich visual descriptions and dramatic pacing.",
    ),
    Tone.INVESTIGATIVE: TonePreset(
        tone=Tone.INVESTIGATIVE,
        display_name="Investigative & Matter-of-Fact",
        modifier="Maintain a professional, fact-based tone with analytical depth.",
    ),
    Tone.FRIENDLY: TonePreset(
        tone=Tone.FRIENDLY,
        display_name="Friendly & Educational",
        modifier="Keep the tone conversational and approachable, like explaining to a friend.",
    ),
    Tone.EPIC: TonePreset(
        tone=Tone.EPIC,
        display_name="Epic & Inspirational",
        modifier=(
            "Use inspiring, larger-than-life language that emphasizes significance "
            "and impact."
        ),
    ),
    Tone.DRY: TonePreset(
        tone=Tone.DRY,
        display_name="Dry & Wry",
        modifier=(
            "Employ subtle humor and understated delivery with occasional witty "
            "observations."
        ),
    ),
}


def get_template_preset(template: ContentTemplate | str) -> TemplatePreset:
    """Get the preset for a template.

    Raises:
        ValueError: If the template name is unknown
    """
    return TEMPLATE_PRESETS[ContentTemplate(template)]


def get_tone_preset(tone: Tone | str) -> TonePreset:
    """Get the preset for a tone.

    Raises:
        ValueError: If the tone name is unknown
    """
    return TONE_PRESETS[Tone(tone)]
