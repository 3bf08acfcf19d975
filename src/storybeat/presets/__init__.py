"""Script authoring presets."""

from storybeat.presets.templates import (
    TEMPLATE_PRESETS,
    TONE_PRESETS,
    TemplatePreset,
    TonePreset,
    get_template_preset,
    get_tone_preset,
)

__all__ = [
    "TEMPLATE_PRESETS",
    "TONE_PRESETS",
    "TemplatePreset",
    "TonePreset",
    "get_template_preset",
    "get_tone_preset",
]
