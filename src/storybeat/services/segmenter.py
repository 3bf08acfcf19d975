"""Beat segmentation: group script sentences into paced narrative beats."""

import re
from typing import Protocol

from storybeat.logging import get_logger
from storybeat.services.duration import sentence_duration

logger = get_logger(__name__)

# A sentence is a run of non-terminal characters plus its terminal punctuation
SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]*")

# A beat may run up to this multiple of the average sentence length
PACE_TOLERANCE = 1.5


def split_sentences(script: str) -> list[str]:
    """Split a script on ``.``, ``!`` and ``?``, dropping blank fragments."""
    sentences = (match.strip() for match in SENTENCE_PATTERN.findall(script))
    return [s for s in sentences if s and not _is_punctuation(s)]


def _is_punctuation(fragment: str) -> bool:
    return all(ch in ".!?" for ch in fragment)


def segment(script: str, target_duration_seconds: float) -> list[str]:
    """Group sentences into beats that approximate the target pace.

    Sentences accumulate greedily into the current beat. A sentence starts a
    new beat only when the current beat is non-empty and adding it would push
    the beat's estimated length past 1.5x the average sentence length. A
    sentence is never split, so one oversized sentence ends up alone.

    Args:
        script: Full narration script
        target_duration_seconds: Intended spoken length of the whole script

    Returns:
        Beat texts in script order; empty if the script has no sentences
    """
    sentences = split_sentences(script)
    if not sentences:
        return []

    average = target_duration_seconds / len(sentences)
    limit = average * PACE_TOLERANCE

    beats: list[str] = []
    current: list[str] = []
    current_duration = 0.0

    for sentence in sentences:
        duration = sentence_duration(sentence)
        if current and current_duration + duration > limit:
            beats.append(" ".join(current))
            current = [sentence]
            current_duration = duration
        else:
            current.append(sentence)
            current_duration += duration

    if current:
        beats.append(" ".join(current))

    logger.debug(
        "script_segmented",
        sentences=len(sentences),
        beats=len(beats),
        beat_limit_seconds=limit,
    )
    return beats


class BeatService(Protocol):
    """Collaborator that turns a script into beat texts."""

    @property
    def name(self) -> str: ...

    async def segment(self, script: str, target_duration_seconds: float) -> list[str]: ...


class SentenceBeatService:
    """Local beat service using sentence-grouping segmentation."""

    @property
    def name(self) -> str:
        return "sentence"

    async def segment(self, script: str, target_duration_seconds: float) -> list[str]:
        return segment(script, target_duration_seconds)
