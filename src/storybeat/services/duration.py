"""Speech duration estimates.

Narration is assumed to run at 150 words per minute until a measured voice
duration is available for a beat.
"""

WORDS_PER_SECOND = 2.5
SECONDS_PER_WORD = 0.5
MIN_BEAT_SECONDS = 3.0
MAX_BEAT_SECONDS = 15.0


def count_words(text: str) -> int:
    """Count whitespace separated words."""
    return len(text.split())


def words_for_duration(target_seconds: float) -> int:
    """Word budget for a script of the given spoken length."""
    return round(target_seconds * WORDS_PER_SECOND)


def duration_for_word_count(word_count: int) -> float:
    """Spoken length in seconds of ``word_count`` words."""
    return word_count / WORDS_PER_SECOND


def sentence_duration(text: str) -> float:
    """Coarse pacing weight of a sentence, used when grouping beats."""
    return count_words(text) * SECONDS_PER_WORD


def estimate_beat_duration(beat_text: str) -> float:
    """Placeholder beat length before narration is synthesized, clamped to 3-15s."""
    return max(MIN_BEAT_SECONDS, min(MAX_BEAT_SECONDS, sentence_duration(beat_text)))


def format_duration(seconds: float) -> str:
    """Format seconds as ``m:ss``."""
    total = int(seconds)
    minutes, remaining = divmod(total, 60)
    return f"{minutes}:{remaining:02d}"
