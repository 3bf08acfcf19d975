"""Tests for beat segmentation."""

import pytest

from storybeat.services.segmenter import SentenceBeatService, segment, split_sentences

SCRIPT = "A dog ran. A dog barked loudly at the mailman. The mailman left quickly."


class TestSplitSentences:
    """Tests for sentence splitting."""

    def test_keeps_terminal_punctuation(self) -> None:
        assert split_sentences("Wait! Really? Yes.") == ["Wait!", "Really?", "Yes."]

    def test_runs_of_punctuation_stay_with_sentence(self) -> None:
        assert split_sentences("What?! No... Fine.") == ["What?!", "No...", "Fine."]

    def test_trailing_text_without_punctuation_is_a_sentence(self) -> None:
        assert split_sentences("First one. and then some") == ["First one.", "and then some"]

    def test_blank_and_punctuation_only_fragments_dropped(self) -> None:
        assert split_sentences("  ...  !  ") == []


class TestSegment:
    """Tests for greedy sentence grouping."""

    def test_empty_script_gives_no_beats(self) -> None:
        assert segment("", 540) == []
        assert segment("   \n  ", 540) == []

    def test_groups_sentences_up_to_pace_limit(self) -> None:
        # 3 sentences over 12s: average 4s, limit 6s; weights 1.5, 3.5, 2.0
        beats = segment(SCRIPT, 12)

        assert beats == [
            "A dog ran. A dog barked loudly at the mailman.",
            "The mailman left quickly.",
        ]

    def test_tight_target_gives_one_sentence_per_beat(self) -> None:
        # Limit 4.5s: every addition overflows
        assert segment(SCRIPT, 9) == [
            "A dog ran.",
            "A dog barked loudly at the mailman.",
            "The mailman left quickly.",
        ]

    def test_generous_target_gives_single_beat(self) -> None:
        assert segment(SCRIPT, 540) == [SCRIPT]

    def test_oversized_sentence_becomes_its_own_beat(self) -> None:
        long_sentence = " ".join(["word"] * 40) + "."
        script = f"Short one. {long_sentence} Short two."

        beats = segment(script, 12)

        assert long_sentence in beats
        assert beats.index(long_sentence) == 1

    def test_beats_reconstruct_sentences_in_order(self) -> None:
        script = (
            "The tide came in. Nobody noticed at first! Then the bells rang? "
            "Boats scattered across the bay. The harbour emptied by noon."
        )
        for target in (5, 20, 60, 540):
            beats = segment(script, target)
            assert " ".join(beats) == " ".join(split_sentences(script))

    def test_is_deterministic(self) -> None:
        assert segment(SCRIPT, 12) == segment(SCRIPT, 12)


@pytest.mark.asyncio
async def test_sentence_beat_service_delegates_to_segment() -> None:
    service = SentenceBeatService()

    assert service.name == "sentence"
    assert await service.segment(SCRIPT, 12) == segment(SCRIPT, 12)
