"""Lexical relevance scoring between beat text and asset descriptions.

A coarse stand-in for semantic similarity: the fraction of beat tokens that
appear in the asset's description. An embedding based scorer can replace it
as long as it keeps the (beat text, description) -> [0, 1] contract.
"""

from storybeat.domain.models import Asset, AssetMetadata

# Tokens this short ("the", "and", "a") never count as matches
MIN_TOKEN_LENGTH = 4


def asset_description(metadata: AssetMetadata) -> str:
    """Text an asset is scored against: alt text, else its attribution."""
    return metadata.alt or metadata.attribution or ""


def score(beat_text: str, description: str) -> float:
    """Relevance of a description to a beat, in [0, 1].

    Every whitespace token of the beat longer than three characters that
    occurs (case-insensitively) inside the description counts as a match.
    The score is matches over the total number of beat tokens, so short
    tokens dilute it without ever matching.
    """
    tokens = beat_text.casefold().split()
    if not any(len(t) >= MIN_TOKEN_LENGTH for t in tokens):
        return 0.0

    haystack = description.casefold()
    matches = sum(1 for t in tokens if len(t) >= MIN_TOKEN_LENGTH and t in haystack)
    return min(1.0, matches / len(tokens))


def score_asset(beat_text: str, asset: Asset) -> float:
    """Score an asset against a beat using its metadata description."""
    return score(beat_text, asset_description(asset.metadata))
