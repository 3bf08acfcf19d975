"""Composition engine: pick one visual asset per beat.

For each beat the engine searches the stock library, scores every hit against
the beat text, keeps the best hit that clears the acceptance threshold and, if
nothing qualifies, falls back to AI image generation when the operator's
aggressiveness allows it.
"""

from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from storybeat.adapters.image_gen.base import ImageGenProvider, ImageGenRequest
from storybeat.adapters.stock.base import (
    MAX_QUERY_CHARS,
    StockCandidate,
    StockSearchProvider,
    StockSearchRequest,
)
from storybeat.domain.enums import AssetKind, AssetSource, StageOutcome
from storybeat.domain.errors import ValidationError
from storybeat.domain.models import Asset, AssetMetadata
from storybeat.logging import get_logger
from storybeat.services.scorer import asset_description, score

logger = get_logger(__name__)

MAX_ASSETS_PER_BEAT = 1
STOCK_CANDIDATE_COUNT = 10
# Generated images are made for the beat, so they rank as strong matches
AI_ASSET_SCORE = 0.9
AI_FALLBACK_MIN_AGGRESSIVENESS = 0.1
AI_ATTRIBUTION = "AI Generated"


def validate_aggressiveness(ai_aggressiveness: float) -> float:
    """Reject aggressiveness values outside [0, 1]."""
    if not 0.0 <= ai_aggressiveness <= 1.0:
        raise ValidationError(f"ai_aggressiveness must be within [0, 1], got {ai_aggressiveness}")
    return float(ai_aggressiveness)


def stock_min_score(ai_aggressiveness: float) -> float:
    """Minimum relevance a stock hit needs to be accepted.

    ``max(0.3, 0.7 - aggressiveness * 0.4)``: raising aggressiveness lowers
    the bar for stock, with a floor of 0.3. Rounded to drop float noise.
    """
    aggressiveness = validate_aggressiveness(ai_aggressiveness)
    return round(max(0.3, 0.7 - aggressiveness * 0.4), 6)


def build_search_query(beat_text: str) -> str:
    """Stock search query for a beat: its first 100 characters."""
    return beat_text[:MAX_QUERY_CHARS]


@dataclass
class CompositionRequest:
    """Everything the engine needs to compose one beat."""

    beat_text: str
    tone: str
    template: str
    aspect_ratio: str
    ai_aggressiveness: float = 0.5


@dataclass
class CompositionResult:
    """Assets chosen for a beat plus what it took to choose them."""

    assets: list[Asset]
    search_query: str
    stock_results: int
    stock_min_score: float
    ai_assets_generated: int = 0
    ai_attempted: bool = False
    stock_error: str | None = None
    ai_error: str | None = None

    @property
    def selected(self) -> Asset | None:
        return next((a for a in self.assets if a.selected), None)

    @property
    def outcome(self) -> StageOutcome:
        if self.selected is not None:
            return StageOutcome.SUCCEEDED
        if self.stock_error or self.ai_error:
            return StageOutcome.FAILED
        return StageOutcome.EMPTY

    @property
    def message(self) -> str:
        """Operator facing summary of how the beat was composed."""
        selected = self.selected
        if selected is not None:
            return f"selected {selected.source} asset (score {selected.score:.2f})"
        problems = [
            f"{label} failed: {error}"
            for label, error in (("stock search", self.stock_error), ("AI image", self.ai_error))
            if error
        ]
        if problems:
            return "; ".join(problems)
        if not self.ai_attempted:
            return (
                f"no stock asset scored >= {self.stock_min_score:.2f} "
                "and AI fallback is disabled"
            )
        return f"no stock asset scored >= {self.stock_min_score:.2f} and AI produced nothing"

    def metadata(self) -> dict[str, Any]:
        return {
            "search_query": self.search_query,
            "stock_results": self.stock_results,
            "stock_min_score": self.stock_min_score,
            "ai_assets_generated": self.ai_assets_generated,
        }


class CompositionEngine:
    """Chooses visual assets for beats from stock search and AI generation."""

    def __init__(
        self,
        stock: StockSearchProvider,
        image_gen: ImageGenProvider,
        max_assets_per_beat: int = MAX_ASSETS_PER_BEAT,
        stock_candidate_count: int = STOCK_CANDIDATE_COUNT,
    ) -> None:
        self.stock = stock
        self.image_gen = image_gen
        self.max_assets_per_beat = max_assets_per_beat
        self.stock_candidate_count = stock_candidate_count

    async def compose(self, request: CompositionRequest) -> CompositionResult:
        """Compose a single beat.

        Never raises for collaborator failures: a failed stock search counts
        as zero hits and a failed AI request as zero images, each recorded on
        the result.

        Raises:
            ValidationError: If the aggressiveness is outside [0, 1]
        """
        threshold = stock_min_score(request.ai_aggressiveness)
        query = build_search_query(request.beat_text)

        logger.info(
            "composition_started",
            search_query=query,
            stock_min_score=threshold,
            ai_aggressiveness=request.ai_aggressiveness,
        )

        candidates, stock_error = await self._search_stock(query, request.aspect_ratio)

        scored = [self._stock_asset(candidate, request.beat_text) for candidate in candidates]
        accepted = sorted(
            (a for a in scored if a.score >= threshold),
            key=lambda a: a.score,
            reverse=True,
        )[: self.max_assets_per_beat]

        assets = list(accepted)
        ai_attempted = False
        ai_error = None
        shortfall = self.max_assets_per_beat - len(assets)
        if shortfall > 0 and request.ai_aggressiveness > AI_FALLBACK_MIN_AGGRESSIVENESS:
            ai_attempted = True
            ai_assets, ai_error = await self._generate_ai(request, query, shortfall)
            assets.extend(ai_assets)

        if assets:
            assets[0].selected = True

        result = CompositionResult(
            assets=assets,
            search_query=query,
            stock_results=len(scored),
            stock_min_score=threshold,
            ai_assets_generated=sum(1 for a in assets if a.source == AssetSource.AI),
            ai_attempted=ai_attempted,
            stock_error=stock_error,
            ai_error=ai_error,
        )

        logger.info(
            "composition_completed",
            outcome=str(result.outcome),
            accepted_stock=len(accepted),
            **result.metadata(),
        )
        return result

    async def _search_stock(
        self, query: str, aspect_ratio: str
    ) -> tuple[list[StockCandidate], str | None]:
        request = StockSearchRequest(
            query=query,
            aspect_ratio=aspect_ratio,
            count=self.stock_candidate_count,
        )
        try:
            result = await self.stock.search(request)
        except Exception as e:
            logger.error("stock_search_exception", provider=self.stock.name, error=str(e))
            return [], str(e)

        if not result.success:
            logger.warning(
                "stock_search_failed",
                provider=self.stock.name,
                error=result.error_message,
            )
            return [], result.error_message or "stock search failed"

        return result.candidates[: self.stock_candidate_count], None

    async def _generate_ai(
        self, request: CompositionRequest, query: str, count: int
    ) -> tuple[list[Asset], str | None]:
        prompt = f"{query}. {request.tone} style, {request.template} theme"
        gen_request = ImageGenRequest(
            prompt=prompt,
            aspect_ratio=request.aspect_ratio,
            count=count,
        )
        try:
            result = await self.image_gen.generate(gen_request)
        except Exception as e:
            logger.error("ai_fallback_exception", provider=self.image_gen.name, error=str(e))
            return [], str(e)

        if not result.success:
            logger.warning(
                "ai_fallback_failed",
                provider=self.image_gen.name,
                error=result.error_message,
            )
            return [], result.error_message or "image generation failed"

        assets = [
            Asset(
                id=f"ai-{uuid4().hex[:12]}",
                kind=AssetKind.IMAGE,
                url=image.url,
                thumbnail_url=image.url,
                source=AssetSource.AI,
                metadata=AssetMetadata(
                    width=image.width,
                    height=image.height,
                    alt=prompt,
                    attribution=AI_ATTRIBUTION,
                ),
                score=AI_ASSET_SCORE,
                provider=self.image_gen.name,
            )
            for image in result.images[:count]
        ]
        return assets, None

    def _stock_asset(self, candidate: StockCandidate, beat_text: str) -> Asset:
        metadata = AssetMetadata(
            width=candidate.width,
            height=candidate.height,
            alt=candidate.description,
            attribution=candidate.attribution,
        )
        return Asset(
            id=candidate.id,
            kind=candidate.kind,
            url=candidate.preview_url,
            thumbnail_url=candidate.thumbnail_url,
            source=AssetSource.STOCK,
            metadata=metadata,
            score=score(beat_text, asset_description(metadata)),
            provider=self.stock.name,
        )
