"""Stateless script, beat and composition endpoints.

These take everything they need in the request body and touch no stored
project; the project workflow lives under ``/api/v1/projects``.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storybeat.api.deps import BeatServiceDep, ComposerDep, ScriptGeneratorDep
from storybeat.domain.enums import AspectRatio, ContentTemplate, Tone
from storybeat.domain.errors import CollaboratorError
from storybeat.domain.models import MAX_TARGET_DURATION_SECONDS, MIN_TARGET_DURATION_SECONDS
from storybeat.logging import get_logger
from storybeat.services.composer import CompositionRequest
from storybeat.services.duration import estimate_beat_duration

router = APIRouter(tags=["Compose"])
logger = get_logger(__name__)

DEFAULT_BEAT_TARGET_SECONDS = 540


class CamelModel(BaseModel):
    """Request/response model using camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateScriptRequest(CamelModel):
    topic: str = Field(..., min_length=1)
    template: ContentTemplate
    tone: Tone
    target_duration: int = Field(
        ..., ge=MIN_TARGET_DURATION_SECONDS, le=MAX_TARGET_DURATION_SECONDS
    )


class GenerateScriptResponse(CamelModel):
    script: str
    word_count: int
    estimated_duration: float


class SegmentBeatsRequest(CamelModel):
    script: str = Field(..., min_length=1)
    target_duration: float = Field(default=DEFAULT_BEAT_TARGET_SECONDS, gt=0)


class BeatOut(CamelModel):
    id: str
    text: str
    start_time: float
    duration: float


class SegmentBeatsResponse(CamelModel):
    beats: list[BeatOut]


class ComposeRequest(CamelModel):
    beat_text: str = Field(..., min_length=1)
    tone: Tone = Tone.FRIENDLY
    template: ContentTemplate = ContentTemplate.EXPLAINER
    aspect_ratio: AspectRatio = AspectRatio.HORIZONTAL_16_9
    ai_aggressiveness: float = Field(default=0.5, ge=0.0, le=1.0)


class AssetOut(CamelModel):
    id: str
    type: str
    url: str
    thumbnail_url: str | None = None
    source: str
    metadata: dict[str, Any]
    score: float
    selected: bool


class ComposeMetadata(CamelModel):
    search_query: str
    stock_results: int
    stock_min_score: float
    ai_assets_generated: int


class ComposeResponse(CamelModel):
    assets: list[AssetOut]
    metadata: ComposeMetadata


@router.post(
    "/script/generate",
    response_model=GenerateScriptResponse,
    summary="Generate script",
    description="Author a narration script for a topic.",
)
async def generate_script(
    request: GenerateScriptRequest,
    generator: ScriptGeneratorDep,
) -> GenerateScriptResponse:
    try:
        script = await generator.generate(
            topic=request.topic,
            template=request.template,
            tone=request.tone,
            target_duration_seconds=request.target_duration,
        )
    except CollaboratorError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to generate script: {e.message}",
        ) from e

    return GenerateScriptResponse(
        script=script.text,
        word_count=script.word_count,
        estimated_duration=script.estimated_duration_seconds,
    )


@router.post(
    "/script/beats",
    response_model=SegmentBeatsResponse,
    summary="Segment script into beats",
    description="Split a script into timed beats (target duration defaults to 540s).",
)
async def segment_beats(
    request: SegmentBeatsRequest,
    beat_service: BeatServiceDep,
) -> SegmentBeatsResponse:
    texts = await beat_service.segment(request.script, request.target_duration)

    return SegmentBeatsResponse(
        beats=[
            BeatOut(
                id=f"beat-{index}",
                text=text,
                start_time=0,
                duration=estimate_beat_duration(text),
            )
            for index, text in enumerate(texts)
        ]
    )


@router.post(
    "/compose",
    response_model=ComposeResponse,
    summary="Compose assets for a beat",
    description="Find stock media for a beat, falling back to AI images.",
)
async def compose(request: ComposeRequest, composer: ComposerDep) -> ComposeResponse:
    result = await composer.compose(
        CompositionRequest(
            beat_text=request.beat_text,
            tone=str(request.tone),
            template=str(request.template),
            aspect_ratio=str(request.aspect_ratio),
            ai_aggressiveness=request.ai_aggressiveness,
        )
    )

    return ComposeResponse(
        assets=[
            AssetOut(
                id=asset.id,
                type=str(asset.kind),
                url=asset.url,
                thumbnail_url=asset.thumbnail_url,
                source=str(asset.source),
                metadata={
                    "width": asset.metadata.width,
                    "height": asset.metadata.height,
                    "alt": asset.metadata.alt,
                    "attribution": asset.metadata.attribution,
                },
                score=asset.score,
                selected=asset.selected,
            )
            for asset in result.assets
        ],
        metadata=ComposeMetadata(
            search_query=result.search_query,
            stock_results=result.stock_results,
            stock_min_score=result.stock_min_score,
            ai_assets_generated=result.ai_assets_generated,
        ),
    )
