"""FastAPI dependencies."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from storybeat.services.composer import CompositionEngine
from storybeat.services.project_pipeline import ProjectPipeline, Workspace
from storybeat.services.providers import get_image_gen_provider, get_stock_provider
from storybeat.services.repository import ProjectRepository
from storybeat.services.script_generator import ScriptGenerator
from storybeat.services.segmenter import BeatService, SentenceBeatService


def get_script_generator() -> ScriptGenerator:
    """Get a script generator over the configured LLM provider."""
    return ScriptGenerator()


def get_beat_service() -> BeatService:
    return SentenceBeatService()


def get_composer() -> CompositionEngine:
    """Get a composition engine over the configured stock and image providers."""
    return CompositionEngine(get_stock_provider(), get_image_gen_provider())


@lru_cache
def get_pipeline() -> ProjectPipeline:
    """Get the process-wide project pipeline, persisting to the configured database."""
    return ProjectPipeline(
        script_generator=get_script_generator(),
        beat_service=get_beat_service(),
        composer=get_composer(),
        repository=ProjectRepository(),
    )


@lru_cache
def get_workspace() -> Workspace:
    """Get the process-wide set of open projects."""
    return Workspace()


ScriptGeneratorDep = Annotated[ScriptGenerator, Depends(get_script_generator)]
BeatServiceDep = Annotated[BeatService, Depends(get_beat_service)]
ComposerDep = Annotated[CompositionEngine, Depends(get_composer)]
PipelineDep = Annotated[ProjectPipeline, Depends(get_pipeline)]
WorkspaceDep = Annotated[Workspace, Depends(get_workspace)]
