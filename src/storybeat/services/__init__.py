"""Application services."""

from storybeat.services.composer import CompositionEngine, CompositionRequest, CompositionResult
from storybeat.services.narration import NarrationResult, NarrationService
from storybeat.services.project_pipeline import (
    ProjectContext,
    ProjectPipeline,
    StageReport,
    Workspace,
)
from storybeat.services.repository import ProjectRepository
from storybeat.services.script_generator import GeneratedScript, ScriptGenerator
from storybeat.services.segmenter import BeatService, SentenceBeatService
from storybeat.services.storage import StorageService, StoredMedia

__all__ = [
    "BeatService",
    "CompositionEngine",
    "CompositionRequest",
    "CompositionResult",
    "GeneratedScript",
    "NarrationResult",
    "NarrationService",
    "ProjectContext",
    "ProjectPipeline",
    "ProjectRepository",
    "ScriptGenerator",
    "SentenceBeatService",
    "StageReport",
    "StorageService",
    "StoredMedia",
    "Workspace",
]
