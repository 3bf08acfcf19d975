"""Domain models and business logic."""

from storybeat.domain.enums import (
    AspectRatio,
    AssetKind,
    AssetSource,
    ContentTemplate,
    ProjectStatus,
    StageOutcome,
    Tone,
    WizardStep,
)
from storybeat.domain.errors import (
    CollaboratorError,
    StateError,
    StorybeatError,
    ValidationError,
)
from storybeat.domain.models import (
    Asset,
    AssetMetadata,
    Beat,
    Project,
    ProjectConfig,
)

__all__ = [
    "AspectRatio",
    "Asset",
    "AssetKind",
    "AssetMetadata",
    "AssetSource",
    "Beat",
    "CollaboratorError",
    "ContentTemplate",
    "Project",
    "ProjectConfig",
    "ProjectStatus",
    "StageOutcome",
    "StateError",
    "StorybeatError",
    "Tone",
    "ValidationError",
    "WizardStep",
]
