"""Domain enumerations."""

from enum import StrEnum


class ContentTemplate(StrEnum):
    """Narrative template a script is authored against."""

    HORROR = "horror"
    TRUE_CRIME = "true-crime"
    EXPLAINER = "explainer"
    HISTORY = "history"
    SPORTS = "sports"

    @classmethod
    def _missing_(cls, value: object) -> "ContentTemplate | None":
        # Older clients send "truecrime"
        if isinstance(value, str) and value.lower() == "truecrime":
            return cls.TRUE_CRIME
        return None


class Tone(StrEnum):
    """Delivery tone applied on top of a template."""

    CINEMATIC = "cinematic"
    INVESTIGATIVE = "investigative"
    FRIENDLY = "friendly"
    EPIC = "epic"
    DRY = "dry"


class AspectRatio(StrEnum):
    """Supported output aspect ratios."""

    HORIZONTAL_16_9 = "16:9"
    VERTICAL_9_16 = "9:16"
    SQUARE_1_1 = "1:1"


class ProjectStatus(StrEnum):
    """Lifecycle status of a project."""

    DRAFT = "draft"
    GENERATING_SCRIPT = "generating-script"
    SCRIPT_READY = "script-ready"
    GENERATING_BEATS = "generating-beats"
    BEATS_READY = "beats-ready"
    COMPOSING = "composing"
    READY_FOR_RENDER = "ready-for-render"
    # Reachable only once a render collaborator exists
    RENDERING = "rendering"
    COMPLETE = "complete"

    @property
    def is_busy(self) -> bool:
        """Whether a project-level stage is currently running."""
        return self in (
            ProjectStatus.GENERATING_SCRIPT,
            ProjectStatus.GENERATING_BEATS,
            ProjectStatus.COMPOSING,
            ProjectStatus.RENDERING,
        )


class AssetKind(StrEnum):
    """Media kind of a visual asset."""

    IMAGE = "image"
    VIDEO = "video"


class AssetSource(StrEnum):
    """Where a visual asset came from."""

    STOCK = "stock"  # Stock library search
    AI = "ai"  # Purpose-generated image
    UPLOAD = "upload"  # Provided by the operator


class WizardStep(StrEnum):
    """Ordered steps of the project creation wizard."""

    PROJECT = "project"
    SCRIPT = "script"
    VOICE = "voice"
    SCENES = "scenes"
    RENDER = "render"

    @classmethod
    def ordered(cls) -> list["WizardStep"]:
        """Steps in wizard order."""
        return list(cls)


class StageOutcome(StrEnum):
    """Outcome of a pipeline stage, reported to the operator."""

    SUCCEEDED = "succeeded"
    EMPTY = "empty"  # Ran fine but produced nothing usable
    FAILED = "failed"  # A collaborator failed
    REJECTED = "rejected"  # Not allowed in the current state
