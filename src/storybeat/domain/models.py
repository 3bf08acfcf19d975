"""Domain models - pure Python classes independent of storage and transport."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from storybeat.domain.enums import (
    AspectRatio,
    AssetKind,
    AssetSource,
    ContentTemplate,
    ProjectStatus,
    Tone,
)
from storybeat.domain.errors import ValidationError

MIN_TARGET_DURATION_SECONDS = 60
MAX_TARGET_DURATION_SECONDS = 1800


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class ProjectConfig:
    """Immutable-at-creation configuration of a project."""

    title: str
    topic: str
    template: ContentTemplate = ContentTemplate.EXPLAINER
    tone: Tone = Tone.FRIENDLY
    target_duration_seconds: int = 540
    aspect_ratio: AspectRatio = AspectRatio.HORIZONTAL_16_9

    @classmethod
    def create(
        cls,
        title: str | None,
        topic: str | None,
        template: str | ContentTemplate = ContentTemplate.EXPLAINER,
        tone: str | Tone = Tone.FRIENDLY,
        target_duration_seconds: int | float = 540,
        aspect_ratio: str | AspectRatio = AspectRatio.HORIZONTAL_16_9,
    ) -> "ProjectConfig":
        """Build a validated config from raw values.

        Raises:
            ValidationError: Listing every missing or out-of-range field
        """
        errors: list[str] = []

        title = (title or "").strip()
        topic = (topic or "").strip()
        if not title:
            errors.append("title is required")
        if not topic:
            errors.append("topic is required")

        template_value = _coerce(ContentTemplate, template, "template", errors)
        tone_value = _coerce(Tone, tone, "tone", errors)
        aspect_value = _coerce(AspectRatio, aspect_ratio, "aspect_ratio", errors)

        if isinstance(target_duration_seconds, bool) or not isinstance(
            target_duration_seconds, (int, float)
        ):
            errors.append("target_duration_seconds must be a number")
        elif not (
            MIN_TARGET_DURATION_SECONDS
            <= target_duration_seconds
            <= MAX_TARGET_DURATION_SECONDS
        ):
            errors.append(
                f"target_duration_seconds must be between {MIN_TARGET_DURATION_SECONDS} "
                f"and {MAX_TARGET_DURATION_SECONDS}, got {target_duration_seconds}"
            )

        if errors:
            raise ValidationError(errors)

        return cls(
            title=title,
            topic=topic,
            template=template_value,  # type: ignore[arg-type]
            tone=tone_value,  # type: ignore[arg-type]
            target_duration_seconds=int(target_duration_seconds),
            aspect_ratio=aspect_value,  # type: ignore[arg-type]
        )

    def with_title(self, title: str) -> "ProjectConfig":
        """Return a copy with a new title (the only editable field)."""
        if not title.strip():
            raise ValidationError("title is required")
        return replace(self, title=title.strip())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON storage."""
        return {
            "title": self.title,
            "topic": self.topic,
            "template": str(self.template),
            "tone": str(self.tone),
            "target_duration_seconds": self.target_duration_seconds,
            "aspect_ratio": str(self.aspect_ratio),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectConfig":
        """Create from dictionary."""
        return cls.create(
            title=data.get("title"),
            topic=data.get("topic"),
            template=data.get("template", ContentTemplate.EXPLAINER),
            tone=data.get("tone", Tone.FRIENDLY),
            target_duration_seconds=data.get("target_duration_seconds", 540),
            aspect_ratio=data.get("aspect_ratio", AspectRatio.HORIZONTAL_16_9),
        )


def _coerce(enum_cls: Any, value: Any, name: str, errors: list[str]) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        errors.append(f"{name} must be one of: {allowed} (got {value!r})")
        return None


@dataclass
class AssetMetadata:
    """Descriptive metadata of a visual asset."""

    width: int
    height: int
    alt: str | None = None
    attribution: str | None = None


@dataclass
class Asset:
    """A visual candidate or selection for a beat."""

    id: str
    kind: AssetKind
    url: str
    source: AssetSource
    metadata: AssetMetadata
    thumbnail_url: str | None = None
    score: float = 0.0
    selected: bool = False
    provider: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON storage."""
        return {
            "id": self.id,
            "kind": str(self.kind),
            "url": self.url,
            "thumbnail_url": self.thumbnail_url,
            "source": str(self.source),
            "metadata": {
                "width": self.metadata.width,
                "height": self.metadata.height,
                "alt": self.metadata.alt,
                "attribution": self.metadata.attribution,
            },
            "score": self.score,
            "selected": self.selected,
            "provider": self.provider,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Asset":
        """Create from dictionary."""
        meta = data.get("metadata", {})
        return cls(
            id=data["id"],
            kind=AssetKind(data.get("kind", AssetKind.IMAGE)),
            url=data["url"],
            thumbnail_url=data.get("thumbnail_url"),
            source=AssetSource(data["source"]),
            metadata=AssetMetadata(
                width=meta.get("width", 0),
                height=meta.get("height", 0),
                alt=meta.get("alt"),
                attribution=meta.get("attribution"),
            ),
            score=data.get("score", 0.0),
            selected=data.get("selected", False),
            provider=data.get("provider"),
        )


@dataclass
class Beat:
    """One narrative segment of a script."""

    id: UUID
    text: str
    duration: float
    start_time: float | None = None
    voice_url: str | None = None
    voice_duration: float | None = None
    assets: list[Asset] = field(default_factory=list)

    @classmethod
    def create(cls, text: str, duration: float) -> "Beat":
        """Create a fresh beat with no voice or assets."""
        text = text.strip()
        if not text:
            raise ValidationError("beat text must not be empty")
        return cls(id=uuid4(), text=text, duration=duration)

    @property
    def selected_asset(self) -> Asset | None:
        """The asset chosen to represent this beat, if any."""
        return next((a for a in self.assets if a.selected), None)

    @property
    def effective_duration(self) -> float:
        """Measured narration length when known, otherwise the estimate."""
        if self.voice_duration is not None:
            return self.voice_duration
        return self.duration

    def select(self, asset_id: str) -> bool:
        """Mark one candidate selected; no-op if it is not a current candidate."""
        if not any(a.id == asset_id for a in self.assets):
            return False
        for asset in self.assets:
            asset.selected = asset.id == asset_id
        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON storage."""
        return {
            "id": str(self.id),
            "text": self.text,
            "duration": self.duration,
            "start_time": self.start_time,
            "voice_url": self.voice_url,
            "voice_duration": self.voice_duration,
            "assets": [a.to_dict() for a in self.assets],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Beat":
        """Create from dictionary."""
        return cls(
            id=UUID(data["id"]),
            text=data["text"],
            duration=data["duration"],
            start_time=data.get("start_time"),
            voice_url=data.get("voice_url"),
            voice_duration=data.get("voice_duration"),
            assets=[Asset.from_dict(a) for a in data.get("assets", [])],
        )


@dataclass
class Project:
    """A single video generation job."""

    id: UUID
    config: ProjectConfig
    status: ProjectStatus = ProjectStatus.DRAFT
    script: str | None = None
    beats: list[Beat] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(cls, config: ProjectConfig) -> "Project":
        """Create a new draft project."""
        now = _utcnow()
        return cls(id=uuid4(), config=config, created_at=now, updated_at=now)

    @property
    def title(self) -> str:
        return self.config.title

    def touch(self) -> None:
        """Record a mutation."""
        self.updated_at = _utcnow()

    def find_beat(self, beat_id: UUID | str) -> Beat | None:
        """Look up a beat by id."""
        key = str(beat_id)
        return next((b for b in self.beats if str(b.id) == key), None)

    @property
    def total_duration(self) -> float:
        """Sum of effective beat durations."""
        return sum(b.effective_duration for b in self.beats)

    def to_dict(self) -> dict[str, Any]:
        """Serializable snapshot of the full project, beats and assets included."""
        return {
            "id": str(self.id),
            "config": self.config.to_dict(),
            "status": str(self.status),
            "script": self.script,
            "beats": [b.to_dict() for b in self.beats],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        """Restore a project from a snapshot."""
        return cls(
            id=UUID(data["id"]),
            config=ProjectConfig.from_dict(data["config"]),
            status=ProjectStatus(data.get("status", ProjectStatus.DRAFT)),
            script=data.get("script"),
            beats=[Beat.from_dict(b) for b in data.get("beats", [])],
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
