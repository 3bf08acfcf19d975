"""Project pipeline: sequences script, beat, voice and composition stages.

Every operation works on an explicit ``ProjectContext``; nothing here holds a
"current project". Stage operations never raise for collaborator or state
problems. They return ``StageReport``s (also appended to ``ctx.reports``) so
each failure reaches the operator as a discrete message.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from storybeat.config import settings
from storybeat.domain.enums import ProjectStatus, StageOutcome, WizardStep
from storybeat.domain.errors import CollaboratorError, StateError, StorybeatError
from storybeat.domain.models import Beat, Project, ProjectConfig
from storybeat.logging import get_logger, log_context
from storybeat.services.composer import (
    CompositionEngine,
    CompositionRequest,
    validate_aggressiveness,
)
from storybeat.services.duration import estimate_beat_duration
from storybeat.services.narration import NarrationService
from storybeat.services.repository import ProjectRepository
from storybeat.services.script_generator import ScriptGenerator
from storybeat.services.segmenter import BeatService, SentenceBeatService

logger = get_logger(__name__)

STAGE_SCRIPT = "script"
STAGE_BEATS = "beats"
STAGE_VOICE = "voice"
STAGE_COMPOSE = "compose"

# Statuses in which no stage may start
_FROZEN_STATUSES = (ProjectStatus.RENDERING, ProjectStatus.COMPLETE)


@dataclass
class StageReport:
    """Outcome of one stage run, for one beat or for the whole project."""

    stage: str
    outcome: StageOutcome
    message: str
    beat_id: UUID | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.outcome == StageOutcome.SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage,
            "outcome": str(self.outcome),
            "message": self.message,
            "beat_id": str(self.beat_id) if self.beat_id else None,
            "details": self.details,
        }


class ProjectContext:
    """Working state around one project: controls, wizard step, reports."""

    def __init__(self, project: Project, ai_aggressiveness: float = 0.5) -> None:
        self.project = project
        self._ai_aggressiveness = validate_aggressiveness(ai_aggressiveness)
        self.step = WizardStep.PROJECT
        self.reports: list[StageReport] = []
        self._in_flight = 0

    @property
    def project_id(self) -> UUID:
        return self.project.id

    @property
    def ai_aggressiveness(self) -> float:
        return self._ai_aggressiveness

    @ai_aggressiveness.setter
    def ai_aggressiveness(self, value: float) -> None:
        self._ai_aggressiveness = validate_aggressiveness(value)

    @property
    def is_generating(self) -> bool:
        """True while any external call dispatched for this project is unresolved."""
        return self._in_flight > 0

    @contextmanager
    def dispatch(self) -> Iterator[None]:
        """Mark an external call in flight; its log events carry the project id."""
        self._in_flight += 1
        try:
            with log_context(project_id=str(self.project.id)):
                yield
        finally:
            self._in_flight -= 1

    def next_step(self) -> WizardStep:
        steps = WizardStep.ordered()
        index = steps.index(self.step)
        self.step = steps[min(index + 1, len(steps) - 1)]
        return self.step

    def prev_step(self) -> WizardStep:
        steps = WizardStep.ordered()
        index = steps.index(self.step)
        self.step = steps[max(index - 1, 0)]
        return self.step

    def record(self, report: StageReport) -> StageReport:
        self.reports.append(report)
        log = logger.info if report.outcome != StageOutcome.FAILED else logger.warning
        log(
            "stage_reported",
            project_id=str(self.project.id),
            stage=report.stage,
            outcome=str(report.outcome),
            beat_id=str(report.beat_id) if report.beat_id else None,
            message=report.message,
        )
        return report


class Workspace:
    """Open projects, exactly one of which is current at a time."""

    def __init__(self) -> None:
        self._contexts: dict[UUID, ProjectContext] = {}
        self._current_id: UUID | None = None

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._contexts

    @property
    def current(self) -> ProjectContext | None:
        if self._current_id is None:
            return None
        return self._contexts[self._current_id]

    def add(self, ctx: ProjectContext, make_current: bool = True) -> ProjectContext:
        self._contexts[ctx.project_id] = ctx
        if make_current or self._current_id is None:
            self._current_id = ctx.project_id
        return ctx

    def get(self, project_id: UUID) -> ProjectContext | None:
        return self._contexts.get(project_id)

    def switch(self, project_id: UUID) -> ProjectContext:
        """Make another open project current.

        Raises:
            KeyError: If the project is not open in this workspace
        """
        if project_id not in self._contexts:
            raise KeyError(f"Project {project_id} is not open")
        self._current_id = project_id
        return self._contexts[project_id]

    def remove(self, project_id: UUID) -> ProjectContext | None:
        ctx = self._contexts.pop(project_id, None)
        if self._current_id == project_id:
            self._current_id = next(iter(self._contexts), None)
        return ctx

    def projects(self) -> list[Project]:
        """Open projects, most recently updated first."""
        return sorted(
            (c.project for c in self._contexts.values()),
            key=lambda p: p.updated_at,
            reverse=True,
        )

    def reset(self) -> None:
        """Close every project."""
        self._contexts.clear()
        self._current_id = None


class ProjectPipeline:
    """Drives projects through script, beats, voice and composition."""

    def __init__(
        self,
        script_generator: ScriptGenerator | None = None,
        beat_service: BeatService | None = None,
        narration: NarrationService | None = None,
        composer: CompositionEngine | None = None,
        repository: ProjectRepository | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        if composer is None:
            from storybeat.services.providers import get_image_gen_provider, get_stock_provider

            composer = CompositionEngine(get_stock_provider(), get_image_gen_provider())

        self.script_generator = script_generator or ScriptGenerator()
        self.beat_service = beat_service or SentenceBeatService()
        self.narration = narration or NarrationService()
        self.composer = composer
        self.repository = repository
        self.max_concurrency = max_concurrency or settings.max_concurrency

    # ------------------------------------------------------------------
    # Project lifecycle
    # ------------------------------------------------------------------

    def create_project(
        self,
        config: ProjectConfig,
        ai_aggressiveness: float | None = None,
    ) -> ProjectContext:
        """Start a draft project.

        Raises:
            ValidationError: If the aggressiveness is outside [0, 1]
        """
        if ai_aggressiveness is None:
            ai_aggressiveness = settings.default_ai_aggressiveness
        ctx = ProjectContext(Project.create(config), ai_aggressiveness)
        self._save(ctx)

        logger.info(
            "project_created",
            project_id=str(ctx.project_id),
            title=config.title,
            template=str(config.template),
            target_duration=config.target_duration_seconds,
        )
        return ctx

    def open_project(
        self, project_id: UUID | str, ai_aggressiveness: float | None = None
    ) -> ProjectContext | None:
        """Load a persisted project into a fresh context."""
        if self.repository is None:
            return None
        project = self.repository.get(project_id)
        if project is None:
            return None
        if ai_aggressiveness is None:
            ai_aggressiveness = settings.default_ai_aggressiveness
        return ProjectContext(project, ai_aggressiveness)

    def update_project(self, ctx: ProjectContext, title: str) -> Project:
        """Rename a project; the title is its only mutable setting."""
        project = ctx.project
        project.config = project.config.with_title(title)
        project.touch()
        self._save(ctx)
        return project

    def delete_project(self, project_id: UUID) -> bool:
        """Forget a persisted project and remove its stored narration.

        Returns True if the project was persisted here.
        """
        deleted = self.repository.delete(project_id) if self.repository is not None else False
        files = self.narration.storage.delete_project_media(project_id)
        logger.info(
            "project_deleted_with_media",
            project_id=str(project_id),
            persisted=deleted,
            files_removed=files,
        )
        return deleted

    # ------------------------------------------------------------------
    # Script and beats
    # ------------------------------------------------------------------

    async def request_script(self, ctx: ProjectContext) -> StageReport:
        """Author a script for the project's topic.

        Existing beats are left alone; they are only replaced by a later
        ``request_beats``.
        """
        project = ctx.project
        try:
            self._require_idle(STAGE_SCRIPT, project)
        except StateError as e:
            return ctx.record(StageReport(STAGE_SCRIPT, StageOutcome.REJECTED, str(e)))

        config = project.config

        with self._holding_status(ctx, ProjectStatus.GENERATING_SCRIPT, project.status):
            try:
                with ctx.dispatch():
                    generated = await self.script_generator.generate(
                        topic=config.topic,
                        template=config.template,
                        tone=config.tone,
                        target_duration_seconds=config.target_duration_seconds,
                    )
            except CollaboratorError as e:
                return ctx.record(StageReport(STAGE_SCRIPT, StageOutcome.FAILED, str(e)))

            project.script = generated.text
            self._set_status(ctx, ProjectStatus.SCRIPT_READY)
        self._save(ctx)

        return ctx.record(
            StageReport(
                STAGE_SCRIPT,
                StageOutcome.SUCCEEDED,
                f"script ready ({generated.word_count} words)",
                details={
                    "word_count": generated.word_count,
                    "estimated_duration_seconds": generated.estimated_duration_seconds,
                },
            )
        )

    async def request_beats(self, ctx: ProjectContext, script: str | None = None) -> StageReport:
        """Segment a script into beats, replacing any existing beats.

        Uses ``script`` when given (storing it on the project), otherwise the
        project's current script.
        """
        project = ctx.project
        try:
            self._require_idle(STAGE_BEATS, project)
        except StateError as e:
            return ctx.record(StageReport(STAGE_BEATS, StageOutcome.REJECTED, str(e)))

        text = script if script is not None else project.script
        if not text or not text.strip():
            return ctx.record(
                StageReport(STAGE_BEATS, StageOutcome.REJECTED, "no script to segment")
            )

        if script is not None:
            project.script = script
            fallback_status = ProjectStatus.SCRIPT_READY
        else:
            fallback_status = project.status
        with self._holding_status(ctx, ProjectStatus.GENERATING_BEATS, fallback_status):
            try:
                with ctx.dispatch():
                    texts = await self.beat_service.segment(
                        text, project.config.target_duration_seconds
                    )
            except Exception as e:
                logger.error(
                    "beat_service_failed", service=self.beat_service.name, error=str(e)
                )
                error = CollaboratorError("beats", str(e))
                return ctx.record(StageReport(STAGE_BEATS, StageOutcome.FAILED, str(error)))

            texts = [t for t in texts if t.strip()]
            if texts:
                self.replace_beats(
                    ctx, [Beat.create(t, estimate_beat_duration(t)) for t in texts]
                )
                self._set_status(ctx, ProjectStatus.BEATS_READY)
        self._save(ctx)

        if not texts:
            return ctx.record(
                StageReport(STAGE_BEATS, StageOutcome.EMPTY, "script produced no beats")
            )

        return ctx.record(
            StageReport(
                STAGE_BEATS,
                StageOutcome.SUCCEEDED,
                f"{len(texts)} beats",
                details={
                    "beat_count": len(texts),
                    "estimated_duration_seconds": project.total_duration,
                },
            )
        )

    def replace_beats(self, ctx: ProjectContext, beats: Sequence[Beat]) -> None:
        """Swap in a new beat list wholesale, discarding voice and asset work."""
        project = ctx.project
        project.beats = list(beats)
        project.touch()

        if not project.status.is_busy and project.status not in _FROZEN_STATUSES:
            if project.beats:
                project.status = ProjectStatus.BEATS_READY
            elif project.script:
                project.status = ProjectStatus.SCRIPT_READY
            else:
                project.status = ProjectStatus.DRAFT
            self._save(ctx)

    def update_beat(self, ctx: ProjectContext, beat_id: UUID | str, text: str) -> Beat | None:
        """Edit a beat's text.

        The duration is re-estimated and the now stale narration dropped.
        Returns None if the beat does not exist.

        Raises:
            ValidationError: If the text is empty
        """
        beat = ctx.project.find_beat(beat_id)
        if beat is None:
            return None

        edited = Beat.create(text, estimate_beat_duration(text))
        beat.text = edited.text
        beat.duration = edited.duration
        beat.voice_url = None
        beat.voice_duration = None
        beat.start_time = None
        ctx.project.touch()
        self._save(ctx)
        return beat

    # ------------------------------------------------------------------
    # Voice
    # ------------------------------------------------------------------

    async def request_voice(self, ctx: ProjectContext, beat_id: UUID | str) -> StageReport:
        """Narrate a single beat."""
        beat = ctx.project.find_beat(beat_id)
        if beat is None:
            return ctx.record(
                StageReport(STAGE_VOICE, StageOutcome.REJECTED, f"unknown beat {beat_id}")
            )
        try:
            self._require_voice_allowed(ctx.project)
        except StateError as e:
            return ctx.record(StageReport(STAGE_VOICE, StageOutcome.REJECTED, str(e), beat.id))

        try:
            report = await self._voice_beat(ctx, beat)
        except StorybeatError as e:
            report = StageReport(STAGE_VOICE, StageOutcome.FAILED, str(e), beat.id)
        self._save(ctx)
        return ctx.record(report)

    async def request_voice_all(self, ctx: ProjectContext) -> list[StageReport]:
        """Narrate every beat with bounded concurrency, reports in beat order."""
        project = ctx.project
        if not project.beats:
            return [ctx.record(StageReport(STAGE_VOICE, StageOutcome.REJECTED, "no beats"))]
        try:
            self._require_voice_allowed(project)
        except StateError as e:
            return [ctx.record(StageReport(STAGE_VOICE, StageOutcome.REJECTED, str(e)))]

        beats = list(project.beats)
        reports = await self._fan_out(
            ctx, STAGE_VOICE, beats, lambda beat: self._voice_beat(ctx, beat)
        )
        self._save(ctx)

        logger.info(
            "voice_all_completed",
            project_id=str(project.id),
            beats=len(beats),
            succeeded=sum(1 for r in reports if r.ok),
        )
        return [ctx.record(r) for r in reports]

    async def _voice_beat(self, ctx: ProjectContext, beat: Beat) -> StageReport:
        with ctx.dispatch():
            narration = await self.narration.narrate(ctx.project.id, beat)

        if ctx.project.find_beat(beat.id) is not beat:
            return StageReport(
                STAGE_VOICE,
                StageOutcome.REJECTED,
                "beat was replaced while narrating; audio discarded",
                beat.id,
            )

        beat.voice_url = narration.audio_url
        beat.voice_duration = narration.measured_duration_seconds
        ctx.project.touch()

        if all(b.voice_duration is not None for b in ctx.project.beats):
            self.finalize_timeline(ctx)

        return StageReport(
            STAGE_VOICE,
            StageOutcome.SUCCEEDED,
            f"narrated ({narration.measured_duration_seconds:.1f}s)",
            beat.id,
            details={
                "voice_url": narration.audio_url,
                "voice_duration": narration.measured_duration_seconds,
            },
        )

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    async def request_composition(
        self, ctx: ProjectContext, force: bool = False
    ) -> list[StageReport]:
        """Choose visual assets for beats.

        Beats that already have a selected asset are skipped unless ``force``.
        Each beat is written back independently, so one failure never loses
        another beat's assets.
        """
        project = ctx.project
        try:
            self._require_idle(STAGE_COMPOSE, project)
        except StateError as e:
            return [ctx.record(StageReport(STAGE_COMPOSE, StageOutcome.REJECTED, str(e)))]
        if not project.beats:
            return [
                ctx.record(StageReport(STAGE_COMPOSE, StageOutcome.REJECTED, "no beats to compose"))
            ]

        targets = [b for b in project.beats if force or b.selected_asset is None]
        if not targets:
            self._set_status(ctx, ProjectStatus.READY_FOR_RENDER)
            self._save(ctx)
            return [
                ctx.record(
                    StageReport(
                        STAGE_COMPOSE,
                        StageOutcome.SUCCEEDED,
                        "every beat already has a selected asset",
                    )
                )
            ]

        aggressiveness = ctx.ai_aggressiveness
        with self._holding_status(ctx, ProjectStatus.COMPOSING, project.status):
            reports = await self._fan_out(
                ctx,
                STAGE_COMPOSE,
                targets,
                lambda beat: self._compose_beat(ctx, beat, aggressiveness),
            )
            self._set_status(ctx, self._composed_status(project))
        self._save(ctx)

        logger.info(
            "composition_run_completed",
            project_id=str(project.id),
            beats=len(targets),
            selected=sum(1 for b in project.beats if b.selected_asset is not None),
            status=str(project.status),
        )
        return [ctx.record(r) for r in reports]

    async def _compose_beat(
        self, ctx: ProjectContext, beat: Beat, aggressiveness: float
    ) -> StageReport:
        config = ctx.project.config
        request = CompositionRequest(
            beat_text=beat.text,
            tone=str(config.tone),
            template=str(config.template),
            aspect_ratio=str(config.aspect_ratio),
            ai_aggressiveness=aggressiveness,
        )
        with ctx.dispatch():
            result = await self.composer.compose(request)

        if ctx.project.find_beat(beat.id) is not beat:
            return StageReport(
                STAGE_COMPOSE,
                StageOutcome.REJECTED,
                "beat was replaced while composing; assets discarded",
                beat.id,
            )

        if result.assets:
            beat.assets = result.assets
            ctx.project.touch()

        return StageReport(
            STAGE_COMPOSE,
            result.outcome,
            result.message,
            beat.id,
            details=result.metadata(),
        )

    def select_asset(
        self, ctx: ProjectContext, beat_id: UUID | str, asset_id: str
    ) -> bool:
        """Make one of a beat's candidates its selected asset.

        Returns False, changing nothing, when the beat or asset is unknown.
        """
        project = ctx.project
        beat = project.find_beat(beat_id)
        if beat is None or not beat.select(asset_id):
            return False

        project.touch()
        if project.status == ProjectStatus.BEATS_READY:
            project.status = self._composed_status(project)
        self._save(ctx)
        return True

    # ------------------------------------------------------------------
    # Timeline
    # ------------------------------------------------------------------

    def finalize_timeline(self, ctx: ProjectContext) -> float:
        """Lay beats end to end, returning the total runtime."""
        cursor = 0.0
        for beat in ctx.project.beats:
            beat.start_time = cursor
            cursor += beat.effective_duration
        ctx.project.touch()
        self._save(ctx)
        return cursor

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _fan_out(
        self,
        ctx: ProjectContext,
        stage: str,
        beats: Sequence[Beat],
        work: Callable[[Beat], Awaitable[StageReport]],
    ) -> list[StageReport]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run(beat: Beat) -> StageReport:
            async with semaphore:
                return await work(beat)

        with ctx.dispatch():
            results = await asyncio.gather(*(run(b) for b in beats), return_exceptions=True)

        reports: list[StageReport] = []
        for beat, result in zip(beats, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    "beat_stage_error",
                    stage=stage,
                    beat_id=str(beat.id),
                    error=str(result),
                    error_type=type(result).__name__,
                )
                reports.append(StageReport(stage, StageOutcome.FAILED, str(result), beat.id))
            else:
                reports.append(result)
        return reports

    @contextmanager
    def _holding_status(
        self, ctx: ProjectContext, busy: ProjectStatus, prior: ProjectStatus
    ) -> Iterator[None]:
        """Hold ``busy`` while a stage runs.

        Unless the stage commits another status, ``prior`` is restored on the
        way out, cancellation included.
        """
        self._set_status(ctx, busy)
        try:
            yield
        finally:
            if ctx.project.status == busy:
                self._set_status(ctx, prior)

    def _require_idle(self, operation: str, project: Project) -> None:
        if project.status.is_busy or project.status in _FROZEN_STATUSES:
            raise StateError(
                operation,
                str(project.status),
                "another stage is running or the project is closed",
            )

    def _require_voice_allowed(self, project: Project) -> None:
        status = project.status
        if status == ProjectStatus.GENERATING_BEATS or status in _FROZEN_STATUSES:
            raise StateError(
                STAGE_VOICE,
                str(project.status),
                "beats are being replaced or the project is closed",
            )

    @staticmethod
    def _composed_status(project: Project) -> ProjectStatus:
        if project.beats and all(b.selected_asset is not None for b in project.beats):
            return ProjectStatus.READY_FOR_RENDER
        return ProjectStatus.BEATS_READY

    def _set_status(self, ctx: ProjectContext, status: ProjectStatus) -> None:
        project = ctx.project
        if project.status != status:
            logger.debug(
                "project_status_changed",
                project_id=str(project.id),
                from_status=str(project.status),
                to_status=str(status),
            )
        project.status = status
        project.touch()

    def _save(self, ctx: ProjectContext) -> None:
        if self.repository is not None:
            self.repository.save(ctx.project)
