"""Tests for the project pipeline state machine."""

import asyncio
from uuid import uuid4

import pytest
import structlog

from storybeat.adapters.image_gen.stub import StubImageGenProvider
from storybeat.adapters.llm.stub import StubLLMProvider
from storybeat.adapters.stock.stub import StubStockSearchProvider
from storybeat.adapters.voiceover.base import VoiceoverResult
from storybeat.adapters.voiceover.stub import StubVoiceoverProvider
from storybeat.domain.enums import AssetSource, ProjectStatus, StageOutcome, WizardStep
from storybeat.domain.errors import ValidationError
from storybeat.domain.models import Beat, ProjectConfig
from storybeat.services.project_pipeline import ProjectContext, Workspace
from storybeat.services.segmenter import SentenceBeatService
from storybeat.services.storage import StorageService

SCRIPT = "A dog ran. A dog barked loudly at the mailman. The mailman left quickly."


class FlakyVoiceoverProvider(StubVoiceoverProvider):
    """Fails for any text containing a marker word."""

    def __init__(self, marker: str, latency_ms: int = 0) -> None:
        super().__init__(latency_ms=latency_ms)
        self.marker = marker
        self.failed: list[str] = []

    async def generate(self, request):
        if self.marker in request.text:
            self.failed.append(request.text)
            return VoiceoverResult(success=False, error_message="voice unavailable")
        return await super().generate(request)


class ExplodingBeatService:
    """Beat service that always raises."""

    @property
    def name(self) -> str:
        return "exploding"

    async def segment(self, script, target_duration_seconds):
        raise RuntimeError("segmenter crashed")


class SlowBeatService(SentenceBeatService):
    async def segment(self, script, target_duration_seconds):
        await asyncio.sleep(0.05)
        return await super().segment(script, target_duration_seconds)


class SlowStockProvider(StubStockSearchProvider):
    async def search(self, request):
        await asyncio.sleep(0.05)
        return await super().search(request)


class FullDiskStorageService(StorageService):
    def store_audio(self, data, project_id, beat_id, output_format="mp3"):
        raise OSError("No space left on device")


class CountingStockProvider(StubStockSearchProvider):
    """Stock provider tracking how many searches run at once."""

    def __init__(self) -> None:
        super().__init__(candidates=[])
        self.active = 0
        self.peak = 0

    async def search(self, request):
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return await super().search(request)


class TestCreateProject:
    """Tests for project creation."""

    def test_starts_as_empty_draft(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        assert ctx.project.status == ProjectStatus.DRAFT
        assert ctx.project.beats == []
        assert ctx.project.script is None
        assert ctx.ai_aggressiveness == 0.5
        assert ctx.step == WizardStep.PROJECT
        assert ctx.is_generating is False

    def test_invalid_aggressiveness_rejected(self, pipeline, project_config) -> None:
        with pytest.raises(ValidationError):
            pipeline.create_project(project_config, ai_aggressiveness=1.5)

    def test_invalid_config_never_reaches_pipeline(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ProjectConfig.create(title="", topic="", target_duration_seconds=30)

        assert len(exc_info.value.errors) == 3

    def test_persists_when_repository_given(
        self, make_pipeline, repository, project_config
    ) -> None:
        pipeline = make_pipeline(repository=repository)

        ctx = pipeline.create_project(project_config)

        stored = repository.get(ctx.project_id)
        assert stored is not None
        assert stored.title == "Lighthouse Keepers"


class TestRequestScript:
    """Tests for script generation."""

    @pytest.mark.asyncio
    async def test_success_stores_script(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        report = await pipeline.request_script(ctx)

        assert report.outcome == StageOutcome.SUCCEEDED
        assert ctx.project.status == ProjectStatus.SCRIPT_READY
        assert "the last lighthouse keepers" in ctx.project.script
        assert report.details["word_count"] == len(ctx.project.script.split())
        assert ctx.reports == [report]
        assert ctx.is_generating is False

    @pytest.mark.asyncio
    async def test_failure_reverts_status(self, make_pipeline, project_config) -> None:
        pipeline = make_pipeline(llm=StubLLMProvider(fail_with="quota exceeded"))
        ctx = pipeline.create_project(project_config)

        report = await pipeline.request_script(ctx)

        assert report.outcome == StageOutcome.FAILED
        assert "quota exceeded" in report.message
        assert ctx.project.status == ProjectStatus.DRAFT
        assert ctx.project.script is None

    @pytest.mark.asyncio
    async def test_regeneration_keeps_existing_beats(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)
        await pipeline.request_beats(ctx, SCRIPT)
        beats_before = list(ctx.project.beats)

        report = await pipeline.request_script(ctx)

        assert report.ok
        assert ctx.project.status == ProjectStatus.SCRIPT_READY
        assert ctx.project.beats == beats_before

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status",
        [ProjectStatus.GENERATING_BEATS, ProjectStatus.COMPOSING, ProjectStatus.COMPLETE],
    )
    async def test_rejected_while_busy_or_closed(
        self, pipeline, project_config, status
    ) -> None:
        ctx = pipeline.create_project(project_config)
        ctx.project.status = status

        report = await pipeline.request_script(ctx)

        assert report.outcome == StageOutcome.REJECTED
        assert ctx.project.status == status


class TestRequestBeats:
    """Tests for beat segmentation."""

    @pytest.mark.asyncio
    async def test_supplied_script_is_stored_and_segmented(self, pipeline) -> None:
        config = ProjectConfig.create(title="Dogs", topic="dogs", target_duration_seconds=60)
        ctx = pipeline.create_project(config)

        report = await pipeline.request_beats(ctx, SCRIPT)

        assert report.outcome == StageOutcome.SUCCEEDED
        assert ctx.project.script == SCRIPT
        assert ctx.project.status == ProjectStatus.BEATS_READY
        assert " ".join(b.text for b in ctx.project.beats) == SCRIPT
        for beat in ctx.project.beats:
            assert beat.assets == []
            assert beat.voice_url is None
            assert beat.start_time is None
            assert 3.0 <= beat.duration <= 15.0

    @pytest.mark.asyncio
    async def test_uses_project_script(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)
        await pipeline.request_script(ctx)

        report = await pipeline.request_beats(ctx)

        assert report.ok
        assert len(ctx.project.beats) >= 1

    @pytest.mark.asyncio
    async def test_no_script_is_rejected(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        report = await pipeline.request_beats(ctx)

        assert report.outcome == StageOutcome.REJECTED
        assert ctx.project.status == ProjectStatus.DRAFT

    @pytest.mark.asyncio
    async def test_script_without_sentences_is_empty(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        report = await pipeline.request_beats(ctx, "... !!!")

        assert report.outcome == StageOutcome.EMPTY
        assert ctx.project.beats == []
        assert ctx.project.status == ProjectStatus.SCRIPT_READY

    @pytest.mark.asyncio
    async def test_service_failure_reverts_status(self, make_pipeline, project_config) -> None:
        pipeline = make_pipeline(beat_service=ExplodingBeatService())
        ctx = pipeline.create_project(project_config)
        ctx.project.script = SCRIPT
        ctx.project.status = ProjectStatus.SCRIPT_READY

        report = await pipeline.request_beats(ctx)

        assert report.outcome == StageOutcome.FAILED
        assert "segmenter crashed" in report.message
        assert ctx.project.status == ProjectStatus.SCRIPT_READY

    @pytest.mark.asyncio
    async def test_resegmenting_discards_prior_work(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)
        await pipeline.request_beats(ctx, SCRIPT)
        await pipeline.request_composition(ctx)
        old_ids = {b.id for b in ctx.project.beats}

        await pipeline.request_beats(ctx, SCRIPT)

        assert {b.id for b in ctx.project.beats}.isdisjoint(old_ids)
        assert all(b.assets == [] for b in ctx.project.beats)

    @pytest.mark.asyncio
    async def test_cancellation_restores_status(self, make_pipeline, project_config) -> None:
        pipeline = make_pipeline(beat_service=SlowBeatService())
        ctx = pipeline.create_project(project_config)
        await pipeline.request_script(ctx)

        task = asyncio.create_task(pipeline.request_beats(ctx))
        await asyncio.sleep(0.01)
        assert ctx.project.status == ProjectStatus.GENERATING_BEATS
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert ctx.project.status == ProjectStatus.SCRIPT_READY
        assert ctx.is_generating is False
        report = await pipeline.request_beats(ctx)
        assert report.ok


class TestVoice:
    """Tests for narration."""

    @pytest.mark.asyncio
    async def test_single_beat_voice(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)
        await pipeline.request_beats(ctx, "First beat here. " * 3 + "Second sentence now.")
        beat = ctx.project.beats[0]

        report = await pipeline.request_voice(ctx, beat.id)

        assert report.ok
        assert report.beat_id == beat.id
        assert beat.voice_url.startswith("file://")
        assert beat.voice_duration == len(beat.text.split()) / 2.5

    @pytest.mark.asyncio
    async def test_unknown_beat_rejected(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        report = await pipeline.request_voice(ctx, uuid4())

        assert report.outcome == StageOutcome.REJECTED

    @pytest.mark.asyncio
    async def test_voice_all_finalizes_timeline(self, pipeline) -> None:
        config = ProjectConfig.create(title="Dogs", topic="dogs", target_duration_seconds=60)
        ctx = pipeline.create_project(config)
        await pipeline.request_beats(ctx, SCRIPT)
        ctx.project.beats = [Beat.create(t, 3.0) for t in ("One two three.", "Four five.")]

        reports = await pipeline.request_voice_all(ctx)

        assert [r.outcome for r in reports] == [StageOutcome.SUCCEEDED] * 2
        first, second = ctx.project.beats
        assert first.start_time == 0.0
        assert second.start_time == first.voice_duration
        assert ctx.is_generating is False

    @pytest.mark.asyncio
    async def test_voice_failure_is_isolated(self, make_pipeline, project_config) -> None:
        pipeline = make_pipeline(voiceover=FlakyVoiceoverProvider(marker="broken"))
        ctx = pipeline.create_project(project_config)
        pipeline.replace_beats(
            ctx,
            [Beat.create(t, 3.0) for t in ("A fine beat.", "A broken beat.", "Another fine one.")],
        )

        reports = await pipeline.request_voice_all(ctx)

        assert [r.outcome for r in reports] == [
            StageOutcome.SUCCEEDED,
            StageOutcome.FAILED,
            StageOutcome.SUCCEEDED,
        ]
        assert [r.beat_id for r in reports] == [b.id for b in ctx.project.beats]
        assert "voice unavailable" in reports[1].message
        assert ctx.project.beats[1].voice_url is None
        # Not every beat is voiced, so no timeline yet
        assert ctx.project.beats[0].start_time is None

    @pytest.mark.asyncio
    async def test_voice_all_without_beats_rejected(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        reports = await pipeline.request_voice_all(ctx)

        assert len(reports) == 1
        assert reports[0].outcome == StageOutcome.REJECTED

    @pytest.mark.asyncio
    async def test_storage_failure_is_reported(self, pipeline, project_config, tmp_path) -> None:
        pipeline.narration.storage = FullDiskStorageService(tmp_path)
        ctx = pipeline.create_project(project_config)
        pipeline.replace_beats(ctx, [Beat.create("A fine beat.", 3.0)])
        beat = ctx.project.beats[0]

        report = await pipeline.request_voice(ctx, beat.id)

        assert report.outcome == StageOutcome.FAILED
        assert "No space left on device" in report.message
        assert beat.voice_url is None
        assert ctx.is_generating is False

    @pytest.mark.asyncio
    async def test_generating_until_every_beat_resolves(
        self, make_pipeline, project_config
    ) -> None:
        voiceover = FlakyVoiceoverProvider(marker="broken", latency_ms=50)
        pipeline = make_pipeline(voiceover=voiceover)
        ctx = pipeline.create_project(project_config)
        pipeline.replace_beats(
            ctx,
            [Beat.create(t, 3.0) for t in ("A broken beat.", "A slow beat.", "Another slow one.")],
        )

        task = asyncio.create_task(pipeline.request_voice_all(ctx))
        await asyncio.sleep(0.01)
        # The broken beat has already failed while its siblings are still narrating
        assert voiceover.failed == ["A broken beat."]
        assert ctx.is_generating is True

        reports = await task

        assert [r.outcome for r in reports] == [
            StageOutcome.FAILED,
            StageOutcome.SUCCEEDED,
            StageOutcome.SUCCEEDED,
        ]
        assert ctx.is_generating is False

    @pytest.mark.asyncio
    async def test_replaced_beats_discard_narration(self, make_pipeline, project_config) -> None:
        pipeline = make_pipeline(voiceover=StubVoiceoverProvider(latency_ms=50))
        ctx = pipeline.create_project(project_config)
        pipeline.replace_beats(
            ctx, [Beat.create(t, 3.0) for t in ("Old beat one.", "Old beat two.")]
        )

        task = asyncio.create_task(pipeline.request_voice_all(ctx))
        await asyncio.sleep(0.01)
        fresh = Beat.create("A fresh beat.", 3.0)
        pipeline.replace_beats(ctx, [fresh])
        reports = await task

        assert [r.outcome for r in reports] == [StageOutcome.REJECTED] * 2
        assert all("replaced" in r.message for r in reports)
        assert ctx.project.beats == [fresh]
        assert fresh.voice_url is None
        assert fresh.start_time is None


class TestComposition:
    """Tests for asset composition across beats."""

    @pytest.mark.asyncio
    async def test_every_beat_gets_an_asset(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)
        await pipeline.request_beats(ctx, SCRIPT)

        reports = await pipeline.request_composition(ctx)

        assert len(reports) == len(ctx.project.beats)
        assert all(r.ok for r in reports)
        assert ctx.project.status == ProjectStatus.READY_FOR_RENDER
        for beat in ctx.project.beats:
            assert sum(1 for a in beat.assets if a.selected) == 1

    @pytest.mark.asyncio
    async def test_no_beats_rejected(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        reports = await pipeline.request_composition(ctx)

        assert [r.outcome for r in reports] == [StageOutcome.REJECTED]
        assert ctx.project.status == ProjectStatus.DRAFT

    @pytest.mark.asyncio
    async def test_empty_results_leave_beats_ready(self, make_pipeline, project_config) -> None:
        pipeline = make_pipeline(stock=StubStockSearchProvider(candidates=[]))
        ctx = pipeline.create_project(project_config, ai_aggressiveness=0.0)
        await pipeline.request_beats(ctx, SCRIPT)

        reports = await pipeline.request_composition(ctx)

        assert all(r.outcome == StageOutcome.EMPTY for r in reports)
        assert ctx.project.status == ProjectStatus.BEATS_READY

    @pytest.mark.asyncio
    async def test_failures_are_per_beat(self, make_pipeline, project_config) -> None:
        pipeline = make_pipeline(
            stock=StubStockSearchProvider(fail_with="rate limited"),
            image_gen=StubImageGenProvider(fail_with="content policy"),
        )
        ctx = pipeline.create_project(project_config)
        await pipeline.request_beats(ctx, SCRIPT)

        reports = await pipeline.request_composition(ctx)

        assert len(reports) == len(ctx.project.beats)
        assert all(r.outcome == StageOutcome.FAILED for r in reports)
        assert ctx.project.status == ProjectStatus.BEATS_READY
        assert ctx.is_generating is False

    @pytest.mark.asyncio
    async def test_skips_composed_beats_unless_forced(
        self, pipeline, project_config, stock_provider
    ) -> None:
        ctx = pipeline.create_project(project_config)
        await pipeline.request_beats(ctx, SCRIPT)
        await pipeline.request_composition(ctx)
        searches = len(stock_provider.requests)

        reports = await pipeline.request_composition(ctx)
        assert len(reports) == 1
        assert reports[0].beat_id is None
        assert len(stock_provider.requests) == searches

        reports = await pipeline.request_composition(ctx, force=True)
        assert len(reports) == len(ctx.project.beats)
        assert len(stock_provider.requests) == searches + len(ctx.project.beats)

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, make_pipeline, project_config) -> None:
        stock = CountingStockProvider()
        pipeline = make_pipeline(stock=stock, max_concurrency=2)
        ctx = pipeline.create_project(project_config)
        pipeline.replace_beats(ctx, [Beat.create(f"Beat number {i}.", 3.0) for i in range(6)])

        reports = await pipeline.request_composition(ctx)

        assert len(reports) == 6
        assert stock.peak <= 2
        assert [r.beat_id for r in reports] == [b.id for b in ctx.project.beats]

    @pytest.mark.asyncio
    async def test_uses_context_aggressiveness(
        self, make_pipeline, project_config, image_gen_provider
    ) -> None:
        pipeline = make_pipeline(stock=StubStockSearchProvider(candidates=[]))
        ctx = pipeline.create_project(project_config)
        await pipeline.request_beats(ctx, SCRIPT)

        ctx.ai_aggressiveness = 0.05
        await pipeline.request_composition(ctx)
        assert image_gen_provider.requests == []

        ctx.ai_aggressiveness = 0.9
        await pipeline.request_composition(ctx)
        assert len(image_gen_provider.requests) == len(ctx.project.beats)
        assert all(b.selected_asset.source == AssetSource.AI for b in ctx.project.beats)

    @pytest.mark.asyncio
    async def test_cancellation_restores_status(self, make_pipeline, project_config) -> None:
        pipeline = make_pipeline(stock=SlowStockProvider())
        ctx = pipeline.create_project(project_config)
        await pipeline.request_beats(ctx, SCRIPT)

        task = asyncio.create_task(pipeline.request_composition(ctx))
        await asyncio.sleep(0.01)
        assert ctx.project.status == ProjectStatus.COMPOSING
        assert ctx.is_generating is True
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert ctx.project.status == ProjectStatus.BEATS_READY
        assert ctx.is_generating is False
        reports = await pipeline.request_composition(ctx)
        assert all(r.ok for r in reports)
        assert ctx.project.status == ProjectStatus.READY_FOR_RENDER

    @pytest.mark.asyncio
    async def test_replaced_beats_discard_assets(self, make_pipeline, project_config) -> None:
        pipeline = make_pipeline(stock=SlowStockProvider())
        ctx = pipeline.create_project(project_config)
        pipeline.replace_beats(
            ctx, [Beat.create(t, 3.0) for t in ("Old beat one.", "Old beat two.")]
        )

        task = asyncio.create_task(pipeline.request_composition(ctx))
        await asyncio.sleep(0.01)
        fresh = Beat.create("A fresh beat.", 3.0)
        pipeline.replace_beats(ctx, [fresh])
        reports = await task

        assert [r.outcome for r in reports] == [StageOutcome.REJECTED] * 2
        assert fresh.assets == []
        assert ctx.project.status == ProjectStatus.BEATS_READY


class TestSelectAsset:
    """Tests for manual asset selection."""

    @pytest.mark.asyncio
    async def test_switches_selection(self, make_pipeline, project_config) -> None:
        pipeline = make_pipeline()
        pipeline.composer.max_assets_per_beat = 3
        ctx = pipeline.create_project(project_config)
        pipeline.replace_beats(ctx, [Beat.create("Mountains glowing brightly.", 3.0)])
        await pipeline.request_composition(ctx)
        beat = ctx.project.beats[0]
        target = beat.assets[2]

        assert pipeline.select_asset(ctx, beat.id, target.id) is True

        assert [a.selected for a in beat.assets] == [False, False, True]
        assert beat.selected_asset is target

    @pytest.mark.asyncio
    async def test_unknown_asset_is_noop(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)
        await pipeline.request_beats(ctx, SCRIPT)
        await pipeline.request_composition(ctx)
        beat = ctx.project.beats[0]
        selected = beat.selected_asset

        assert pipeline.select_asset(ctx, beat.id, "missing") is False
        assert pipeline.select_asset(ctx, uuid4(), selected.id) is False
        assert beat.selected_asset is selected

    def test_selecting_last_missing_asset_marks_ready(self, pipeline, project_config) -> None:
        from storybeat.domain.enums import AssetKind
        from storybeat.domain.models import Asset, AssetMetadata

        ctx = pipeline.create_project(project_config)
        beat = Beat.create("A foggy pier.", 3.0)
        beat.assets = [
            Asset(
                id="upload-1",
                kind=AssetKind.IMAGE,
                url="https://example.com/pier.jpg",
                source=AssetSource.UPLOAD,
                metadata=AssetMetadata(width=100, height=100),
            )
        ]
        pipeline.replace_beats(ctx, [beat])
        assert ctx.project.status == ProjectStatus.BEATS_READY

        assert pipeline.select_asset(ctx, beat.id, "upload-1") is True
        assert ctx.project.status == ProjectStatus.READY_FOR_RENDER


class TestEditing:
    """Tests for beat and project edits."""

    @pytest.mark.asyncio
    async def test_update_beat_clears_voice(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)
        await pipeline.request_beats(ctx, SCRIPT)
        beat = ctx.project.beats[0]
        await pipeline.request_voice(ctx, beat.id)

        updated = pipeline.update_beat(ctx, beat.id, " ".join(["word"] * 20))

        assert updated is beat
        assert beat.duration == 10.0
        assert beat.voice_url is None
        assert beat.voice_duration is None

    def test_update_beat_rejects_empty_text(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)
        pipeline.replace_beats(ctx, [Beat.create("Something.", 3.0)])

        with pytest.raises(ValidationError):
            pipeline.update_beat(ctx, ctx.project.beats[0].id, "   ")

    def test_update_unknown_beat_returns_none(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        assert pipeline.update_beat(ctx, uuid4(), "text") is None

    def test_update_project_title(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        pipeline.update_project(ctx, "  Keepers of the Light ")

        assert ctx.project.title == "Keepers of the Light"
        assert ctx.project.config.topic == project_config.topic

    def test_replace_beats_with_nothing_falls_back(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)
        pipeline.replace_beats(ctx, [Beat.create("Something.", 3.0)])

        pipeline.replace_beats(ctx, [])

        assert ctx.project.status == ProjectStatus.DRAFT

    def test_finalize_timeline_uses_effective_durations(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)
        beats = [Beat.create(t, 5.0) for t in ("One.", "Two.", "Three.")]
        beats[1].voice_duration = 2.0
        pipeline.replace_beats(ctx, beats)

        total = pipeline.finalize_timeline(ctx)

        assert [b.start_time for b in beats] == [0.0, 5.0, 7.0]
        assert total == 12.0


class TestContextAndWorkspace:
    """Tests for project contexts and the workspace."""

    def test_wizard_steps_are_bounded(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        assert ctx.prev_step() == WizardStep.PROJECT
        for _ in range(10):
            ctx.next_step()
        assert ctx.step == WizardStep.RENDER
        assert ctx.prev_step() == WizardStep.SCENES

    def test_aggressiveness_setter_validates(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        with pytest.raises(ValidationError):
            ctx.ai_aggressiveness = -0.5
        assert ctx.ai_aggressiveness == 0.5

    def test_dispatch_tracks_in_flight_calls(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        with ctx.dispatch():
            with ctx.dispatch():
                assert ctx.is_generating is True
            assert ctx.is_generating is True
        assert ctx.is_generating is False

    def test_dispatch_binds_project_to_logs(self, pipeline, project_config) -> None:
        ctx = pipeline.create_project(project_config)

        with ctx.dispatch():
            assert structlog.contextvars.get_contextvars()["project_id"] == str(ctx.project_id)
        assert "project_id" not in structlog.contextvars.get_contextvars()

    def test_workspace_switch(self, pipeline, project_config) -> None:
        workspace = Workspace()
        first = workspace.add(pipeline.create_project(project_config))
        second = workspace.add(pipeline.create_project(project_config), make_current=False)

        assert workspace.current is first
        assert workspace.switch(second.project_id) is second
        assert workspace.current is second
        with pytest.raises(KeyError):
            workspace.switch(uuid4())

    def test_workspace_remove_and_reset(self, pipeline, project_config) -> None:
        workspace = Workspace()
        first = workspace.add(pipeline.create_project(project_config))
        second = workspace.add(pipeline.create_project(project_config))

        workspace.remove(second.project_id)
        assert workspace.current is first
        assert len(workspace) == 1

        workspace.reset()
        assert workspace.current is None
        assert len(workspace) == 0

    def test_contexts_are_independent(self, project_config) -> None:
        from storybeat.domain.models import Project

        a = ProjectContext(Project.create(project_config), 0.2)
        b = ProjectContext(Project.create(project_config), 0.8)

        a.next_step()
        assert b.step == WizardStep.PROJECT
        assert a.ai_aggressiveness != b.ai_aggressiveness


@pytest.mark.asyncio
async def test_full_run_persists_snapshot(make_pipeline, repository, project_config) -> None:
    """End to end: script, beats, voice and composition with persistence."""
    pipeline = make_pipeline(repository=repository)
    ctx = pipeline.create_project(project_config)

    await pipeline.request_script(ctx)
    await pipeline.request_beats(ctx)
    await pipeline.request_voice_all(ctx)
    await pipeline.request_composition(ctx)

    stored = repository.get(ctx.project_id)
    assert stored.status == ProjectStatus.READY_FOR_RENDER
    assert len(stored.beats) == len(ctx.project.beats)
    assert all(b.start_time is not None for b in stored.beats)
    assert all(b.selected_asset is not None for b in stored.beats)


@pytest.mark.asyncio
async def test_delete_project_removes_media(
    make_pipeline, repository, storage, project_config
) -> None:
    pipeline = make_pipeline(repository=repository)
    ctx = pipeline.create_project(project_config)
    pipeline.replace_beats(ctx, [Beat.create("A fine beat.", 3.0)])
    await pipeline.request_voice(ctx, ctx.project.beats[0].id)
    audio_dir = storage.base_path / "audio" / str(ctx.project_id)
    assert any(audio_dir.iterdir())

    assert pipeline.delete_project(ctx.project_id) is True

    assert not audio_dir.exists()
    assert repository.get(ctx.project_id) is None
    assert pipeline.delete_project(ctx.project_id) is False
