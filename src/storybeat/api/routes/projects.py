"""Project workflow endpoints."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from storybeat.api.deps import PipelineDep, WorkspaceDep
from storybeat.domain.enums import StageOutcome
from storybeat.domain.models import Project, ProjectConfig
from storybeat.logging import get_logger
from storybeat.services.project_pipeline import (
    ProjectContext,
    ProjectPipeline,
    StageReport,
    Workspace,
)

router = APIRouter(prefix="/projects", tags=["Projects"])
logger = get_logger(__name__)


class CreateProjectRequest(BaseModel):
    """Request to create a project."""

    title: str = Field(..., max_length=255)
    topic: str
    template: str = "explainer"
    tone: str = "friendly"
    target_duration_seconds: int = 540
    aspect_ratio: str = "16:9"
    ai_aggressiveness: float | None = None


class UpdateProjectRequest(BaseModel):
    """Request to update a project's mutable settings."""

    title: str | None = Field(None, max_length=255)
    ai_aggressiveness: float | None = None


class SegmentRequest(BaseModel):
    script: str | None = None


class UpdateBeatRequest(BaseModel):
    text: str


class SelectAssetRequest(BaseModel):
    asset_id: str


class StepRequest(BaseModel):
    direction: Literal["next", "prev"]


class ProjectResponse(BaseModel):
    """Project response model."""

    id: str
    title: str
    status: str
    config: dict[str, Any]
    script: str | None
    beats: list[dict[str, Any]]
    total_duration: float
    ai_aggressiveness: float | None = None
    is_generating: bool = False
    step: str | None = None
    created_at: datetime
    updated_at: datetime


class StageResponse(BaseModel):
    """Reports from a stage run plus the resulting project."""

    reports: list[dict[str, Any]]
    project: ProjectResponse


def _project_response(project: Project, ctx: ProjectContext | None = None) -> ProjectResponse:
    snapshot = project.to_dict()
    return ProjectResponse(
        id=snapshot["id"],
        title=project.title,
        status=snapshot["status"],
        config=snapshot["config"],
        script=project.script,
        beats=snapshot["beats"],
        total_duration=project.total_duration,
        ai_aggressiveness=ctx.ai_aggressiveness if ctx else None,
        is_generating=ctx.is_generating if ctx else False,
        step=str(ctx.step) if ctx else None,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def _stage_response(ctx: ProjectContext, reports: list[StageReport]) -> StageResponse:
    """Build the response, answering 409 when the stage was refused outright."""
    if len(reports) == 1 and reports[0].outcome == StageOutcome.REJECTED:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=reports[0].message)
    return StageResponse(
        reports=[r.to_dict() for r in reports],
        project=_project_response(ctx.project, ctx),
    )


def _open(project_id: UUID, pipeline: ProjectPipeline, workspace: Workspace) -> ProjectContext:
    """Find an open project, loading it from storage if needed."""
    ctx = workspace.get(project_id)
    if ctx is None:
        ctx = pipeline.open_project(project_id)
        if ctx is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Project {project_id} not found",
            )
        workspace.add(ctx, make_current=False)
    return ctx


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
)
async def create_project(
    request: CreateProjectRequest,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> ProjectResponse:
    """Create a draft project and make it current.

    Invalid settings are answered with 422 listing every problem.
    """
    config = ProjectConfig.create(
        title=request.title,
        topic=request.topic,
        template=request.template,
        tone=request.tone,
        target_duration_seconds=request.target_duration_seconds,
        aspect_ratio=request.aspect_ratio,
    )
    ctx = pipeline.create_project(config, request.ai_aggressiveness)

    workspace.add(ctx)
    return _project_response(ctx.project, ctx)


@router.get(
    "",
    response_model=list[ProjectResponse],
    summary="List projects",
)
async def list_projects(
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
    limit: int = Query(default=50, ge=1, le=500),
) -> list[ProjectResponse]:
    """List persisted projects, most recently updated first."""
    if pipeline.repository is None:
        projects = workspace.projects()[:limit]
    else:
        projects = pipeline.repository.list(limit=limit)
    return [_project_response(p, workspace.get(p.id)) for p in projects]


@router.get("/{project_id}", response_model=ProjectResponse, summary="Get project")
async def get_project(
    project_id: UUID,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> ProjectResponse:
    ctx = _open(project_id, pipeline, workspace)
    return _project_response(ctx.project, ctx)


@router.patch("/{project_id}", response_model=ProjectResponse, summary="Update project")
async def update_project(
    project_id: UUID,
    request: UpdateProjectRequest,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> ProjectResponse:
    """Rename a project or change its AI aggressiveness."""
    ctx = _open(project_id, pipeline, workspace)
    if request.ai_aggressiveness is not None:
        ctx.ai_aggressiveness = request.ai_aggressiveness
    if request.title is not None:
        pipeline.update_project(ctx, request.title)
    return _project_response(ctx.project, ctx)


@router.post("/{project_id}/step", response_model=ProjectResponse, summary="Move wizard step")
async def move_step(
    project_id: UUID,
    request: StepRequest,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> ProjectResponse:
    """Advance or go back one wizard step; the first and last steps are sticky."""
    ctx = _open(project_id, pipeline, workspace)
    if request.direction == "next":
        ctx.next_step()
    else:
        ctx.prev_step()
    return _project_response(ctx.project, ctx)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete project",
)
async def delete_project(
    project_id: UUID,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> None:
    """Close and delete a project along with its narration audio."""
    removed = workspace.remove(project_id) is not None
    removed = pipeline.delete_project(project_id) or removed
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project {project_id} not found",
        )
    logger.info("project_removed", project_id=str(project_id))


@router.post("/{project_id}/script", response_model=StageResponse, summary="Generate script")
async def generate_script(
    project_id: UUID,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> StageResponse:
    ctx = _open(project_id, pipeline, workspace)
    report = await pipeline.request_script(ctx)
    return _stage_response(ctx, [report])


@router.post("/{project_id}/beats", response_model=StageResponse, summary="Segment beats")
async def segment_beats(
    project_id: UUID,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
    request: SegmentRequest | None = None,
) -> StageResponse:
    """Segment the project's script, or a supplied one, into beats."""
    ctx = _open(project_id, pipeline, workspace)
    report = await pipeline.request_beats(ctx, request.script if request else None)
    return _stage_response(ctx, [report])


@router.patch(
    "/{project_id}/beats/{beat_id}",
    response_model=ProjectResponse,
    summary="Edit beat text",
)
async def update_beat(
    project_id: UUID,
    beat_id: UUID,
    request: UpdateBeatRequest,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> ProjectResponse:
    ctx = _open(project_id, pipeline, workspace)
    beat = pipeline.update_beat(ctx, beat_id, request.text)
    if beat is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Beat {beat_id} not found",
        )
    return _project_response(ctx.project, ctx)


@router.post(
    "/{project_id}/beats/{beat_id}/voice",
    response_model=StageResponse,
    summary="Narrate one beat",
)
async def voice_beat(
    project_id: UUID,
    beat_id: UUID,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> StageResponse:
    ctx = _open(project_id, pipeline, workspace)
    if ctx.project.find_beat(beat_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Beat {beat_id} not found",
        )
    report = await pipeline.request_voice(ctx, beat_id)
    return _stage_response(ctx, [report])


@router.post("/{project_id}/voice", response_model=StageResponse, summary="Narrate all beats")
async def voice_all(
    project_id: UUID,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> StageResponse:
    ctx = _open(project_id, pipeline, workspace)
    reports = await pipeline.request_voice_all(ctx)
    return _stage_response(ctx, reports)


@router.post("/{project_id}/compose", response_model=StageResponse, summary="Compose assets")
async def compose_project(
    project_id: UUID,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
    force: bool = False,
) -> StageResponse:
    """Choose assets for beats lacking one, or for every beat when forced."""
    ctx = _open(project_id, pipeline, workspace)
    reports = await pipeline.request_composition(ctx, force=force)
    return _stage_response(ctx, reports)


@router.put(
    "/{project_id}/beats/{beat_id}/selection",
    response_model=ProjectResponse,
    summary="Select asset",
)
async def select_asset(
    project_id: UUID,
    beat_id: UUID,
    request: SelectAssetRequest,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> ProjectResponse:
    ctx = _open(project_id, pipeline, workspace)
    if not pipeline.select_asset(ctx, beat_id, request.asset_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Asset {request.asset_id} is not a candidate of beat {beat_id}",
        )
    return _project_response(ctx.project, ctx)


@router.post(
    "/{project_id}/timeline",
    response_model=ProjectResponse,
    summary="Finalize timeline",
)
async def finalize_timeline(
    project_id: UUID,
    pipeline: PipelineDep,
    workspace: WorkspaceDep,
) -> ProjectResponse:
    """Assign beat start times from their effective durations."""
    ctx = _open(project_id, pipeline, workspace)
    pipeline.finalize_timeline(ctx)
    return _project_response(ctx.project, ctx)
