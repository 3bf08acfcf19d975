"""Health check endpoints."""

import os
from pathlib import Path

from fastapi import APIRouter, status
from pydantic import BaseModel

from storybeat.api.deps import ComposerDep, ScriptGeneratorDep
from storybeat.config import settings
from storybeat.logging import get_logger
from storybeat.services.providers import get_voiceover_provider

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    components: dict[str, bool] | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    database: bool
    components: dict[str, bool] | None = None


def _storage_writable() -> bool:
    """Narration audio is written under the storage path."""
    path = Path(settings.storage_path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("storage_health_check_failed", path=str(path), error=str(e))
        return False
    return os.access(path, os.W_OK)


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint that verifies the API is running.",
)
async def health_check() -> HealthResponse:
    """Basic health check - is the API up?

    Reports which collaborators use a real provider rather than the stub.
    """
    from storybeat import __version__

    components = {
        "llm": settings.llm_provider,
        "image_gen": settings.image_gen_provider,
        "stock": settings.stock_provider,
        "voiceover": settings.voiceover_provider,
    }

    return HealthResponse(
        status="healthy",
        version=__version__,
        components={k: v != "stub" for k, v in components.items()},
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Verifies the database and the external collaborators.",
)
async def readiness_check(
    script_generator: ScriptGeneratorDep,
    composer: ComposerDep,
) -> ReadinessResponse:
    """Readiness check including dependencies."""
    database_ok = False
    try:
        from sqlalchemy import text

        from storybeat.db.session import engine

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            database_ok = True
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))

    components = {
        "llm": await script_generator.health_check(),
        "stock": await composer.stock.health_check(),
        "image_gen": await composer.image_gen.health_check(),
        "voiceover": await get_voiceover_provider().health_check(),
        "storage": _storage_writable(),
    }

    return ReadinessResponse(
        ready=database_ok and all(components.values()),
        database=database_ok,
        components=components,
    )


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def liveness_check() -> dict[str, str]:
    """Liveness check - is the process alive?"""
    return {"status": "alive"}
