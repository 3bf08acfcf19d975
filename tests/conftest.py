"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_PATH"] = tempfile.mkdtemp(prefix="storybeat-test-")
os.environ["LLM_PROVIDER"] = "stub"
os.environ["IMAGE_GEN_PROVIDER"] = "stub"
os.environ["STOCK_PROVIDER"] = "stub"
os.environ["VOICEOVER_PROVIDER"] = "stub"
os.environ["LOG_LEVEL"] = "WARNING"


@pytest.fixture(scope="session")
def test_client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from storybeat.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def llm_provider():
    """Get a stub LLM provider."""
    from storybeat.adapters.llm.stub import StubLLMProvider

    return StubLLMProvider()


@pytest.fixture
def stock_provider():
    """Get a stub stock search provider."""
    from storybeat.adapters.stock.stub import StubStockSearchProvider

    return StubStockSearchProvider()


@pytest.fixture
def image_gen_provider():
    """Get a stub image generation provider."""
    from storybeat.adapters.image_gen.stub import StubImageGenProvider

    return StubImageGenProvider()


@pytest.fixture
def voiceover_provider():
    """Get a stub voiceover provider."""
    from storybeat.adapters.voiceover.stub import StubVoiceoverProvider

    return StubVoiceoverProvider()


@pytest.fixture
def storage(tmp_path):
    """Get a storage service writing under a temporary directory."""
    from storybeat.services.storage import StorageService

    return StorageService(base_path=tmp_path)


@pytest.fixture
def session_factory():
    """Get a session factory bound to a fresh in-memory database."""
    from storybeat.db.session import build_engine, build_session_factory, init_db

    engine = build_engine("sqlite://")
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory):
    """Get a project repository over the in-memory database."""
    from storybeat.services.repository import ProjectRepository

    return ProjectRepository(session_factory)


@pytest.fixture
def project_config():
    """Get a valid project configuration."""
    from storybeat.domain.models import ProjectConfig

    return ProjectConfig.create(
        title="Lighthouse Keepers",
        topic="the last lighthouse keepers",
        template="history",
        tone="cinematic",
        target_duration_seconds=120,
        aspect_ratio="16:9",
    )


@pytest.fixture
def make_pipeline(llm_provider, stock_provider, image_gen_provider, voiceover_provider, storage):
    """Build a pipeline over stub collaborators; keyword overrides replace any of them."""
    from storybeat.services.composer import CompositionEngine
    from storybeat.services.narration import NarrationService
    from storybeat.services.project_pipeline import ProjectPipeline
    from storybeat.services.script_generator import ScriptGenerator

    def factory(
        llm=None,
        stock=None,
        image_gen=None,
        voiceover=None,
        beat_service=None,
        repository=None,
        max_concurrency=4,
    ):
        return ProjectPipeline(
            script_generator=ScriptGenerator(llm_provider=llm or llm_provider),
            beat_service=beat_service,
            narration=NarrationService(provider=voiceover or voiceover_provider, storage=storage),
            composer=CompositionEngine(stock or stock_provider, image_gen or image_gen_provider),
            repository=repository,
            max_concurrency=max_concurrency,
        )

    return factory


@pytest.fixture
def pipeline(make_pipeline):
    """Get a pipeline over stub collaborators without persistence."""
    return make_pipeline()
