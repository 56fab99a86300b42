import os

# Settings are read at import time
os.environ["AI_MODE"] = "mock"
os.environ["RATE_LIMIT"] = "10000/minute"

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from recipe_capture.acquisition.collaborators import AudioBlob, Collaborators
from recipe_capture.acquisition.orchestrator import ContentAcquisitionOrchestrator
from recipe_capture.core.retry import RetryPolicy
from recipe_capture.deps import get_ai_client, get_orchestrator
from recipe_capture.main import app
from recipe_capture.models import ExtractedRecipe
from recipe_capture.settings import Settings


@pytest.fixture
def no_wait_retry():
    return RetryPolicy(max_attempts=3, delay_seconds=0)


@pytest.fixture
def test_settings():
    return Settings(retry_delay_seconds=0)


@pytest.fixture
def fake_ai():
    """AI client double: available, every call is an AsyncMock."""
    client = MagicMock()
    client.is_available.return_value = True
    client.last_error = None
    client.generate_text = AsyncMock(return_value="")
    client.generate_structured = AsyncMock(return_value=None)
    client.generate_from_media = AsyncMock(return_value="")
    return client


@pytest.fixture
def make_pipeline(test_settings):
    """
    Build an orchestrator over mocked collaborators.

    recipes maps SourceKind -> ExtractedRecipe returned by the extractor;
    kinds not listed extract to an empty recipe.
    """

    def _make(
        caption="",
        audio=None,
        transcript="",
        non_cooking=False,
        frames="",
        recipes=None,
        audio_fetcher=True,
        settings=None,
    ):
        recipes = recipes or {}

        caption_fetcher = MagicMock()
        caption_fetcher.fetch_caption = AsyncMock(return_value=caption)

        fetcher = None
        if audio_fetcher:
            fetcher = MagicMock()
            fetcher.fetch_audio = AsyncMock(
                return_value=audio if audio is not None else AudioBlob(data=b"ID3audio")
            )

        transcriber = MagicMock()
        transcriber.transcribe = AsyncMock(return_value=transcript)

        frame_analyzer = MagicMock()
        frame_analyzer.extract_text_from_video_frames = AsyncMock(return_value=frames)

        async def _extract(text, source_kind):
            return recipes.get(source_kind, ExtractedRecipe.empty())

        extractor = MagicMock()
        extractor.extract = AsyncMock(side_effect=_extract)
        extractor.clean_caption = AsyncMock(side_effect=lambda raw: raw)

        classifier = MagicMock()
        if isinstance(non_cooking, BaseException):
            classifier.is_non_cooking = AsyncMock(side_effect=non_cooking)
        else:
            classifier.is_non_cooking = AsyncMock(return_value=non_cooking)

        collaborators = Collaborators(
            default_caption_fetcher=caption_fetcher,
            audio_fetcher=fetcher,
            transcriber=transcriber,
            frame_analyzer=frame_analyzer,
        )
        orchestrator = ContentAcquisitionOrchestrator(
            collaborators,
            extractor=extractor,
            classifier=classifier,
            settings=settings or test_settings,
        )
        return SimpleNamespace(
            orchestrator=orchestrator,
            caption_fetcher=caption_fetcher,
            audio_fetcher=fetcher,
            transcriber=transcriber,
            frame_analyzer=frame_analyzer,
            extractor=extractor,
            classifier=classifier,
        )

    return _make


@pytest.fixture
def client():
    """Test client; mock AI mode, no orchestrator override."""
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def client_with_pipeline(make_pipeline):
    """Test client whose /parse-url runs against a mocked pipeline."""

    def _client(**kwargs):
        pipeline = make_pipeline(**kwargs)
        app.dependency_overrides[get_orchestrator] = lambda: pipeline.orchestrator
        return TestClient(app), pipeline

    yield _client
    app.dependency_overrides.clear()


@pytest.fixture
def client_with_ai(fake_ai):
    app.dependency_overrides[get_ai_client] = lambda: fake_ai
    with TestClient(app) as c:
        yield c, fake_ai
    app.dependency_overrides.clear()
