"""FastAPI dependencies for the recipe_capture API.

Provides:
- The shared AI client
- The acquisition orchestrator wired with the default collaborators
- The batch ingredient normalizer
"""

from typing import Optional

from fastapi import Depends

from .acquisition.collaborators import Collaborators
from .acquisition.fetchers import HttpPageTextFetcher
from .acquisition.orchestrator import ContentAcquisitionOrchestrator
from .ai.classifier import ContentClassifier
from .ai.extractor import RecipeExtractor
from .ai.media import GeminiTranscriber, GeminiVideoAnalyzer
from .core.ai_client import AIClient
from .core.retry import RetryPolicy
from .services.ingredient_normalize import IngredientNormalizer
from .settings import Settings, settings as default_settings


def get_ai_client() -> AIClient:
    return AIClient.get_instance()


def build_orchestrator(ai_client: AIClient, settings: Optional[Settings] = None) -> ContentAcquisitionOrchestrator:
    """Orchestrator with page-text captions and Gemini transcription/video analysis.

    No audio downloader ships by default; without one the audio path is
    recorded as a hard failure and the pipeline moves on to video analysis.
    """
    settings = settings or default_settings
    retry_policy = RetryPolicy.from_settings(settings)

    collaborators = Collaborators(
        default_caption_fetcher=HttpPageTextFetcher(),
        transcriber=GeminiTranscriber(ai_client, max_bytes=settings.max_audio_bytes),
        frame_analyzer=GeminiVideoAnalyzer(ai_client),
    )
    return ContentAcquisitionOrchestrator(
        collaborators,
        extractor=RecipeExtractor(ai_client, retry_policy),
        classifier=ContentClassifier(ai_client, retry_policy),
        settings=settings,
    )


def get_orchestrator(ai_client: AIClient = Depends(get_ai_client)) -> ContentAcquisitionOrchestrator:
    return build_orchestrator(ai_client)


def get_normalizer(ai_client: AIClient = Depends(get_ai_client)) -> IngredientNormalizer:
    return IngredientNormalizer(ai_client)
