"""Recipe capture: URL-to-recipe acquisition and ingredient quantity engine."""

from typing import Union

from .models import AcquisitionMode, AcquisitionResult
from .parsing.dedup import deduplicate_ingredients, extract_core_ingredient_key
from .parsing.ingredient_parser import parse_ingredient_line, parse_ingredients
from .services.merge import merge_ingredient_lists

__all__ = [
    "acquire_and_extract",
    "parse_ingredient_line",
    "parse_ingredients",
    "merge_ingredient_lists",
    "deduplicate_ingredients",
    "extract_core_ingredient_key",
]


async def acquire_and_extract(
    url: str,
    mode: Union[AcquisitionMode, str] = AcquisitionMode.FAST,
    orchestrator=None,
) -> AcquisitionResult:
    """Run the acquisition pipeline with the default collaborators."""
    if orchestrator is None:
        from .deps import build_orchestrator, get_ai_client

        orchestrator = build_orchestrator(get_ai_client())
    return await orchestrator.acquire_and_extract(url, mode)
