"""
Structured recipe extraction from caption, transcript and frame-analysis text.

Caption text is held to a strict standard (food mentions alone are not a
recipe); transcripts are read permissively. Model output that is not valid
JSON never escapes: it yields empty lists, or a section-based salvage for
spoken/visual sources.
"""

import re
import logging
from typing import Optional

from ..core.ai_client import AIClient
from ..core.retry import RetryPolicy, retry_async
from ..core.text import (
    basic_caption_cleanup,
    clean_md,
    clean_string_list,
    extract_json_object,
    preview,
)
from ..models import ExtractedRecipe, SourceKind
from .prompts import (
    CAPTION_EXTRACT_PROMPT,
    CLEAN_CAPTION_PROMPT,
    FRAME_EXTRACT_PROMPT,
    TRANSCRIPT_EXTRACT_PROMPT,
)

logger = logging.getLogger("recipe_capture.ai")

# Pantry ingredients that instructions often mention without listing
PANTRY_KEYWORDS = [
    "broth", "stock", "water", "salt", "pepper", "sugar", "flour", "butter", "oil",
    "onion", "garlic", "ginger", "lemon", "lime", "herbs", "spices", "cheese",
    "cream", "milk", "wine", "vinegar", "sauce", "paste", "powder", "noodles",
]

_SECTION_INGREDIENTS_RE = re.compile(r"\bingredients?\b", re.IGNORECASE)
_SECTION_INSTRUCTIONS_RE = re.compile(r"\b(instructions?|steps?|directions?|method)\b", re.IGNORECASE)
_LIST_ITEM_RE = re.compile(r"^(?:[-*•]\s+|\d+[.)]\s+)")


def is_frame_analysis(text: str) -> bool:
    return "FRAME " in text and "OBSERVATIONS" in text.upper()


def prompt_for(source_kind: SourceKind, text: str) -> str:
    if source_kind == SourceKind.FRAME_ANALYSIS or (
        source_kind == SourceKind.TRANSCRIPT and is_frame_analysis(text)
    ):
        return FRAME_EXTRACT_PROMPT
    if source_kind == SourceKind.TRANSCRIPT:
        return TRANSCRIPT_EXTRACT_PROMPT
    return CAPTION_EXTRACT_PROMPT


def parse_recipe_response(content: str) -> Optional[ExtractedRecipe]:
    """Shape-check a JSON model response. None when it is not JSON."""
    data = extract_json_object(content)
    if data is None:
        return None
    return ExtractedRecipe(
        ingredients=clean_string_list(data.get("ingredients")),
        instructions=clean_string_list(data.get("instructions")),
    )


def salvage_sections(content: str) -> ExtractedRecipe:
    """
    Line-based fallback for non-JSON answers:
    list items under an "Ingredients" header become ingredients, lines
    under "Instructions"/"Steps"/"Directions" become instructions.
    """
    ingredients: list[str] = []
    instructions: list[str] = []
    section = ""

    for line in (content or "").splitlines():
        stripped = line.strip()
        if not stripped:
            continue

        header = stripped.strip("#*: ").lower()
        looks_like_header = len(header) < 40 and (
            stripped.startswith(("#", "**")) or stripped.endswith(":") or len(header.split()) <= 2
        )
        if looks_like_header and _SECTION_INGREDIENTS_RE.search(header):
            section = "ingredients"
            continue
        if looks_like_header and _SECTION_INSTRUCTIONS_RE.search(header):
            section = "instructions"
            continue

        item = clean_md(stripped)
        if not item:
            continue
        if section == "ingredients" and _LIST_ITEM_RE.match(stripped):
            ingredients.append(item)
        elif section == "instructions" and len(item) > 10:
            instructions.append(item)

    return ExtractedRecipe(ingredients=ingredients, instructions=instructions)


def add_missing_pantry_ingredients(recipe: ExtractedRecipe) -> ExtractedRecipe:
    """Append pantry ingredients used in the instructions but not listed."""
    listed = " | ".join(recipe.ingredients).lower()
    missing: list[str] = []

    def _add(name: str):
        if name not in missing and not re.search(rf"\b{re.escape(name)}", listed):
            missing.append(name)

    for instruction in recipe.instructions:
        lower = instruction.lower()
        for keyword in PANTRY_KEYWORDS:
            if not re.search(rf"\b{keyword}\b", lower):
                continue
            if re.search(rf"\b{keyword}", listed):
                continue
            if keyword in ("broth", "stock") and re.search(r"\bvegetable (broth|stock)\b", lower):
                _add("vegetable broth")
            elif keyword in ("broth", "stock") and re.search(r"\bchicken (broth|stock)\b", lower):
                _add("chicken broth")
            else:
                _add(keyword)

    if not missing:
        return recipe

    logger.info(f"Added {len(missing)} ingredients referenced in instructions: {missing}")
    return ExtractedRecipe(
        ingredients=[*recipe.ingredients, *missing],
        instructions=recipe.instructions,
    )


class RecipeExtractor:
    def __init__(self, ai_client: AIClient, retry_policy: Optional[RetryPolicy] = None):
        self.ai_client = ai_client
        self.retry_policy = retry_policy or RetryPolicy()

    async def extract(self, text: str, source_kind: SourceKind = SourceKind.CAPTION) -> ExtractedRecipe:
        """Extract ingredients/instructions. Never raises; failures yield empty lists."""
        if not text or not text.strip():
            return ExtractedRecipe.empty()

        source_kind = SourceKind(source_kind)
        system_prompt = prompt_for(source_kind, text)
        spoken = source_kind in (SourceKind.TRANSCRIPT, SourceKind.FRAME_ANALYSIS)

        async def _call() -> str:
            return await self.ai_client.generate_text(
                f"Text ({source_kind.value}):\n\n{text}",
                system_instruction=system_prompt,
                json_output=True,
            )

        try:
            content = await retry_async(_call, self.retry_policy, label=f"{source_kind.value} extraction")
        except Exception as e:
            logger.warning(f"Recipe extraction from {source_kind.value} failed: {e}")
            return ExtractedRecipe.empty()

        recipe = parse_recipe_response(content)
        if recipe is None:
            logger.warning(f"Non-JSON extraction response: {preview(content)!r}")
            if not spoken:
                return ExtractedRecipe.empty()
            recipe = salvage_sections(content)

        if spoken and not recipe.is_empty:
            recipe = add_missing_pantry_ingredients(recipe)

        logger.info(
            f"Extracted {len(recipe.ingredients)} ingredients, "
            f"{len(recipe.instructions)} instructions from {source_kind.value}"
        )
        return recipe

    async def clean_caption(self, raw: str) -> str:
        """Model-based caption cleanup with a deterministic regex fallback."""
        if not raw or not raw.strip():
            return ""

        try:
            cleaned = await self.ai_client.generate_text(
                f"Please clean this video caption/transcript:\n\n{raw}",
                system_instruction=CLEAN_CAPTION_PROMPT,
            )
        except Exception as e:
            logger.warning(f"Caption cleaning failed, using basic cleanup: {e}")
            return basic_caption_cleanup(raw)

        return cleaned or basic_caption_cleanup(raw)
