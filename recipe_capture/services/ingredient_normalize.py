"""
AI-assisted ingredient normalization.

Each line is sent to the model concurrently; a line whose model call fails or
returns nothing usable falls back to the local rule-based parser, so one bad
line never sinks the batch.
"""

import asyncio
import logging
from typing import Iterable, Optional

from pydantic import BaseModel

from ..ai.prompts import INGREDIENT_NORMALIZE_PROMPT
from ..core.ai_client import AIClient
from ..models import ParsedIngredient, QuantityRange
from ..parsing.ingredient_parser import parse_ingredient_line
from .unit_conversion import normalize_unit

logger = logging.getLogger("recipe_capture.parsing")

AI_CONFIDENCE = 0.9


class AIParsedIngredient(BaseModel):
    name: str
    quantity: Optional[float] = None
    range_min: Optional[float] = None
    range_max: Optional[float] = None
    unit: Optional[str] = None
    preparation: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None


def to_parsed_ingredient(ai: AIParsedIngredient, original: str) -> ParsedIngredient:
    """Map a model answer onto ParsedIngredient. A missing amount becomes 0."""
    name = (ai.name or "").strip().lower()
    if not name:
        raise ValueError("model returned an empty ingredient name")

    amount: dict = {}
    low, high = ai.range_min, ai.range_max
    if low is not None and high is not None and low != high:
        amount["range"] = QuantityRange(min=min(low, high), max=max(low, high))
    elif ai.quantity is not None:
        amount["quantity"] = ai.quantity
    elif low is not None:
        amount["quantity"] = low
    else:
        amount["quantity"] = 0.0

    return ParsedIngredient(
        name=name,
        unit=normalize_unit(ai.unit),
        preparation=ai.preparation or None,
        notes=ai.notes or None,
        category=(ai.category or "").strip().lower() or None,
        confidence=AI_CONFIDENCE,
        original=original,
        **amount,
    )


class IngredientNormalizer:
    def __init__(self, ai_client: AIClient):
        self.ai_client = ai_client

    async def _normalize_one(self, line: str) -> Optional[ParsedIngredient]:
        answer = await self.ai_client.generate_structured(
            f"Ingredient line: {line}",
            AIParsedIngredient,
            system_instruction=INGREDIENT_NORMALIZE_PROMPT,
        )
        if answer is None:
            return None
        return to_parsed_ingredient(answer, line)

    async def normalize(self, lines: Iterable[str]) -> list[ParsedIngredient]:
        """
        Normalize all lines concurrently (all-settled).
        Output order matches input order; blank and connector lines are dropped.
        """
        lines = [line for line in (lines or []) if line and line.strip()]
        if not lines:
            return []

        if not self.ai_client.is_available():
            logger.info("AI unavailable, parsing ingredients locally")
            results = [None] * len(lines)
        else:
            results = await asyncio.gather(
                *(self._normalize_one(line) for line in lines),
                return_exceptions=True,
            )

        normalized = []
        for line, result in zip(lines, results):
            if isinstance(result, BaseException):
                logger.warning(f"AI normalization failed for {line!r}, using local parse: {result}")
                result = None
            if result is None:
                result = parse_ingredient_line(line)
            if result.name:
                normalized.append(result)
        return normalized
