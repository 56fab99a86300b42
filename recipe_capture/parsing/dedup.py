"""
Ingredient deduplication.

Extraction often yields the same ingredient twice in different forms:
"chicken thighs" (from the intro) and "2 lb boneless skinless chicken thighs"
(from the list). Items sharing a core key collapse to the most detailed
version, i.e. the longest raw string. Quantities are never summed.
"""

import re
import logging
from typing import Any, Mapping, TypeVar

from .quantity import VULGAR_FRACTIONS

logger = logging.getLogger("recipe_capture.dedup")

T = TypeVar("T")

MODIFIER_WORDS = {
    "boneless", "skinless", "fresh", "dried", "chopped", "diced",
    "minced", "sliced", "of", "large", "small", "medium",
}

# Unit must be followed by whitespace ("g" never matches inside "garlic").
QUANTITY_PREFIX_RE = re.compile(
    r"^[\d\s/.%s]+(?:(lb|lbs|oz|cups?|tbsp|tsp|cloves?|bunch(?:es)?|stalks?|kg|ml)\s+)?"
    % "".join(VULGAR_FRACTIONS),
    re.IGNORECASE,
)


def strip_leading_quantity(text: str) -> str:
    return QUANTITY_PREFIX_RE.sub("", text, count=1)


def extract_core_ingredient_key(name_or_raw: str) -> str:
    """
    "2 lb boneless skinless chicken thighs" -> "chicken thighs"
    "1/4 cup coconut aminos" -> "coconut aminos"
    """
    base = (name_or_raw or "").lower().strip()
    without_quantity = strip_leading_quantity(base)
    words = [w for w in without_quantity.split() if w not in MODIFIER_WORDS]
    return " ".join(words)


def _fields(item: Any) -> tuple[str, str]:
    """(name_or_raw, raw) for strings, mappings and objects with name/raw."""
    if isinstance(item, str):
        return item, item
    if isinstance(item, Mapping):
        raw = item.get("raw") or ""
        return item.get("name") or raw, raw
    raw = getattr(item, "raw", None) or getattr(item, "original", None) or ""
    return getattr(item, "name", None) or raw, raw


def deduplicate_ingredients(items: list[T], debug: bool = False) -> list[T]:
    """Keep one item per core key, preferring the longer raw string.

    Ties keep the first seen item; output keeps first-seen key order.
    """
    seen: dict[str, T] = {}
    seen_raw: dict[str, str] = {}

    for item in items or []:
        base, raw = _fields(item)
        key = extract_core_ingredient_key(base)

        if debug:
            logger.debug(f"[dedup] {base!r} -> key {key!r}")

        if key not in seen:
            seen[key] = item
            seen_raw[key] = raw
            if debug:
                logger.debug(f"[dedup] added {key!r}")
        elif len(raw) > len(seen_raw[key]):
            if debug:
                logger.debug(f"[dedup] replaced {seen_raw[key]!r} with longer {raw!r}")
            seen[key] = item
            seen_raw[key] = raw
        elif debug:
            logger.debug(f"[dedup] kept {seen_raw[key]!r}, skipped {raw!r}")

    return list(seen.values())
