"""
Recipe titles.

A title comes from the post caption when its opening sentence names a dish
("Crispy garlic chicken thighs!"); otherwise one is generated from the
extracted ingredients and instructions ("Baked Salmon & Lemon").
"""

import re
import logging
from typing import Iterable, Optional

logger = logging.getLogger("recipe_capture.parsing")

FALLBACK_TITLE = "Delicious Recipe"

# Platforms whose captions usually open with the dish name
CAPTION_TITLE_PLATFORMS = {"youtube", "tiktok", "instagram"}

_FOODS = (
    r"chicken|beef|pork|fish|salmon|pasta|rice|noodles|soup|curry|stir.fry|salad|"
    r"sandwich|burger|pizza|tacos|bread|cake|cookies|pie"
)
FOOD_WORDS_RE = re.compile(
    rf"{_FOODS}|vegetables|beans|tofu|quinoa|avocado|mushrooms", re.IGNORECASE
)
EXCLUDE_WORDS_RE = re.compile(
    r"\b(?:follow|subscribe|like|comment|share|bio|link|website|recipe on|check out|"
    r"don't forget|make sure|if you|let me know)\b",
    re.IGNORECASE,
)

# Tried in order against the cleaned first line; a sentence stops at . ! or ?
TITLE_PATTERNS = [
    re.compile(rf"^([^.!?\n]+(?:{_FOODS})[^.!?\n]*)", re.IGNORECASE),
    re.compile(
        r"^([^.!?\n]*(?:baked|grilled|fried|roasted|sautéed|steamed|braised|slow.cooked|instant.pot)[^.!?\n]+)",
        re.IGNORECASE,
    ),
    re.compile(
        r"^([^.!?\n]*(?:crispy|creamy|spicy|tender|juicy|flaky|cheesy|savory|sweet|tangy|smoky)"
        r"[^.!?\n]+(?:chicken|beef|pork|fish|pasta|rice|soup|curry|salad)[^.!?\n]*)",
        re.IGNORECASE,
    ),
    re.compile(r"^([^.!?\n]+)"),
]

CAPTION_NOISE = [
    re.compile(r"[\U0001F300-\U0001FAFF\u2600-\u27BF\uFE0F\u200D]"),
    re.compile(r"\s+for\s+(?:a\s+)?(?:top\s+tier|great|perfect|amazing|delicious).*$", re.IGNORECASE),
    re.compile(r"\s+on\s+(?:a\s+)?(?:sunny|rainy|cold|hot|warm|beautiful).*$", re.IGNORECASE),
    re.compile(r"\s+(?:makes?\s+)?\d+\s+servings.*$", re.IGNORECASE),
    re.compile(r"\s+ready\s+in.*$", re.IGNORECASE),
    re.compile(r"\s+prep\s+time.*$", re.IGNORECASE),
    re.compile(r"(?:full recipe on|recipe in bio|link in bio|check out|follow for more).*$", re.IGNORECASE),
    re.compile(r"#\w+"),
]

LEADING_ARTICLE_RE = re.compile(r"^(?:a|an|the)\s+", re.IGNORECASE)

TITLE_STOP_WORDS = {
    "cup", "cups", "tablespoon", "tablespoons", "teaspoon", "teaspoons",
    "pound", "pounds", "ounce", "ounces", "gram", "grams", "of", "and", "or",
    "fresh", "dried", "chopped", "minced", "sliced", "can", "cans", "large",
    "small", "medium", "head", "heads", "bunch", "clove", "cloves", "piece", "pieces",
    "tbsp", "tsp", "lbs",
}

# First match wins
COOKING_METHODS = [
    ("Baked", re.compile(r"\b(?:bak(?:e|ed|ing)|oven)\b")),
    ("Pan-Fried", re.compile(r"\b(?:fr(?:y|ied|ying)|pan)\b")),
    ("Grilled", re.compile(r"\bgrill")),
    ("Roasted", re.compile(r"\broast")),
    ("Sautéed", re.compile(r"\bsaut[ée]")),
    ("Simmered", re.compile(r"\b(?:boil|simmer)")),
    ("Steamed", re.compile(r"\bsteam")),
]


def clean_caption_for_title(caption: str) -> str:
    """First caption line left once emojis, hashtags and promo tails are removed."""
    for line in (caption or "").splitlines():
        for pattern in CAPTION_NOISE:
            line = pattern.sub("", line)
        line = line.strip()
        if line:
            return line
    return ""


def is_food_title(text: str) -> bool:
    if not 5 <= len(text) <= 100:
        return False
    return bool(FOOD_WORDS_RE.search(text)) and not EXCLUDE_WORDS_RE.search(text)


def format_title(text: str) -> str:
    """'the BEST  creamy pasta' -> 'Best Creamy Pasta'"""
    words = LEADING_ARTICLE_RE.sub("", text.strip()).split()
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)


def title_from_caption(caption: str) -> Optional[str]:
    text = clean_caption_for_title(caption)
    if len(text) < 10:
        return None

    for pattern in TITLE_PATTERNS:
        m = pattern.match(text)
        if m:
            candidate = m.group(1).strip()
            if is_food_title(candidate):
                return format_title(candidate)
    return None


def _key_word(ingredient: str) -> Optional[str]:
    words = ingredient.lower().split()
    if not words:
        return None
    for word in words:
        if word not in TITLE_STOP_WORDS and not word[0].isdigit() and len(word) > 2:
            return word
    return words[-1]


def generate_recipe_title(ingredients: Iterable[str], instructions: Iterable[str]) -> str:
    """Title from up to three key ingredients plus the cooking method."""
    keys = [k for k in (_key_word(i) for i in list(ingredients)[:4]) if k][:3]
    if not keys:
        return FALLBACK_TITLE

    text = " ".join(instructions).lower()
    method = next((name for name, pattern in COOKING_METHODS if pattern.search(text)), None)

    ingredient_part = " & ".join(k[:1].upper() + k[1:] for k in keys)
    if method:
        return f"{method} {ingredient_part}"
    return f"{ingredient_part} Recipe"


def recipe_title(
    caption: str,
    platform: str,
    ingredients: Iterable[str],
    instructions: Iterable[str],
) -> str:
    """Caption title for video platforms, generated title otherwise."""
    if platform in CAPTION_TITLE_PLATFORMS:
        title = title_from_caption(caption)
        if title:
            logger.debug(f"Using caption title {title!r}")
            return title
    return generate_recipe_title(ingredients, instructions)
