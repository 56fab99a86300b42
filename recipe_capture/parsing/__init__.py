from .ingredient_parser import parse_ingredient_line, parse_ingredients
from .dedup import deduplicate_ingredients, extract_core_ingredient_key
from .quantity import parse_amount, match_leading_quantity
from .titles import recipe_title

__all__ = [
    "parse_ingredient_line",
    "parse_ingredients",
    "deduplicate_ingredients",
    "extract_core_ingredient_key",
    "parse_amount",
    "match_leading_quantity",
    "recipe_title",
]
