"""
Grocery list merge.

Combines two ingredient lists into one, summing quantities of matching
ingredients (by lower-cased name):
- range + range: component-wise sum, midpoint as the scalar quantity
- range + scalar: scalar added to both ends
- scalar + scalar: direct sum for equal units, otherwise converted to the
  best common unit; incompatible units stay as separate "name-unit" entries
"""

import logging
import re
from typing import Any, Iterable, Optional, Union

from ..models import GroceryItem, MergedIngredient, ParsedIngredient, QuantityRange
from .unit_conversion import (
    best_common_unit,
    can_convert,
    convert,
    format_quantity_with_fractions,
    format_range,
    normalize_unit,
)

logger = logging.getLogger("recipe_capture.merge")

MergeInput = Union[GroceryItem, ParsedIngredient, dict]

_DISPLAY_RANGE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)\s*$")


def to_grocery_item(item: Any) -> GroceryItem:
    if isinstance(item, GroceryItem):
        return item
    if isinstance(item, ParsedIngredient):
        return GroceryItem.from_parsed(item)
    return GroceryItem.model_validate(item)


def range_of(item: GroceryItem) -> Optional[QuantityRange]:
    """Explicit range, or one encoded in a "10-15" display quantity."""
    if item.range is not None:
        return item.range
    if item.display_quantity:
        m = _DISPLAY_RANGE_RE.match(item.display_quantity)
        if m:
            low, high = float(m.group(1)), float(m.group(2))
            return QuantityRange(min=min(low, high), max=max(low, high))
    return None


def _units_compatible(unit_a: str, unit_b: str) -> bool:
    return normalize_unit(unit_a) == normalize_unit(unit_b) or can_convert(unit_a, unit_b)


def _category(existing: GroceryItem, item: GroceryItem) -> Optional[str]:
    return existing.category or item.category


def _scalar(name: str, quantity: float, unit: str, category: Optional[str] = None) -> MergedIngredient:
    return MergedIngredient(
        name=name,
        quantity=quantity,
        unit=unit,
        display_quantity=format_quantity_with_fractions(quantity),
        category=category,
        merged=True,
    )


def _combine_ranges(existing: GroceryItem, item: GroceryItem) -> Optional[MergedIngredient]:
    if not _units_compatible(existing.unit, item.unit):
        return None

    def bounds(g: GroceryItem) -> tuple[float, float]:
        r = range_of(g)
        low, high = (r.min, r.max) if r else (g.quantity, g.quantity)
        return convert(low, g.unit, existing.unit), convert(high, g.unit, existing.unit)

    a_low, a_high = bounds(existing)
    b_low, b_high = bounds(item)
    if None in (a_low, a_high, b_low, b_high):
        return None

    low, high = a_low + b_low, a_high + b_high
    return MergedIngredient(
        name=existing.name,
        quantity=(low + high) / 2,
        unit=existing.unit,
        range=QuantityRange(min=low, max=high),
        display_quantity=format_range(low, high),
        category=_category(existing, item),
        merged=True,
    )


def combine_items(existing: GroceryItem, item: GroceryItem) -> Optional[MergedIngredient]:
    """Sum two entries for the same ingredient. None if they cannot be combined."""
    if range_of(existing) is not None or range_of(item) is not None:
        return _combine_ranges(existing, item)

    unit_a = normalize_unit(existing.unit)
    unit_b = normalize_unit(item.unit)

    if unit_a == unit_b:
        return _scalar(existing.name, existing.quantity + item.quantity, existing.unit, _category(existing, item))

    if not can_convert(unit_a, unit_b):
        return None

    total_in_a = existing.quantity + convert(item.quantity, unit_b, unit_a)
    best = best_common_unit(unit_a, unit_b, total_in_a)
    if best is None:
        return None

    converted_a = convert(existing.quantity, unit_a, best)
    converted_b = convert(item.quantity, unit_b, best)
    if converted_a is None or converted_b is None:
        return None

    logger.debug(
        f"Converted {existing.name}: {existing.quantity} {unit_a} + {item.quantity} {unit_b} -> {best}"
    )
    return _scalar(existing.name, converted_a + converted_b, best, _category(existing, item))


def _fresh(item: GroceryItem) -> MergedIngredient:
    return MergedIngredient(**item.model_dump())


def _merge_into(merged: dict[str, MergedIngredient], item: GroceryItem) -> None:
    key = item.name.lower().strip()
    existing = merged.get(key)
    if existing is None:
        merged[key] = _fresh(item)
        return

    try:
        combined = combine_items(existing, item)
    except Exception as e:
        logger.warning(f"Unit conversion error for {item.name!r}, keeping separate: {e}")
        combined = None

    if combined is not None:
        merged[key] = combined
        return

    # Incompatible units: keep a separate "name-unit" entry
    separate_key = f"{key}-{normalize_unit(item.unit)}"
    suffix = 1
    while separate_key in merged:
        try:
            combined = combine_items(merged[separate_key], item)
        except Exception as e:
            logger.warning(f"Unit conversion error for {item.name!r}, keeping separate: {e}")
            combined = None
        if combined is not None:
            merged[separate_key] = combined
            return
        suffix += 1
        separate_key = f"{key}-{normalize_unit(item.unit)}-{suffix}"

    merged[separate_key] = _fresh(item)


def _sorted(items: Iterable[MergedIngredient]) -> list[MergedIngredient]:
    return sorted(items, key=lambda m: (m.name.lower(), m.unit))


def simple_merge(list_a: Iterable[MergeInput], list_b: Iterable[MergeInput]) -> list[MergedIngredient]:
    """Additive merge keyed by name+unit, no unit conversion."""
    merged: dict[str, MergedIngredient] = {}

    for raw in [*(list_a or []), *(list_b or [])]:
        try:
            item = to_grocery_item(raw)
        except Exception as e:
            logger.warning(f"Skipping unreadable grocery item {raw!r}: {e}")
            continue

        key = f"{item.name.lower()}-{item.unit.lower()}"
        existing = merged.get(key)
        if existing is None:
            merged[key] = _fresh(item)
        else:
            merged[key] = _scalar(
                existing.name, existing.quantity + item.quantity, existing.unit, _category(existing, item)
            )

    return _sorted(merged.values())


def merge_ingredient_lists(list_a: Iterable[MergeInput], list_b: Iterable[MergeInput]) -> list[MergedIngredient]:
    """
    Merge two grocery lists into a new list sorted by name.
    Inputs are not modified.
    """
    try:
        merged: dict[str, MergedIngredient] = {}
        for raw in [*(list_a or []), *(list_b or [])]:
            _merge_into(merged, to_grocery_item(raw))
        return _sorted(merged.values())
    except Exception as e:
        logger.error(f"Error merging lists, using simple merge: {e}")
        return simple_merge(list_a, list_b)
