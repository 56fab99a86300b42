"""
Unit Conversion Service for recipe_capture.

Handles volume (base: cup) and weight (base: ounce) conversions, picks a
readable common unit when two quantities are summed, and formats quantities
with cooking fractions.
"""

import logging
import math
from typing import Optional, Tuple, Literal

from ..models import UnitCategory

logger = logging.getLogger("recipe_capture.units")

UnitSystem = Literal["original", "metric", "imperial"]

# --- Data Tables ---

# Canonical unit -> aliases (lower-case). Plurals with a trailing "s" are
# handled by normalize_unit.
CANONICAL_UNITS = {
    # Volume
    "teaspoon": ["tsp", "tsps", "tsp.", "teaspoons"],
    "tablespoon": ["tbsp", "tbsps", "tbs", "tbl", "tablespoons"],
    "fluid ounce": ["fl oz", "fl. oz", "fl. oz.", "fluid ounces", "fl ounce"],
    "cup": ["c", "cups"],
    "pint": ["pt", "pts", "pints"],
    "quart": ["qt", "qts", "quarts"],
    "gallon": ["gal", "gals", "gallons"],
    "milliliter": ["ml", "mls", "milliliters", "millilitre", "millilitres"],
    "liter": ["l", "liters", "litre", "litres"],
    # Weight
    "gram": ["g", "gr", "grams", "gramme", "grammes"],
    "kilogram": ["kg", "kgs", "kilograms", "kilo", "kilos"],
    "ounce": ["oz", "ozs", "ounces"],
    "pound": ["lb", "lbs", "pounds"],
    # Count / container units (no conversion category)
    "clove": ["cloves"],
    "can": ["cans"],
    "package": ["pkg", "packages", "packet", "packets"],
    "bunch": ["bunches"],
    "pinch": ["pinches"],
    "dash": ["dashes"],
    "slice": ["slices"],
    "stick": ["sticks"],
    "sprig": ["sprigs"],
    "stalk": ["stalks"],
    "head": ["heads"],
    "piece": ["pieces", "pc", "pcs"],
    "jar": ["jars"],
    "bottle": ["bottles"],
    "handful": ["handfuls"],
}

UNIT_ALIASES = {alias: canonical for canonical, aliases in CANONICAL_UNITS.items() for alias in aliases}
UNIT_ALIASES.update({canonical: canonical for canonical in CANONICAL_UNITS})

# Case-sensitive shorthands (T = tablespoon, t = teaspoon)
SYNONYMS = {
    "T": "tablespoon",
    "t": "teaspoon",
}

# Canonical unit -> (category, factor_to_base)
UNITS_DB = {
    # Volume (base: cup)
    "teaspoon": (UnitCategory.VOLUME, 1 / 48),
    "tablespoon": (UnitCategory.VOLUME, 1 / 16),
    "fluid ounce": (UnitCategory.VOLUME, 1 / 8),
    "cup": (UnitCategory.VOLUME, 1.0),
    "pint": (UnitCategory.VOLUME, 2.0),
    "quart": (UnitCategory.VOLUME, 4.0),
    "gallon": (UnitCategory.VOLUME, 16.0),
    "milliliter": (UnitCategory.VOLUME, 1 / 236.588),
    "liter": (UnitCategory.VOLUME, 1000 / 236.588),
    # Weight (base: ounce)
    "gram": (UnitCategory.WEIGHT, 1 / 28.35),
    "ounce": (UnitCategory.WEIGHT, 1.0),
    "pound": (UnitCategory.WEIGHT, 16.0),
    "kilogram": (UnitCategory.WEIGHT, 35.274),
}

# Smallest to largest, for picking a display unit.
UNIT_HIERARCHIES = {
    UnitCategory.VOLUME: [
        "milliliter", "teaspoon", "tablespoon", "fluid ounce", "cup",
        "pint", "quart", "liter", "gallon",
    ],
    UnitCategory.WEIGHT: ["gram", "ounce", "pound", "kilogram"],
}

# (decimal, display) in lookup order
COMMON_FRACTIONS = [
    (0.125, "1/8"),
    (0.25, "1/4"),
    (0.333, "1/3"),
    (0.375, "3/8"),
    (0.5, "1/2"),
    (0.625, "5/8"),
    (0.667, "2/3"),
    (0.75, "3/4"),
    (0.875, "7/8"),
]
FRACTION_TOLERANCE = 0.05


# --- Core Functions ---

def normalize_unit(unit: Optional[str]) -> str:
    """Normalize a unit string to its canonical name.

    Unknown units are returned lower-cased and trimmed; empty stays empty.
    """
    if not unit:
        return ""

    raw_clean = unit.strip()
    if raw_clean in SYNONYMS:
        return SYNONYMS[raw_clean]

    u = raw_clean.lower()
    if u in UNIT_ALIASES:
        return UNIT_ALIASES[u]

    u = u.rstrip(".")
    if u in UNIT_ALIASES:
        return UNIT_ALIASES[u]

    if u.endswith("s") and u[:-1] in UNIT_ALIASES:
        return UNIT_ALIASES[u[:-1]]

    return u


def get_unit_category(unit: Optional[str]) -> UnitCategory:
    info = UNITS_DB.get(normalize_unit(unit))
    return info[0] if info else UnitCategory.NONE


def can_convert(unit_a: Optional[str], unit_b: Optional[str]) -> bool:
    """Both empty -> True. One empty -> False. Otherwise same real category."""
    a = normalize_unit(unit_a)
    b = normalize_unit(unit_b)
    if not a or not b:
        return a == b

    cat_a = get_unit_category(a)
    return cat_a != UnitCategory.NONE and cat_a == get_unit_category(b)


def convert(quantity: float, from_unit: Optional[str], to_unit: Optional[str]) -> Optional[float]:
    """Convert quantity between units of one category. None if not possible."""
    norm_from = normalize_unit(from_unit)
    norm_to = normalize_unit(to_unit)

    if norm_from == norm_to:
        return quantity

    if not can_convert(norm_from, norm_to):
        return None

    _, factor_from = UNITS_DB[norm_from]
    _, factor_to = UNITS_DB[norm_to]

    base_qty = quantity * factor_from
    return base_qty / factor_to


def best_common_unit(unit_a: Optional[str], unit_b: Optional[str], total_in_unit_a: float) -> Optional[str]:
    """
    Pick the unit to express a summed total in.

    Starts at the larger of the two units and walks up the hierarchy,
    returning the first unit whose converted total lies in [1, 1000).
    If a step past the start drops below 1, the previous unit wins.
    Falls back to the starting unit.
    """
    if not can_convert(unit_a, unit_b):
        return None

    category = get_unit_category(unit_a)
    if category == UnitCategory.NONE:
        return None

    hierarchy = UNIT_HIERARCHIES[category]
    norm_a = normalize_unit(unit_a)
    norm_b = normalize_unit(unit_b)
    start = max(hierarchy.index(norm_a), hierarchy.index(norm_b))

    for i in range(start, len(hierarchy)):
        candidate = hierarchy[i]
        converted = convert(total_in_unit_a, norm_a, candidate)
        if converted is None:
            continue
        if 1 <= converted < 1000:
            return candidate
        if converted < 1 and i > start:
            return hierarchy[i - 1]

    return hierarchy[start]


# --- Formatting ---

def format_number(value: float, places: int = 2) -> str:
    """Round and drop trailing zeros: 2.0 -> "2", 2.50 -> "2.5"."""
    rounded = round(value, places)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.{places}f}".rstrip("0").rstrip(".")


def format_quantity_with_fractions(quantity: float) -> str:
    """
    Render a quantity with the nearest common cooking fraction.
    1.5 -> "1 1/2", 0.25 -> "1/4", 0.1 -> "0.1".
    """
    whole = math.floor(quantity)
    decimal = quantity - whole

    for value, display in COMMON_FRACTIONS:
        if abs(value - decimal) < FRACTION_TOLERANCE:
            if whole == 0:
                return display
            return f"{whole} {display}"

    return format_number(quantity)


def format_range(low: float, high: float) -> str:
    return f"{format_number(low)}-{format_number(high)}"


# --- Metric / Imperial display ---

class ConvertedMeasurement:
    def __init__(
        self,
        original: Tuple[str, str],
        metric: Tuple[str, str],
        imperial: Tuple[str, str],
    ):
        self.original = original
        self.metric = metric
        self.imperial = imperial

    def to_dict(self):
        return {
            "original": {"quantity": self.original[0], "unit": self.original[1]},
            "metric": {"quantity": self.metric[0], "unit": self.metric[1]},
            "imperial": {"quantity": self.imperial[0], "unit": self.imperial[1]},
        }


def _to_metric(quantity: float, unit: str) -> Tuple[str, str]:
    category = get_unit_category(unit)
    if category == UnitCategory.VOLUME:
        ml = convert(quantity, unit, "milliliter")
        if ml >= 1000:
            return format_number(ml / 1000, 2), "l"
        return format_number(ml, 0), "ml"

    grams = convert(quantity, unit, "gram")
    if grams >= 1000:
        return format_number(grams / 1000, 2), "kg"
    return format_number(grams, 0), "g"


def _to_imperial(quantity: float, unit: str) -> Tuple[str, str]:
    category = get_unit_category(unit)
    if category == UnitCategory.VOLUME:
        cups = convert(quantity, unit, "cup")
        if cups < 1 / 16:
            return format_quantity_with_fractions(cups * 48), "tsp"
        if cups < 1 / 4:
            return format_quantity_with_fractions(cups * 16), "tbsp"
        if cups < 4:
            return format_quantity_with_fractions(cups), "cups" if cups > 1 else "cup"
        return format_quantity_with_fractions(cups / 4), "qt"

    ounces = convert(quantity, unit, "ounce")
    if ounces < 16:
        return format_quantity_with_fractions(ounces), "oz"
    return format_quantity_with_fractions(ounces / 16), "lb"


def convert_measurement(quantity: float, unit: Optional[str]) -> ConvertedMeasurement:
    """Express a measurement in the original, metric and imperial systems.

    Units without a conversion category pass through unchanged.
    """
    unit = unit or ""
    original = (format_quantity_with_fractions(quantity), unit)

    if get_unit_category(unit) == UnitCategory.NONE:
        return ConvertedMeasurement(original, original, original)

    return ConvertedMeasurement(
        original,
        _to_metric(quantity, unit),
        _to_imperial(quantity, unit),
    )


def preferred_measurement(converted: ConvertedMeasurement, system: UnitSystem = "original") -> Tuple[str, str]:
    if system == "metric":
        return converted.metric
    if system == "imperial":
        return converted.imperial
    return converted.original
