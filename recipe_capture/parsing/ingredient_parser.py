import re
import logging
from typing import Optional, Iterable

from ..models import ParsedIngredient, QuantityRange
from ..services.unit_conversion import (
    UNIT_ALIASES,
    SYNONYMS,
    convert,
    can_convert,
)
from .quantity import AMOUNT_PATTERN, match_leading_quantity, parse_amount

logger = logging.getLogger("recipe_capture.parsing")

PREPARATIONS = {
    "chopped", "diced", "sliced", "minced", "grated", "shredded", "melted",
    "softened", "crushed", "julienned", "cubed", "halved", "quartered",
    "peeled", "seeded", "trimmed", "rinsed", "drained", "beaten", "whisked",
    "sifted", "toasted", "zested", "juiced", "mashed", "pitted", "cored",
    "deveined", "torn", "cut", "thawed", "cooked", "packed", "separated",
    "crumbled", "smashed", "squeezed", "warmed", "chilled", "room-temperature",
}

PREP_ADVERBS = {
    "finely", "roughly", "coarsely", "thinly", "thickly", "freshly", "lightly",
    "well", "firmly", "loosely", "very",
}

NOTE_PATTERNS = [
    "to taste", "optional", "if desired", "if needed", "as needed", "divided",
    "for serving", "for garnish", "for topping", "for frying", "for dusting",
    "plus more", "or more", "at room temperature", "room temperature",
]

GARBAGE_TOKENS = {
    "or", "and", "optional", "to taste", "if needed", "for serving", "plus more", "divided"
}

NOTE_SUFFIX_RE = re.compile(
    r"\s+(" + "|".join(re.escape(p) for p in NOTE_PATTERNS) + r")\s*$",
    re.IGNORECASE,
)

# Unit token must end at whitespace, punctuation or end of string
# ("g" must not match the start of "garlic").
_UNIT_ALTERNATION = "|".join(
    re.escape(alias) for alias in sorted(UNIT_ALIASES, key=len, reverse=True)
)
UNIT_RE = re.compile(rf"^(?P<unit>{_UNIT_ALTERNATION})\.?(?=[\s,;:)]|$)", re.IGNORECASE)
SHORTHAND_UNIT_RE = re.compile(rf"^(?P<unit>{'|'.join(SYNONYMS)})\.?(?=\s|$)")

UNIT_RANGE_TAIL_RE = re.compile(
    rf"^(?:to|or|[-–—])\s*(?P<high>{AMOUNT_PATTERN})(?![\d/])\s*",
    re.IGNORECASE,
)

PARENTHETICAL_RE = re.compile(r"\(([^)]*)\)")
LEADING_PARENTHETICAL_RE = re.compile(r"^\(([^)]*)\)\s*")


def sanitize_ingredient_text(text: str) -> str:
    """Strip markdown and normalize whitespace."""
    if not text:
        return ""

    s = text
    # Remove markdown bold/italic markers
    s = s.replace("**", "").replace("__", "").replace("*", "")

    # Remove leading bullets
    s = re.sub(r'^[\s\-\#•]+', '', s)

    # Collapse whitespace
    s = re.sub(r'\s+', ' ', s).strip()

    return s


def is_garbage_line(text: str) -> bool:
    """Check if the text is just a connector word or garbage."""
    if not text:
        return True

    t = text.lower().strip()
    t = re.sub(r'[^\w\s]', '', t)

    if not t:
        return True

    return t in GARBAGE_TOKENS


def match_unit(text: str) -> tuple[str, str]:
    """Match a unit at the start of text. Returns (canonical_unit, remainder)."""
    m = SHORTHAND_UNIT_RE.match(text)
    if m:
        return SYNONYMS[m.group("unit")], text[m.end():].strip()

    m = UNIT_RE.match(text)
    if m:
        return UNIT_ALIASES[m.group("unit").lower()], text[m.end():].strip()

    return "", text


def _is_preparation(segment: str) -> bool:
    words = [w for w in segment.lower().split() if w not in PREP_ADVERBS]
    if not words:
        return False
    return words[0].strip(".;:") in PREPARATIONS


def _is_note(segment: str) -> bool:
    s = segment.lower().strip(" .;:")
    return any(s == p or s.startswith(p + " ") for p in NOTE_PATTERNS)


def strip_parentheticals(text: str) -> str:
    s = PARENTHETICAL_RE.sub(" ", text)
    s = re.sub(r"\[[^\]]*\]", " ", s)
    return re.sub(r"\s+", " ", s).strip()


def _split_name(rest: str, notes: list[str]) -> tuple[str, Optional[str]]:
    """Split the remainder after quantity/unit into (name, preparation)."""
    rest = re.sub(r"^of\s+", "", rest, flags=re.IGNORECASE)

    for inner in PARENTHETICAL_RE.findall(rest):
        if _is_note(inner):
            notes.append(inner.strip().lower())
    rest = strip_parentheticals(rest)

    segments = [s.strip() for s in rest.split(",")]
    name = segments[0]
    preparations = []
    for segment in segments[1:]:
        if not segment:
            continue
        if _is_preparation(segment):
            preparations.append(segment.lower())
        else:
            notes.append(segment.lower())

    m = NOTE_SUFFIX_RE.search(name)
    if m:
        notes.append(m.group(1).lower())
        name = name[:m.start()]

    name = re.sub(r"\s+", " ", name).strip(" .;:-").lower()
    preparation = ", ".join(preparations) if preparations else None
    return name, preparation


def _quantity_from_parenthetical(text: str):
    """Find "(approximately 1-2 cups)" style amounts. Returns (match, unit, span)."""
    for m in reversed(list(PARENTHETICAL_RE.finditer(text))):
        inner = m.group(1).strip()
        qm = match_leading_quantity(inner)
        if not qm:
            continue
        unit, _ = match_unit(inner[qm.end:].strip())
        return qm, unit, m.span()
    return None


def _unit_range_tail(rest: str, unit: str):
    """Handle "½ cup to ¾ cup flour": returns (high_in_unit, remainder) or None."""
    m = UNIT_RANGE_TAIL_RE.match(rest)
    if not m:
        return None
    high = parse_amount(m.group("high"))
    if high is None:
        return None

    tail_unit, tail = match_unit(rest[m.end():])
    if not tail_unit or tail_unit == unit:
        # count units (clove, can) have no conversion category
        return high, tail
    if not can_convert(tail_unit, unit):
        return None
    return convert(high, tail_unit, unit), tail


def _build(name, low, high, unit, preparation, notes, confidence, original) -> ParsedIngredient:
    if high is not None and high != low:
        if high < low:
            low, high = high, low
        amount = {"range": QuantityRange(min=low, max=high)}
    else:
        amount = {"quantity": low}

    return ParsedIngredient(
        name=name,
        unit=unit,
        preparation=preparation,
        notes="; ".join(notes) if notes else None,
        confidence=confidence,
        original=original,
        **amount,
    )


def _parse(original: str) -> ParsedIngredient:
    clean = sanitize_ingredient_text(original)
    if is_garbage_line(clean):
        return ParsedIngredient(name="", quantity=0.0, unit="", confidence=0.0, original=original)

    notes: list[str] = []

    qm = match_leading_quantity(clean)
    if qm:
        rest = clean[qm.end:].strip()
        low, high = qm.low, qm.high
        if qm.approximate:
            notes.append("approximate")

        unit, after_unit = match_unit(rest)
        if not unit:
            # "1 (14 oz) can tomatoes"
            lead = LEADING_PARENTHETICAL_RE.match(rest)
            if lead:
                unit, after_unit = match_unit(rest[lead.end():])
                if unit:
                    notes.append(lead.group(1).strip().lower())
        if unit:
            rest = after_unit
            if high is None:
                tail = _unit_range_tail(rest, unit)
                if tail:
                    high, rest = tail

        name, preparation = _split_name(rest, notes)
        confidence = 1.0 if unit else 0.9
        return _build(name, low, high, unit, preparation, notes, confidence, original)

    found = _quantity_from_parenthetical(clean)
    if found:
        pq, unit, (start, end) = found
        if pq.approximate:
            notes.append("approximate")
        rest = clean[:start] + clean[end:]
        name, preparation = _split_name(rest, notes)
        return _build(name, pq.low, pq.high, unit, preparation, notes, 0.7, original)

    name, preparation = _split_name(clean, notes)
    return _build(name, 0.0, None, "", preparation, notes, 0.5, original)


def _degraded(original: str) -> ParsedIngredient:
    name = re.sub(r"[\d/.,()\[\]]+", " ", sanitize_ingredient_text(original))
    name = re.sub(r"\s+", " ", name).strip().lower() or "unknown ingredient"
    return ParsedIngredient(name=name, quantity=0.0, unit="", confidence=0.3, original=original)


def parse_ingredient_line(line: str) -> ParsedIngredient:
    """
    Parse one free-text ingredient line into a ParsedIngredient.
    Never raises: malformed input degrades to a low-confidence result.
    Lines without an amount get quantity 0 and an empty unit.
    """
    original = line if isinstance(line, str) else ""
    try:
        return _parse(original)
    except Exception as e:
        logger.warning(f"Ingredient parse degraded for {original!r}: {e}")
        return _degraded(original)


def parse_ingredients(lines: Iterable[str]) -> list[ParsedIngredient]:
    """Parse many lines, dropping connectors and blank lines."""
    parsed = [parse_ingredient_line(line) for line in (lines or [])]
    return [p for p in parsed if p.name]
