import re
from typing import Optional, NamedTuple

# Unicode vulgar fractions -> exact values
VULGAR_FRACTIONS = {
    "½": 1 / 2,
    "¼": 1 / 4,
    "¾": 3 / 4,
    "⅓": 1 / 3,
    "⅔": 2 / 3,
    "⅛": 1 / 8,
    "⅜": 3 / 8,
    "⅝": 5 / 8,
    "⅞": 7 / 8,
    "⅕": 1 / 5,
    "⅖": 2 / 5,
    "⅗": 3 / 5,
    "⅘": 4 / 5,
    "⅙": 1 / 6,
    "⅚": 5 / 6,
}

_GLYPHS = "".join(VULGAR_FRACTIONS)

# One amount token. Order matters: longest forms first.
AMOUNT_PATTERN = (
    rf"(?:\d+\s*[{_GLYPHS}]"          # 1½ / 1 ½
    rf"|\d+\s+\d+\s*/\s*\d+"           # 1 1/2
    rf"|\d+\s*/\s*\d+"                 # 1/2
    rf"|\d*\.\d+|\d+(?:\.\d+)?"        # 0.5 / .5 / 2
    rf"|[{_GLYPHS}])"                  # ½
)

APPROX_PATTERN = r"(?:~|about|approx\.?|approximately|around|roughly|circa)"

RANGE_SEPARATOR = r"(?:\s*[-–—]\s*|\s+(?:to|or)\s+)"

LEADING_QUANTITY_RE = re.compile(
    rf"^(?P<approx>{APPROX_PATTERN}\s*)?"
    rf"(?P<low>{AMOUNT_PATTERN})"
    rf"(?:{RANGE_SEPARATOR}(?P<high>{AMOUNT_PATTERN}))?"
    r"(?![\d/])",
    re.IGNORECASE,
)

_MIXED_GLYPH_RE = re.compile(rf"^(\d+)\s*([{_GLYPHS}])$")
_MIXED_FRACTION_RE = re.compile(r"^(\d+)\s+(\d+)\s*/\s*(\d+)$")
_FRACTION_RE = re.compile(r"^(\d+)\s*/\s*(\d+)$")


class QuantityMatch(NamedTuple):
    low: float
    high: Optional[float]
    approximate: bool
    end: int

    @property
    def is_range(self) -> bool:
        return self.high is not None and self.high != self.low


def normalize_fraction_chars(text: str) -> str:
    """Fraction slash (U+2044) and division slash (U+2215) -> '/'."""
    return text.replace("⁄", "/").replace("∕", "/")


def parse_amount(token: str) -> Optional[float]:
    """Parse a single amount token ("1 1/2", "1½", "⅓", "0.5") to a float."""
    if not token:
        return None
    t = normalize_fraction_chars(token.strip())

    if t in VULGAR_FRACTIONS:
        return VULGAR_FRACTIONS[t]

    m = _MIXED_GLYPH_RE.match(t)
    if m:
        return int(m.group(1)) + VULGAR_FRACTIONS[m.group(2)]

    m = _MIXED_FRACTION_RE.match(t)
    if m:
        denominator = int(m.group(3))
        if denominator == 0:
            return None
        return int(m.group(1)) + int(m.group(2)) / denominator

    m = _FRACTION_RE.match(t)
    if m:
        denominator = int(m.group(2))
        if denominator == 0:
            return None
        return int(m.group(1)) / denominator

    try:
        return float(t)
    except ValueError:
        return None


def match_leading_quantity(text: str) -> Optional[QuantityMatch]:
    """
    Match an amount or range at the start of text.

    "2-3 cups" -> low=2, high=3; "~2 tbsp" -> low=2, approximate.
    Ranges are returned ordered (low <= high).
    """
    m = LEADING_QUANTITY_RE.match(normalize_fraction_chars(text))
    if not m:
        return None

    low = parse_amount(m.group("low"))
    if low is None:
        return None

    high = None
    if m.group("high"):
        high = parse_amount(m.group("high"))
        if high is None:
            return None
        if high < low:
            low, high = high, low

    return QuantityMatch(low=low, high=high, approximate=bool(m.group("approx")), end=m.end())
