import re
from typing import Tuple

_DECIMAL_RE = re.compile(r"\d*[.,]?\d+", re.ASCII)

# Unicode vulgar fractions -> (numerator, denominator)
UNICODE_FRACTIONS = {
    "½": (1, 2),
    "⅓": (1, 3),
    "⅔": (2, 3),
    "¼": (1, 4),
    "¾": (3, 4),
    "⅕": (1, 5),
    "⅖": (2, 5),
    "⅗": (3, 5),
    "⅘": (4, 5),
    "⅙": (1, 6),
    "⅚": (5, 6),
    "⅛": (1, 8),
    "⅜": (3, 8),
    "⅝": (5, 8),
    "⅞": (7, 8),
    "⅟": (1, 1),
}


def _is_integer(text: str) -> bool:
    """Check if a string represents a non-negative integer."""
    return text.isascii() and text.isdigit()


def _is_number(text: str) -> bool:
    """Check if a string is a decimal number, accepting "," as decimal separator."""
    try:
        _to_float(text)
        return True
    except ValueError:
        return False


def _to_float(text: str) -> float:
    """Parse "2.5" or "2,5" into a float."""
    if not _DECIMAL_RE.fullmatch(text):
        raise ValueError(f"Not a number: {text}")
    return float(text.replace(",", "."))


def _is_fraction(text: str) -> bool:
    """Check if a string represents a valid fraction (e.g., '1/2' or '1⁄2')."""
    text = text.replace("⁄", "/")
    if "/" not in text:
        return False
    parts = text.split("/")
    return len(parts) == 2 and all(_is_integer(part) for part in parts)


def _parse_fraction(text: str) -> Tuple[int, int]:
    """Parse a fraction string (e.g., '3/4') into ``(numerator, denominator)``."""
    text = text.replace("⁄", "/")
    if not _is_fraction(text):
        raise ValueError(f"Not a fraction: {text}")

    numerator_str, denominator_str = text.split("/")
    numerator = int(numerator_str)
    denominator = int(denominator_str)

    if denominator == 0:
        raise ZeroDivisionError("Division by zero in fraction")

    return numerator, denominator


def expand_unicode_fractions(text: str) -> str:
    """Rewrite unicode fraction glyphs as ASCII fractions.

    A glyph attached to a whole number becomes a mixed number.

    Examples:
        >>> expand_unicode_fractions("1½ cups")
        '1 1/2 cups'
        >>> expand_unicode_fractions("¾ tsp")
        '3/4 tsp'
    """
    out = []
    for i, char in enumerate(text):
        if char in UNICODE_FRACTIONS:
            numerator, denominator = UNICODE_FRACTIONS[char]
            if i > 0 and text[i - 1].isdigit():
                out.append(" ")
            out.append(f"{numerator}/{denominator}")
        else:
            out.append(char)
    return "".join(out)
