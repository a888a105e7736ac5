"""Parsing of OCR'd ingredient lines into scored :class:`Ingredient` records."""

import logging
import re
from typing import List, Optional, Tuple

from ingredient_ocr.ingredients.models import (
    Exact,
    Fraction,
    Ingredient,
    IngredientList,
    Quantity,
    QuantityType,
    Range,
)
from ingredient_ocr.ingredients.number_utils import (
    _is_fraction,
    _is_integer,
    _is_number,
    _parse_fraction,
    _to_float,
    expand_unicode_fractions,
)
from ingredient_ocr.ingredients.postprocessing import postprocess_ingredient_name
from ingredient_ocr.ingredients.units import (
    AnyUnit,
    Unit,
    UnknownUnit,
    is_measurement_word,
    lookup_unit,
)

logger = logging.getLogger(__name__)

# --- Constants ---

CONFIDENCE_KNOWN_UNIT = 1.0
CONFIDENCE_COUNT = 0.9
CONFIDENCE_UNKNOWN_UNIT = 0.8
CONFIDENCE_AMBIGUOUS = 0.6
CONFIDENCE_NAME_ONLY = 0.5
APPROXIMATE_PENALTY = 0.1

RANGE_WORDS = {"to", "or", "à", "a", "ou", "-", "–"}

# Phrases standing in for a quantity at the start of a line
LEADING_AMBIGUOUS = (
    "a pinch of",
    "a handful of",
    "a little",
    "a bit of",
    "a few",
    "a dash of",
    "some",
    "several",
    "une pincée de",
    "une poignée de",
    "un peu de",
    "un peu d'",
    "quelques",
    "plusieurs",
)

# Phrases standing in for a quantity at the end of a line
TRAILING_AMBIGUOUS_RE = re.compile(
    r"[\s,;:-]*\(?\b(?P<phrase>to taste|as needed|as required|to serve|for garnish|"
    r"optional|selon le goût|selon goût|au goût|à goût|à volonté|facultatif|optionnel)"
    r"\)?\.?\s*$",
    re.IGNORECASE,
)

APPROXIMATE_RE = re.compile(
    r"^(?:~|(?:ca|approx)\.|(?:approximately|approx|about|around|roughly|environ|"
    r"scant|heaping|generous)\b)\s*",
    re.IGNORECASE,
)

_PARENTHETICAL_RE = re.compile(r"\s*\(([^)]*)\)")
_ATTACHED_UNIT_RE = re.compile(r"(?<=\d)(?=[^\W\d_])")


class IngredientParseError(ValueError):
    """A line could not be turned into an ingredient."""

    def __init__(self, reason: str, line: str):
        super().__init__(f"{reason}: {line!r}")
        self.reason = reason
        self.line = line


# --- Functions ---


def parse_quantity_text(text: str) -> Tuple[Optional[QuantityType], str]:
    """Parse the amount at the start of ``text``.

    Handles numeric ranges, mixed numbers, fractions (including unicode
    glyphs and the fraction slash), decimals with "." or "," and integers.

    Args:
        text: Ingredient text with a potential quantity at the start.

    Returns:
        A tuple containing:
            - quantity: Parsed measurement, or None if no amount was found
            - rest: Remaining text after the amount

    Examples:
        >>> parse_quantity_text("2 1/4 cups butter")
        (Fraction(numerator=1, denominator=4, whole=2), 'cups butter')
        >>> parse_quantity_text("2-3 tbsp olive oil")
        (Range(min=2.0, max=3.0), 'tbsp olive oil')
    """
    text = expand_unicode_fractions(text).replace("⁄", "/")
    text = re.sub(r"(?<=\d)\s*[-–]\s*(?=\d)", " - ", text)

    words = text.split()
    if not words:
        return None, ""

    try:
        # Try different parsing patterns in order of complexity
        for parser in [_parse_number_range, _parse_mixed_number, _parse_simple_number]:
            quantity, consumed_words = parser(words)
            if quantity is not None:
                return quantity, " ".join(words[consumed_words:])
    except (ValueError, ZeroDivisionError):
        # If any parsing fails, no amount can be parsed
        pass

    return None, " ".join(words)


def _parse_number_range(words: List[str]) -> Tuple[Optional[QuantityType], int]:
    """Parse number ranges like '2 to 3', '2 à 3' or '2 - 3'."""
    if (
        len(words) >= 3
        and _is_number(words[0])
        and words[1].lower() in RANGE_WORDS
        and _is_number(words[2])
    ):
        low, high = _to_float(words[0]), _to_float(words[2])
        if low > high:
            logger.debug("Swapping reversed range bounds %s-%s", low, high)
            low, high = high, low
        return Range(low, high), 3

    return None, 0


def _parse_mixed_number(words: List[str]) -> Tuple[Optional[QuantityType], int]:
    """Parse mixed numbers like '1 1/2'."""
    if len(words) < 2 or not _is_integer(words[0]) or not _is_fraction(words[1]):
        return None, 0

    numerator, denominator = _parse_fraction(words[1])
    return Fraction(numerator, denominator, int(words[0])), 2


def _parse_simple_number(words: List[str]) -> Tuple[Optional[QuantityType], int]:
    """Parse simple numbers like '1/2', '2.5', '2,5' or '3'."""
    if _is_fraction(words[0]):
        numerator, denominator = _parse_fraction(words[0])
        return Fraction(numerator, denominator), 1

    if _is_number(words[0]):
        return Exact(_to_float(words[0])), 1

    return None, 0


def parse_unit_text(text: str) -> Tuple[Optional[AnyUnit], str]:
    """Parse a unit from the start of ``text``.

    Multi-word units ("cuillères à soupe", "fl oz") are tried before single
    words. A recognised measurement word with no canonical unit ("slices",
    "tranches") becomes an :class:`UnknownUnit`.

    Returns:
        A tuple of the unit (or None) and the text after it.
    """
    words = text.split()
    for size in (3, 2, 1):
        if len(words) < size:
            continue
        candidate = " ".join(words[:size])
        unit = lookup_unit(candidate)
        if unit is not None:
            return unit, " ".join(words[size:])

    if words and is_measurement_word(words[0]):
        return UnknownUnit(words[0].lower().strip(".")), " ".join(words[1:])

    return None, text.strip()


def score_ingredient(quantity: Optional[Quantity], has_unit_token: bool) -> float:
    """Confidence for one parsed ingredient.

    A recognised unit scores highest, then a bare count, an unrecognised unit
    word, an ambiguous amount and finally a name with no quantity at all.
    Approximate amounts lose a little.
    """
    if quantity is None:
        return CONFIDENCE_NAME_ONLY
    if quantity.is_ambiguous():
        return CONFIDENCE_AMBIGUOUS

    if not has_unit_token:
        score = CONFIDENCE_COUNT
    elif isinstance(quantity.unit, UnknownUnit):
        score = CONFIDENCE_UNKNOWN_UNIT
    else:
        score = CONFIDENCE_KNOWN_UNIT

    if quantity.is_approximate:
        score -= APPROXIMATE_PENALTY
    return round(score, 2)


def _split_parentheticals(text: str) -> Tuple[str, Optional[str]]:
    """Remove parenthetical notes, returning the first one as a modifier."""
    notes = [n.strip() for n in _PARENTHETICAL_RE.findall(text) if n.strip()]
    text = _PARENTHETICAL_RE.sub("", text)
    return text, (notes[0] if notes else None)


def _match_leading_ambiguous(text: str) -> Tuple[Optional[str], str]:
    lowered = text.lower()
    for phrase in LEADING_AMBIGUOUS:
        if lowered.startswith(phrase) and (
            phrase.endswith("'") or lowered[len(phrase) : len(phrase) + 1] in ("", " ")
        ):
            return phrase, text[len(phrase) :].strip()
    return None, text


def parse_ingredient_line(line: str) -> Ingredient:
    """Parse one ingredient line.

    Args:
        line: Raw ingredient text, e.g. "2 1/4 cups flour (sifted)" or
            "sel, au goût".

    Returns:
        An :class:`Ingredient` with its quantity, modifier, notes and confidence.

    Raises:
        IngredientParseError: If no ingredient name can be extracted.

    Examples:
        >>> str(parse_ingredient_line("2-3 tbsp olive oil"))
        '2-3 tbsp olive oil'
        >>> parse_ingredient_line("250 g de farine").name
        'farine'
    """
    original = line.strip()
    if not original:
        raise IngredientParseError("Empty line", line)
    if original.endswith(":"):
        raise IngredientParseError("Section header", line)

    text = expand_unicode_fractions(original).replace("⁄", "/")
    text = _ATTACHED_UNIT_RE.sub(" ", text)
    text, modifier = _split_parentheticals(text)
    text = " ".join(text.split())

    is_approximate = False
    approx_match = APPROXIMATE_RE.match(text)
    if approx_match:
        is_approximate = True
        text = text[approx_match.end() :]

    notes = None
    trailing = TRAILING_AMBIGUOUS_RE.search(text)
    trailing_phrase = None
    if trailing and trailing.start() > 0:
        trailing_phrase = trailing.group("phrase").lower()
        text = text[: trailing.start()]

    quantity = None
    has_unit_token = False
    leading_phrase, rest = _match_leading_ambiguous(text)
    if leading_phrase is not None:
        quantity = Quantity.ambiguous(leading_phrase)
    else:
        measurement, rest = parse_quantity_text(text)
        if measurement is not None:
            unit, rest = parse_unit_text(rest)
            has_unit_token = unit is not None
            quantity = Quantity(
                measurement,
                unit if unit is not None else Unit.PIECES,
                is_approximate=is_approximate,
            )

    if trailing_phrase is not None:
        if quantity is None:
            quantity = Quantity.ambiguous(trailing_phrase)
        else:
            notes = trailing_phrase

    name, _, comment = rest.partition(",")
    comment = comment.strip()
    if comment:
        notes = f"{comment}; {notes}" if notes else comment

    name = postprocess_ingredient_name(name)
    if not re.search(r"[^\W\d_]", name):
        raise IngredientParseError("No ingredient name found", line)

    ingredient = Ingredient(name, quantity=quantity, modifier=modifier, notes=notes)
    ingredient = ingredient.with_confidence(score_ingredient(quantity, has_unit_token))
    logger.debug("Parsed ingredient line '%s' -> %s", original, ingredient)
    return ingredient


def parse_ingredient_list(text: str) -> IngredientList:
    """Parse a block of OCR text, one ingredient per non-empty line.

    Lines that cannot be parsed are kept as unparsed lines.
    """
    ingredient_list = IngredientList(original_text=text)

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            ingredient_list.add_ingredient(parse_ingredient_line(line))
        except IngredientParseError as e:
            logger.debug("Could not parse line: %s", e)
            ingredient_list.add_unparsed_line(line)

    logger.info(
        "Parsed %d ingredients with %.1f%% confidence, %d unparsed lines",
        ingredient_list.parsed_count(),
        ingredient_list.overall_confidence * 100,
        ingredient_list.unparsed_count(),
    )
    return ingredient_list
