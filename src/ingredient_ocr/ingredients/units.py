"""Measurement unit vocabulary for English and French recipe text."""

import dataclasses
import enum
import re
from typing import Optional, Union


class Unit(enum.Enum):
    # Volume
    TEASPOONS = "teaspoons"
    TABLESPOONS = "tablespoons"
    FLUID_OUNCES = "fluid_ounces"
    CUPS = "cups"
    PINTS = "pints"
    QUARTS = "quarts"
    GALLONS = "gallons"
    MILLILITERS = "milliliters"
    LITERS = "liters"
    # Weight
    OUNCES = "ounces"
    POUNDS = "pounds"
    GRAMS = "grams"
    KILOGRAMS = "kilograms"
    # Count
    PIECES = "pieces"
    DOZEN = "dozen"
    CLOVES = "cloves"
    PACKAGES = "packages"
    CANS = "cans"
    BOTTLES = "bottles"
    # Small amounts, no category
    PINCHES = "pinches"
    DASHES = "dashes"

    def is_volume(self) -> bool:
        return self in VOLUME_UNITS

    def is_weight(self) -> bool:
        return self in WEIGHT_UNITS

    def is_count(self) -> bool:
        return self in COUNT_UNITS

    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


@dataclasses.dataclass(frozen=True)
class UnknownUnit:
    """A unit token that has no canonical :class:`Unit`."""

    raw: str = ""

    def is_volume(self) -> bool:
        return False

    def is_weight(self) -> bool:
        return False

    def is_count(self) -> bool:
        return False

    def display_name(self) -> str:
        return "unknown"


AnyUnit = Union[Unit, UnknownUnit]

VOLUME_UNITS = frozenset(
    {
        Unit.TEASPOONS,
        Unit.TABLESPOONS,
        Unit.FLUID_OUNCES,
        Unit.CUPS,
        Unit.PINTS,
        Unit.QUARTS,
        Unit.GALLONS,
        Unit.MILLILITERS,
        Unit.LITERS,
    }
)
WEIGHT_UNITS = frozenset({Unit.OUNCES, Unit.POUNDS, Unit.GRAMS, Unit.KILOGRAMS})
COUNT_UNITS = frozenset(
    {Unit.PIECES, Unit.DOZEN, Unit.CLOVES, Unit.PACKAGES, Unit.CANS, Unit.BOTTLES}
)

DISPLAY_NAMES = {
    Unit.TEASPOONS: "tsp",
    Unit.TABLESPOONS: "tbsp",
    Unit.FLUID_OUNCES: "fl oz",
    Unit.CUPS: "cups",
    Unit.PINTS: "pints",
    Unit.QUARTS: "quarts",
    Unit.GALLONS: "gallons",
    Unit.MILLILITERS: "ml",
    Unit.LITERS: "L",
    Unit.OUNCES: "oz",
    Unit.POUNDS: "lbs",
    Unit.GRAMS: "g",
    Unit.KILOGRAMS: "kg",
    Unit.PIECES: "pieces",
    Unit.DOZEN: "dozen",
    Unit.PINCHES: "pinches",
    Unit.DASHES: "dashes",
    Unit.CLOVES: "cloves",
    Unit.PACKAGES: "packages",
    Unit.CANS: "cans",
    Unit.BOTTLES: "bottles",
}

# Canonical unit -> spellings seen in English and French recipes
UNIT_MAP = {
    Unit.TEASPOONS: [
        "tsp",
        "teaspoon",
        "teaspoons",
        "teaspoonful",
        "cuillère à café",
        "cuillères à café",
        "cuillere a cafe",
        "cac",
        "c. à café",
        "c. à c",
        "c.à.c",
    ],
    Unit.TABLESPOONS: [
        "tbsp",
        "tablespoon",
        "tablespoons",
        "tablespoonful",
        "cuillère à soupe",
        "cuillères à soupe",
        "cuillere a soupe",
        "cas",
        "c. à soupe",
        "c. à s",
        "c.à.s",
    ],
    Unit.FLUID_OUNCES: ["fl oz", "fl. oz", "fluid ounce", "fluid ounces"],
    Unit.CUPS: ["cup", "cups", "c", "tasse", "tasses"],
    Unit.PINTS: ["pint", "pints", "pt"],
    Unit.QUARTS: ["quart", "quarts", "qt"],
    Unit.GALLONS: ["gallon", "gallons", "gal"],
    Unit.MILLILITERS: [
        "ml",
        "milliliter",
        "milliliters",
        "millilitre",
        "millilitres",
    ],
    Unit.LITERS: ["l", "liter", "liters", "litre", "litres"],
    Unit.OUNCES: ["oz", "ounce", "ounces"],
    Unit.POUNDS: ["lb", "lbs", "pound", "pounds", "livre", "livres"],
    Unit.GRAMS: ["g", "gr", "gram", "grams", "gramme", "grammes"],
    Unit.KILOGRAMS: [
        "kg",
        "kilogram",
        "kilograms",
        "kilogramme",
        "kilogrammes",
    ],
    Unit.PIECES: ["piece", "pieces", "item", "items", "pièce", "pièces", "morceau", "morceaux"],
    Unit.DOZEN: ["dozen", "doz", "douzaine", "douzaines"],
    Unit.PINCHES: ["pinch", "pinches", "pincée", "pincées"],
    Unit.DASHES: ["dash", "dashes", "trait", "traits"],
    Unit.CLOVES: ["clove", "cloves", "gousse", "gousses"],
    Unit.PACKAGES: [
        "package",
        "packages",
        "pkg",
        "packet",
        "packets",
        "paquet",
        "paquets",
        "sachet",
        "sachets",
    ],
    Unit.CANS: ["can", "cans", "boîte", "boîtes", "conserve", "conserves"],
    Unit.BOTTLES: ["bottle", "bottles", "bouteille", "bouteilles"],
}

# Create reverse mapping for lookup
UNIT_LOOKUP = {v: k for k, vs in UNIT_MAP.items() for v in vs}

# Recognised unit tokens with no canonical Unit, plus accent-insensitive
# spellings OCR tends to produce. Multi-word fragments come before their prefixes.
EXTRA_MEASUREMENT_TOKENS = (
    r"cuill[eè]res?\s+[àa]\s+(?:caf[ée]|soupe)",
    r"cuill[eè]res?",
    r"mg",
    r"cl",
    r"dl",
    r"cm3",
    r"mm3",
    r"cm²",
    r"mm²",
    r"slices?",
    r"sticks?",
    r"bags?",
    r"drops?",
    r"cubes?",
    r"handfuls?",
    r"bars?",
    r"sheets?",
    r"servings?",
    r"portions?",
    r"poign[ée]es?",
    r"pinc[ée]es?",
    r"bo[îi]tes?",
    r"tranches?",
    r"pi[èe]ces?",
    r"brins?",
    r"feuilles?",
    r"bouquets?",
)


def _token_fragment(token: str) -> str:
    """Regex for one spelling: flexible inner whitespace, optional final period."""
    return r"\s*".join(re.escape(word) for word in token.split()) + r"\.?"


# Regex fragments for every unit token the detector recognises, longest
# spelling first so that "c. à soupe" wins over "c"
MEASUREMENT_TOKENS = tuple(
    _token_fragment(token)
    for token in sorted(UNIT_LOOKUP, key=lambda t: (-len(t), t))
) + EXTRA_MEASUREMENT_TOKENS

_MEASUREMENT_WORD_RE = re.compile(
    r"(?:" + "|".join(MEASUREMENT_TOKENS) + r")", re.IGNORECASE
)


def _canonical_token(token: str) -> str:
    token = " ".join(token.lower().split())
    return token.strip(".")


def lookup_unit(token: str) -> Optional[Unit]:
    """Return the canonical unit for a token, or None if it is not a known unit.

    Examples:
        >>> lookup_unit("Tbsp.")
        <Unit.TABLESPOONS: 'tablespoons'>
        >>> lookup_unit("cuillères à soupe")
        <Unit.TABLESPOONS: 'tablespoons'>
        >>> lookup_unit("sprig") is None
        True
    """
    token = _canonical_token(token)
    if not token:
        return None
    if token in UNIT_LOOKUP:
        return UNIT_LOOKUP[token]
    # Try without pluralization
    if len(token) > 1 and token.endswith("s") and token[:-1] in UNIT_LOOKUP:
        return UNIT_LOOKUP[token[:-1]]
    return None


def normalize_unit(token: str) -> AnyUnit:
    """Normalize a unit token to a :class:`Unit`, or :class:`UnknownUnit`.

    Args:
        token: Raw unit string, e.g. "cups", "TBSP.", "gousses".

    Returns:
        The canonical unit, or ``UnknownUnit`` carrying the lowercased token.
    """
    unit = lookup_unit(token)
    if unit is None:
        return UnknownUnit(_canonical_token(token))
    return unit


def is_measurement_word(token: str) -> bool:
    """Check whether a token is exactly one of the recognised unit tokens."""
    return _MEASUREMENT_WORD_RE.fullmatch(token.strip()) is not None


def unit_category(unit: Optional[AnyUnit]) -> Optional[str]:
    """Return "volume", "weight", "count" or None for a unit."""
    if unit is None:
        return None
    if unit.is_volume():
        return "volume"
    if unit.is_weight():
        return "weight"
    if unit.is_count():
        return "count"
    return None
