"""Clean-up of ingredient name fragments extracted after a measurement."""

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_MAX_INGREDIENT_LENGTH = 100

# Only the outermost connective is removed
LEADING_CONNECTIVES = ("of ", "the ", "de ", "du ", "des ", "d'", "d’")

_TRAILING_PUNCTUATION = re.compile(r"[^\w'’-]+$")


def strip_leading_connective(name: str) -> str:
    """Remove one leading connective word ("of", "the", "de", "du", "des", "d'").

    Examples:
        >>> strip_leading_connective("de farine")
        'farine'
        >>> strip_leading_connective("d'huile d'olive")
        "huile d'olive"
        >>> strip_leading_connective("of the flour")
        'the flour'
    """
    lowered = name.lower()
    for connective in LEADING_CONNECTIVES:
        if lowered.startswith(connective):
            return name[len(connective) :].lstrip()
    return name


def truncate_at_word_boundary(name: str, max_length: int) -> str:
    """Shorten ``name`` to at most ``max_length`` characters without splitting a word.

    A single word longer than the limit yields an empty string.
    """
    if len(name) <= max_length:
        return name
    if max_length <= 0:
        return ""
    # The cut already falls between two words
    if name[max_length].isspace():
        return name[:max_length].rstrip()
    truncated = name[:max_length]
    last_space = truncated.rfind(" ")
    if last_space == -1:
        return ""
    return truncated[:last_space].rstrip()


def postprocess_ingredient_name(
    raw_name: str, max_length: int = DEFAULT_MAX_INGREDIENT_LENGTH
) -> str:
    """Clean an ingredient name fragment.

    Collapses whitespace, strips one leading connective in English or French,
    truncates at a word boundary when longer than ``max_length`` and removes
    trailing punctuation. Applying it to an already-cleaned name returns the
    same name, unless that name still starts with a connective: only one is
    stripped per call, so "of the flour" becomes "the flour" and then "flour".

    Args:
        raw_name: Text that followed a measurement on its line.
        max_length: Maximum number of characters to keep.

    Returns:
        The cleaned name. An empty string means there is no ingredient name.

    Examples:
        >>> postprocess_ingredient_name("  de   farine ")
        'farine'
        >>> postprocess_ingredient_name("of sugar,")
        'sugar'
    """
    name = " ".join(raw_name.split())
    if not name:
        return ""

    original_name = name
    name = strip_leading_connective(name)

    if len(name) > max_length:
        name = truncate_at_word_boundary(name, max_length)
        logger.warning(
            "Ingredient name truncated due to length limit (%d > %d): '%s' -> '%s'",
            len(original_name),
            max_length,
            original_name,
            name,
        )

    name = _TRAILING_PUNCTUATION.sub("", name).strip()
    logger.debug("Post-processed ingredient name: '%s' -> '%s'", raw_name, name)
    return name
