"""Regex-based detection of quantity and unit expressions in recipe text.

The default pattern recognises a leading numeral (integer, decimal with "." or
",", fraction written with "/" or the fraction slash "⁄", mixed number, numeric
range such as "2-3" or "5 à 6", or unicode fraction glyph) followed either by
a unit token from the unit vocabulary, or by a single word so that
quantity-only ingredients such as "6 eggs" or "2 œufs" are found too.
"""

import dataclasses
import logging
import re
from typing import Iterator, List, Optional, Set, Tuple

from ingredient_ocr.ingredients.models import MeasurementMatch
from ingredient_ocr.ingredients.postprocessing import (
    DEFAULT_MAX_INGREDIENT_LENGTH,
    postprocess_ingredient_name,
)
from ingredient_ocr.ingredients.units import MEASUREMENT_TOKENS, is_measurement_word

logger = logging.getLogger(__name__)

# --- Constants ---

FRACTION_GLYPHS = "½⅓⅔¼¾⅕⅖⅗⅘⅙⅚⅛⅜⅝⅞⅟"

# "/" or the fraction slash U+2044
FRACTION_SLASH = "/⁄"

QUANTITY_PATTERN = (
    r"\d+(?:[.,]\d+)?\s+(?:to|or|à|ou)\s+\d+(?:[.,]\d+)?"  # 2 to 3, 5 à 6
    r"|\d+(?:[.,]\d+)?\s*[-–]\s*\d+(?:[.,]\d+)?"  # 2-3
    rf"|\d+\s+\d+[{FRACTION_SLASH}]\d+"  # 1 1/2
    rf"|\d+\s*[{FRACTION_GLYPHS}]"  # 1½
    rf"|\d+[{FRACTION_SLASH}]\d+"  # 1/2
    r"|\d*[.,]?\d+"  # 2, 2.5, 2,5
    rf"|[{FRACTION_GLYPHS}]"  # ½
)

UNIT_PATTERN = "|".join(MEASUREMENT_TOKENS)

DEFAULT_PATTERN = (
    rf"(?<![\w.,{FRACTION_SLASH}])"
    rf"(?P<quantity>{QUANTITY_PATTERN})"
    rf"(?:\s*(?P<unit>{UNIT_PATTERN})(?![\w'’])"
    r"|\s+(?P<word>[^\W\d_][\w'’-]*))"
)

DEFAULT_REGEX = re.compile(DEFAULT_PATTERN, re.IGNORECASE)


class PatternError(ValueError):
    """A custom measurement pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid measurement pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


@dataclasses.dataclass
class MeasurementConfig:
    """Options for :class:`MeasurementDetector`.

    Attributes:
        custom_pattern: Regex replacing the default measurement pattern.
        enable_ingredient_postprocessing: Clean extracted ingredient names.
        max_ingredient_length: Longest ingredient name kept after cleaning.
        include_count_measurements: Report quantity-only matches like "3 eggs".
    """

    custom_pattern: Optional[str] = None
    enable_ingredient_postprocessing: bool = True
    max_ingredient_length: int = DEFAULT_MAX_INGREDIENT_LENGTH
    include_count_measurements: bool = True


class MeasurementDetector:
    """Find measurements and the ingredient names that follow them.

    Detection is line based: every non-overlapping match of the pattern in a
    line produces one :class:`MeasurementMatch`. Positions are string indices
    into the full text, counting one character for each newline.

    Examples:
        >>> detector = MeasurementDetector()
        >>> [(m.text, m.ingredient_name) for m in detector.find_measurements(
        ...     "2 cups flour\\n1/2 cup sugar\\n3 eggs")]
        [('2 cups', 'flour'), ('1/2 cup', 'sugar'), ('3', 'eggs')]
    """

    def __init__(self, config: Optional[MeasurementConfig] = None):
        self.config = config if config is not None else MeasurementConfig()

        if self.config.custom_pattern is not None:
            logger.debug("Using custom regex pattern: %s", self.config.custom_pattern)
            try:
                self._regex = re.compile(self.config.custom_pattern, re.IGNORECASE)
            except re.error as e:
                raise PatternError(self.config.custom_pattern, str(e)) from e
        else:
            self._regex = DEFAULT_REGEX

        logger.info(
            "Created MeasurementDetector: postprocessing=%s, max_length=%d, "
            "count_measurements=%s",
            self.config.enable_ingredient_postprocessing,
            self.config.max_ingredient_length,
            self.config.include_count_measurements,
        )

    @classmethod
    def with_pattern(cls, pattern: str) -> "MeasurementDetector":
        """Create a detector that uses ``pattern`` with otherwise default options."""
        return cls(MeasurementConfig(custom_pattern=pattern))

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    def find_measurements(self, text: str) -> List[MeasurementMatch]:
        """Return every measurement in ``text`` in reading order.

        The ingredient name of each match is the rest of its line, trimmed.
        """
        matches = list(self._iter_matches(text))
        logger.info("Found %d measurement matches in text", len(matches))
        return matches

    def extract_ingredient_measurements(self, text: str) -> List[MeasurementMatch]:
        """Like :meth:`find_measurements`, with ingredient names post-processed
        when the configuration enables it."""
        matches = self.find_measurements(text)
        if not self.config.enable_ingredient_postprocessing:
            return matches
        return [
            dataclasses.replace(
                match,
                ingredient_name=postprocess_ingredient_name(
                    match.ingredient_name, self.config.max_ingredient_length
                ),
            )
            for match in matches
        ]

    def has_measurements(self, text: str) -> bool:
        result = next(self._iter_matches(text), None) is not None
        logger.debug("Checking for measurements in text: '%s' -> %s", text, result)
        return result

    def extract_measurement_lines(self, text: str) -> List[Tuple[int, str]]:
        """Return ``(line_number, line)`` for each line holding a measurement."""
        return [
            (line_number, line)
            for line_number, line, _ in _split_lines(text)
            if next(self._iter_line_matches(line, line_number, 0), None) is not None
        ]

    def get_unique_units(self, text: str) -> Set[str]:
        """Return the distinct matched measurement texts, lowercased."""
        return {match.text.lower() for match in self._iter_matches(text)}

    def _iter_matches(self, text: str) -> Iterator[MeasurementMatch]:
        for line_number, line, offset in _split_lines(text):
            logger.debug("Processing line %d: '%s'", line_number, line)
            yield from self._iter_line_matches(line, line_number, offset)

    def _iter_line_matches(
        self, line: str, line_number: int, offset: int
    ) -> Iterator[MeasurementMatch]:
        for match in self._regex.finditer(line):
            quantity_span = self._quantity_only_span(match)

            if quantity_span is None:
                start, end = match.span()
            elif not self.config.include_count_measurements:
                logger.debug("Skipping count-only measurement '%s'", match.group(0))
                continue
            else:
                start, end = quantity_span

            measurement_text = line[start:end]
            if not measurement_text:
                continue
            logger.debug(
                "Found measurement '%s' at line %d", measurement_text, line_number
            )
            yield MeasurementMatch(
                text=measurement_text,
                ingredient_name=line[end:].strip(),
                line_number=line_number,
                start_pos=offset + start,
                end_pos=offset + end,
            )

    def _quantity_only_span(self, match: "re.Match[str]") -> Optional[Tuple[int, int]]:
        """Return the span of the bare quantity when ``match`` has no unit.

        Patterns with ``unit``/``word`` groups answer directly; other patterns
        fall back to checking whether the word after the number is a unit.
        """
        groups = match.groupdict()
        if "unit" in groups or "word" in groups:
            if groups.get("unit") is not None or groups.get("word") is None:
                return None
            if groups.get("quantity") is not None:
                return match.span("quantity")
            return _leading_token_span(match)

        parts = match.group(0).split()
        if len(parts) != 2 or is_measurement_word(parts[1]):
            return None
        return _leading_token_span(match)


def _leading_token_span(match: "re.Match[str]") -> Tuple[int, int]:
    matched = match.group(0)
    start = match.start() + (len(matched) - len(matched.lstrip()))
    return start, start + len(matched.split()[0])


def _split_lines(text: str) -> Iterator[Tuple[int, str, int]]:
    """Yield ``(line_number, line, offset)`` splitting on newlines.

    A trailing carriage return is dropped from the line but still counted in
    the offsets of the following lines.
    """
    offset = 0
    for line_number, raw_line in enumerate(text.split("\n")):
        line = raw_line[:-1] if raw_line.endswith("\r") else raw_line
        yield line_number, line, offset
        offset += len(raw_line) + 1


def extract_ingredient_measurements(
    text: str, config: Optional[MeasurementConfig] = None
) -> List[MeasurementMatch]:
    """Detect measurements in ``text`` and return them with cleaned ingredient names.

    Raises:
        PatternError: If ``config.custom_pattern`` does not compile.
    """
    return MeasurementDetector(config).extract_ingredient_measurements(text)
