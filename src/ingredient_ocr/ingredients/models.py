"""Data model for parsed ingredients, quantities and detector matches."""

import dataclasses
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from ingredient_ocr.ingredients.units import AnyUnit, Unit, UnknownUnit, unit_category


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


@dataclasses.dataclass(frozen=True)
class Exact:
    amount: float

    def estimated_value(self) -> Optional[float]:
        return float(self.amount)

    def __str__(self) -> str:
        return _format_number(self.amount)


@dataclasses.dataclass(frozen=True)
class Fraction:
    numerator: int
    denominator: int
    whole: Optional[int] = None

    def __post_init__(self):
        if self.denominator <= 0:
            raise ValueError(
                f"Fraction denominator must be positive, got {self.denominator}"
            )

    def estimated_value(self) -> Optional[float]:
        whole = self.whole or 0
        return whole + self.numerator / self.denominator

    def __str__(self) -> str:
        if self.whole is not None:
            return f"{self.whole} {self.numerator}/{self.denominator}"
        return f"{self.numerator}/{self.denominator}"


@dataclasses.dataclass(frozen=True)
class Range:
    min: float
    max: float

    def estimated_value(self) -> Optional[float]:
        return (self.min + self.max) / 2

    def __str__(self) -> str:
        return f"{_format_number(self.min)}-{_format_number(self.max)}"


@dataclasses.dataclass(frozen=True)
class Ambiguous:
    description: str

    def estimated_value(self) -> Optional[float]:
        return None

    def __str__(self) -> str:
        return self.description


QuantityType = Union[Exact, Fraction, Range, Ambiguous]


@dataclasses.dataclass(frozen=True)
class Quantity:
    """An amount together with its unit.

    ``is_approximate`` is always true for ambiguous measurements.
    """

    measurement: QuantityType
    unit: AnyUnit
    is_approximate: bool = False

    def __post_init__(self):
        if isinstance(self.measurement, Ambiguous) and not self.is_approximate:
            object.__setattr__(self, "is_approximate", True)

    @classmethod
    def exact(cls, amount: float, unit: AnyUnit) -> "Quantity":
        return cls(Exact(amount), unit)

    @classmethod
    def fraction(
        cls, whole: Optional[int], numerator: int, denominator: int, unit: AnyUnit
    ) -> "Quantity":
        return cls(Fraction(numerator, denominator, whole), unit)

    @classmethod
    def range(cls, min_amount: float, max_amount: float, unit: AnyUnit) -> "Quantity":
        return cls(Range(min_amount, max_amount), unit)

    @classmethod
    def ambiguous(cls, description: str, unit: Optional[AnyUnit] = None) -> "Quantity":
        return cls(Ambiguous(description), unit if unit is not None else UnknownUnit())

    def approximate(self) -> "Quantity":
        return dataclasses.replace(self, is_approximate=True)

    def estimated_value(self) -> Optional[float]:
        return self.measurement.estimated_value()

    def is_range(self) -> bool:
        return isinstance(self.measurement, Range)

    def is_ambiguous(self) -> bool:
        return isinstance(self.measurement, Ambiguous)

    def __str__(self) -> str:
        prefix = "~" if self.is_approximate else ""
        return f"{prefix}{self.measurement} {self.unit.display_name()}"


@dataclasses.dataclass(frozen=True)
class Ingredient:
    name: str
    quantity: Optional[Quantity] = None
    modifier: Optional[str] = None
    notes: Optional[str] = None
    confidence: float = 1.0

    def with_quantity(self, quantity: Quantity) -> "Ingredient":
        return dataclasses.replace(self, quantity=quantity)

    def with_modifier(self, modifier: str) -> "Ingredient":
        return dataclasses.replace(self, modifier=modifier)

    def with_notes(self, notes: str) -> "Ingredient":
        return dataclasses.replace(self, notes=notes)

    def with_confidence(self, confidence: float) -> "Ingredient":
        return dataclasses.replace(self, confidence=min(max(confidence, 0.0), 1.0))

    def has_quantity(self) -> bool:
        return self.quantity is not None

    def estimated_amount(self) -> Optional[float]:
        if self.quantity is None:
            return None
        return self.quantity.estimated_value()

    def __str__(self) -> str:
        text = f"{self.quantity} {self.name}" if self.quantity else self.name
        if self.modifier:
            text += f" ({self.modifier})"
        return text


@dataclasses.dataclass
class IngredientList:
    """Ingredients parsed from one block of text, plus the lines that failed.

    ``overall_confidence`` is recomputed on every insertion as the mean of the
    average ingredient confidence and the success rate.
    """

    original_text: str
    ingredients: List[Ingredient] = dataclasses.field(default_factory=list)
    unparsed_lines: List[str] = dataclasses.field(default_factory=list)
    overall_confidence: float = 1.0

    def add_ingredient(self, ingredient: Ingredient) -> None:
        self.ingredients.append(ingredient)
        self._recalculate_confidence()

    def add_unparsed_line(self, line: str) -> None:
        self.unparsed_lines.append(line)
        self._recalculate_confidence()

    def parsed_count(self) -> int:
        return len(self.ingredients)

    def unparsed_count(self) -> int:
        return len(self.unparsed_lines)

    def success_rate(self) -> float:
        total_lines = self.parsed_count() + self.unparsed_count()
        if total_lines == 0:
            return 1.0
        return self.parsed_count() / total_lines

    def _recalculate_confidence(self) -> None:
        if not self.ingredients:
            self.overall_confidence = 0.0 if self.unparsed_lines else 1.0
            return

        avg_confidence = sum(i.confidence for i in self.ingredients) / len(
            self.ingredients
        )
        self.overall_confidence = (avg_confidence + self.success_rate()) / 2

    def summary(self) -> Dict[str, List[str]]:
        """Group ingredient names by quantity category.

        Returns:
            A dict with keys "volume", "weight", "count" and "ambiguous".
            Ingredients without a quantity, or whose unit has no category,
            are left out.
        """
        groups: Dict[str, List[str]] = {
            "volume": [],
            "weight": [],
            "count": [],
            "ambiguous": [],
        }
        for ingredient in self.ingredients:
            quantity = ingredient.quantity
            if quantity is None:
                continue
            if quantity.is_ambiguous():
                groups["ambiguous"].append(ingredient.name)
                continue
            category = unit_category(quantity.unit)
            if category is not None:
                groups[category].append(ingredient.name)
        return groups

    def to_dataframe(self) -> pd.DataFrame:
        """Flatten the parsed ingredients into a DataFrame, one row each.

        Missing numeric amounts are NaN so the frame can be aggregated directly.
        """
        rows = []
        for ingredient in self.ingredients:
            quantity = ingredient.quantity
            estimated = ingredient.estimated_amount()
            rows.append(
                {
                    "name": ingredient.name,
                    "amount": str(quantity.measurement) if quantity else None,
                    "estimated_value": estimated if estimated is not None else np.nan,
                    "unit": _unit_label(quantity.unit) if quantity else None,
                    "category": unit_category(quantity.unit) if quantity else None,
                    "is_approximate": quantity.is_approximate if quantity else False,
                    "modifier": ingredient.modifier,
                    "notes": ingredient.notes,
                    "confidence": ingredient.confidence,
                }
            )
        return pd.DataFrame(rows, columns=DATAFRAME_COLUMNS)

    def __str__(self) -> str:
        lines = [
            f"Ingredient List ({self.parsed_count()} parsed, "
            f"{self.unparsed_count()} unparsed, "
            f"{self.overall_confidence * 100:.1f}% confidence):"
        ]
        lines.extend(f"  • {ingredient}" for ingredient in self.ingredients)
        if self.unparsed_lines:
            lines.append("Unparsed:")
            lines.extend(f"  ? {line}" for line in self.unparsed_lines)
        return "\n".join(lines)


DATAFRAME_COLUMNS = [
    "name",
    "amount",
    "estimated_value",
    "unit",
    "category",
    "is_approximate",
    "modifier",
    "notes",
    "confidence",
]


def _unit_label(unit: AnyUnit) -> str:
    if isinstance(unit, Unit):
        return unit.value
    return unit.raw or "unknown"


@dataclasses.dataclass(frozen=True)
class MeasurementMatch:
    """A quantity (and unit) found by the detector.

    ``start_pos`` and ``end_pos`` index into the full original text.
    """

    text: str
    ingredient_name: str
    line_number: int
    start_pos: int
    end_pos: int
