"""Ingredient measurement detection, parsing and scoring."""

from .detection import (
    MeasurementConfig,
    MeasurementDetector,
    PatternError,
    extract_ingredient_measurements,
)
from .models import (
    Ambiguous,
    Exact,
    Fraction,
    Ingredient,
    IngredientList,
    MeasurementMatch,
    Quantity,
    Range,
)
from .parsing import (
    IngredientParseError,
    parse_ingredient_line,
    parse_ingredient_list,
    parse_quantity_text,
    parse_unit_text,
    score_ingredient,
)
from .postprocessing import postprocess_ingredient_name
from .units import Unit, UnknownUnit, lookup_unit, normalize_unit

__all__ = [
    "MeasurementConfig",
    "MeasurementDetector",
    "PatternError",
    "extract_ingredient_measurements",
    "Ambiguous",
    "Exact",
    "Fraction",
    "Ingredient",
    "IngredientList",
    "MeasurementMatch",
    "Quantity",
    "Range",
    "IngredientParseError",
    "parse_ingredient_line",
    "parse_ingredient_list",
    "parse_quantity_text",
    "parse_unit_text",
    "score_ingredient",
    "postprocess_ingredient_name",
    "Unit",
    "UnknownUnit",
    "lookup_unit",
    "normalize_unit",
]
