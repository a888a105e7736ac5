"""From a recipe photo to a scored ingredient list."""

import logging
import time
from typing import Callable

from ingredient_ocr.ingredients.models import IngredientList
from ingredient_ocr.ingredients.parsing import parse_ingredient_list
from ingredient_ocr.ocr.circuit_breaker import CircuitBreaker
from ingredient_ocr.ocr.config import OcrConfig
from ingredient_ocr.ocr.extraction import extract_text_from_image
from ingredient_ocr.ocr.instance_manager import OcrInstanceManager

logger = logging.getLogger(__name__)


def extract_ingredients_from_text(text: str) -> IngredientList:
    """Parse already-recognised text into an :class:`IngredientList`."""
    ingredient_list = parse_ingredient_list(text)
    summary = ingredient_list.summary()
    logger.info(
        "Ingredient summary: %d volume, %d weight, %d count, %d ambiguous",
        len(summary["volume"]),
        len(summary["weight"]),
        len(summary["count"]),
        len(summary["ambiguous"]),
    )
    return ingredient_list


def extract_ingredients_from_image(
    image_path: str,
    config: OcrConfig,
    instance_manager: OcrInstanceManager,
    circuit_breaker: CircuitBreaker,
    sleep: Callable[[float], None] = time.sleep,
) -> IngredientList:
    """Run OCR on ``image_path`` and parse the text into ingredients.

    The instance manager and circuit breaker are meant to be shared by every
    caller in the process.

    Raises:
        OcrError: If text extraction fails; see
            :func:`~ingredient_ocr.ocr.extraction.extract_text_from_image`.
    """
    text = extract_text_from_image(
        image_path, config, instance_manager, circuit_breaker, sleep=sleep
    )
    logger.info("Parsing ingredients from %s", image_path)
    return extract_ingredients_from_text(text)
