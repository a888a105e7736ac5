import pytest
from PIL import Image

from ingredient_ocr.ingredients.units import Unit
from ingredient_ocr.ocr.circuit_breaker import CircuitBreaker
from ingredient_ocr.ocr.config import OcrConfig
from ingredient_ocr.ocr.engine import OcrEngine
from ingredient_ocr.ocr.instance_manager import OcrInstanceManager
from ingredient_ocr.pipeline import (
    extract_ingredients_from_image,
    extract_ingredients_from_text,
)

OCR_TEXT = """
  Ingrédients :

2 cups flour
250 g de farine
3 eggs
sel, au goût
"""


class StaticEngine(OcrEngine):
    def __init__(self, languages):
        self.languages = languages

    def extract_text(self, image_path, timeout_secs):
        return OCR_TEXT


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "recipe.jpg"
    Image.new("RGB", (60, 40), "white").save(path, format="JPEG")
    return str(path)


def test_extract_ingredients_from_text():
    ingredients = extract_ingredients_from_text(OCR_TEXT)

    assert [i.name for i in ingredients.ingredients] == ["flour", "farine", "eggs", "sel"]
    assert ingredients.unparsed_lines == ["Ingrédients :"]
    assert ingredients.ingredients[1].quantity.unit is Unit.GRAMS
    assert ingredients.summary() == {
        "volume": ["flour"],
        "weight": ["farine"],
        "count": ["eggs"],
        "ambiguous": ["sel"],
    }


def test_extract_ingredients_from_image(image_path):
    config = OcrConfig()
    manager = OcrInstanceManager(engine_factory=StaticEngine)
    breaker = CircuitBreaker(config.recovery)

    ingredients = extract_ingredients_from_image(
        image_path, config, manager, breaker, sleep=lambda s: None
    )

    assert ingredients.parsed_count() == 4
    assert ingredients.unparsed_count() == 1
    assert ingredients.original_text.startswith("Ingrédients :\n2 cups flour")
    assert 0.0 <= ingredients.overall_confidence <= 1.0
    assert manager.instance_count() == 1
