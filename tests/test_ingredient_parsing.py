import pytest

from ingredient_ocr.ingredients.models import (
    Ambiguous,
    Exact,
    Fraction,
    Quantity,
    Range,
)
from ingredient_ocr.ingredients.parsing import (
    IngredientParseError,
    parse_ingredient_line,
    parse_ingredient_list,
    parse_quantity_text,
    parse_unit_text,
    score_ingredient,
)
from ingredient_ocr.ingredients.units import Unit, UnknownUnit


@pytest.mark.parametrize(
    "input_text, expected_quantity, expected_rest",
    [
        ("2 ounces vodka", Exact(2.0), "ounces vodka"),
        ("1/2 cup sugar", Fraction(1, 2), "cup sugar"),
        ("1 1/2 tsp salt", Fraction(1, 2, 1), "tsp salt"),
        ("1½ cups milk", Fraction(1, 2, 1), "cups milk"),
        ("¾ tsp salt", Fraction(3, 4), "tsp salt"),
        ("1⁄4 cup oil", Fraction(1, 4), "cup oil"),
        ("2.5 kg flour", Exact(2.5), "kg flour"),
        ("2,5 kg farine", Exact(2.5), "kg farine"),
        ("2-3 tbsp oil", Range(2.0, 3.0), "tbsp oil"),
        ("2 – 3 tbsp oil", Range(2.0, 3.0), "tbsp oil"),
        ("2 to 3 eggs", Range(2.0, 3.0), "eggs"),
        ("2 à 3 œufs", Range(2.0, 3.0), "œufs"),
        ("2 ou 3 pommes", Range(2.0, 3.0), "pommes"),
        ("3-2 eggs", Range(2.0, 3.0), "eggs"),
        ("salt", None, "salt"),
        ("1/0 cup", None, "1/0 cup"),
        ("", None, ""),
    ],
)
def test_parse_quantity_text(input_text, expected_quantity, expected_rest):
    """Test amount parsing at the start of the text."""
    quantity, rest = parse_quantity_text(input_text)
    assert quantity == expected_quantity
    assert rest == expected_rest


@pytest.mark.parametrize(
    "input_text, expected_unit, expected_rest",
    [
        ("cups flour", Unit.CUPS, "flour"),
        ("Tbsp. sugar", Unit.TABLESPOONS, "sugar"),
        ("fl oz cream", Unit.FLUID_OUNCES, "cream"),
        ("cuillères à soupe de sucre", Unit.TABLESPOONS, "de sucre"),
        ("c. à s. d'huile", Unit.TABLESPOONS, "d'huile"),
        ("slices bread", UnknownUnit("slices"), "bread"),
        ("large eggs", None, "large eggs"),
        ("", None, ""),
    ],
)
def test_parse_unit_text(input_text, expected_unit, expected_rest):
    unit, rest = parse_unit_text(input_text)
    assert unit == expected_unit
    assert rest == expected_rest


@pytest.mark.parametrize(
    "line, expected_name, expected_quantity",
    [
        ("2 cups flour", "flour", Quantity(Exact(2.0), Unit.CUPS)),
        ("1 1/2 cups sugar", "sugar", Quantity(Fraction(1, 2, 1), Unit.CUPS)),
        ("¾ tsp salt", "salt", Quantity(Fraction(3, 4), Unit.TEASPOONS)),
        ("500g butter", "butter", Quantity(Exact(500.0), Unit.GRAMS)),
        ("250 g de farine", "farine", Quantity(Exact(250.0), Unit.GRAMS)),
        ("2,5 kg pommes de terre", "pommes de terre", Quantity(Exact(2.5), Unit.KILOGRAMS)),
        ("2-3 tbsp olive oil", "olive oil", Quantity(Range(2.0, 3.0), Unit.TABLESPOONS)),
        ("4 à 2 oeufs", "oeufs", Quantity(Range(2.0, 4.0), Unit.PIECES)),
        ("3 large eggs", "large eggs", Quantity(Exact(3.0), Unit.PIECES)),
        ("2 gousses d'ail", "ail", Quantity(Exact(2.0), Unit.CLOVES)),
        (
            "2 cuillères à soupe de sucre",
            "sucre",
            Quantity(Exact(2.0), Unit.TABLESPOONS),
        ),
        ("3 c. à s. d'huile", "huile", Quantity(Exact(3.0), Unit.TABLESPOONS)),
        ("2 slices bread", "bread", Quantity(Exact(2.0), UnknownUnit("slices"))),
        (
            "about 2 cups flour",
            "flour",
            Quantity(Exact(2.0), Unit.CUPS, is_approximate=True),
        ),
        (
            "~250g sugar",
            "sugar",
            Quantity(Exact(250.0), Unit.GRAMS, is_approximate=True),
        ),
        ("salt to taste", "salt", Quantity(Ambiguous("to taste"), UnknownUnit())),
        ("sel, au goût", "sel", Quantity(Ambiguous("au goût"), UnknownUnit())),
        ("a pinch of salt", "salt", Quantity(Ambiguous("a pinch of"), UnknownUnit())),
        (
            "quelques feuilles de basilic",
            "feuilles de basilic",
            Quantity(Ambiguous("quelques"), UnknownUnit()),
        ),
        ("un peu d'huile", "huile", Quantity(Ambiguous("un peu d'"), UnknownUnit())),
        ("parsley", "parsley", None),
    ],
)
def test_parse_ingredient_line(line, expected_name, expected_quantity):
    """Test parsing of full ingredient lines."""
    ingredient = parse_ingredient_line(line)
    assert ingredient.name == expected_name
    assert ingredient.quantity == expected_quantity


@pytest.mark.parametrize(
    "line, expected_confidence",
    [
        ("2 cups flour", 1.0),
        ("3 large eggs", 0.9),
        ("2 slices bread", 0.8),
        ("about 2 cups flour", 0.9),
        ("salt to taste", 0.6),
        ("parsley", 0.5),
    ],
)
def test_parse_ingredient_line_confidence(line, expected_confidence):
    assert parse_ingredient_line(line).confidence == pytest.approx(expected_confidence)


def test_parse_ingredient_line_modifier_and_notes():
    ingredient = parse_ingredient_line("2 cups flour (sifted), plus extra")
    assert ingredient.name == "flour"
    assert ingredient.modifier == "sifted"
    assert ingredient.notes == "plus extra"
    assert str(ingredient) == "2 cups flour (sifted)"


def test_trailing_phrase_becomes_note_when_quantity_present():
    ingredient = parse_ingredient_line("2 tbsp sugar, optional")
    assert ingredient.quantity == Quantity(Exact(2.0), Unit.TABLESPOONS)
    assert ingredient.notes == "optional"


@pytest.mark.parametrize("line", ["", "   ", "Ingredients:", "Pour la pâte :", "123", "---"])
def test_parse_ingredient_line_rejects(line):
    with pytest.raises(IngredientParseError):
        parse_ingredient_line(line)


@pytest.mark.parametrize(
    "quantity, has_unit_token, expected",
    [
        (None, False, 0.5),
        (Quantity.ambiguous("to taste"), False, 0.6),
        (Quantity.exact(2, Unit.CUPS), True, 1.0),
        (Quantity.exact(2, Unit.PIECES), False, 0.9),
        (Quantity.exact(2, UnknownUnit("slices")), True, 0.8),
        (Quantity.exact(2, Unit.CUPS).approximate(), True, 0.9),
        (Quantity.exact(2, Unit.PIECES).approximate(), False, 0.8),
    ],
)
def test_score_ingredient(quantity, has_unit_token, expected):
    assert score_ingredient(quantity, has_unit_token) == pytest.approx(expected)


def test_parse_ingredient_list():
    text = "Ingrédients:\n2 cups flour\n\nsel, au goût\n???"

    ingredients = parse_ingredient_list(text)

    assert ingredients.original_text == text
    assert [i.name for i in ingredients.ingredients] == ["flour", "sel"]
    assert ingredients.unparsed_lines == ["Ingrédients:", "???"]
    assert ingredients.success_rate() == 0.5
    # avg confidence (1.0 + 0.6) / 2 = 0.8, success rate 0.5
    assert ingredients.overall_confidence == pytest.approx(0.65)


def test_parse_empty_ingredient_list():
    ingredients = parse_ingredient_list("")
    assert ingredients.parsed_count() == 0
    assert ingredients.overall_confidence == 1.0
