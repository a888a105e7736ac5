import math

import pytest

from ingredient_ocr.ingredients.models import (
    DATAFRAME_COLUMNS,
    Ambiguous,
    Exact,
    Fraction,
    Ingredient,
    IngredientList,
    Quantity,
    Range,
)
from ingredient_ocr.ingredients.units import Unit, UnknownUnit


@pytest.mark.parametrize(
    "measurement, expected",
    [
        (Exact(2), 2.0),
        (Exact(2.5), 2.5),
        (Fraction(1, 2), 0.5),
        (Fraction(1, 2, whole=1), 1.5),
        (Fraction(3, 4, whole=0), 0.75),
        (Range(2, 3), 2.5),
        (Range(1.5, 1.5), 1.5),
        (Ambiguous("to taste"), None),
    ],
)
def test_estimated_value(measurement, expected):
    assert measurement.estimated_value() == expected


@pytest.mark.parametrize("denominator", [0, -2])
def test_fraction_rejects_non_positive_denominator(denominator):
    with pytest.raises(ValueError):
        Fraction(1, denominator)


@pytest.mark.parametrize(
    "quantity, expected",
    [
        (Quantity.exact(2, Unit.CUPS), "2 cups"),
        (Quantity.fraction(1, 1, 2, Unit.CUPS), "1 1/2 cups"),
        (Quantity.fraction(None, 3, 4, Unit.TEASPOONS), "3/4 tsp"),
        (Quantity.range(2, 3, Unit.PIECES), "2-3 pieces"),
        (Quantity.exact(250, Unit.GRAMS).approximate(), "~250 g"),
        (Quantity.exact(1, UnknownUnit("slices")), "1 unknown"),
    ],
)
def test_quantity_str(quantity, expected):
    assert str(quantity) == expected


def test_ambiguous_quantity_is_always_approximate():
    quantity = Quantity(Ambiguous("to taste"), UnknownUnit())
    assert quantity.is_approximate
    assert quantity.is_ambiguous()
    assert quantity.estimated_value() is None
    assert Quantity.ambiguous("une pincée").is_approximate


def test_quantity_predicates():
    assert Quantity.range(2, 3, Unit.CUPS).is_range()
    assert not Quantity.exact(2, Unit.CUPS).is_range()
    assert not Quantity.exact(2, Unit.CUPS).is_ambiguous()


def test_ingredient_builders_return_new_instances():
    base = Ingredient("onions")
    built = (
        base.with_quantity(Quantity.range(2, 3, Unit.PIECES))
        .with_modifier("diced")
        .with_notes("yellow")
        .with_confidence(0.8)
    )
    assert base.quantity is None
    assert base.confidence == 1.0
    assert built.modifier == "diced"
    assert built.notes == "yellow"
    assert built.confidence == 0.8
    assert built.has_quantity()
    assert built.estimated_amount() == 2.5
    assert str(built) == "2-3 pieces onions (diced)"


@pytest.mark.parametrize("confidence, expected", [(1.5, 1.0), (-0.2, 0.0), (0.4, 0.4)])
def test_with_confidence_clamps(confidence, expected):
    assert Ingredient("salt").with_confidence(confidence).confidence == expected


def test_ingredient_without_quantity():
    ingredient = Ingredient("salt")
    assert not ingredient.has_quantity()
    assert ingredient.estimated_amount() is None
    assert str(ingredient) == "salt"


def test_empty_ingredient_list():
    ingredients = IngredientList("")
    assert ingredients.success_rate() == 1.0
    assert ingredients.overall_confidence == 1.0
    assert ingredients.parsed_count() == 0
    assert ingredients.unparsed_count() == 0


def test_only_unparsed_lines_has_zero_confidence():
    ingredients = IngredientList("???")
    ingredients.add_unparsed_line("???")
    assert ingredients.success_rate() == 0.0
    assert ingredients.overall_confidence == 0.0


def test_confidence_recomputed_on_every_insertion():
    ingredients = IngredientList("text")
    ingredients.add_ingredient(Ingredient("flour", confidence=1.0))
    assert ingredients.overall_confidence == 1.0

    ingredients.add_ingredient(Ingredient("salt", confidence=0.5))
    # avg 0.75, success 1.0
    assert ingredients.overall_confidence == pytest.approx(0.875)

    ingredients.add_unparsed_line("Ingredients:")
    # avg 0.75, success 2/3
    assert ingredients.success_rate() == pytest.approx(2 / 3)
    assert ingredients.overall_confidence == pytest.approx((0.75 + 2 / 3) / 2)


def test_summary_groups_by_category():
    ingredients = IngredientList("text")
    ingredients.add_ingredient(Ingredient("flour", Quantity.exact(2, Unit.CUPS)))
    ingredients.add_ingredient(Ingredient("butter", Quantity.exact(250, Unit.GRAMS)))
    ingredients.add_ingredient(Ingredient("eggs", Quantity.exact(3, Unit.PIECES)))
    ingredients.add_ingredient(Ingredient("salt", Quantity.ambiguous("to taste")))
    ingredients.add_ingredient(Ingredient("nutmeg", Quantity.exact(1, Unit.PINCHES)))
    ingredients.add_ingredient(Ingredient("parsley"))

    assert ingredients.summary() == {
        "volume": ["flour"],
        "weight": ["butter"],
        "count": ["eggs"],
        "ambiguous": ["salt"],
    }


def test_to_dataframe():
    ingredients = IngredientList("text")
    ingredients.add_ingredient(
        Ingredient("flour", Quantity.fraction(1, 1, 2, Unit.CUPS), modifier="sifted")
    )
    ingredients.add_ingredient(
        Ingredient("salt", Quantity.ambiguous("to taste"), confidence=0.6)
    )
    ingredients.add_ingredient(Ingredient("parsley", confidence=0.5))

    df = ingredients.to_dataframe()

    assert list(df.columns) == DATAFRAME_COLUMNS
    assert len(df) == 3
    assert df.loc[0, "amount"] == "1 1/2"
    assert df.loc[0, "estimated_value"] == 1.5
    assert df.loc[0, "unit"] == "cups"
    assert df.loc[0, "category"] == "volume"
    assert df.loc[0, "modifier"] == "sifted"
    assert math.isnan(df.loc[1, "estimated_value"])
    assert bool(df.loc[1, "is_approximate"])
    assert df.loc[1, "unit"] == "unknown"
    assert math.isnan(df.loc[2, "estimated_value"])


def test_empty_list_to_dataframe_has_columns():
    df = IngredientList("").to_dataframe()
    assert df.empty
    assert list(df.columns) == DATAFRAME_COLUMNS


def test_ingredient_list_str():
    ingredients = IngredientList("text")
    ingredients.add_ingredient(Ingredient("flour", Quantity.exact(2, Unit.CUPS)))
    ingredients.add_unparsed_line("Ingredients:")

    report = str(ingredients)

    assert report.startswith("Ingredient List (1 parsed, 1 unparsed")
    assert "2 cups flour" in report
    assert "Ingredients:" in report
