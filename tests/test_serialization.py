"""Tests for JSON storage of parser and aggregation outputs."""

import json

from recipe_nutrition.domain.serialization import (
    dish_from_json,
    dish_to_dict,
    dish_to_json,
    recipe_from_json,
    recipe_to_json,
)
from recipe_nutrition.services.aggregation import aggregate
from recipe_nutrition.services.parser import parse_recipe
from tests.conftest import BUTTER, FLOUR


def test_recipe_survives_storage() -> None:
    recipe = parse_recipe("Pie\nServes 6\n1 crust (200 g flour, 100 g butter)\n2 apples")

    restored = recipe_from_json(recipe_to_json(recipe))

    assert restored == recipe
    assert restored.sub_recipes[0].ingredients[1].ingredient_name == "butter"


def test_dish_survives_storage() -> None:
    recipe = parse_recipe("Shortbread\n200 g flour\n100 g butter")
    dish = aggregate(recipe, {"flour": FLOUR, "butter": BUTTER}, serving_size_grams=30)

    assert dish_from_json(dish_to_json(dish)) == dish


def test_dish_to_dict_keeps_missing_nutrients_as_null() -> None:
    recipe = parse_recipe("Shortbread\n200 g flour\n100 g butter")
    dish = aggregate(recipe, {"flour": FLOUR, "butter": BUTTER}, serving_size_grams=30)

    payload = dish_to_dict(dish)

    assert payload["total_weight_grams"] == 300
    assert payload["nutrition_per_100g"]["vitamin_d"] is None
    assert json.loads(json.dumps(payload)) == payload
