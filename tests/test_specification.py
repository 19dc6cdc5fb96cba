"""Tests for variety/size flags on counted ingredients."""

import pytest

from recipe_nutrition.services.specification import HIGH_VARIATION, specification_for


@pytest.mark.parametrize(
    ("unit", "name", "base"),
    [
        ("item", "tomatoes", "tomato"),
        ("item", "potatoes", "potato"),
        ("whole", "onion", "onion"),
        ("piece", "zucchini", "zucchini"),
    ],
)
def test_counted_high_variation_ingredients_are_flagged(
    unit: str, name: str, base: str
) -> None:
    specification = specification_for(unit, name)

    assert specification is not None
    assert specification.base_ingredient == base
    assert specification.options == HIGH_VARIATION[base]


def test_measured_ingredients_are_not_flagged() -> None:
    assert specification_for("cup", "tomatoes") is None
    assert specification_for("g", "onion") is None


def test_named_variety_is_not_flagged() -> None:
    assert specification_for("item", "roma tomatoes") is None
    assert specification_for("item", "red bell peppers") is None
    assert specification_for("large", "apple", raw_text="2 large apples") is None


def test_lookalike_words_are_not_flagged() -> None:
    assert specification_for("item", "pineapple") is None
    assert specification_for("slice", "pepperoni") is None
    assert specification_for("item", "eggs") is None
