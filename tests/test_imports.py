"""Tests for the recipe import pipeline."""

import asyncio

import pytest

from recipe_nutrition.domain.errors import (
    AggregationError,
    FoodNotFoundError,
    LookupCancelledError,
    ParseError,
)
from recipe_nutrition.services.aggregation import aggregate
from recipe_nutrition.services.imports import RecipeImportService
from recipe_nutrition.services.parser import parse_recipe
from recipe_nutrition.services.units import to_grams
from tests.conftest import BUTTER, FakeFdcClient

PANCAKES = "Pancakes\n1 cup flour\n2 large eggs\n2 tbsp sugar\n1 pinch unobtainium"


def test_run_stops_for_review_on_missing_ingredient(
    import_service: RecipeImportService,
) -> None:
    context = asyncio.run(import_service.run(PANCAKES, serving_size_grams=80))

    assert context.recipe is not None and context.recipe.ok
    assert context.pending == ["unobtainium"]
    assert isinstance(context.failures["unobtainium"], FoodNotFoundError)
    assert set(context.resolved) == {"flour", "eggs", "sugar"}
    assert context.dish is None

    with pytest.raises(AggregationError, match="unresolved ingredients"):
        import_service.aggregate(context)


def test_skip_then_aggregate_uses_portion_data(import_service: RecipeImportService) -> None:
    context = asyncio.run(import_service.run(PANCAKES, serving_size_grams=80))

    import_service.skip(context, "Unobtainium")
    dish = import_service.aggregate(context)

    expected_total = 125 + 2 * 50 + to_grams(2, "tbsp")
    assert dish.total_weight_grams == pytest.approx(expected_total)
    assert [item.name for item in dish.skipped] == ["unobtainium"]
    assert any(warning.kind == "missing_sugar" for warning in dish.warnings)
    assert context.dish is dish


def test_run_aggregates_when_everything_resolves(
    import_service: RecipeImportService,
) -> None:
    context = asyncio.run(import_service.run("Toast\n2 cups flour"))

    assert context.dish is not None
    assert context.dish.serving_size_grams == 100
    assert context.dish.total_weight_grams == pytest.approx(250)


def test_saved_sub_recipe_is_not_looked_up(
    fdc_client: FakeFdcClient, import_service: RecipeImportService
) -> None:
    sauce = aggregate(
        parse_recipe("Sauce\n100 g butter"), {"butter": BUTTER}, serving_size_grams=50
    )
    context = import_service.start(
        "Dish\n100 g house sauce (1 cup mystery, 1 tbsp butter)\n1 cup flour",
        serving_size_grams=75,
    )
    import_service.use_saved(context, "House Sauce", sauce)

    asyncio.run(import_service.resolve(context))
    dish = import_service.aggregate(context)

    assert "mystery" not in fdc_client.search_calls
    assert dish.total_weight_grams == pytest.approx(225)


def test_parse_errors_block_the_pipeline(import_service: RecipeImportService) -> None:
    context = asyncio.run(import_service.run("Just A Title"))

    assert context.recipe is not None
    assert context.recipe.errors
    assert context.resolved == {}
    with pytest.raises(ParseError):
        import_service.aggregate(context)


def test_cancelled_lookups_are_pending(import_service: RecipeImportService) -> None:
    event = asyncio.Event()
    event.set()

    context = asyncio.run(
        import_service.run("Toast\n2 cups flour", cancel_event=event)
    )

    assert context.pending == ["flour"]
    assert isinstance(context.failures["flour"], LookupCancelledError)


def test_yield_multiplier_flows_through(import_service: RecipeImportService) -> None:
    context = asyncio.run(
        import_service.run("Toast\n2 cups flour", serving_size_grams=50, yield_multiplier=0.8)
    )

    assert context.dish is not None
    assert context.dish.yield_multiplier == 0.8
    assert context.dish.total_weight_grams == pytest.approx(200)


def test_specify_replaces_counted_ingredient(
    fdc_client: FakeFdcClient, import_service: RecipeImportService
) -> None:
    context = import_service.start("Salad\n2 tomatoes\n1 cup flour")
    import_service.parse(context)
    assert [item.ingredient_name for item in context.unspecified] == ["tomatoes"]
    assert context.unspecified[0].specification_prompt == "What type or size of tomato?"

    import_service.specify(context, "Tomatoes", "roma tomato")

    assert context.unspecified == []
    assert context.recipe is not None
    assert context.recipe.ingredients[0].ingredient_name == "roma tomato"
    asyncio.run(import_service.resolve(context))
    assert "roma tomato" in fdc_client.search_calls
    assert context.pending == ["roma tomato"]
