"""Tests for the nutrient lookup service."""

import asyncio

import pytest

from recipe_nutrition.adapters.fdc_models import FdcFood
from recipe_nutrition.domain.errors import FoodNotFoundError, TransientLookupError
from recipe_nutrition.domain.nutrients import IngredientNutrition
from recipe_nutrition.services.cache import InMemoryCache
from recipe_nutrition.services.nutrition import NutritionService, to_ingredient_nutrition
from tests.conftest import FakeFdcClient, fdc_food, no_wait_policy


def test_search_uses_cache(
    fdc_client: FakeFdcClient, nutrition_service: NutritionService
) -> None:
    results = asyncio.run(nutrition_service.search("flour", limit=1))
    assert results[0].fdc_id == 101
    assert fdc_client.search_calls == ["flour"]

    cached = asyncio.run(nutrition_service.search("flour", limit=1))
    assert cached[0].fdc_id == 101
    assert fdc_client.search_calls == ["flour"]


def test_get_food_maps_nutrient_codes(nutrition_service: NutritionService) -> None:
    nutrition = asyncio.run(nutrition_service.get_food(101))

    assert isinstance(nutrition, IngredientNutrition)
    assert nutrition.profile.calories == 364
    assert nutrition.profile.total_carbohydrate == 76.3
    assert nutrition.profile.dietary_fiber == 2.7
    assert nutrition.profile.sodium is None
    assert nutrition.portions[0].name == "cup"
    assert nutrition.portions[0].gram_weight == 125


def test_get_food_infers_missing_sugar(nutrition_service: NutritionService) -> None:
    nutrition = asyncio.run(nutrition_service.get_food(102))

    assert nutrition.profile.total_sugars == pytest.approx(99.98)
    assert nutrition.warnings[0].kind == "missing_sugar"


def test_resolve_falls_back_to_search_variants(
    fdc_client: FakeFdcClient, nutrition_service: NutritionService
) -> None:
    nutrition = asyncio.run(nutrition_service.resolve("Fresh Eggs"))

    assert nutrition.fdc_id == 103
    assert fdc_client.search_calls[:2] == ["eggs", "fresh eggs"]
    assert "egg" in fdc_client.search_calls
    assert nutrition.portions[0].name == "large"


def test_resolve_caches_by_ingredient(
    fdc_client: FakeFdcClient, nutrition_service: NutritionService
) -> None:
    asyncio.run(nutrition_service.resolve("flour"))
    asyncio.run(nutrition_service.resolve("  Flour "))

    assert fdc_client.food_calls == [101]


def test_resolve_not_found(nutrition_service: NutritionService) -> None:
    with pytest.raises(FoodNotFoundError):
        asyncio.run(nutrition_service.resolve("unobtainium"))


def test_resolve_retries_transient_errors(fdc_client: FakeFdcClient) -> None:
    fdc_client.errors = [TransientLookupError("503", status_code=503)]
    service = NutritionService(fdc_client, InMemoryCache(), retry_policy=no_wait_policy())

    nutrition = asyncio.run(service.resolve("sugar"))

    assert nutrition.fdc_id == 102
    assert fdc_client.search_calls == ["sugar", "sugar"]


def test_resolve_reports_transient_failure_when_retries_exhausted(
    fdc_client: FakeFdcClient,
) -> None:
    fdc_client.errors = [TransientLookupError("down")] * 20
    service = NutritionService(
        fdc_client, InMemoryCache(), retry_policy=no_wait_policy(max_retries=0)
    )

    with pytest.raises(TransientLookupError):
        asyncio.run(service.resolve("sugar"))


def test_resolve_many_collects_failures(nutrition_service: NutritionService) -> None:
    batch = asyncio.run(nutrition_service.resolve_many(["flour", "Sugar", "unobtainium"]))

    assert set(batch.resolved) == {"flour", "sugar"}
    assert isinstance(batch.failures["unobtainium"], FoodNotFoundError)


def test_to_ingredient_nutrition_accepts_search_shape() -> None:
    food = FdcFood.model_validate(
        {
            "fdcId": 5,
            "description": "Odd syrup",
            "foodNutrients": [
                {"nutrientId": 1005, "value": 10},
                {"nutrientId": 2000, "value": 30},
                {"nutrientId": 9999, "value": 1},
            ],
        }
    )

    nutrition = to_ingredient_nutrition(food)

    assert nutrition.profile.total_sugars == 10
    assert nutrition.warnings[0].kind == "sugar_exceeds_carbs"
    assert nutrition.warnings[0].ingredient == "Odd syrup"


def test_portion_without_weight_is_dropped() -> None:
    food = FdcFood.model_validate(
        fdc_food(
            7,
            "Bread",
            {1008: 250},
            portions=[
                {"amount": 1, "gramWeight": 0, "measureUnit": {"name": "slice"}},
                {"amount": 2, "gramWeight": 56, "measureUnit": {"name": "slice"}},
            ],
        )
    )

    nutrition = to_ingredient_nutrition(food)

    assert len(nutrition.portions) == 1
    assert nutrition.portions[0].amount == 2
