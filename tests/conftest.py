"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from recipe_nutrition.adapters.fdc_client import FdcClient
from recipe_nutrition.config import Settings
from recipe_nutrition.domain.errors import FoodNotFoundError
from recipe_nutrition.domain.nutrients import NutrientProfile
from recipe_nutrition.services.cache import InMemoryCache
from recipe_nutrition.services.imports import RecipeImportService
from recipe_nutrition.services.nutrition import NutritionService
from recipe_nutrition.services.retry import RetryPolicy


def fdc_food(
    fdc_id: int,
    description: str,
    nutrients: dict[int, float],
    portions: list[dict[str, object]] | None = None,
) -> dict[str, object]:
    """Build a food detail payload in FDC's shape."""
    return {
        "fdcId": fdc_id,
        "description": description,
        "dataType": "SR Legacy",
        "foodNutrients": [
            {"nutrient": {"id": code, "unitName": "G"}, "amount": amount}
            for code, amount in nutrients.items()
        ],
        "foodPortions": portions or [],
    }


@dataclass
class FakeFdcClient(FdcClient):
    """FDC client serving a fixed catalogue keyed by search query."""

    foods: dict[str, dict[str, object]] = field(default_factory=dict)
    errors: list[Exception] = field(default_factory=list)
    search_calls: list[str] = field(default_factory=list)
    food_calls: list[int] = field(default_factory=list)

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        self.search_calls.append(query)
        if self.errors:
            raise self.errors.pop(0)
        food = self.foods.get(query)
        if food is None:
            return {"totalHits": 0, "foods": []}
        return {"totalHits": 1, "foods": [food]}

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.food_calls.append(fdc_id)
        for food in self.foods.values():
            if food["fdcId"] == fdc_id:
                return food
        raise FoodNotFoundError(str(fdc_id))


def no_wait_policy(max_retries: int = 3) -> RetryPolicy:
    return RetryPolicy(max_retries=max_retries, initial_delay=0, max_delay=0)


FLOUR = NutrientProfile(
    calories=364,
    total_fat=1.0,
    saturated_fat=0.2,
    total_carbohydrate=76.3,
    dietary_fiber=2.7,
    total_sugars=0.3,
    protein=10.3,
    sodium=2,
)
SUGAR = NutrientProfile(
    calories=387,
    total_fat=0.0,
    total_carbohydrate=100.0,
    total_sugars=100.0,
    added_sugars=100.0,
    protein=0.0,
)
BUTTER = NutrientProfile(
    calories=717,
    total_fat=81.1,
    saturated_fat=51.4,
    trans_fat=3.3,
    cholesterol=215,
    sodium=11,
    total_carbohydrate=0.1,
    total_sugars=0.1,
    protein=0.9,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(fdc_api_key="fdc-key")


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient(
        foods={
            "flour": fdc_food(
                101,
                "Wheat flour, white, all-purpose",
                {1008: 364, 1004: 1.0, 1005: 76.3, 1079: 2.7, 2000: 0.3, 1003: 10.3},
                portions=[
                    {
                        "id": 1,
                        "amount": 1,
                        "gramWeight": 125,
                        "modifier": "",
                        "measureUnit": {"id": 1000, "name": "cup", "abbreviation": "c"},
                    }
                ],
            ),
            "sugar": fdc_food(
                102,
                "Sugars, granulated",
                {1008: 387, 1004: 0, 1005: 99.98, 2000: 0, 1003: 0},
            ),
            "egg": fdc_food(
                103,
                "Egg, whole, raw, fresh",
                {1008: 143, 1004: 9.5, 1258: 3.1, 1253: 372, 1005: 0.7, 1003: 12.6},
                portions=[
                    {
                        "id": 2,
                        "amount": 1,
                        "gramWeight": 50,
                        "modifier": "large",
                        "measureUnit": {"id": 9999, "name": "undetermined"},
                    }
                ],
            ),
        }
    )


@pytest.fixture
def nutrition_service(fdc_client: FakeFdcClient) -> NutritionService:
    return NutritionService(fdc_client, InMemoryCache(), retry_policy=no_wait_policy())


@pytest.fixture
def import_service(nutrition_service: NutritionService) -> RecipeImportService:
    return RecipeImportService(nutrition_service=nutrition_service)
