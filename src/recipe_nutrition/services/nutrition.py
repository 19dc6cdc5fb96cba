"""Nutrient lookup service backed by USDA FoodData Central."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from recipe_nutrition.adapters.fdc_client import FdcClient
from recipe_nutrition.adapters.fdc_models import FdcFood, FdcSearchResult
from recipe_nutrition.domain.errors import (
    FoodNotFoundError,
    LookupCancelledError,
    LookupFailedError,
)
from recipe_nutrition.domain.nutrients import IngredientNutrition
from recipe_nutrition.services.aggregation import ingredient_key
from recipe_nutrition.services.cache import Cache
from recipe_nutrition.services.data_quality import enforce_invariants, infer_missing_sugars
from recipe_nutrition.services.retry import RetryPolicy, call_with_retry
from recipe_nutrition.services.search_terms import search_variants

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass(frozen=True)
class LookupBatch:
    """Outcome of resolving several ingredients."""

    resolved: dict[str, IngredientNutrition]
    failures: dict[str, LookupFailedError]


@dataclass
class NutritionService:
    """Resolves ingredient names to per-100 g nutrient data with caching."""

    fdc_client: FdcClient
    cache: Cache
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    search_page_size: int = 5
    max_concurrency: int = 4
    debug: bool = False

    async def search(
        self, query: str, limit: int = 5, cancel_event: asyncio.Event | None = None
    ) -> list[FdcFood]:
        """Search FDC foods with caching."""
        cache_key = f"fdc:search:{query.lower()}:{limit}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(query, page_size=limit),
            action=f"search:{query}",
            cancel_event=cancel_event,
        )
        foods = FdcSearchResult.model_validate(payload).foods
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        if self.debug:
            _logger.info("Nutrition search FDC: query=%s results=%s", query, len(foods))
        return foods

    async def get_food(
        self, fdc_id: int, cancel_event: asyncio.Event | None = None
    ) -> IngredientNutrition:
        """Retrieve a food's canonical nutrient profile and portions."""
        cache_key = f"fdc:food:{fdc_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, IngredientNutrition):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.get_food(fdc_id),
            action=f"get_food:{fdc_id}",
            cancel_event=cancel_event,
        )
        nutrition = to_ingredient_nutrition(FdcFood.model_validate(payload))
        self.cache.set(cache_key, nutrition, ttl_seconds=self.food_ttl_seconds)
        if self.debug:
            _logger.info("Nutrition food FDC: fdc_id=%s", fdc_id)
        return nutrition

    async def search_with_variants(
        self, ingredient: str, cancel_event: asyncio.Event | None = None
    ) -> FdcFood:
        """Return the best match, trying simpler query variants in turn."""
        last_error: LookupFailedError | None = None
        for variant in search_variants(ingredient):
            try:
                foods = await self.search(
                    variant, limit=self.search_page_size, cancel_event=cancel_event
                )
            except LookupCancelledError:
                raise
            except FoodNotFoundError:
                continue
            except LookupFailedError as exc:
                _logger.warning("Search variant %r failed: %s", variant, exc)
                last_error = exc
                continue
            if foods:
                if variant != ingredient.lower().strip():
                    _logger.info("Matched %r using variant %r", ingredient, variant)
                return foods[0]
        if last_error is not None:
            raise last_error
        raise FoodNotFoundError(ingredient)

    async def resolve(
        self, ingredient: str, cancel_event: asyncio.Event | None = None
    ) -> IngredientNutrition:
        """Resolve an ingredient name to nutrient data.

        Raises FoodNotFoundError when no variant matches; callers must skip
        or re-search the ingredient rather than treat it as zero.
        """
        cache_key = f"fdc:resolve:{ingredient_key(ingredient)}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, IngredientNutrition):
            return cached

        match = await self.search_with_variants(ingredient, cancel_event=cancel_event)
        nutrition = await self.get_food(match.fdc_id, cancel_event=cancel_event)
        self.cache.set(cache_key, nutrition, ttl_seconds=self.food_ttl_seconds)
        return nutrition

    async def resolve_many(
        self, ingredients: Iterable[str], cancel_event: asyncio.Event | None = None
    ) -> LookupBatch:
        """Resolve several ingredients concurrently, collecting failures."""
        names = list(dict.fromkeys(ingredient_key(name) for name in ingredients))
        semaphore = asyncio.Semaphore(self.max_concurrency)
        resolved: dict[str, IngredientNutrition] = {}
        failures: dict[str, LookupFailedError] = {}

        async def resolve_one(name: str) -> None:
            async with semaphore:
                try:
                    resolved[name] = await self.resolve(name, cancel_event=cancel_event)
                except LookupFailedError as exc:
                    _logger.warning("Could not resolve %r: %s", name, exc)
                    failures[name] = exc

        await asyncio.gather(*(resolve_one(name) for name in names))
        return LookupBatch(resolved=resolved, failures=failures)

    async def _call_with_retry(
        self,
        func: "Callable[[], Awaitable[dict[str, object]]]",
        *,
        action: str,
        cancel_event: asyncio.Event | None,
    ) -> dict[str, object]:
        return await call_with_retry(
            func, self.retry_policy, action=action, cancel_event=cancel_event
        )


def to_ingredient_nutrition(food: FdcFood) -> IngredientNutrition:
    """Map an FDC food onto the canonical shape, correcting bad data."""
    profile, inferred = infer_missing_sugars(food.to_profile(), ingredient=food.description)
    profile, corrected = enforce_invariants(profile, ingredient=food.description)
    return IngredientNutrition(
        profile=profile,
        portions=food.to_portions(),
        description=food.description,
        fdc_id=food.fdc_id,
        data_type=food.data_type,
        warnings=inferred + corrected,
    )
