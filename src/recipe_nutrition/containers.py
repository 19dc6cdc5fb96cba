"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from recipe_nutrition.adapters.fdc_client import FdcClient, HttpxFdcClient
from recipe_nutrition.app_logging import configure_logging
from recipe_nutrition.config import Settings
from recipe_nutrition.services.cache import InMemoryCache
from recipe_nutrition.services.imports import RecipeImportService
from recipe_nutrition.services.nutrition import NutritionService
from recipe_nutrition.services.retry import RetryPolicy


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    fdc_client: FdcClient
    nutrition_service: NutritionService
    import_service: RecipeImportService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(logging.DEBUG if resolved_settings.debug else logging.INFO)
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
        timeout_seconds=resolved_settings.fdc_timeout_seconds,
    )
    retry_policy = RetryPolicy(
        max_retries=resolved_settings.lookup_max_retries,
        initial_delay=resolved_settings.lookup_initial_delay_seconds,
        max_delay=resolved_settings.lookup_max_delay_seconds,
    )
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        cache=InMemoryCache(),
        retry_policy=retry_policy,
        food_ttl_seconds=resolved_settings.lookup_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )
    import_service = RecipeImportService(
        nutrition_service=nutrition_service,
        default_serving_size_grams=resolved_settings.default_serving_size_grams,
    )

    async def close_resources() -> None:
        await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        fdc_client=fdc_client,
        nutrition_service=nutrition_service,
        import_service=import_service,
        close_resources=close_resources,
    )
