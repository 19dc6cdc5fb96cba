"""Domain models for aggregated dishes."""

from dataclasses import dataclass

from recipe_nutrition.domain.nutrients import DataQualityWarning, NutrientProfile


@dataclass(frozen=True)
class SkippedIngredient:
    """An ingredient left out of an aggregation, with the reason."""

    name: str
    reason: str
    sub_recipe: str | None = None


@dataclass(frozen=True)
class AggregatedDish:
    """Aggregated nutrition for a dish or sub-recipe.

    ``total_weight_grams`` is the yield-adjusted weight; the raw ingredient
    weight is kept in ``raw_total_weight_grams``.
    """

    nutrition_per_100g: NutrientProfile
    total_weight_grams: float
    serving_size_grams: float
    nutrition_per_serving: NutrientProfile
    servings_per_container: float
    raw_total_weight_grams: float
    yield_multiplier: float = 1.0
    warnings: tuple[DataQualityWarning, ...] = ()
    skipped: tuple[SkippedIngredient, ...] = ()

    @property
    def display_servings_per_container(self) -> float:
        return round(self.servings_per_container, 1)
