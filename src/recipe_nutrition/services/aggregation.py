"""Nutrition aggregation engine.

Turns a parsed recipe plus resolved per-ingredient nutrient data into an
:class:`AggregatedDish`. Every contribution is weighted by the grams actually
used, including sub-recipes, so the per-100 g result is a mass-weighted
average of the ingredients.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

from recipe_nutrition.domain.dishes import AggregatedDish, SkippedIngredient
from recipe_nutrition.domain.errors import AggregationError, ConversionError
from recipe_nutrition.domain.nutrients import (
    NUTRIENT_KEYS,
    DataQualityWarning,
    FoodPortion,
    IngredientNutrition,
    NutrientProfile,
)
from recipe_nutrition.domain.recipes import ParsedIngredient, ParsedRecipe, SubRecipe
from recipe_nutrition.services.data_quality import enforce_invariants
from recipe_nutrition.services.units import convert_to_grams

ResolvedNutrition = NutrientProfile | IngredientNutrition | AggregatedDish

MAX_YIELD_MULTIPLIER = 2.0

# Fraction of raw weight left after cooking. Reference values only; callers
# pass the multiplier explicitly.
TYPICAL_YIELDS: dict[str, float] = {
    "raw": 1.0,
    "baked": 0.85,
    "roasted": 0.70,
    "grilled": 0.75,
    "fried": 0.90,
    "boiled": 1.0,
    "steamed": 0.95,
    "sautéed": 0.85,
    "braised": 0.80,
    "stewed": 0.90,
    "poached": 0.95,
}

# Count units that mean "the whole batch" when applied to a sub-recipe.
_BATCH_UNITS = ("item", "whole", "batch", "recipe")


@dataclass(frozen=True)
class _Contribution:
    name: str
    grams: float
    profile: NutrientProfile


def ingredient_key(name: str) -> str:
    """Key used to look up resolved nutrition for an ingredient name."""
    return " ".join(name.lower().split())


def typical_yield(method: str) -> float:
    """Return the typical cooked yield for a cooking method."""
    key = ingredient_key(method).replace("sauteed", "sautéed")
    try:
        return TYPICAL_YIELDS[key]
    except KeyError:
        known = ", ".join(TYPICAL_YIELDS)
        raise KeyError(f"Unknown cooking method {method!r}; known methods: {known}") from None


def aggregate(
    recipe: ParsedRecipe,
    resolved: Mapping[str, ResolvedNutrition],
    serving_size_grams: float,
    yield_multiplier: float = 1.0,
) -> AggregatedDish:
    """Aggregate a parsed recipe into per-100 g and per-serving nutrition.

    ``resolved`` maps :func:`ingredient_key` of an ingredient or sub-recipe
    name to its nutrient data. A sub-recipe found in ``resolved`` as an
    :class:`AggregatedDish` is used as saved; otherwise it is aggregated
    from its own ingredients. Ingredients without data or with an
    unconvertible unit are skipped and reported.

    Raises :class:`ParseError` if the recipe carries parse errors and
    :class:`AggregationError` for an invalid serving size, yield multiplier
    or total weight, when nothing can be aggregated, or when a nutrient
    value comes out non-finite.
    """
    _check_serving_size(serving_size_grams)
    _check_yield(yield_multiplier)
    recipe.raise_for_errors()

    skipped: list[SkippedIngredient] = []
    warnings: list[DataQualityWarning] = []
    contributions: list[_Contribution] = []

    for ingredient in recipe.ingredients:
        contribution = _leaf_contribution(ingredient, resolved, skipped, warnings, None)
        if contribution is not None:
            contributions.append(contribution)
    for sub_recipe in recipe.sub_recipes:
        contribution = _sub_recipe_contribution(sub_recipe, resolved, skipped, warnings)
        if contribution is not None:
            contributions.append(contribution)

    if not contributions:
        raise AggregationError(
            "no valid ingredients",
            details={"skipped": {item.name: item.reason for item in skipped}},
        )

    raw_total = _total_weight(contributions, recipe.title)
    raw_per_100g = _mass_weighted_profile(contributions, raw_total)
    return _build_dish(
        raw_per_100g,
        raw_total,
        serving_size_grams,
        yield_multiplier,
        warnings,
        skipped,
        contributions,
    )


def rescale(dish: AggregatedDish, serving_size_grams: float) -> AggregatedDish:
    """Re-derive per-serving values for a new serving size."""
    _check_serving_size(serving_size_grams)
    return replace(
        dish,
        serving_size_grams=serving_size_grams,
        nutrition_per_serving=dish.nutrition_per_100g.scaled(serving_size_grams / 100),
        servings_per_container=dish.total_weight_grams / serving_size_grams,
    )


def _check_serving_size(serving_size_grams: float) -> None:
    if not math.isfinite(serving_size_grams) or serving_size_grams <= 0:
        raise AggregationError(
            "serving size must be greater than zero",
            details={"serving_size_grams": serving_size_grams},
        )


def _check_yield(yield_multiplier: float) -> None:
    if not math.isfinite(yield_multiplier) or not 0 < yield_multiplier <= MAX_YIELD_MULTIPLIER:
        raise AggregationError(
            f"yield multiplier must be greater than 0 and at most {MAX_YIELD_MULTIPLIER:g}",
            details={"yield_multiplier": yield_multiplier},
        )


def _leaf_contribution(
    ingredient: ParsedIngredient,
    resolved: Mapping[str, ResolvedNutrition],
    skipped: list[SkippedIngredient],
    warnings: list[DataQualityWarning],
    sub_recipe: str | None,
) -> _Contribution | None:
    name = ingredient.ingredient_name
    entry = resolved.get(ingredient_key(name))
    if entry is None:
        skipped.append(SkippedIngredient(name, "no nutrient data", sub_recipe))
        return None

    profile, portions = _unpack(entry)
    try:
        grams = convert_to_grams(
            ingredient.quantity, ingredient.unit, portions, ingredient=name
        ).grams
    except ConversionError as exc:
        skipped.append(SkippedIngredient(name, str(exc), sub_recipe))
        return None

    if isinstance(entry, IngredientNutrition):
        warnings.extend(entry.warnings)
    return _Contribution(name, grams, profile)


def _sub_recipe_contribution(
    sub_recipe: SubRecipe,
    resolved: Mapping[str, ResolvedNutrition],
    skipped: list[SkippedIngredient],
    warnings: list[DataQualityWarning],
) -> _Contribution | None:
    saved = resolved.get(ingredient_key(sub_recipe.name))
    if isinstance(saved, AggregatedDish):
        profile, portions = _unpack(saved)
    else:
        inner = [
            contribution
            for ingredient in sub_recipe.ingredients
            if (
                contribution := _leaf_contribution(
                    ingredient, resolved, skipped, warnings, sub_recipe.name
                )
            )
            is not None
        ]
        if not inner:
            skipped.append(
                SkippedIngredient(sub_recipe.name, "no valid ingredients", sub_recipe.name)
            )
            return None
        batch_weight = _total_weight(inner, sub_recipe.name)
        profile = _mass_weighted_profile(inner, batch_weight)
        portions = _batch_portions(batch_weight)

    try:
        grams_used = convert_to_grams(
            sub_recipe.quantity, sub_recipe.unit, portions, ingredient=sub_recipe.name
        ).grams
    except ConversionError as exc:
        skipped.append(SkippedIngredient(sub_recipe.name, str(exc), sub_recipe.name))
        return None
    return _Contribution(sub_recipe.name, grams_used, profile)


def _unpack(entry: ResolvedNutrition) -> tuple[NutrientProfile, tuple[FoodPortion, ...]]:
    if isinstance(entry, AggregatedDish):
        portions = _batch_portions(entry.total_weight_grams) + (
            FoodPortion(name="serving", gram_weight=entry.serving_size_grams),
        )
        return entry.nutrition_per_100g, portions
    if isinstance(entry, IngredientNutrition):
        return entry.profile, entry.portions
    return entry, ()


def _batch_portions(total_weight_grams: float) -> tuple[FoodPortion, ...]:
    return tuple(
        FoodPortion(name=unit, gram_weight=total_weight_grams) for unit in _BATCH_UNITS
    )


def _total_weight(contributions: Iterable[_Contribution], owner: str) -> float:
    contributions = list(contributions)
    total = math.fsum(item.grams for item in contributions)
    if not math.isfinite(total) or total <= 0:
        raise AggregationError(
            "invalid total weight",
            details={
                "recipe": owner,
                "total_weight_grams": total,
                "ingredient_grams": {item.name: item.grams for item in contributions},
            },
        )
    return total


def _mass_weighted_profile(
    contributions: list[_Contribution], total_weight_grams: float
) -> NutrientProfile:
    values: dict[str, float | None] = {}
    for key in NUTRIENT_KEYS:
        parts = [
            (amount * item.grams / 100)
            for item in contributions
            if (amount := item.profile.get(key)) is not None
        ]
        if not parts:
            values[key] = None
            continue
        try:
            total = math.fsum(parts)
        except (ValueError, OverflowError) as exc:
            # fsum rejects inf + -inf and overflowing partial sums.
            inputs = _nutrient_inputs(contributions, key)
            raise AggregationError(
                f"nutrient {key} is not finite ({exc}); inputs: {inputs}",
                nutrient=key,
                details={"inputs": inputs},
            ) from exc
        values[key] = total / (total_weight_grams / 100)
    return NutrientProfile(**values)


def _nutrient_inputs(
    contributions: list[_Contribution], key: str
) -> dict[str, dict[str, float | None]]:
    return {
        item.name: {"grams": item.grams, key: item.profile.get(key)}
        for item in contributions
    }


def _build_dish(
    raw_per_100g: NutrientProfile,
    raw_total_weight_grams: float,
    serving_size_grams: float,
    yield_multiplier: float,
    warnings: list[DataQualityWarning],
    skipped: list[SkippedIngredient],
    contributions: list[_Contribution],
) -> AggregatedDish:
    # Moisture loss concentrates nutrients: per-100 g scales by 1/yield while
    # the batch weight scales by yield.
    total_weight = raw_total_weight_grams * yield_multiplier
    per_100g = raw_per_100g
    if yield_multiplier != 1.0:
        per_100g = raw_per_100g.scaled(1 / yield_multiplier)

    _check_finite(per_100g, "per 100 g", contributions, yield_multiplier)
    per_100g, corrections = enforce_invariants(per_100g)
    per_serving = per_100g.scaled(serving_size_grams / 100)
    _check_finite(per_serving, "per serving", contributions, yield_multiplier)

    return AggregatedDish(
        nutrition_per_100g=per_100g,
        total_weight_grams=total_weight,
        serving_size_grams=serving_size_grams,
        nutrition_per_serving=per_serving,
        servings_per_container=total_weight / serving_size_grams,
        raw_total_weight_grams=raw_total_weight_grams,
        yield_multiplier=yield_multiplier,
        warnings=tuple(warnings) + corrections,
        skipped=tuple(skipped),
    )


def _check_finite(
    profile: NutrientProfile,
    basis: str,
    contributions: list[_Contribution],
    yield_multiplier: float,
) -> None:
    for key, value in profile.items():
        if value is None or math.isfinite(value):
            continue
        inputs = _nutrient_inputs(contributions, key)
        raise AggregationError(
            f"nutrient {key} is not finite ({value}) {basis}; inputs: {inputs}",
            nutrient=key,
            details={"inputs": inputs, "yield_multiplier": yield_multiplier},
        )
