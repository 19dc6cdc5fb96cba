"""Nutrient relationship checks and corrections.

Each violated relationship is corrected by capping the dependent nutrient to
its ceiling and reported as a :class:`DataQualityWarning`.
"""

from recipe_nutrition.domain.nutrients import DataQualityWarning, NutrientProfile

# (dependent, ceiling, warning kind); order matters, sugars are capped to
# carbohydrate before added sugars are capped to sugars.
NUTRIENT_INVARIANTS: tuple[tuple[str, str, str], ...] = (
    ("total_sugars", "total_carbohydrate", "sugar_exceeds_carbs"),
    ("added_sugars", "total_sugars", "added_sugar_exceeds_total"),
    ("dietary_fiber", "total_carbohydrate", "fiber_exceeds_carbs"),
    ("saturated_fat", "total_fat", "saturated_fat_exceeds_total"),
    ("trans_fat", "total_fat", "trans_fat_exceeds_total"),
)

PURE_SUGAR_CARB_THRESHOLD = 95.0


def enforce_invariants(
    profile: NutrientProfile, ingredient: str | None = None
) -> tuple[NutrientProfile, tuple[DataQualityWarning, ...]]:
    """Return a corrected copy of profile and the corrections made."""
    values = profile.to_dict()
    warnings: list[DataQualityWarning] = []

    for key, value in values.items():
        if value is not None and value < 0:
            warnings.append(
                DataQualityWarning(
                    kind="negative_value",
                    nutrient=key,
                    message=f"{_label(key)} was negative ({value:g}); corrected to 0.",
                    original_value=value,
                    corrected_value=0.0,
                    ingredient=ingredient,
                )
            )
            values[key] = 0.0

    for dependent, ceiling, kind in NUTRIENT_INVARIANTS:
        amount = values[dependent]
        limit = values[ceiling]
        if amount is None or limit is None or amount <= limit:
            continue
        warnings.append(
            DataQualityWarning(
                kind=kind,
                nutrient=dependent,
                message=(
                    f"{_label(dependent)} ({amount:.1f}) cannot exceed "
                    f"{_label(ceiling).lower()} ({limit:.1f}); corrected to {limit:.1f}."
                ),
                original_value=amount,
                corrected_value=limit,
                ingredient=ingredient,
            )
        )
        values[dependent] = limit

    if not warnings:
        return profile, ()
    return NutrientProfile(**values), tuple(warnings)


def infer_missing_sugars(
    profile: NutrientProfile, ingredient: str | None = None
) -> tuple[NutrientProfile, tuple[DataQualityWarning, ...]]:
    """Fill in sugars for near-pure sugar foods that report none.

    Some FoodData Central entries (granulated sugar among them) report zero
    total sugars while carbohydrate is essentially the whole weight.
    """
    carbs = profile.total_carbohydrate
    if carbs is None or carbs < PURE_SUGAR_CARB_THRESHOLD:
        return profile, ()
    if profile.total_sugars not in (None, 0.0):
        return profile, ()
    warning = DataQualityWarning(
        kind="missing_sugar",
        nutrient="total_sugars",
        message=(
            f"Sugar data missing; inferred {carbs:.1f} g sugar from "
            "carbohydrate content."
        ),
        original_value=profile.total_sugars,
        corrected_value=carbs,
        ingredient=ingredient,
    )
    return profile.with_values(total_sugars=carbs, added_sugars=carbs), (warning,)


def _label(key: str) -> str:
    return key.replace("_", " ").capitalize()
