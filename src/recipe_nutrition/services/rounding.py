"""FDA label rounding (21 CFR 101.9).

Each rounder takes a raw amount and returns the display string. Raw values
are never modified, so re-scaling always starts from unrounded numbers.
Rounding is half-up, as on printed labels, not banker's rounding.
"""

import math
from collections.abc import Callable

from recipe_nutrition.domain.nutrients import NUTRIENT_UNITS, NutrientProfile

FDA_DAILY_VALUES: dict[str, float] = {
    "total_fat": 78,
    "saturated_fat": 20,
    "cholesterol": 300,
    "sodium": 2300,
    "total_carbohydrate": 275,
    "dietary_fiber": 28,
    "total_sugars": 50,
    "added_sugars": 50,
    "protein": 50,
    "vitamin_d": 20,
    "calcium": 1300,
    "iron": 18,
    "potassium": 4700,
}


def round_half_up(value: float, step: float = 1.0) -> float:
    return math.floor(value / step + 0.5) * step


def round_calories(value: float) -> str:
    if value < 5:
        return "0"
    if value <= 50:
        return f"{round_half_up(value, 5):.0f}"
    return f"{round_half_up(value, 10):.0f}"


def round_total_fat(value: float) -> str:
    if value < 0.5:
        return "0 g"
    if value < 5:
        return f"{round_half_up(value, 0.5):.1f} g"
    return f"{round_half_up(value):.0f} g"


def round_saturated_fat(value: float) -> str:
    if value < 0.5:
        return "0 g"
    if value < 1:
        return "Less than 1 g"
    return f"{round_half_up(value, 0.5):.1f} g"


def round_trans_fat(value: float) -> str:
    if value < 0.5:
        return "0 g"
    return f"{round_half_up(value, 0.5):.1f} g"


def round_cholesterol(value: float) -> str:
    if value < 2:
        return "0 mg"
    if value < 5:
        return "Less than 5 mg"
    return f"{round_half_up(value, 5):.0f} mg"


def round_sodium(value: float) -> str:
    """Sodium: <5 mg is 0, up to 140 mg nearest 5 mg, above that nearest 10 mg."""
    if value < 5:
        return "0 mg"
    if value <= 140:
        return f"{round_half_up(value, 5):.0f} mg"
    return f"{round_half_up(value, 10):.0f} mg"


def round_grams(value: float) -> str:
    """Carbohydrate, fiber, sugars and protein."""
    if value < 0.5:
        return "0 g"
    if value < 1:
        return "Less than 1 g"
    return f"{round_half_up(value):.0f} g"


def round_vitamin_d(value: float) -> str:
    if value < 0.1:
        return "0 mcg"
    return f"{round_half_up(value, 0.1):.1f} mcg"


def round_calcium(value: float) -> str:
    if value < 5:
        return "0 mg"
    return f"{round_half_up(value, 10):.0f} mg"


round_potassium = round_calcium


def round_iron(value: float) -> str:
    if value < 0.5:
        return "0 mg"
    return f"{round_half_up(value, 0.1):.1f} mg"


ROUNDERS: dict[str, Callable[[float], str]] = {
    "calories": round_calories,
    "total_fat": round_total_fat,
    "saturated_fat": round_saturated_fat,
    "trans_fat": round_trans_fat,
    "cholesterol": round_cholesterol,
    "sodium": round_sodium,
    "total_carbohydrate": round_grams,
    "dietary_fiber": round_grams,
    "total_sugars": round_grams,
    "added_sugars": round_grams,
    "protein": round_grams,
    "vitamin_d": round_vitamin_d,
    "calcium": round_calcium,
    "iron": round_iron,
    "potassium": round_potassium,
}


def daily_value_percent(amount: float, daily_value: float) -> str:
    """Percent of a daily value, rounded to a whole percent."""
    if not daily_value or not amount:
        return "0%"
    return f"{round_half_up(amount / daily_value * 100):.0f}%"


def format_nutrient(key: str, value: float) -> str:
    """Display string for any nutrient, using its FDA rounder when one exists."""
    rounder = ROUNDERS.get(key)
    if rounder is not None:
        return rounder(value)
    unit = NUTRIENT_UNITS.get(key, "g")
    return f"{value:.1f} {unit}"


def round_label(per_serving: NutrientProfile) -> dict[str, dict[str, str]]:
    """Rounded label lines for a per-serving profile.

    Returns ``{key: {"amount": ..., "daily_value": ...}}`` for every provided
    nutrient; ``daily_value`` is present only when an FDA daily value exists.
    """
    label: dict[str, dict[str, str]] = {}
    for key, value in per_serving.provided().items():
        line = {"amount": format_nutrient(key, value)}
        if key in FDA_DAILY_VALUES:
            line["daily_value"] = daily_value_percent(value, FDA_DAILY_VALUES[key])
        label[key] = line
    return label
