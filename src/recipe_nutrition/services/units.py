"""Culinary unit vocabulary and gram conversion.

Conversion priority:

1. Ingredient portion data from the lookup source (authoritative, reflects
   the ingredient's real density).
2. The fixed table below. Mass units are exact. Volume units assume the
   density of water (1 ml = 1 g), which is only an approximation for
   anything that is not water-like.

Count units (piece, slice, item, ...) have no generic gram weight and need
portion data.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from recipe_nutrition.domain.errors import ConversionError
from recipe_nutrition.domain.nutrients import FoodPortion

MASS_GRAMS: dict[str, float] = {
    "g": 1.0,
    "kg": 1000.0,
    "mg": 0.001,
    "oz": 28.3495,
    "lb": 453.592,
}

# Water-equivalent density approximation.
VOLUME_GRAMS: dict[str, float] = {
    "ml": 1.0,
    "l": 1000.0,
    "tsp": 4.92892,
    "tbsp": 14.7868,
    "fl oz": 29.5735,
    "cup": 236.588,
    "pint": 473.176,
    "quart": 946.353,
    "gallon": 3785.41,
}

APPROXIMATE_GRAMS: dict[str, float] = {
    "smidgen": 0.25,
    "pinch": 0.5,
    "dash": 0.6,
}

COUNT_UNITS: frozenset[str] = frozenset(
    {
        "item",
        "piece",
        "slice",
        "clove",
        "sprig",
        "leaf",
        "stalk",
        "head",
        "bunch",
        "can",
        "package",
        "jar",
        "bottle",
        "box",
        "stick",
        "small",
        "medium",
        "large",
        "whole",
        "serving",
    }
)

UNIT_ALIASES: dict[str, tuple[str, ...]] = {
    "g": ("g", "gm", "gr", "gram", "grams", "gramme", "grammes"),
    "kg": ("kg", "kgs", "kilo", "kilos", "kilogram", "kilograms"),
    "mg": ("mg", "milligram", "milligrams"),
    "oz": ("oz", "ounce", "ounces"),
    "lb": ("lb", "lbs", "pound", "pounds"),
    "ml": ("ml", "milliliter", "milliliters", "millilitre", "millilitres"),
    "l": ("l", "liter", "liters", "litre", "litres"),
    "tsp": ("tsp", "tsps", "teaspoon", "teaspoons"),
    "tbsp": ("tbsp", "tbsps", "tbs", "tbl", "tablespoon", "tablespoons"),
    "fl oz": ("fl oz", "fl. oz", "floz", "fluid ounce", "fluid ounces"),
    "cup": ("cup", "cups", "c"),
    "pint": ("pint", "pints", "pt"),
    "quart": ("quart", "quarts", "qt"),
    "gallon": ("gallon", "gallons", "gal"),
    "smidgen": ("smidgen", "smidgens"),
    "pinch": ("pinch", "pinches"),
    "dash": ("dash", "dashes"),
    "item": ("item", "items", "each", "ea"),
    "piece": ("piece", "pieces", "pc", "pcs"),
    "slice": ("slice", "slices"),
    "clove": ("clove", "cloves"),
    "sprig": ("sprig", "sprigs"),
    "leaf": ("leaf", "leaves"),
    "stalk": ("stalk", "stalks"),
    "head": ("head", "heads"),
    "bunch": ("bunch", "bunches"),
    "can": ("can", "cans"),
    "package": ("package", "packages", "pkg", "pkgs"),
    "jar": ("jar", "jars"),
    "bottle": ("bottle", "bottles"),
    "box": ("box", "boxes"),
    "stick": ("stick", "sticks"),
    "small": ("small",),
    "medium": ("medium",),
    "large": ("large", "lg"),
    "whole": ("whole",),
    "serving": ("serving", "servings"),
}

_ALIAS_LOOKUP: dict[str, str] = {
    alias: canonical
    for canonical, aliases in UNIT_ALIASES.items()
    for alias in aliases
}


@dataclass(frozen=True)
class Conversion:
    """Gram weight with where it came from and how far to trust it."""

    grams: float
    source: str
    confidence: str


def normalize_unit(text: str) -> str | None:
    """Return the canonical unit for text, or None if it is not a known unit."""
    cleaned = " ".join(text.lower().replace(".", " ").split())
    return _ALIAS_LOOKUP.get(cleaned) or _ALIAS_LOOKUP.get(cleaned.replace(" ", ""))


def match_leading_unit(text: str) -> tuple[str | None, str]:
    """Split a known unit off the start of text.

    Returns the canonical unit (or None) and the remaining text.
    """
    words = text.split()
    for size in (2, 1):
        if len(words) < size:
            continue
        canonical = normalize_unit(" ".join(words[:size]))
        if canonical is not None:
            return canonical, " ".join(words[size:])
    return None, text.strip()


def is_count_unit(unit: str) -> bool:
    return (normalize_unit(unit) or unit.lower().strip()) in COUNT_UNITS


def convert_to_grams(
    quantity: float,
    unit: str,
    portions: Iterable[FoodPortion] | None = None,
    ingredient: str | None = None,
) -> Conversion:
    """Convert a quantity in unit to grams.

    Raises :class:`ConversionError` when neither portion data nor the fixed
    table can convert the unit.
    """
    if not math.isfinite(quantity) or quantity < 0:
        raise ConversionError(
            f"Invalid quantity {quantity!r} for {ingredient or 'ingredient'}",
            unit=unit,
            ingredient=ingredient,
        )
    portion = find_portion(unit, portions or ())
    if portion is not None:
        amount = portion.amount if portion.amount > 0 else 1.0
        return Conversion(
            grams=quantity * portion.gram_weight / amount,
            source="portion",
            confidence="high",
        )

    canonical = normalize_unit(unit)
    if canonical in MASS_GRAMS:
        return Conversion(quantity * MASS_GRAMS[canonical], "standard", "high")
    if canonical in VOLUME_GRAMS:
        return Conversion(quantity * VOLUME_GRAMS[canonical], "standard", "medium")
    if canonical in APPROXIMATE_GRAMS:
        return Conversion(quantity * APPROXIMATE_GRAMS[canonical], "standard", "low")
    if is_count_unit(unit):
        raise ConversionError(
            f"Unit {unit!r} for {ingredient or 'ingredient'} has no generic gram "
            "weight; portion data is required",
            unit=unit,
            ingredient=ingredient,
        )
    raise ConversionError(
        f"Unknown unit {unit!r} for {ingredient or 'ingredient'}",
        unit=unit,
        ingredient=ingredient,
    )


def to_grams(
    quantity: float, unit: str, portions: Iterable[FoodPortion] | None = None
) -> float:
    """Convert a quantity in unit to grams."""
    return convert_to_grams(quantity, unit, portions).grams


def find_portion(unit: str, portions: Iterable[FoodPortion]) -> FoodPortion | None:
    """Return the first portion whose measure matches unit."""
    wanted = _labels(unit)
    if not wanted:
        return None
    for portion in portions:
        if portion.gram_weight <= 0:
            continue
        if wanted & _portion_labels(portion):
            return portion
    return None


def _labels(text: str | None) -> set[str]:
    if not text:
        return set()
    lowered = " ".join(text.lower().split())
    if not lowered or lowered == "undetermined":
        return set()
    labels = {lowered}
    canonical = normalize_unit(lowered)
    if canonical:
        labels.add(canonical)
    return labels


def _portion_labels(portion: FoodPortion) -> set[str]:
    labels: set[str] = set()
    for text in (portion.name, portion.abbreviation, portion.modifier):
        if not text:
            continue
        labels |= _labels(text)
        head = text.split(",")[0].split("(")[0].strip()
        labels |= _labels(head)
        if head:
            labels |= _labels(head.split()[0])
    return labels
