"""Ingredients that need a variety or size before lookup.

"2 tomatoes" can weigh anything from 20 g (cherry) to 400 g (beefsteak), so a
counted high-variation ingredient is flagged with the choices a caller can
offer. Eggs, lemons and meats come in sizes close enough to a standard
portion and are not flagged.
"""

import re
from dataclasses import dataclass

from recipe_nutrition.services.units import is_count_unit

HIGH_VARIATION: dict[str, tuple[str, ...]] = {
    "tomato": (
        "cherry tomato",
        "grape tomato",
        "roma tomato",
        "medium tomato",
        "large tomato",
        "beefsteak tomato",
        "heirloom tomato",
    ),
    "potato": (
        "small potato",
        "medium potato",
        "large potato",
        "russet potato",
        "red potato",
        "yukon gold potato",
        "fingerling potato",
    ),
    "onion": (
        "small onion",
        "medium onion",
        "large onion",
        "pearl onion",
        "shallot",
        "red onion",
        "white onion",
        "yellow onion",
    ),
    "apple": (
        "small apple",
        "medium apple",
        "large apple",
        "granny smith apple",
        "fuji apple",
        "honeycrisp apple",
        "gala apple",
    ),
    "pepper": (
        "bell pepper",
        "red bell pepper",
        "green bell pepper",
        "jalapeño pepper",
        "serrano pepper",
        "poblano pepper",
    ),
    "carrot": ("baby carrot", "medium carrot", "large carrot"),
    "orange": (
        "small orange",
        "medium orange",
        "large orange",
        "navel orange",
        "blood orange",
    ),
    "banana": ("small banana", "medium banana", "large banana"),
    "zucchini": ("small zucchini", "medium zucchini", "large zucchini"),
    "eggplant": (
        "small eggplant",
        "medium eggplant",
        "large eggplant",
        "japanese eggplant",
    ),
}

_BASE_PATTERNS: dict[str, re.Pattern[str]] = {
    base: re.compile(rf"\b{base}(e?s)?\b", re.IGNORECASE) for base in HIGH_VARIATION
}


@dataclass(frozen=True)
class Specification:
    """Choices to offer for an ingredient counted without a variety or size."""

    base_ingredient: str
    options: tuple[str, ...]


def specification_for(unit: str, name: str, raw_text: str = "") -> Specification | None:
    """Return the choices for a counted high-variation ingredient, if any.

    Ingredients measured by weight or volume never need one. Nor does an
    ingredient whose name or line already names one of the varieties
    (``1 medium onion``, ``2 roma tomatoes``).
    """
    if not is_count_unit(unit):
        return None
    for base, pattern in _BASE_PATTERNS.items():
        if pattern.search(name) is None:
            continue
        described = " ".join(f"{raw_text} {unit} {name}".lower().split())
        if any(_mentions(described, variety) for variety in HIGH_VARIATION[base]):
            return None
        return Specification(base_ingredient=base, options=HIGH_VARIATION[base])
    return None


def _mentions(text: str, variety: str) -> bool:
    return re.search(rf"\b{re.escape(variety)}(e?s)?\b", text) is not None
