"""JSON encoding for parser and aggregation outputs."""

from pydantic import TypeAdapter

from recipe_nutrition.domain.dishes import AggregatedDish
from recipe_nutrition.domain.recipes import ParsedRecipe

_RECIPE_ADAPTER = TypeAdapter(ParsedRecipe)
_DISH_ADAPTER = TypeAdapter(AggregatedDish)


def recipe_to_json(recipe: ParsedRecipe) -> str:
    """Encode a parsed recipe as a JSON text blob."""
    return _RECIPE_ADAPTER.dump_json(recipe).decode()


def recipe_from_json(payload: str | bytes) -> ParsedRecipe:
    """Decode a parsed recipe stored with recipe_to_json."""
    return _RECIPE_ADAPTER.validate_json(payload)


def dish_to_json(dish: AggregatedDish) -> str:
    """Encode an aggregated dish as a JSON text blob."""
    return _DISH_ADAPTER.dump_json(dish).decode()


def dish_from_json(payload: str | bytes) -> AggregatedDish:
    """Decode an aggregated dish stored with dish_to_json."""
    return _DISH_ADAPTER.validate_json(payload)


def dish_to_dict(dish: AggregatedDish) -> dict[str, object]:
    """Return a JSON-compatible dict for an aggregated dish."""
    return _DISH_ADAPTER.dump_python(dish, mode="json")
