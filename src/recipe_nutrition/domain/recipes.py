"""Domain models for parsed recipe text."""

from dataclasses import dataclass

from recipe_nutrition.domain.errors import ParseError


@dataclass(frozen=True)
class ParsedIngredient:
    """One ingredient line split into quantity, unit and name.

    ``needs_specification`` is advisory: the ingredient is counted (``2
    tomatoes``) but varies too much in size for a reliable lookup, and the
    caller may offer ``specification_options`` before resolving it.
    """

    raw_text: str
    quantity: float
    unit: str
    ingredient_name: str
    needs_specification: bool = False
    base_ingredient: str | None = None
    specification_options: tuple[str, ...] = ()

    @property
    def specification_prompt(self) -> str | None:
        if not self.needs_specification:
            return None
        return f"What type or size of {self.base_ingredient}?"


@dataclass(frozen=True)
class SubRecipe:
    """A parenthetical ingredient group found on a parent line.

    ``quantity`` and ``unit`` describe how much of the sub-recipe the parent
    dish uses.
    """

    name: str
    ingredients: tuple[ParsedIngredient, ...]
    quantity: float = 1.0
    unit: str = "item"
    raw_text: str = ""


@dataclass(frozen=True)
class ParsedRecipe:
    """Parser output: recovered structure plus errors and warnings."""

    title: str
    ingredients: tuple[ParsedIngredient, ...] = ()
    sub_recipes: tuple[SubRecipe, ...] = ()
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    explicit_servings: int | None = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise ParseError if the recipe is not safe to aggregate."""
        if self.errors:
            raise ParseError("; ".join(self.errors))
