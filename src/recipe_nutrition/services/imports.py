"""Recipe import pipeline: parse, resolve, review, aggregate.

State between stages lives in an :class:`ImportContext` owned by the caller,
so an import can be paused for manual review and resumed later. Review means
skipping an ingredient, attaching a saved sub-recipe or picking the variety of
a counted ingredient.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace

from recipe_nutrition.domain.dishes import AggregatedDish
from recipe_nutrition.domain.errors import AggregationError, LookupFailedError
from recipe_nutrition.domain.recipes import ParsedIngredient, ParsedRecipe
from recipe_nutrition.services.aggregation import (
    ResolvedNutrition,
    aggregate,
    ingredient_key,
)
from recipe_nutrition.services.nutrition import NutritionService
from recipe_nutrition.services.parser import parse_recipe

_logger = logging.getLogger(__name__)


@dataclass
class ImportContext:
    """Working state of one recipe import."""

    text: str
    serving_size_grams: float
    yield_multiplier: float = 1.0
    recipe: ParsedRecipe | None = None
    resolved: dict[str, ResolvedNutrition] = field(default_factory=dict)
    failures: dict[str, LookupFailedError] = field(default_factory=dict)
    skipped: set[str] = field(default_factory=set)
    dish: AggregatedDish | None = None

    @property
    def pending(self) -> list[str]:
        """Ingredients whose lookup failed and that were not skipped."""
        return sorted(name for name in self.failures if name not in self.skipped)

    @property
    def unspecified(self) -> list[ParsedIngredient]:
        """Counted ingredients still waiting for a variety or size."""
        if self.recipe is None:
            return []
        items = list(self.recipe.ingredients)
        for sub_recipe in self.recipe.sub_recipes:
            items.extend(sub_recipe.ingredients)
        return [item for item in items if item.needs_specification]


@dataclass
class RecipeImportService:
    """Runs the import stages against a nutrient lookup service."""

    nutrition_service: NutritionService
    default_serving_size_grams: float = 100.0

    def start(
        self,
        text: str,
        serving_size_grams: float | None = None,
        yield_multiplier: float = 1.0,
    ) -> ImportContext:
        return ImportContext(
            text=text,
            serving_size_grams=(
                self.default_serving_size_grams
                if serving_size_grams is None
                else serving_size_grams
            ),
            yield_multiplier=yield_multiplier,
        )

    def parse(self, context: ImportContext) -> ParsedRecipe:
        """Parse the context's text; parse problems stay on the recipe."""
        recipe = parse_recipe(context.text)
        context.recipe = recipe
        context.dish = None
        if recipe.errors:
            _logger.info("Recipe parse failed with %s error(s)", len(recipe.errors))
        elif recipe.warnings:
            _logger.info("Recipe %r parsed with %s warning(s)", recipe.title, len(recipe.warnings))
        return recipe

    async def resolve(
        self, context: ImportContext, cancel_event: asyncio.Event | None = None
    ) -> None:
        """Look up every ingredient not yet resolved or skipped."""
        recipe = self._parsed(context)
        names = [
            name
            for name in _lookup_names(recipe, context.resolved)
            if name not in context.resolved and name not in context.skipped
        ]
        if not names:
            return
        batch = await self.nutrition_service.resolve_many(names, cancel_event=cancel_event)
        context.resolved.update(batch.resolved)
        for name in batch.resolved:
            context.failures.pop(name, None)
        context.failures.update(batch.failures)

    def skip(self, context: ImportContext, name: str) -> None:
        """Leave an ingredient out of the aggregation."""
        key = ingredient_key(name)
        context.skipped.add(key)
        context.resolved.pop(key, None)
        _logger.info("Ingredient %r skipped by caller", name)

    def specify(self, context: ImportContext, name: str, choice: str) -> None:
        """Replace a counted ingredient with the variety or size the caller picked.

        Its previous lookup result is dropped; the next :meth:`resolve` looks
        up the chosen name.
        """
        recipe = self._parsed(context)
        key = ingredient_key(name)

        def chosen(items: tuple[ParsedIngredient, ...]) -> tuple[ParsedIngredient, ...]:
            return tuple(
                replace(
                    item,
                    ingredient_name=choice,
                    needs_specification=False,
                    base_ingredient=None,
                    specification_options=(),
                )
                if ingredient_key(item.ingredient_name) == key
                else item
                for item in items
            )

        context.recipe = replace(
            recipe,
            ingredients=chosen(recipe.ingredients),
            sub_recipes=tuple(
                replace(sub_recipe, ingredients=chosen(sub_recipe.ingredients))
                for sub_recipe in recipe.sub_recipes
            ),
        )
        context.resolved.pop(key, None)
        context.failures.pop(key, None)
        context.dish = None
        _logger.info("Ingredient %r specified as %r", name, choice)

    def use_saved(self, context: ImportContext, name: str, dish: AggregatedDish) -> None:
        """Use a previously saved dish for an ingredient or sub-recipe."""
        key = ingredient_key(name)
        context.resolved[key] = dish
        context.failures.pop(key, None)
        context.skipped.discard(key)

    def aggregate(self, context: ImportContext) -> AggregatedDish:
        """Aggregate the resolved recipe; every failed lookup must be reviewed first."""
        recipe = self._parsed(context)
        if context.pending:
            raise AggregationError(
                f"unresolved ingredients need review: {', '.join(context.pending)}",
                details={name: str(context.failures[name]) for name in context.pending},
            )
        resolved = {
            key: value for key, value in context.resolved.items() if key not in context.skipped
        }
        context.dish = aggregate(
            recipe,
            resolved,
            context.serving_size_grams,
            yield_multiplier=context.yield_multiplier,
        )
        for skipped in context.dish.skipped:
            _logger.info("Ingredient %r not counted: %s", skipped.name, skipped.reason)
        return context.dish

    async def run(
        self,
        text: str,
        serving_size_grams: float | None = None,
        yield_multiplier: float = 1.0,
        cancel_event: asyncio.Event | None = None,
    ) -> ImportContext:
        """Parse and resolve; aggregate when nothing needs review."""
        context = self.start(text, serving_size_grams, yield_multiplier)
        recipe = self.parse(context)
        if recipe.errors:
            return context
        await self.resolve(context, cancel_event=cancel_event)
        if not context.pending:
            self.aggregate(context)
        return context

    def _parsed(self, context: ImportContext) -> ParsedRecipe:
        recipe = context.recipe or self.parse(context)
        recipe.raise_for_errors()
        return recipe


def _lookup_names(recipe: ParsedRecipe, resolved: dict[str, ResolvedNutrition]) -> list[str]:
    names = [ingredient_key(item.ingredient_name) for item in recipe.ingredients]
    for sub_recipe in recipe.sub_recipes:
        if isinstance(resolved.get(ingredient_key(sub_recipe.name)), AggregatedDish):
            continue
        names.extend(ingredient_key(item.ingredient_name) for item in sub_recipe.ingredients)
    return list(dict.fromkeys(names))

