"""Error taxonomy for parsing, conversion, aggregation and lookup."""

from collections.abc import Mapping


class RecipeNutritionError(Exception):
    """Base class for all recipe nutrition errors."""


class ParseError(RecipeNutritionError):
    """Recipe text cannot be parsed safely."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number


class ConversionError(RecipeNutritionError):
    """A quantity cannot be converted to grams."""

    def __init__(self, message: str, unit: str, ingredient: str | None = None) -> None:
        super().__init__(message)
        self.unit = unit
        self.ingredient = ingredient


class AggregationError(RecipeNutritionError):
    """A recipe tree cannot be aggregated into a nutrient profile."""

    def __init__(
        self,
        message: str,
        nutrient: str | None = None,
        details: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.nutrient = nutrient
        self.details = dict(details or {})


class LookupFailedError(RecipeNutritionError):
    """Base class for nutrient lookup failures."""


class FoodNotFoundError(LookupFailedError):
    """The lookup source has no food for the query."""

    def __init__(self, query: str) -> None:
        super().__init__(f"No food found for {query!r}")
        self.query = query


class RateLimitedError(LookupFailedError):
    """The lookup source asked us to slow down."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class TransientLookupError(LookupFailedError):
    """Timeout, transport failure or 5xx from the lookup source."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LookupCancelledError(LookupFailedError):
    """The caller cancelled a lookup between attempts."""
