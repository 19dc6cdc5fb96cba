"""Nutrient domain models."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, fields, replace

NUTRIENT_UNITS: dict[str, str] = {
    "calories": "kcal",
    "total_fat": "g",
    "saturated_fat": "g",
    "trans_fat": "g",
    "cholesterol": "mg",
    "sodium": "mg",
    "total_carbohydrate": "g",
    "dietary_fiber": "g",
    "total_sugars": "g",
    "added_sugars": "g",
    "protein": "g",
    "vitamin_d": "mcg",
    "vitamin_a": "mcg",
    "vitamin_c": "mg",
    "vitamin_e": "mg",
    "vitamin_k": "mcg",
    "thiamin": "mg",
    "riboflavin": "mg",
    "niacin": "mg",
    "vitamin_b6": "mg",
    "folate": "mcg",
    "vitamin_b12": "mcg",
    "calcium": "mg",
    "iron": "mg",
    "magnesium": "mg",
    "phosphorus": "mg",
    "potassium": "mg",
    "zinc": "mg",
    "copper": "mg",
    "manganese": "mg",
    "selenium": "mcg",
}

NUTRIENT_KEYS: tuple[str, ...] = tuple(NUTRIENT_UNITS)


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient amounts per 100 g of the entity described.

    ``None`` means the value was not provided, which is distinct from a
    measured ``0.0``.
    """

    calories: float | None = None
    total_fat: float | None = None
    saturated_fat: float | None = None
    trans_fat: float | None = None
    cholesterol: float | None = None
    sodium: float | None = None
    total_carbohydrate: float | None = None
    dietary_fiber: float | None = None
    total_sugars: float | None = None
    added_sugars: float | None = None
    protein: float | None = None
    vitamin_d: float | None = None
    vitamin_a: float | None = None
    vitamin_c: float | None = None
    vitamin_e: float | None = None
    vitamin_k: float | None = None
    thiamin: float | None = None
    riboflavin: float | None = None
    niacin: float | None = None
    vitamin_b6: float | None = None
    folate: float | None = None
    vitamin_b12: float | None = None
    calcium: float | None = None
    iron: float | None = None
    magnesium: float | None = None
    phosphorus: float | None = None
    potassium: float | None = None
    zinc: float | None = None
    copper: float | None = None
    manganese: float | None = None
    selenium: float | None = None

    @classmethod
    def from_dict(cls, values: Mapping[str, object]) -> "NutrientProfile":
        """Build a profile from a mapping of canonical keys."""
        unknown = set(values) - set(NUTRIENT_KEYS)
        if unknown:
            raise ValueError(f"Unknown nutrient keys: {', '.join(sorted(unknown))}")
        cleaned: dict[str, float | None] = {}
        for key, value in values.items():
            if value is None:
                cleaned[key] = None
            elif isinstance(value, int | float) and not isinstance(value, bool):
                cleaned[key] = float(value)
            else:
                raise ValueError(f"Nutrient {key} must be a number, got {value!r}")
        return cls(**cleaned)

    def get(self, key: str) -> float | None:
        """Return a nutrient amount by canonical key."""
        if key not in NUTRIENT_UNITS:
            raise KeyError(key)
        return getattr(self, key)

    def items(self) -> Iterator[tuple[str, float | None]]:
        """Iterate over (key, amount) pairs in label order."""
        for item in fields(self):
            yield item.name, getattr(self, item.name)

    def provided(self) -> dict[str, float]:
        """Return only the nutrients that carry a value."""
        return {key: value for key, value in self.items() if value is not None}

    def with_values(self, **changes: float | None) -> "NutrientProfile":
        """Return a copy with some nutrients replaced."""
        return replace(self, **changes)

    def scaled(self, factor: float) -> "NutrientProfile":
        """Return a copy with every provided amount multiplied by factor."""
        return NutrientProfile(
            **{
                key: (value * factor if value is not None else None)
                for key, value in self.items()
            }
        )

    def to_dict(self) -> dict[str, float | None]:
        return dict(self.items())


@dataclass(frozen=True)
class FoodPortion:
    """Ingredient-specific household measure, e.g. 1 slice = 28 g."""

    name: str
    gram_weight: float
    amount: float = 1.0
    abbreviation: str | None = None
    modifier: str | None = None


@dataclass(frozen=True)
class DataQualityWarning:
    """A nutrient relationship that was violated and corrected."""

    kind: str
    nutrient: str
    message: str
    original_value: float | None
    corrected_value: float | None
    ingredient: str | None = None


@dataclass(frozen=True)
class IngredientNutrition:
    """Resolved nutrient data for one ingredient from the lookup source."""

    profile: NutrientProfile
    portions: tuple[FoodPortion, ...] = ()
    description: str | None = None
    fdc_id: int | None = None
    data_type: str | None = None
    warnings: tuple[DataQualityWarning, ...] = field(default_factory=tuple)
