"""Pydantic models for FoodData Central payloads."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from recipe_nutrition.domain.nutrients import FoodPortion, NutrientProfile

# FDC nutrient number -> canonical nutrient key. Codes not listed are ignored.
FDC_NUTRIENT_CODES: dict[int, str] = {
    1008: "calories",
    1004: "total_fat",
    1258: "saturated_fat",
    1257: "trans_fat",
    1253: "cholesterol",
    1093: "sodium",
    1005: "total_carbohydrate",
    1079: "dietary_fiber",
    2000: "total_sugars",
    1235: "added_sugars",
    1003: "protein",
    1114: "vitamin_d",
    1106: "vitamin_a",
    1162: "vitamin_c",
    1109: "vitamin_e",
    1185: "vitamin_k",
    1165: "thiamin",
    1166: "riboflavin",
    1167: "niacin",
    1175: "vitamin_b6",
    1190: "folate",
    1178: "vitamin_b12",
    1087: "calcium",
    1089: "iron",
    1090: "magnesium",
    1091: "phosphorus",
    1092: "potassium",
    1095: "zinc",
    1098: "copper",
    1101: "manganese",
    1103: "selenium",
}


class FdcNutrientRef(BaseModel):
    """Nested nutrient reference in food detail payloads."""

    id: int | None = None
    name: str | None = None
    unit_name: str | None = Field(default=None, alias="unitName")


class FdcFoodNutrient(BaseModel):
    """One nutrient amount.

    Search results use ``nutrientId``/``value``; food details nest the id
    under ``nutrient`` and report ``amount``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    nutrient_id: int | None = Field(default=None, alias="nutrientId")
    nutrient: FdcNutrientRef | None = None
    value: float | None = None
    amount: float | None = None

    @model_validator(mode="after")
    def _fill_nutrient_id(self) -> "FdcFoodNutrient":
        if self.nutrient_id is None and self.nutrient is not None:
            self.nutrient_id = self.nutrient.id
        return self

    @property
    def quantity(self) -> float | None:
        return self.value if self.value is not None else self.amount


class FdcMeasureUnit(BaseModel):
    id: int | None = None
    name: str | None = None
    abbreviation: str | None = None


class FdcFoodPortion(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | None = None
    amount: float | None = None
    gram_weight: float | None = Field(default=None, alias="gramWeight")
    modifier: str | None = None
    portion_description: str | None = Field(default=None, alias="portionDescription")
    measure_unit: FdcMeasureUnit | None = Field(default=None, alias="measureUnit")

    def to_portion(self) -> FoodPortion | None:
        if not self.gram_weight or self.gram_weight <= 0:
            return None
        unit = self.measure_unit or FdcMeasureUnit()
        name = unit.name if unit.name and unit.name != "undetermined" else None
        name = name or self.modifier or self.portion_description or ""
        return FoodPortion(
            name=name,
            gram_weight=self.gram_weight,
            amount=self.amount if self.amount and self.amount > 0 else 1.0,
            abbreviation=unit.abbreviation or None,
            modifier=self.modifier or None,
        )


class FdcFood(BaseModel):
    """A food from search results or the food detail endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    fdc_id: int = Field(alias="fdcId")
    description: str = ""
    data_type: str | None = Field(default=None, alias="dataType")
    brand_owner: str | None = Field(default=None, alias="brandOwner")
    food_nutrients: list[FdcFoodNutrient] = Field(default_factory=list, alias="foodNutrients")
    food_portions: list[FdcFoodPortion] = Field(default_factory=list, alias="foodPortions")

    def to_profile(self) -> NutrientProfile:
        """Map reported nutrients onto the canonical profile."""
        values: dict[str, float] = {}
        for entry in self.food_nutrients:
            key = FDC_NUTRIENT_CODES.get(entry.nutrient_id or 0)
            quantity = entry.quantity
            if key is None or quantity is None or key in values:
                continue
            values[key] = float(quantity)
        return NutrientProfile.from_dict(values)

    def to_portions(self) -> tuple[FoodPortion, ...]:
        portions = (portion.to_portion() for portion in self.food_portions)
        return tuple(portion for portion in portions if portion is not None)


class FdcSearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    total_hits: int = Field(default=0, alias="totalHits")
    foods: list[FdcFood] = Field(default_factory=list)
