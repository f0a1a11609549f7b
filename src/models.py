# models.py
#
# Description:
# This module defines the Pydantic data models used throughout the meal planner.
# These models are the strict schema for the plan we expect from the LLM, the
# caller's request and the diet rules, so every stage of the engine works on
# validated, typed data instead of loose dictionaries.

import unicodedata
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class PlanValidationError(ValueError):
    """Raised when a request can never produce a valid plan (e.g. every ingredient is banned)."""


def _strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value.strip().lower())
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


# The LLM is asked for the accented labels, but unaccented ones are common.
_CATEGORY_LABELS = {
    "proteina": "proteína",
    "carboidrato": "carboidrato",
    "legume": "legume",
    "completo": "completo",
}
_COST_LABELS = {"baixo": "baixo", "medio": "médio", "alto": "alto"}


class WireModel(BaseModel):
    """Base for every model that travels as camelCase JSON and rejects unknown fields."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class Ingredient(WireModel):
    """A single ingredient of a dish, owned by that dish."""
    name: str = Field(..., description="Ingredient name in Portuguese, e.g. 'frango'.")
    quantity: float = Field(..., ge=0, description="Amount of the ingredient in the given unit.")
    unit: str = Field(..., description="Unit of the quantity, e.g. 'g', 'kg', 'ml', 'l', 'unidade'.")
    kcal: Optional[float] = Field(None, description="Calories of this quantity.")
    kcal_per_100: Optional[float] = Field(None, alias="kcalPer100", description="Calories per 100 g/ml or per unit.")


class Dish(WireModel):
    name: str = Field(..., description="Name of the dish.")
    category: Literal["proteína", "carboidrato", "legume", "completo"] = Field(
        ..., description="Main role of the dish in the meal.")
    ingredients: List[Ingredient] = Field(..., description="Ingredients with quantities for the whole dish.")
    steps: List[str] = Field(..., description="Preparation steps.")
    servings: int = Field(..., ge=0, description="Number of portions the dish yields.")
    prep_time: float = Field(..., ge=0, description="Preparation time in minutes.")
    variations: List[str] = Field(default_factory=list, description="Simple variation suggestions.")
    total_kcal: Optional[float] = Field(None, description="Calories of the whole dish.")
    kcal_per_serving: Optional[float] = Field(None, description="Calories per portion.")
    complexity: Literal["simples", "gourmet"] = Field("simples", description="Sophistication of the recipe.")

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value):
        if isinstance(value, str):
            return _CATEGORY_LABELS.get(_strip_accents(value), value)
        return value


class ShoppingItem(WireModel):
    category: str = Field(..., description="Store section, e.g. 'Hortifruti'.")
    item: str = Field(..., description="Item to buy.")
    quantity: float = Field(..., ge=0)
    unit: str


class PrepStep(WireModel):
    order: int = Field(..., ge=1, description="1-based position in the batch-cooking schedule.")
    action: str = Field(..., description="Short title of the step.")
    duration: float = Field(..., ge=0, description="Duration in minutes.")
    parallel: bool = Field(..., description="Whether the step overlaps with its neighbours.")
    details: Optional[List[str]] = Field(None, description="Detailed sub-steps for beginners.")
    tips: Optional[str] = Field(None, description="Practical tip.")


class MealPlan(WireModel):
    """The aggregate root: what the LLM produces and what the engine returns."""
    dishes: List[Dish]
    shopping_list: List[ShoppingItem]
    prep_schedule: List[PrepStep]
    estimated_cost: Literal["baixo", "médio", "alto"]
    total_prep_time: float = Field(..., ge=0)
    note: Optional[str] = None
    total_kcal: Optional[float] = None
    avg_kcal_per_serving: Optional[float] = None
    total_plan_time: Optional[float] = None
    time_fits: Optional[bool] = None
    available_time: Optional[float] = None
    adjustment_reason: Optional[str] = None

    @field_validator("estimated_cost", mode="before")
    @classmethod
    def _normalize_cost(cls, value):
        if isinstance(value, str):
            return _COST_LABELS.get(_strip_accents(value), value)
        return value

    @property
    def total_servings(self) -> int:
        return sum(dish.servings for dish in self.dishes)

    def append_adjustments(self, adjustments: List[str]) -> None:
        """Appends adjustment messages to the audit trail, never replacing what is already there."""
        if not adjustments:
            return
        text = " ".join(adjustments)
        self.adjustment_reason = f"{self.adjustment_reason} {text}" if self.adjustment_reason else text


class StockEntry(WireModel):
    """An available ingredient, optionally with the amount the user has."""
    name: str = Field(..., min_length=1)
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None


class DietRuleSet(WireModel):
    status: Literal["canonical", "recognized", "unknown"]
    label: Optional[str] = None
    forbidden_terms: List[str] = Field(default_factory=list)
    guideline_tokens: List[str] = Field(default_factory=list)


class DietLookupResponse(BaseModel):
    """What the diet-knowledge backend answers about a diet name."""
    is_known: bool = Field(..., description="False whenever there is no reliable information about the diet.")
    normalized_label: Optional[str] = Field(None, description="Official name of the diet.")
    rules: Optional[List[str]] = Field(None, description="3 to 6 short rules that define the diet.")


class PlanRequest(WireModel):
    """The caller-facing input of the engine."""
    available_ingredients: List[Union[str, StockEntry]] = Field(..., min_length=1)
    servings: int = Field(..., ge=1)
    varieties: Optional[int] = Field(None, ge=1)
    exclusions: List[str] = Field(default_factory=list)
    objective: Literal["normal", "aproveitamento"] = "normal"
    allow_new_ingredients: bool = False
    sophistication: Literal["simples", "gourmet"] = "simples"
    skill_level: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    diet_type: Optional[str] = None
    calorie_limit: Optional[float] = Field(None, gt=0)
    available_time: Optional[float] = Field(None, gt=0, description="Hours available to cook.")
    user_favorites: List[str] = Field(default_factory=list)
    user_dislikes: List[str] = Field(default_factory=list)

    def stock_entries(self) -> List[StockEntry]:
        return [StockEntry(name=item) if isinstance(item, str) else item for item in self.available_ingredients]

    def ingredient_names(self) -> List[str]:
        return [entry.name for entry in self.stock_entries()]

    def dish_count(self) -> int:
        """Requested varieties, or a default that grows with the number of servings."""
        if self.varieties:
            return self.varieties
        if self.servings <= 8:
            return 3
        if self.servings <= 12:
            return 4
        return 5
