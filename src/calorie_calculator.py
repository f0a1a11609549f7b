# calorie_calculator.py
#
# Description:
# Enriches ingredients, dishes and whole plans with calorie figures taken
# from the nutrition database. Every function returns an enriched copy and
# leaves its input untouched, so the totals can be recomputed after any
# stage that changes quantities or servings.

import math
from dataclasses import dataclass
from typing import List, Optional

from ingredients_database import calculate_ingredient_calories, find_ingredient
from models import Dish, Ingredient, MealPlan


@dataclass
class CalorieAdjustment:
    adjusted_servings: int
    message: Optional[str]
    needs_adjustment: bool


def enrich_ingredient(ingredient: Ingredient) -> Ingredient:
    entry = find_ingredient(ingredient.name)
    kcal = calculate_ingredient_calories(ingredient.name, ingredient.quantity, ingredient.unit)
    return ingredient.model_copy(update={
        "kcal": kcal,
        "kcal_per_100": entry.kcal_per_100 if entry else None,
    })


def enrich_dish(dish: Dish) -> Dish:
    """Enriches every ingredient and sets totalKcal and kcalPerServing (0 when the dish has no servings)."""
    ingredients = [enrich_ingredient(ingredient) for ingredient in dish.ingredients]
    total_kcal = sum(ingredient.kcal or 0 for ingredient in ingredients)
    kcal_per_serving = round(total_kcal / dish.servings) if dish.servings > 0 else 0
    return dish.model_copy(update={
        "ingredients": ingredients,
        "total_kcal": total_kcal,
        "kcal_per_serving": kcal_per_serving,
    })


def enrich_plan(plan: MealPlan) -> MealPlan:
    dishes = [enrich_dish(dish) for dish in plan.dishes]
    total_kcal = sum(dish.total_kcal or 0 for dish in dishes)
    total_servings = sum(dish.servings for dish in dishes)
    avg_kcal = round(total_kcal / total_servings) if total_servings > 0 else 0
    return plan.model_copy(update={
        "dishes": dishes,
        "total_kcal": total_kcal,
        "avg_kcal_per_serving": avg_kcal,
    })


def adjust_servings_for_calorie_limit(dish: Dish, max_kcal_per_serving: float) -> CalorieAdjustment:
    """
    Suggests how many servings a dish needs so each one stays under the
    calorie limit. Servings only ever grow: the food is spread over more
    portions, never removed. The caller decides whether to apply it.
    """
    if not dish.total_kcal or dish.servings <= 0:
        return CalorieAdjustment(dish.servings, None, False)

    if dish.total_kcal / dish.servings <= max_kcal_per_serving:
        return CalorieAdjustment(dish.servings, None, False)

    adjusted = math.ceil(dish.total_kcal / max_kcal_per_serving)
    limit = f"{max_kcal_per_serving:g}"
    message = (
        f'Para manter até {limit} kcal por porção, sugerimos dividir "{dish.name}" '
        f"em {adjusted} porções (atual: {dish.servings})."
    )
    return CalorieAdjustment(adjusted, message, True)


def get_missing_calorie_info(dish: Dish) -> List[str]:
    """Names of the ingredients without calorie information, for callers that want to warn the user."""
    return [ingredient.name for ingredient in dish.ingredients if not ingredient.kcal]
