# inventory_enforcer.py
#
# Description:
# Makes sure a plan never uses more of an ingredient than the user said they
# have. Usage of each stocked ingredient is summed across all dishes in a
# common base unit (grams, millilitres or units); when it exceeds the stock,
# every occurrence is scaled down by the same factor so the dishes keep
# their proportions. Also holds the pre-generation check that warns when the
# declared stock looks too small for the number of meals.

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from calorie_calculator import enrich_plan
from ingredient_parser import normalize_ingredient, normalize_unit
from models import MealPlan, StockEntry
from utils import normalize_name

_TO_BASE = {
    "g": (1, "g"),
    "kg": (1000, "g"),
    "ml": (1, "ml"),
    "l": (1000, "ml"),
    "unidade": (1, "unidade"),
}


def to_base_amount(quantity: float, unit: Optional[str]) -> Tuple[Optional[float], Optional[str]]:
    """
    Converts a quantity to grams, millilitres or units.
    Returns (None, None) for units that cannot be converted.
    """
    factor, base_unit = _TO_BASE.get(normalize_unit(unit), (None, None))
    if factor is None:
        return None, None
    return quantity * factor, base_unit


@dataclass
class _StockLimit:
    name: str
    amount: float
    base_unit: str


def _stock_limits(stock: List[StockEntry]) -> List[_StockLimit]:
    limits = []
    for entry in stock:
        if entry.quantity is None or not entry.unit:
            continue
        amount, base_unit = to_base_amount(entry.quantity, entry.unit)
        if amount is None:
            logging.debug(f"Stock of '{entry.name}' uses an unknown unit '{entry.unit}'; not constraining it.")
            continue
        limits.append(_StockLimit(entry.name, amount, base_unit))
    return limits


def _leads_with(name: str, head: str) -> bool:
    return name == head or name.startswith(head + " ")


def is_stocked_item(ingredient_name: str, stock_name: str) -> bool:
    """
    True when an ingredient of the plan is the stocked item itself.

    Names known to the dictionary are compared by their canonical name, so
    "peito de frango" draws on a "frango" stock but "salmão" never draws on
    "sal". Other names match when one starts with the other as whole words
    ("frango grelhado" and "frango"); "farinha de arroz" is not "arroz".
    """
    ingredient, stock = normalize_name(ingredient_name), normalize_name(stock_name)
    if not ingredient or not stock:
        return False
    if ingredient == stock:
        return True

    ingredient_entry, stock_entry = normalize_ingredient(ingredient), normalize_ingredient(stock)
    if ingredient_entry and stock_entry and ingredient_entry["confidence"] == stock_entry["confidence"] == "high":
        return ingredient_entry["canonical"] == stock_entry["canonical"]
    return _leads_with(ingredient, stock) or _leads_with(stock, ingredient)


def _matching_limit(name: str, limits: List[_StockLimit]) -> Optional[_StockLimit]:
    """The stock entry for the ingredient; the longest name wins."""
    matches = [limit for limit in limits if is_stocked_item(name, limit.name)]
    if not matches:
        return None
    return max(matches, key=lambda limit: len(normalize_name(limit.name)))


def _floor2(value: float) -> float:
    # round first so 49.99999999 from float noise does not floor to 49.99
    return math.floor(round(value * 100, 6)) / 100


def enforce_stock(plan: MealPlan, stock: List[StockEntry]) -> Tuple[MealPlan, List[str]]:
    """
    Scales down every ingredient whose total usage exceeds its declared stock.

    Args:
        plan: The plan to check; it is not modified.
        stock: The user's ingredients. Entries without quantity or unit, or
            with a unit that cannot be converted, do not constrain the plan.

    Returns:
        The adjusted plan (with recomputed calories when anything changed)
        and one adjustment message per scaled ingredient.
    """
    limits = _stock_limits(stock)
    if not limits:
        return plan, []

    plan = plan.model_copy(deep=True)

    # Occurrences (dish index, ingredient index, amount in base unit) per stock entry
    usage: Dict[int, List[Tuple[int, int, float]]] = {}
    for dish_index, dish in enumerate(plan.dishes):
        for ingredient_index, ingredient in enumerate(dish.ingredients):
            limit = _matching_limit(ingredient.name, limits)
            if limit is None:
                continue
            amount, base_unit = to_base_amount(ingredient.quantity, ingredient.unit)
            if amount is None or base_unit != limit.base_unit:
                continue
            usage.setdefault(id(limit), []).append((dish_index, ingredient_index, amount))

    adjustments = []
    for limit in limits:
        occurrences = usage.get(id(limit), [])
        total = sum(amount for _, _, amount in occurrences)
        if total <= limit.amount:
            continue

        factor = limit.amount / total
        for dish_index, ingredient_index, amount in occurrences:
            ingredient = plan.dishes[dish_index].ingredients[ingredient_index]
            ingredient.quantity = _floor2(amount * factor)
            ingredient.unit = limit.base_unit

        message = (
            f"Quantidade de {limit.name} reduzida para caber no estoque: o plano usaria "
            f"{total:g} {limit.base_unit}, mas há {limit.amount:g} {limit.base_unit} em estoque."
        )
        logging.info(message)
        adjustments.append(message)

    if adjustments:
        plan = enrich_plan(plan)
    return plan, adjustments


# --- Pre-generation stock check ---

# Conservative estimate of how much of each kind of ingredient one meal uses, in grams.
PROTEIN_PER_MEAL_G = 250
CARB_PER_MEAL_G = 150
VEGETABLE_PER_MEAL_G = 100
INSUFFICIENT_STOCK_RATIO = 0.7

_PROTEIN_TERMS = ["frango", "carne", "peixe", "ovo"]
_CARB_TERMS = ["arroz", "macarrao", "batata"]


@dataclass
class InsufficientIngredient:
    name: str
    available: float
    needed: float
    unit: str


def _estimated_need_g(name: str, meal_count: int) -> float:
    normalized = normalize_name(name)
    if any(term in normalized for term in _PROTEIN_TERMS):
        return PROTEIN_PER_MEAL_G * meal_count
    if any(term in normalized for term in _CARB_TERMS):
        return CARB_PER_MEAL_G * meal_count
    return VEGETABLE_PER_MEAL_G * meal_count


def validate_stock(entries: List[StockEntry], meal_count: int) -> List[InsufficientIngredient]:
    """
    Lists the stocked ingredients that look too small for the number of
    meals (less than 70% of a conservative estimate). Only mass units are
    checked; the estimated need is given in the entry's own unit.
    """
    insufficient = []
    for entry in entries:
        if not entry.quantity or not entry.unit:
            continue
        unit = normalize_unit(entry.unit)
        if unit not in ("g", "kg"):
            continue

        available_g, _ = to_base_amount(entry.quantity, unit)
        needed_g = _estimated_need_g(entry.name, meal_count)
        if available_g < needed_g * INSUFFICIENT_STOCK_RATIO:
            needed = needed_g / 1000 if unit == "kg" else needed_g
            insufficient.append(InsufficientIngredient(entry.name, entry.quantity, math.ceil(needed), entry.unit))
    return insufficient
