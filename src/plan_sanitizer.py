# plan_sanitizer.py
#
# Description:
# Filters every ingredient of a candidate plan, in its dishes and in its
# shopping list, through three gates in a fixed order: the user's
# exclusions, the diet's forbidden terms and, when new ingredients are not
# allowed, the user's available ingredients. Dishes left without
# ingredients are dropped. A plan is never returned empty: the fallback plan
# is filtered the same way, and if that empties too a simple dish is
# synthesized from the user's own ingredients.

import logging
from typing import List, Optional, Tuple

from config import DEFAULT_SYNTHESIZED_QUANTITY_G
from diet_resolver import forbidden_term_for
from fallback_plan import fallback_plan
from ingredient_parser import shopping_category
from models import DietRuleSet, Dish, Ingredient, MealPlan, PlanValidationError, PrepStep, ShoppingItem
from utils import names_overlap, normalize_name


def matching_exclusion(name: str, exclusions: List[str]) -> Optional[str]:
    normalized = normalize_name(name)
    for exclusion in exclusions:
        term = normalize_name(exclusion)
        if term and term in normalized:
            return exclusion
    return None


def _is_available(name: str, available_ingredients: List[str]) -> bool:
    return any(names_overlap(name, available) for available in available_ingredients)


def ban_reason(name: str, exclusions: List[str], diet: DietRuleSet, available_ingredients: List[str],
               allow_new_ingredients: bool) -> Optional[str]:
    """
    Returns why an ingredient is not allowed, or None if it passes every gate.
    The first gate that matches decides the reason.
    """
    if matching_exclusion(name, exclusions):
        return "exclusion"
    if forbidden_term_for(name, diet):
        return "diet"
    if not allow_new_ingredients and not _is_available(name, available_ingredients):
        return "availability"
    return None


_REASON_MESSAGES = {
    "exclusion": "Ingrediente removido por exclusão: {name} ({where}).",
    "diet": "Ingrediente proibido pela dieta removido: {name} ({where}).",
    "availability": "Ingrediente não permitido removido: {name} ({where}).",
}


def _filter_plan(plan: MealPlan, exclusions: List[str], diet: DietRuleSet, available_ingredients: List[str],
                 allow_new_ingredients: bool) -> Tuple[MealPlan, List[str]]:
    adjustments = []

    def passes(name: str, where: str) -> bool:
        reason = ban_reason(name, exclusions, diet, available_ingredients, allow_new_ingredients)
        if reason is None:
            return True
        message = _REASON_MESSAGES[reason].format(name=name, where=where)
        logging.info(message)
        adjustments.append(message)
        return False

    dishes = []
    for dish in plan.dishes:
        ingredients = [
            ingredient.model_copy(deep=True)
            for ingredient in dish.ingredients
            if passes(ingredient.name, f'prato "{dish.name}"')
        ]
        if not ingredients:
            message = f"Receita removida por não conter ingredientes válidos: {dish.name}."
            logging.info(message)
            adjustments.append(message)
            continue
        dishes.append(dish.model_copy(update={"ingredients": ingredients}, deep=True))

    shopping_list = [
        item.model_copy() for item in plan.shopping_list if passes(item.item, "lista de compras")
    ]

    return plan.model_copy(update={"dishes": dishes, "shopping_list": shopping_list}, deep=True), adjustments


def synthesize_plan(ingredient_names: List[str], servings: int) -> MealPlan:
    """A one-dish plan that uses each of the given ingredients."""
    ingredients = [
        Ingredient(name=name, quantity=DEFAULT_SYNTHESIZED_QUANTITY_G, unit="g") for name in ingredient_names
    ]
    dish = Dish(
        name=f"Refogado de {', '.join(ingredient_names)}",
        category="completo",
        ingredients=ingredients,
        steps=[
            "Lave e corte todos os ingredientes em pedaços pequenos",
            "Refogue os ingredientes mais firmes primeiro, temperando a gosto",
            "Junte os demais ingredientes e cozinhe até ficarem macios",
            "Divida em porções e guarde em marmitas",
        ],
        servings=servings,
        prep_time=30,
        variations=["Finalize com ervas frescas"],
    )
    return MealPlan(
        dishes=[dish],
        shopping_list=[
            ShoppingItem(category=shopping_category(name), item=name, quantity=DEFAULT_SYNTHESIZED_QUANTITY_G,
                         unit="g")
            for name in ingredient_names
        ],
        prep_schedule=[
            PrepStep(order=1, action="Separar e lavar os ingredientes", duration=10, parallel=False),
            PrepStep(order=2, action="Cozinhar o refogado", duration=25, parallel=False),
            PrepStep(order=3, action="Montar marmitas", duration=10, parallel=False),
        ],
        estimated_cost="baixo",
        total_prep_time=45,
    )


def sanitize_plan(plan: MealPlan, exclusions: List[str], diet: DietRuleSet, available_ingredients: List[str],
                  allow_new_ingredients: bool, servings: Optional[int] = None) -> Tuple[MealPlan, List[str]]:
    """
    Removes every ingredient that is excluded, forbidden by the diet or (when
    new ingredients are not allowed) not available, and drops emptied dishes.

    Args:
        plan: The candidate plan; it is not modified.
        exclusions: Ingredients the user never wants.
        diet: The resolved diet; an unknown diet bans nothing.
        available_ingredients: Names of the ingredients the user has.
        allow_new_ingredients: Whether ingredients outside that list are accepted.
        servings: Servings to use if the plan has to be rebuilt; defaults to the plan's own total.

    Returns:
        The sanitized plan and the list of adjustments made, in order.

    Raises:
        PlanValidationError: If no plan can be built because every available
            ingredient is banned.
    """
    sanitized, adjustments = _filter_plan(plan, exclusions, diet, available_ingredients, allow_new_ingredients)
    if sanitized.dishes:
        return sanitized, adjustments

    servings = servings or max(plan.total_servings, 1)
    logging.warning("Every dish was removed during sanitization; trying the default plan.")
    recovered, fallback_adjustments = _filter_plan(
        fallback_plan(servings), exclusions, diet, available_ingredients, allow_new_ingredients
    )
    if recovered.dishes:
        adjustments.extend(fallback_adjustments)
        adjustments.append("Nenhuma receita gerada era válida, então usamos o plano padrão adaptado às restrições.")
        return recovered.model_copy(update={"adjustment_reason": plan.adjustment_reason}), adjustments

    usable = [
        name for name in available_ingredients
        if ban_reason(name, exclusions, diet, available_ingredients, allow_new_ingredients) is None
    ]
    if not usable:
        raise PlanValidationError("Nenhum ingrediente disponível atende às exclusões e à dieta informadas.")

    logging.warning(f"Default plan is not valid either; building a dish from {len(usable)} available ingredients.")
    adjustments.append(
        "Nenhuma receita gerada era válida, então montamos um prato simples com os ingredientes disponíveis."
    )
    synthesized = synthesize_plan(usable, servings)
    return synthesized.model_copy(update={"adjustment_reason": plan.adjustment_reason}), adjustments
