# variety_enforcer.py
#
# Description:
# Forces the plan to have exactly the requested number of dishes and the
# requested number of servings. Missing dishes are variations cloned from
# the existing ones; extra dishes are cut. Servings are then spread over the
# final dishes so they add up to the requested total.

import logging
from typing import List, Tuple

from config import SERVING_SLACK
from models import Dish, MealPlan


def _clone_variation(base: Dish, index: int) -> Dish:
    return base.model_copy(
        update={
            "name": f"{base.name} - Variação {index + 1}",
            "servings": 0,
            "variations": list(base.variations[1:]),
        },
        deep=True,
    )


def redistribute_servings(dishes: List[Dish], requested_servings: int) -> List[Dish]:
    """
    Gives each dish floor(total / dishes) servings, and one more to the first
    total % dishes dishes, so the sum is exactly the requested total.
    """
    per_dish, remainder = divmod(requested_servings, len(dishes))
    return [
        dish.model_copy(update={"servings": per_dish + (1 if index < remainder else 0)})
        for index, dish in enumerate(dishes)
    ]


def _needs_redistribution(dishes: List[Dish], requested_servings: int) -> bool:
    current = sum(dish.servings for dish in dishes)
    if current < requested_servings:
        return True
    if current - requested_servings > SERVING_SLACK:
        return True
    # A small excess is tolerated, but never while a dish has no servings at all.
    return any(dish.servings == 0 for dish in dishes)


def enforce_varieties_and_servings(plan: MealPlan, requested_varieties: int,
                                   requested_servings: int) -> Tuple[MealPlan, List[str]]:
    """
    Args:
        plan: A plan with at least one dish; it is not modified.
        requested_varieties: Number of dishes the plan must have.
        requested_servings: Number of servings the dishes must add up to.

    Returns:
        The adjusted plan and the adjustment messages, in order.
    """
    if not plan.dishes:
        raise ValueError("Cannot enforce varieties on a plan without dishes.")

    adjustments = []
    dishes = [dish.model_copy(deep=True) for dish in plan.dishes]
    generated = len(dishes)

    if generated < requested_varieties:
        missing = requested_varieties - generated
        for i in range(missing):
            clone = _clone_variation(dishes[i % generated], i)
            dishes.append(clone)
            logging.info(f"Extra dish created: '{clone.name}'")
        message = (
            f"O sistema gerou {generated} misturas inicialmente e criou {missing} variações adicionais "
            f"para atingir as {requested_varieties} misturas solicitadas."
        )
        logging.info(message)
        adjustments.append(message)
    elif generated > requested_varieties:
        dishes = dishes[:requested_varieties]
        message = (
            f"O sistema gerou {generated} misturas mas você pediu {requested_varieties}, "
            f"então removemos o excesso."
        )
        logging.info(message)
        adjustments.append(message)

    if _needs_redistribution(dishes, requested_servings):
        before = sum(dish.servings for dish in dishes)
        dishes = redistribute_servings(dishes, requested_servings)
        message = f"O sistema ajustou a distribuição de porções para atingir as {requested_servings} porções solicitadas."
        logging.info(f"Servings rebalanced from {before} to {requested_servings}.")
        adjustments.append(message)

    return plan.model_copy(update={"dishes": dishes}), adjustments
