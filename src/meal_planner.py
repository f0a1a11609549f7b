# meal_planner.py
#
# Description:
# The entry point of the engine. It validates the request, resolves the
# diet, asks the generator for a candidate plan (or takes the default plan
# when the generator fails) and then runs it through every correction stage
# in a fixed order:
#
#   sanitize -> enforce stock -> enforce varieties and servings
#   -> enforce stock again (clones add usage) -> calories -> time
#
# Each stage reports what it changed, and those messages are appended to the
# plan's adjustmentReason so the user can see why the plan differs from what
# was generated.

import logging
from typing import List, Optional, Protocol, Union

from calorie_calculator import adjust_servings_for_calorie_limit, enrich_plan, get_missing_calorie_info
from diet_resolver import DietLookup, filter_ingredients_by_diet, resolve_diet
from fallback_plan import fallback_plan
from inventory_enforcer import enforce_stock
from models import DietRuleSet, MealPlan, PlanRequest, PlanValidationError
from plan_sanitizer import matching_exclusion, sanitize_plan
from time_estimator import estimate_time, time_message
from variety_enforcer import enforce_varieties_and_servings

FALLBACK_MESSAGE = (
    "Não foi possível gerar um plano personalizado agora, então usamos o plano padrão "
    "ajustado para o número de marmitas pedido."
)


class PlanGenerator(Protocol):
    def generate(self, request: PlanRequest, diet: DietRuleSet, num_dishes: int) -> Optional[MealPlan]:
        ...


def _check_satisfiable(names: List[str], exclusions: List[str], diet: Optional[DietRuleSet] = None) -> None:
    remaining = [name for name in names if not matching_exclusion(name, exclusions)]
    if not remaining:
        raise PlanValidationError("Todos os ingredientes disponíveis estão na lista de exclusões.")
    if diet is not None and diet.status != "unknown":
        allowed, restricted = filter_ingredients_by_diet(remaining, diet)
        if not allowed:
            raise PlanValidationError(
                f"A dieta \"{diet.label}\" e as exclusões proíbem todos os ingredientes disponíveis: "
                f"{', '.join(restricted)}."
            )


def _apply_calories_and_time(plan: MealPlan, request: PlanRequest, adjustments: List[str]) -> MealPlan:
    plan = enrich_plan(plan)

    for dish in plan.dishes:
        missing = get_missing_calorie_info(dish)
        if missing:
            logging.debug(f"No calorie data for {', '.join(missing)} in '{dish.name}'.")

    if request.calorie_limit:
        for dish in plan.dishes:
            suggestion = adjust_servings_for_calorie_limit(dish, request.calorie_limit)
            if suggestion.needs_adjustment:
                logging.info(suggestion.message)
                adjustments.append(suggestion.message)

    estimate = estimate_time(plan, request.available_time)
    plan = plan.model_copy(update={
        "total_plan_time": estimate.total_plan_time,
        "time_fits": estimate.time_fits,
        "available_time": request.available_time,
    })
    if estimate.time_fits is False:
        message = time_message(estimate, request.available_time)
        logging.info(message)
        adjustments.append(message)
    return plan


def _reconcile(plan: MealPlan, request: PlanRequest, diet: DietRuleSet, num_dishes: int,
               allow_new_ingredients: bool, adjustments: List[str]) -> MealPlan:
    names = request.ingredient_names()
    stock = request.stock_entries()

    plan, stage_adjustments = sanitize_plan(
        plan, request.exclusions, diet, names, allow_new_ingredients, servings=request.servings
    )
    adjustments.extend(stage_adjustments)

    plan, stage_adjustments = enforce_stock(plan, stock)
    adjustments.extend(stage_adjustments)

    plan, stage_adjustments = enforce_varieties_and_servings(plan, num_dishes, request.servings)
    adjustments.extend(stage_adjustments)

    if any(entry.quantity is not None for entry in stock):
        plan, stage_adjustments = enforce_stock(plan, stock)
        adjustments.extend(stage_adjustments)

    return _apply_calories_and_time(plan, request, adjustments)


def generate_meal_plan(request: Union[PlanRequest, dict], generator: PlanGenerator,
                       diet_lookup: Optional[DietLookup] = None) -> MealPlan:
    """
    Generates a meal plan that respects the request's constraints.

    Args:
        request: A PlanRequest, or a dict with its fields (camelCase or snake_case).
        generator: Produces the candidate plan; returning None (or raising)
            means the fallback plan is used.
        diet_lookup: Answers about diets that are not built in. Without it,
            such diets are ignored.

    Returns:
        The final plan, never without dishes.

    Raises:
        pydantic.ValidationError: If the request fields are invalid.
        PlanValidationError: If the exclusions and diet ban every available ingredient.
    """
    if not isinstance(request, PlanRequest):
        request = PlanRequest.model_validate(request)

    names = request.ingredient_names()
    num_dishes = request.dish_count()

    _check_satisfiable(names, request.exclusions)
    diet = resolve_diet(request.diet_type, diet_lookup)
    _check_satisfiable(names, request.exclusions, diet)

    logging.info(
        f"Generating plan: {request.servings} servings, {num_dishes} dishes, diet '{diet.label or 'nenhuma'}' "
        f"({diet.status})."
    )

    try:
        candidate = generator.generate(request, diet, num_dishes)
    except Exception as e:
        logging.error(f"Plan generator failed: {e}")
        candidate = None

    adjustments: List[str] = []

    if candidate is None:
        logging.warning("No usable plan from the generator; using the default plan.")
        adjustments.append(FALLBACK_MESSAGE)
        # The default plan is made of everyday ingredients to buy, so only the
        # exclusion, diet and stock limits apply to it. Without explicit
        # varieties it keeps its own three dishes.
        default = fallback_plan(request.servings)
        plan = _reconcile(default, request, diet, request.varieties or len(default.dishes),
                          allow_new_ingredients=True, adjustments=adjustments)
    else:
        plan = _reconcile(candidate, request, diet, num_dishes,
                          allow_new_ingredients=request.allow_new_ingredients, adjustments=adjustments)

    plan.append_adjustments(adjustments)

    logging.info(f"Plan ready: {len(plan.dishes)} dishes, {plan.total_servings} servings, {len(adjustments)} adjustments.")
    return plan
