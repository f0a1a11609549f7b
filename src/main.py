# main.py
import logging
import sys
from typing import List

from pydantic import ValidationError

import config
from diet_resolver import LLMDietLookup
from ingredient_parser import get_suggestions, parse_ingredients, to_stock_entries
from ingredients_database import suggest_similar_ingredients
from inventory_enforcer import validate_stock
from llm_processor import LLMProcessor, OllamaProcessor
from llm_processor_gemini import GeminiProcessor
from llm_processor_lmstudio import LMStudioProcessor
from meal_planner import generate_meal_plan
from models import PlanRequest, PlanValidationError
from plan_generator import CandidatePlanGenerator
from utils import setup_logging, load_json, save_plan


def get_llm_processor() -> LLMProcessor:
    """
    Factory function to select and instantiate the correct LLM processor
    based on the configuration.
    """
    provider = config.LLM_PROVIDER
    if provider == "google":
        logging.info("Using Google Gemini as the LLM provider.")
        return GeminiProcessor()
    elif provider == "local":
        logging.info("Using local Ollama as the LLM provider.")
        return OllamaProcessor()
    elif provider == "lmstudio":
        logging.info("Using LM Studio as the LLM provider.")
        return LMStudioProcessor()
    else:
        raise ValueError(
            f"Invalid LLM_PROVIDER in config: '{provider}'. "
            "Choose 'local', 'google', or 'lmstudio'."
        )


def suggest_names(name: str) -> List[str]:
    """Dictionary names that complete what was typed, or failing that, names that look alike."""
    return get_suggestions(name) or [entry.name for entry in suggest_similar_ingredients(name)]


def load_request(path: str) -> PlanRequest:
    """
    Reads the plan request. The ingredients may be given as a list under
    'availableIngredients' or as free text under 'ingredientsText'.
    """
    data = load_json(path)
    if not data:
        raise PlanValidationError(f"No plan request found at {path}.")

    ingredients_text = data.pop("ingredientsText", None)
    if ingredients_text and not data.get("availableIngredients"):
        parsed = parse_ingredients(ingredients_text)
        for item in parsed:
            if item.confidence == "unknown":
                suggestions = suggest_names(item.name)
                hint = f" Did you mean: {', '.join(suggestions)}?" if suggestions else ""
                logging.warning(f"Ingredient '{item.name}' is not in the dictionary; using it as typed.{hint}")
        data["availableIngredients"] = [entry.model_dump(exclude_none=True) for entry in to_stock_entries(parsed)]

    return PlanRequest.model_validate(data)


def main() -> int:
    setup_logging()
    logging.info("Starting meal plan generation...")

    try:
        request = load_request(config.REQUEST_JSON_PATH)
    except (ValidationError, PlanValidationError) as e:
        logging.error(f"Invalid plan request: {e}")
        return 1

    for item in validate_stock(request.stock_entries(), request.servings):
        logging.warning(
            f"Stock of {item.name} looks low: {item.available:g} {item.unit} for {request.servings} meals "
            f"(about {item.needed:g} {item.unit} needed)."
        )

    try:
        llm_processor = get_llm_processor()
    except ValueError as e:
        logging.error(e)
        return 1

    models_to_run = config.LLM_MODELS.get(config.LLM_PROVIDER, [])
    if not models_to_run:
        logging.error(f"No models defined for '{config.LLM_PROVIDER}' in config.py.")
        return 1
    model_name = models_to_run[0]

    generator = CandidatePlanGenerator(llm_processor, model_name)
    diet_lookup = LLMDietLookup(llm_processor, model_name)

    try:
        plan = generate_meal_plan(request, generator, diet_lookup)
    except PlanValidationError as e:
        logging.error(f"The request cannot be satisfied: {e}")
        return 1

    save_plan(plan, config.PLAN_JSON_PATH)
    logging.info(f"Meal plan with {len(plan.dishes)} dishes saved to {config.PLAN_JSON_PATH}")
    if plan.adjustment_reason:
        logging.info(f"Adjustments: {plan.adjustment_reason}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
