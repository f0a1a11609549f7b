# plan_generator.py
#
# Description:
# Builds the prompts that describe the user's request to the model and turns
# the model's answer into a MealPlan. The model is not trusted: any answer
# that is empty, is not JSON or does not match the MealPlan schema is
# reported as None so the engine can use the fallback plan instead.

import logging
import math
from typing import List, Optional

from pydantic import ValidationError

from config import MEAL_PLAN_SYSTEM_PROMPT
from llm_processor import LLMProcessor, strip_code_fences
from models import DietRuleSet, MealPlan, PlanRequest

_OBJECTIVE_RULES = {
    "aproveitamento": (
        "FOCO EM APROVEITAMENTO TOTAL: Aproveite cascas (ex: chips de casca de batata), talos "
        "(ex: talos de brócolis refogados), sobras e partes normalmente descartadas. Reduza desperdício ao máximo."
    ),
    "normal": "MODO NORMAL: Receitas tradicionais, práticas e balanceadas.",
}

_SOPHISTICATION_RULES = {
    "gourmet": (
        "NÍVEL GOURMET: Use técnicas culinárias mais elaboradas, temperos especiais, apresentação refinada. "
        "Pode incluir ingredientes premium se permitido."
    ),
    "simples": "NÍVEL SIMPLES: Receitas práticas e descomplicadas, ingredientes básicos, preparo direto sem firulas.",
}

_SKILL_RULES = {
    "beginner": (
        "NÍVEL INICIANTE: Passos muito detalhados (8-10 sub-passos), evite tarefas em paralelo "
        "(parallel: false na maioria), adicione 20% ao tempo estimado."
    ),
    "intermediate": (
        "NÍVEL INTERMEDIÁRIO: Equilíbrio entre detalhamento e eficiência, algumas tarefas em paralelo quando lógico."
    ),
    "advanced": (
        "NÍVEL AVANÇADO: Maximize tarefas em paralelo (parallel: true quando possível), reduza 15% do tempo "
        "estimado, pode assumir conhecimento de técnicas."
    ),
}


def _diet_rule(diet: DietRuleSet) -> Optional[str]:
    if diet.status == "canonical":
        return (
            f'DIETA ESPECIAL: O usuário segue a dieta "{diet.label}". RESPEITE RIGOROSAMENTE as restrições '
            f"desta dieta. Use APENAS ingredientes permitidos. Nunca use: {', '.join(diet.forbidden_terms)}."
        )
    if diet.status == "recognized":
        return (
            f'DIETA ESPECIAL: O usuário segue a dieta "{diet.label}". Trate esta dieta como um padrão conhecido '
            f"com as seguintes diretrizes: {'; '.join(diet.guideline_tokens)}. RESPEITE essas restrições com rigor."
        )
    return None


def _stock_rule(request: PlanRequest) -> Optional[str]:
    limits = [entry for entry in request.stock_entries() if entry.quantity is not None]
    if not limits:
        return None
    lines = "\n".join(f"- {entry.name}: {entry.quantity:g}{entry.unit or ''}" for entry in limits)
    return (
        f"LIMITES DE ESTOQUE: O usuário informou as seguintes quantidades disponíveis:\n{lines}\n"
        "NÃO planeje receitas que exijam MAIS do que essas quantidades."
    )


def build_plan_rules(request: PlanRequest, diet: DietRuleSet, num_dishes: int) -> List[str]:
    """The numbered rules of the system prompt, in the order the model sees them."""
    names = request.ingredient_names()
    if request.allow_new_ingredients:
        ingredients_rule = (
            f"Use PREFERENCIALMENTE os ingredientes disponíveis: {', '.join(names)}. Você PODE sugerir até 3 "
            "ingredientes adicionais por receita se forem essenciais."
        )
    else:
        ingredients_rule = f"Use APENAS os ingredientes disponíveis: {', '.join(names)}"

    rules = [
        f"Crie {num_dishes} pratos base diferentes para {request.servings} marmitas",
        ingredients_rule,
        f"NUNCA use estes ingredientes (exclusões): {', '.join(request.exclusions) or 'nenhum'}",
        "Cada prato deve ter proteína + carboidrato + legumes (balanceamento simples)",
        "Sugira 2 variações simples para cada prato (tempero diferente, montagem diferente)",
        _OBJECTIVE_RULES[request.objective],
        _SOPHISTICATION_RULES[request.sophistication],
        _SKILL_RULES[request.skill_level],
    ]

    if request.calorie_limit:
        rules.append(
            f"LIMITE CALÓRICO: Cada porção deve ter NO MÁXIMO {request.calorie_limit:g} kcal. "
            "Ajuste as quantidades de ingredientes para respeitar este limite."
        )

    diet_rule = _diet_rule(diet)
    if diet_rule:
        rules.append(diet_rule)

    stock_rule = _stock_rule(request)
    if stock_rule:
        rules.append(stock_rule)

    if request.available_time:
        rules.append(
            f"TEMPO DISPONÍVEL: O usuário tem {request.available_time:g} hora(s) para cozinhar TODAS as marmitas. "
            f"O tempo total do plano, considerando paralelismo, deve ser NO MÁXIMO "
            f"{round(request.available_time * 60)} minutos."
        )

    if request.user_favorites:
        rules.append(f"PREFERÊNCIAS DO USUÁRIO (priorize): {', '.join(request.user_favorites)}")
    if request.user_dislikes:
        rules.append(f"EVITE (usuário não gosta): {', '.join(request.user_dislikes)}")
    return rules


def build_system_prompt(request: PlanRequest, diet: DietRuleSet, num_dishes: int) -> str:
    rules = build_plan_rules(request, diet, num_dishes)
    numbered = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))
    return MEAL_PLAN_SYSTEM_PROMPT.format(
        rules=numbered,
        servings_per_dish=math.ceil(request.servings / num_dishes),
    )


def build_user_prompt(request: PlanRequest, diet: DietRuleSet) -> str:
    lines = [
        f"Ingredientes disponíveis: {', '.join(request.ingredient_names())}",
        f"Número de marmitas: {request.servings}",
    ]
    if request.exclusions:
        lines.append(f"Exclusões: {', '.join(request.exclusions)}")
    if diet.status != "unknown":
        lines.append(f"Dieta: {diet.label}")
    lines.append("Gere o plano de marmitas em JSON.")
    return "\n".join(lines)


class CandidatePlanGenerator:
    """
    Asks an LLM processor for a candidate plan. Any transport failure or
    invalid answer is returned as None; this class never raises for them.
    """

    def __init__(self, processor: LLMProcessor, model_name: str):
        self.processor = processor
        self.model_name = model_name

    def generate(self, request: PlanRequest, diet: DietRuleSet, num_dishes: int) -> Optional[MealPlan]:
        system_prompt = build_system_prompt(request, diet, num_dishes)
        user_prompt = build_user_prompt(request, diet)

        response_content = self.processor.complete_json(system_prompt, user_prompt, MealPlan, self.model_name)
        if not response_content:
            logging.error(f"No plan received from {self.model_name}.")
            return None

        try:
            plan = MealPlan.model_validate_json(strip_code_fences(response_content))
        except ValidationError as e:
            logging.error(f"Plan from {self.model_name} failed validation: {e}")
            logging.debug(f"Invalid JSON received from {self.model_name}: {response_content}")
            return None

        if not plan.dishes:
            logging.error(f"Plan from {self.model_name} has no dishes.")
            return None

        logging.info(f"Received a plan with {len(plan.dishes)} dishes from {self.model_name}.")
        return plan
