# diet_resolver.py
#
# Description:
# This module maps the diet the user typed (e.g. "low-carb", "Vegano", "DASH")
# to a rule set of forbidden ingredient terms. Well-known diets are resolved
# from a built-in table. Anything else is checked against an external diet
# knowledge lookup under an anti-hallucination policy: when the lookup is not
# sure, fails, or answers something malformed, the diet is "unknown" and does
# not restrict the plan at all.

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from config import DIET_LOOKUP_SYSTEM_PROMPT
from llm_processor import LLMProcessor, strip_code_fences
from models import DietLookupResponse, DietRuleSet
from utils import normalize_name

# A lookup receives the diet name and answers raw JSON (or an already decoded dict).
DietLookup = Callable[[str], Union[str, dict, None]]

# Built-in diets and the ingredient terms each one forbids.
CANONICAL_DIETS: Dict[str, Dict[str, object]] = {
    "low carb": {
        "forbidden": ["arroz", "batata", "massa", "macarrão", "pão", "farinha", "açúcar", "doces"],
        "notes": "Low carb evita carboidratos simples e amidos.",
    },
    "vegana": {
        "forbidden": ["carne", "frango", "peixe", "ovo", "leite", "laticínios", "manteiga", "mel", "queijo",
                      "iogurte", "linguiça", "requeijão"],
        "notes": "Veganos não consomem nenhum ingrediente de origem animal.",
    },
    "vegetariana": {
        "forbidden": ["carne", "frango", "peixe", "linguiça"],
        "notes": "Vegetarianos evitam carnes, mas aceitam laticínios e ovos.",
    },
    "cetogênica": {
        "forbidden": ["arroz", "batata", "mandioca", "pão", "açúcar", "macarrão", "frutas ricas em açúcar"],
        "notes": "Cetogênica é muito baixa em carboidratos e rica em gordura.",
    },
    "mediterrânea": {
        "forbidden": ["ultraprocessado", "industrializado"],
        "notes": "Mediterrânea evita alimentos ultraprocessados.",
    },
    "paleo": {
        "forbidden": ["grãos", "laticínios", "leguminosas", "açúcar", "processados"],
        "notes": "Paleo evita alimentos não disponíveis no paleolítico.",
    },
    "sem glúten": {
        "forbidden": ["trigo", "cevada", "centeio", "pão", "massa", "macarrão"],
        "notes": "Sem glúten evita cereais que contêm glúten.",
    },
    "sem lactose": {
        "forbidden": ["leite", "queijo", "iogurte", "manteiga", "creme de leite", "laticínios", "requeijão"],
        "notes": "Sem lactose evita produtos lácteos.",
    },
}

# Normalized spellings accepted for each canonical diet.
DIET_ALIASES: Dict[str, str] = {
    "low carb": "low carb",
    "lowcarb": "low carb",
    "baixo carboidrato": "low carb",
    "vegana": "vegana",
    "vegano": "vegana",
    "vegan": "vegana",
    "vegetariana": "vegetariana",
    "vegetariano": "vegetariana",
    "vegetarian": "vegetariana",
    "paleo": "paleo",
    "paleolitica": "paleo",
    "cetogenica": "cetogênica",
    "cetogenico": "cetogênica",
    "keto": "cetogênica",
    "ketogenic": "cetogênica",
    "mediterranea": "mediterrânea",
    "mediterranean": "mediterrânea",
    "sem gluten": "sem glúten",
    "gluten free": "sem glúten",
    "sem lactose": "sem lactose",
    "lactose free": "sem lactose",
}

# Names containing these terms are the diet's own substitutes ("leite vegetal",
# "queijo vegano", "leite de coco") and are never banned by a diet.
DIET_SUBSTITUTE_TERMS: List[str] = [
    "vegetal", "vegano", "vegana", "sem lactose", "zero lactose", "sem gluten",
    "substituto", "de coco", "de soja", "de amendoa", "de aveia",
]

_LABEL_SEPARATORS = re.compile(r"[\s_-]+")
_RULE_SPLIT = re.compile(r"[\W_]+")

UNKNOWN_DIET = DietRuleSet(status="unknown")


def normalize_diet_label(label: Optional[str]) -> str:
    """Lowercase, accent-free, with hyphens and repeated spaces collapsed to one space."""
    return _LABEL_SEPARATORS.sub(" ", normalize_name(label or "")).strip()


def canonical_diet_name(label: Optional[str]) -> Optional[str]:
    """Returns the canonical diet for a label, or None if it is not a built-in diet."""
    return DIET_ALIASES.get(normalize_diet_label(label))


def canonical_rule_set(name: str, label: Optional[str] = None) -> DietRuleSet:
    rules = CANONICAL_DIETS[name]
    return DietRuleSet(
        status="canonical",
        label=label or name,
        forbidden_terms=[normalize_name(term) for term in rules["forbidden"]],
        guideline_tokens=[rules["notes"]],
    )


def tokenize_rules(rules: List[str]) -> List[str]:
    """
    Turns rule sentences into forbidden terms: split on punctuation and
    whitespace, drop tokens shorter than 3 characters, lowercase, de-duplicate.
    """
    tokens = []
    for rule in rules:
        for token in _RULE_SPLIT.split(normalize_name(rule)):
            if len(token) >= 3 and token not in tokens:
                tokens.append(token)
    return tokens


def _parse_lookup_answer(answer: Union[str, dict, None]) -> Optional[DietLookupResponse]:
    if answer is None:
        return None
    try:
        if isinstance(answer, dict):
            return DietLookupResponse.model_validate(answer)
        return DietLookupResponse.model_validate_json(strip_code_fences(answer))
    except ValidationError as e:
        logging.warning(f"Diet lookup answer did not match the expected schema: {e}")
        return None


def resolve_diet(label: Optional[str], lookup: Optional[DietLookup] = None) -> DietRuleSet:
    """
    Resolves a diet label into a DietRuleSet.

    Empty labels are unknown without any lookup. Built-in diets are canonical.
    Other labels are sent to the lookup; only an explicit, consistent
    "is_known" answer with rules is trusted. Every failure degrades to unknown.
    """
    if not label or not label.strip():
        return UNKNOWN_DIET

    canonical = canonical_diet_name(label)
    if canonical:
        logging.debug(f"Diet '{label}' resolved to canonical diet '{canonical}'.")
        return canonical_rule_set(canonical, label.strip())

    if lookup is None:
        logging.info(f"Diet '{label}' is not a built-in diet and no lookup is configured; ignoring it.")
        return UNKNOWN_DIET

    try:
        answer = lookup(label.strip())
    except Exception as e:
        logging.error(f"Diet lookup failed for '{label}': {e}")
        return UNKNOWN_DIET

    parsed = _parse_lookup_answer(answer)
    if parsed is None or not parsed.is_known:
        logging.info(f"Diet '{label}' is unknown; it will not restrict the plan.")
        return UNKNOWN_DIET

    rules = [rule.strip() for rule in (parsed.rules or []) if rule and rule.strip()]
    if not rules:
        logging.warning(f"Diet lookup claimed '{label}' is known but gave no rules; treating it as unknown.")
        return UNKNOWN_DIET

    resolved_label = (parsed.normalized_label or label).strip()
    canonical = canonical_diet_name(resolved_label)
    if canonical:
        logging.info(f"Diet '{label}' recognized as canonical diet '{canonical}'.")
        return canonical_rule_set(canonical, resolved_label)

    logging.info(f"Diet '{label}' recognized as '{resolved_label}' with {len(rules)} rules.")
    return DietRuleSet(
        status="recognized",
        label=resolved_label,
        forbidden_terms=tokenize_rules(rules),
        guideline_tokens=rules,
    )


def is_substitute(name: str) -> bool:
    normalized = normalize_name(name)
    return any(normalize_name(term) in normalized for term in DIET_SUBSTITUTE_TERMS)


def forbidden_term_for(name: str, diet: DietRuleSet) -> Optional[str]:
    """The first forbidden term an ingredient name contains, or None if the diet allows it."""
    if diet.status == "unknown" or is_substitute(name):
        return None
    normalized = normalize_name(name)
    for term in diet.forbidden_terms:
        if term and normalize_name(term) in normalized:
            return term
    return None


def is_ingredient_allowed(name: str, diet: DietRuleSet) -> bool:
    return forbidden_term_for(name, diet) is None


def filter_ingredients_by_diet(names: List[str], diet: DietRuleSet) -> Tuple[List[str], List[str]]:
    """Splits names into (allowed, restricted) for the given diet."""
    allowed, restricted = [], []
    for name in names:
        (allowed if is_ingredient_allowed(name, diet) else restricted).append(name)
    return allowed, restricted


class LLMDietLookup:
    """
    Adapts an LLMProcessor into a diet lookup callable that answers with the
    raw JSON of a DietLookupResponse.
    """

    def __init__(self, processor: LLMProcessor, model_name: str):
        self.processor = processor
        self.model_name = model_name

    def __call__(self, diet_name: str) -> Optional[str]:
        user_prompt = (
            f'O usuário informou que segue a dieta: "{diet_name}".\n'
            "1. Diga se essa é uma dieta reconhecida.\n"
            "2. Se for, liste de 3 a 6 regras curtas que a definem.\n"
            "3. Se não tiver certeza, responda que é desconhecida."
        )
        return self.processor.complete_json(
            DIET_LOOKUP_SYSTEM_PROMPT, user_prompt, DietLookupResponse, self.model_name
        )
