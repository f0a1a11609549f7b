# ingredients_database.py
#
# Description:
# Nutrition data for common Brazilian ingredients (TACO and USDA tables) and
# the lookups the calorie calculator is built on. Calories are per 100 g or
# 100 ml, except for ingredients counted in units, which are per unit.

from dataclasses import dataclass
from typing import List, Literal, Optional

from ingredient_parser import normalize_unit
from utils import normalize_name


@dataclass(frozen=True)
class IngredientNutrition:
    name: str
    category: str
    unit: Literal["g", "ml", "unidade"]
    kcal_per_100: float  # per unit when unit == "unidade"
    grams_per_unit: Optional[float] = None  # average weight of one piece


INGREDIENTS_DATABASE: List[IngredientNutrition] = [
    # Proteínas
    IngredientNutrition("frango", "proteína", "g", 165),
    IngredientNutrition("carne bovina", "proteína", "g", 250),
    IngredientNutrition("carne moída", "proteína", "g", 212),
    IngredientNutrition("peixe", "proteína", "g", 96),
    IngredientNutrition("ovo", "proteína", "unidade", 70, grams_per_unit=50),
    IngredientNutrition("feijão", "proteína", "g", 77),
    # Carboidratos
    IngredientNutrition("arroz", "carboidrato", "g", 130),
    IngredientNutrition("macarrão", "carboidrato", "g", 131),
    IngredientNutrition("batata-doce", "carboidrato", "g", 86, grams_per_unit=150),
    IngredientNutrition("batata", "carboidrato", "g", 77, grams_per_unit=150),
    IngredientNutrition("pão", "carboidrato", "g", 265, grams_per_unit=50),
    IngredientNutrition("mandioca", "carboidrato", "g", 125),
    # Vegetais
    IngredientNutrition("tomate", "vegetal", "g", 18, grams_per_unit=100),
    IngredientNutrition("cebola", "vegetal", "g", 40, grams_per_unit=100),
    IngredientNutrition("alho", "vegetal", "g", 149, grams_per_unit=3),
    IngredientNutrition("cenoura", "vegetal", "g", 41, grams_per_unit=100),
    IngredientNutrition("brócolis", "vegetal", "g", 34),
    IngredientNutrition("couve", "vegetal", "g", 27),
    IngredientNutrition("alface", "vegetal", "g", 15),
    # Laticínios
    IngredientNutrition("leite", "laticínio", "ml", 61),
    IngredientNutrition("queijo", "laticínio", "g", 353),
    IngredientNutrition("iogurte", "laticínio", "g", 51, grams_per_unit=170),
    IngredientNutrition("manteiga", "laticínio", "g", 717),
    # Óleos e gorduras
    IngredientNutrition("azeite", "gordura", "ml", 884),
    IngredientNutrition("óleo", "gordura", "ml", 884),
    # Temperos e condimentos
    IngredientNutrition("sal", "tempero", "g", 0),
    IngredientNutrition("açúcar", "tempero", "g", 387),
    IngredientNutrition("molho de tomate", "tempero", "g", 24),
]


def find_ingredient(name: str) -> Optional[IngredientNutrition]:
    """
    Finds the nutrition entry for an ingredient name. An exact (accent and
    case-insensitive) match wins; otherwise the longest entry name contained
    in the ingredient name, then the first entry that contains the name.
    """
    normalized = normalize_name(name)
    if not normalized:
        return None

    for entry in INGREDIENTS_DATABASE:
        if normalize_name(entry.name) == normalized:
            return entry

    contained = [entry for entry in INGREDIENTS_DATABASE if normalize_name(entry.name) in normalized]
    if contained:
        return max(contained, key=lambda entry: len(entry.name))

    for entry in INGREDIENTS_DATABASE:
        if normalized in normalize_name(entry.name):
            return entry
    return None


def _amount_in_entry_unit(entry: IngredientNutrition, quantity: float, unit: str) -> Optional[float]:
    """Converts a quantity to the entry's base unit (g, ml or pieces), or None if that is not possible."""
    unit = normalize_unit(unit)
    if unit in ("g", "kg", "ml", "l"):
        # Mass and volume are treated as interchangeable at 1 g per ml.
        amount = quantity * 1000 if unit in ("kg", "l") else quantity
        if entry.unit == "unidade":
            return amount / entry.grams_per_unit if entry.grams_per_unit else None
        return amount
    if unit == "unidade":
        if entry.unit == "unidade":
            return quantity
        return quantity * entry.grams_per_unit if entry.grams_per_unit else None
    return None


def calculate_ingredient_calories(name: str, quantity: float, unit: str) -> Optional[float]:
    """
    Calories of a quantity of an ingredient, rounded to a whole number.
    Returns None when the ingredient is not in the database or its unit
    cannot be converted.
    """
    entry = find_ingredient(name)
    if entry is None:
        return None

    amount = _amount_in_entry_unit(entry, quantity, unit)
    if amount is None:
        return None

    if entry.unit == "unidade":
        return float(round(entry.kcal_per_100 * amount))
    return float(round(entry.kcal_per_100 * amount / 100))


def suggest_similar_ingredients(name: str, limit: int = 3) -> List[IngredientNutrition]:
    """Entries sharing a three-letter prefix with the name, for 'did you mean' hints."""
    normalized = normalize_name(name)
    if not normalized:
        return []
    prefix = normalized[:3]
    matches = []
    for entry in INGREDIENTS_DATABASE:
        entry_name = normalize_name(entry.name)
        if prefix in entry_name or entry_name[:3] in normalized:
            matches.append(entry)
    return matches[:limit]
