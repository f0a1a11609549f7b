# ingredient_parser.py
#
# Description:
# This module turns the free-text ingredient list typed by the user
# (e.g. "2,5 kg frango, 1kg arroz, 10 ovos") into structured entries with a
# canonical name, a quantity and a unit. It also owns the small closed set of
# units the rest of the engine works with.

import re
from dataclasses import dataclass, field
from typing import List, Literal, Optional

from pydantic import BaseModel

from models import StockEntry
from utils import normalize_name


@dataclass(frozen=True)
class DictionaryEntry:
    canonical: str
    category: str  # shopping-list section
    unit: str  # default unit when buying
    synonyms: List[str] = field(default_factory=list)


INGREDIENTS_DICTIONARY: List[DictionaryEntry] = [
    # Proteínas
    DictionaryEntry("frango", "Açougue", "kg",
                    ["peito de frango", "coxa de frango", "sobrecoxa", "frango inteiro", "file de frango"]),
    DictionaryEntry("carne moída", "Açougue", "kg", ["moída", "carne picada", "patinho moído", "alcatra moída"]),
    DictionaryEntry("carne bovina", "Açougue", "kg", ["carne", "bife", "alcatra", "patinho", "músculo", "acém"]),
    DictionaryEntry("peixe", "Açougue", "kg", ["tilápia", "salmão", "pescada", "merluza", "file de peixe"]),
    DictionaryEntry("ovo", "Frios e Laticínios", "unidade", ["ovos", "ovo de galinha"]),
    DictionaryEntry("linguiça", "Açougue", "kg", ["linguica", "calabresa", "toscana", "paio"]),
    # Carboidratos
    DictionaryEntry("arroz", "Mercearia", "kg", ["arroz branco", "arroz integral", "arroz parboilizado"]),
    DictionaryEntry("macarrão", "Mercearia", "kg", ["massa", "espaguete", "penne", "parafuso", "talharim"]),
    DictionaryEntry("batata", "Hortifruti", "kg", ["batata inglesa", "batata branca"]),
    DictionaryEntry("batata-doce", "Hortifruti", "kg", ["batata doce"]),
    DictionaryEntry("mandioca", "Hortifruti", "kg", ["aipim", "macaxeira"]),
    DictionaryEntry("feijão", "Mercearia", "kg", ["feijão preto", "feijão carioca"]),
    DictionaryEntry("pão", "Padaria", "unidade", ["pão francês", "pão de forma"]),
    # Legumes
    DictionaryEntry("brócolis", "Hortifruti", "kg"),
    DictionaryEntry("cenoura", "Hortifruti", "kg"),
    DictionaryEntry("tomate", "Hortifruti", "kg", ["tomates"]),
    DictionaryEntry("cebola", "Hortifruti", "kg", ["cebolas"]),
    DictionaryEntry("alho", "Hortifruti", "g", ["alho picado", "dente de alho"]),
    DictionaryEntry("pimentão", "Hortifruti", "unidade", ["pimentão verde", "pimentão vermelho", "pimentão amarelo"]),
    DictionaryEntry("abobrinha", "Hortifruti", "kg", ["abóbora italiana"]),
    DictionaryEntry("berinjela", "Hortifruti", "kg"),
    DictionaryEntry("couve", "Hortifruti", "maço", ["couve-manteiga", "couve refogada"]),
    DictionaryEntry("espinafre", "Hortifruti", "maço"),
    DictionaryEntry("alface", "Hortifruti", "unidade", ["alface americana", "alface crespa"]),
    DictionaryEntry("repolho", "Hortifruti", "kg", ["repolho roxo", "repolho verde"]),
    DictionaryEntry("vagem", "Hortifruti", "kg", ["vagens"]),
    DictionaryEntry("milho", "Hortifruti", "unidade", ["milho verde", "espiga de milho", "milho em lata"]),
    DictionaryEntry("ervilha", "Mercearia", "lata", ["ervilha em lata", "ervilha fresca"]),
    # Temperos e condimentos
    DictionaryEntry("sal", "Mercearia", "kg", ["sal refinado", "sal grosso"]),
    DictionaryEntry("óleo", "Mercearia", "l", ["óleo de soja", "óleo vegetal"]),
    DictionaryEntry("azeite", "Mercearia", "ml", ["azeite de oliva", "azeite extra virgem"]),
    DictionaryEntry("vinagre", "Mercearia", "ml", ["vinagre de álcool", "vinagre de vinho"]),
    DictionaryEntry("molho de tomate", "Mercearia", "unidade", ["molho", "extrato de tomate", "polpa de tomate"]),
    DictionaryEntry("shoyu", "Mercearia", "ml", ["molho shoyu", "molho de soja"]),
    DictionaryEntry("limão", "Hortifruti", "unidade", ["limão taiti"]),
    DictionaryEntry("coentro", "Hortifruti", "maço"),
    DictionaryEntry("salsinha", "Hortifruti", "maço", ["salsa", "cheiro verde"]),
    DictionaryEntry("cebolinha", "Hortifruti", "maço", ["cebolinha verde"]),
    # Laticínios
    DictionaryEntry("queijo", "Frios e Laticínios", "kg", ["queijo mussarela", "queijo prato", "queijo minas"]),
    DictionaryEntry("leite", "Frios e Laticínios", "l", ["leite integral", "leite desnatado"]),
    DictionaryEntry("manteiga", "Frios e Laticínios", "g"),
    DictionaryEntry("requeijão", "Frios e Laticínios", "g"),
]


# --- Units ---
# Every spelling maps onto the closed set g, kg, ml, l, unidade.
UNIT_ALIASES = {
    "g": "g", "gr": "g", "grs": "g", "grama": "g", "gramas": "g", "gram": "g", "grams": "g",
    "kg": "kg", "kgs": "kg", "quilo": "kg", "quilos": "kg", "kilo": "kg", "kilos": "kg",
    "quilograma": "kg", "quilogramas": "kg", "kilogram": "kg", "kilograms": "kg",
    "ml": "ml", "mililitro": "ml", "mililitros": "ml", "milliliter": "ml", "milliliters": "ml",
    "l": "l", "lt": "l", "lts": "l", "litro": "l", "litros": "l", "liter": "l", "liters": "l",
    "unidade": "unidade", "unidades": "unidade", "un": "unidade", "und": "unidade", "unid": "unidade",
    "u": "unidade", "unit": "unidade", "units": "unidade", "pc": "unidade", "pcs": "unidade",
}


def normalize_unit(unit: Optional[str]) -> str:
    """
    Maps a free-form unit onto g, kg, ml, l or unidade. Anything else is returned
    normalized (lowercase, no accents) and is never converted.
    """
    key = normalize_name(unit or "").rstrip(".")
    return UNIT_ALIASES.get(key, key)


def is_known_unit(token: Optional[str]) -> bool:
    return normalize_name(token or "").rstrip(".") in UNIT_ALIASES


# --- Dictionary lookup ---

class ParsedIngredient(BaseModel):
    """One item of the user's free-text ingredient list."""
    original: str
    name: str
    canonical: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    confidence: Literal["high", "medium", "unknown"] = "unknown"
    quantity: Optional[float] = None
    input_unit: Optional[str] = None


def normalize_ingredient(name: str) -> Optional[dict]:
    """
    Looks a name up in the dictionary: exact canonical or synonym matches are
    'high' confidence, substring matches in either direction are 'medium'.
    Returns None when nothing matches.
    """
    key = normalize_name(name)
    if not key:
        return None

    def _result(entry: DictionaryEntry, confidence: str) -> dict:
        return {"canonical": entry.canonical, "category": entry.category, "unit": entry.unit,
                "confidence": confidence}

    for entry in INGREDIENTS_DICTIONARY:
        if normalize_name(entry.canonical) == key:
            return _result(entry, "high")

    for entry in INGREDIENTS_DICTIONARY:
        if any(normalize_name(syn) == key for syn in entry.synonyms):
            return _result(entry, "high")

    for entry in INGREDIENTS_DICTIONARY:
        candidates = [entry.canonical] + entry.synonyms
        for candidate in candidates:
            norm = normalize_name(candidate)
            if norm in key or key in norm:
                return _result(entry, "medium")

    return None


def shopping_category(name: str) -> str:
    """Store section of an ingredient, 'Outros' when it is not in the dictionary."""
    match = normalize_ingredient(name)
    return match["category"] if match else "Outros"


def get_suggestions(partial: str, limit: int = 5) -> List[str]:
    """Autocomplete: canonical names whose canonical form or a synonym starts with the input."""
    key = normalize_name(partial)
    if len(key) < 2:
        return []

    matches = [
        entry.canonical for entry in INGREDIENTS_DICTIONARY
        if normalize_name(entry.canonical).startswith(key)
        or any(normalize_name(syn).startswith(key) for syn in entry.synonyms)
    ]
    return matches[:limit]


# --- Free-text parsing ---

_LETTERS = r"[^\W\d_]"
_NUMBER = r"\d+(?:·\d+)?"
# "2kg frango 1kg arroz": quantity first, name runs until the next number
_QTY_FIRST = re.compile(rf"({_NUMBER})\s*({_LETTERS}+)?\s+((?:{_LETTERS}|[\s-])+?)(?=\s*\d|$)")
# "frango 2kg arroz 1kg": quantity last, the next item starts with a word followed by a number
_QTY_LAST = re.compile(rf"({_LETTERS}+)\s+({_NUMBER})\s*({_LETTERS}+)?(?=\s+{_LETTERS}+\s+\d|$)")

_ITEM_QTY_FIRST = re.compile(rf"^(\d+(?:,\d+)?)\s*({_LETTERS}+)?\s+(.+)$")
_ITEM_QTY_LAST = re.compile(rf"^(.+?)\s+(\d+(?:,\d+)?)\s*({_LETTERS}+)?$")


def _split_items(text: str) -> List[str]:
    # Unify decimal points to commas, then protect decimal commas from the item split.
    normalized = re.sub(r"(\d)\.(\d)", r"\1,\2", text)
    normalized = re.sub(r"(\d),(\d)", r"\1·\2", normalized)

    items = [item.strip() for item in re.split(r"[,;\n]", normalized) if item.strip()]

    if len(items) == 1:
        single = items[0]
        qty_first = [m.group(0).strip() for m in _QTY_FIRST.finditer(single)]
        qty_last = [m.group(0).strip() for m in _QTY_LAST.finditer(single)]
        matches = qty_first if len(qty_first) >= len(qty_last) else qty_last
        if len(matches) > 1:
            items = matches

    return [item.replace("·", ",") for item in items]


def _parse_item(item: str) -> ParsedIngredient:
    quantity = None
    input_unit = None
    name = item

    match = _ITEM_QTY_FIRST.match(item)
    if match:
        quantity = float(match.group(1).replace(",", "."))
        unit_token, rest = match.group(2), match.group(3)
        if unit_token and not is_known_unit(unit_token):
            # "2 peitos de frango": the word after the number is part of the name
            name = f"{unit_token} {rest}"
        else:
            input_unit = unit_token.lower() if unit_token else None
            name = rest
    else:
        match = _ITEM_QTY_LAST.match(item)
        if match:
            name = match.group(1)
            quantity = float(match.group(2).replace(",", "."))
            input_unit = match.group(3).lower() if match.group(3) else None

    name = name.strip()
    normalized = normalize_ingredient(name)
    if normalized:
        return ParsedIngredient(original=item, name=name, quantity=quantity, input_unit=input_unit, **normalized)
    return ParsedIngredient(original=item, name=name, quantity=quantity, input_unit=input_unit)


def parse_ingredients(text: str) -> List[ParsedIngredient]:
    """
    Parses a free-text ingredient list.

    Items are separated by commas, semicolons or new lines. Decimal commas and
    points are both accepted ("2,5 kg" and "2.5kg"). When the text has no
    separators at all, items are detected by their quantities instead
    ("2kg frango 1kg arroz" or "frango 2kg arroz 1kg").
    """
    if not text or not text.strip():
        return []
    return [_parse_item(item) for item in _split_items(text)]


def to_stock_entries(parsed: List[ParsedIngredient]) -> List[StockEntry]:
    """
    Converts parsed items into stock entries. A quantity only becomes a stock
    limit when its unit is known; bare counts ("10 ovos") use the dictionary
    unit when that unit is 'unidade'.
    """
    entries = []
    for item in parsed:
        name = item.canonical or item.name
        unit = item.input_unit
        if unit is None and item.quantity is not None and item.unit == "unidade":
            unit = "unidade"
        if item.quantity is not None and unit:
            entries.append(StockEntry(name=name, quantity=item.quantity, unit=unit))
        else:
            entries.append(StockEntry(name=name))
    return entries
