import json

import pytest

from models import DietRuleSet, Dish, Ingredient, MealPlan, PrepStep, ShoppingItem


def make_dish(name, ingredients, servings=2, category="completo", prep_time=30, variations=None):
    return Dish(
        name=name,
        category=category,
        ingredients=[Ingredient(name=n, quantity=q, unit=u) for n, q, u in ingredients],
        steps=["Preparar", "Cozinhar"],
        servings=servings,
        prep_time=prep_time,
        variations=variations if variations is not None else ["Variação A", "Variação B"],
    )


def make_plan(dishes, shopping=None, schedule=None):
    return MealPlan(
        dishes=dishes,
        shopping_list=[ShoppingItem(category="Outros", item=i, quantity=1, unit="kg") for i in (shopping or [])],
        prep_schedule=schedule if schedule is not None else [
            PrepStep(order=1, action="Preparar tudo", duration=20, parallel=False),
        ],
        estimated_cost="baixo",
        total_prep_time=20,
    )


class FakeGenerator:
    """Returns a fixed plan (or raises) and records how it was called."""

    def __init__(self, plan=None, error=None):
        self.plan = plan
        self.error = error
        self.calls = []

    def generate(self, request, diet, num_dishes):
        self.calls.append((request, diet, num_dishes))
        if self.error:
            raise self.error
        return self.plan


class FakeDietLookup:
    """Answers a fixed payload (or raises) and records the diets asked about."""

    def __init__(self, answer=None, error=None):
        self.answer = answer
        self.error = error
        self.calls = []

    def __call__(self, diet_name):
        self.calls.append(diet_name)
        if self.error:
            raise self.error
        if isinstance(self.answer, dict):
            return json.dumps(self.answer)
        return self.answer


class FakeProcessor:
    """An LLMProcessor stand-in that answers canned text."""

    def __init__(self, answer):
        self.answer = answer
        self.prompts = []

    def complete_json(self, system_prompt, user_prompt, response_model, model_name):
        self.prompts.append((system_prompt, user_prompt, response_model, model_name))
        return self.answer


@pytest.fixture
def unknown_diet():
    return DietRuleSet(status="unknown")


@pytest.fixture
def sample_plan():
    return make_plan(
        [
            make_dish("Frango com Arroz", [("frango", 500, "g"), ("arroz", 300, "g"), ("cenoura", 200, "g")],
                      servings=3),
            make_dish("Carne com Batata", [("carne moída", 400, "g"), ("batata", 500, "g")], servings=3),
        ],
        shopping=["frango", "arroz", "cenoura", "carne moída", "batata"],
    )
