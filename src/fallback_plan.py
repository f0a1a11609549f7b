# fallback_plan.py
#
# Description:
# A fixed, hand-written plan used whenever the model cannot produce a usable
# one. It is balanced (protein, carbohydrate and vegetables), built only from
# everyday ingredients, and scaled to the requested number of servings.

import math

from models import Dish, Ingredient, MealPlan, PrepStep, ShoppingItem


def fallback_plan(servings: int) -> MealPlan:
    """Returns the fixed three-dish plan with ceil(servings / 3) servings per dish."""
    per_dish = max(math.ceil(servings / 3), 0)

    dishes = [
        Dish(
            name="Frango Grelhado com Arroz e Legumes",
            category="completo",
            ingredients=[
                Ingredient(name="frango", quantity=1, unit="kg"),
                Ingredient(name="arroz", quantity=500, unit="g"),
                Ingredient(name="cenoura", quantity=300, unit="g"),
                Ingredient(name="brócolis", quantity=300, unit="g"),
            ],
            steps=[
                "Tempere o frango com sal e alho",
                "Grelhe o frango por 15 minutos de cada lado",
                "Cozinhe o arroz",
                "Cozinhe os legumes no vapor",
            ],
            servings=per_dish,
            prep_time=40,
            variations=["Adicione limão ao frango", "Use tempero de ervas"],
        ),
        Dish(
            name="Carne Moída com Batata",
            category="completo",
            ingredients=[
                Ingredient(name="carne moída", quantity=800, unit="g"),
                Ingredient(name="batata", quantity=1, unit="kg"),
                Ingredient(name="cebola", quantity=200, unit="g"),
                Ingredient(name="tomate", quantity=300, unit="g"),
            ],
            steps=[
                "Refogue a cebola e o alho",
                "Adicione a carne moída e refogue",
                "Adicione tomate picado",
                "Cozinhe as batatas em cubos",
            ],
            servings=per_dish,
            prep_time=35,
            variations=["Adicione pimentão", "Use batata-doce"],
        ),
        Dish(
            name="Ovo Mexido com Legumes",
            category="completo",
            ingredients=[
                Ingredient(name="ovo", quantity=12, unit="unidade"),
                Ingredient(name="tomate", quantity=200, unit="g"),
                Ingredient(name="cebola", quantity=100, unit="g"),
            ],
            steps=[
                "Pique os legumes",
                "Refogue os legumes",
                "Adicione os ovos batidos",
                "Mexa até cozinhar",
            ],
            servings=per_dish,
            prep_time=15,
            variations=["Adicione queijo", "Use espinafre"],
        ),
    ]

    shopping_list = [
        ShoppingItem(category="Açougue", item="frango", quantity=1, unit="kg"),
        ShoppingItem(category="Açougue", item="carne moída", quantity=800, unit="g"),
        ShoppingItem(category="Frios e Laticínios", item="ovo", quantity=12, unit="unidade"),
        ShoppingItem(category="Mercearia", item="arroz", quantity=500, unit="g"),
        ShoppingItem(category="Hortifruti", item="cenoura", quantity=300, unit="g"),
        ShoppingItem(category="Hortifruti", item="brócolis", quantity=300, unit="g"),
        ShoppingItem(category="Hortifruti", item="batata", quantity=1, unit="kg"),
        ShoppingItem(category="Hortifruti", item="cebola", quantity=300, unit="g"),
        ShoppingItem(category="Hortifruti", item="tomate", quantity=500, unit="g"),
    ]

    prep_schedule = [
        PrepStep(order=1, action="Separar e lavar todos os ingredientes", duration=10, parallel=False),
        PrepStep(order=2, action="Temperar o frango", duration=5, parallel=False),
        PrepStep(order=3, action="Cozinhar arroz e batatas", duration=25, parallel=True),
        PrepStep(order=4, action="Grelhar frango", duration=30, parallel=True),
        PrepStep(order=5, action="Refogar carne moída", duration=20, parallel=False),
        PrepStep(order=6, action="Preparar ovos mexidos", duration=15, parallel=False),
        PrepStep(order=7, action="Montar marmitas", duration=15, parallel=False),
    ]

    return MealPlan(
        dishes=dishes,
        shopping_list=shopping_list,
        prep_schedule=prep_schedule,
        estimated_cost="baixo",
        total_prep_time=90,
        note="Plano padrão usado quando não foi possível gerar um plano personalizado.",
    )
