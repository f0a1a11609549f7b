import pytest
from pydantic import ValidationError

from conftest import FakeDietLookup, FakeGenerator, make_dish, make_plan
from diet_resolver import resolve_diet
from fallback_plan import fallback_plan
from meal_planner import FALLBACK_MESSAGE, generate_meal_plan
from models import PlanValidationError
from plan_sanitizer import sanitize_plan
from utils import names_overlap, normalize_name


def ingredient_names(plan):
    return [i.name for dish in plan.dishes for i in dish.ingredients] + [s.item for s in plan.shopping_list]


def test_low_carb_scenario():
    candidate = make_plan([
        make_dish("Frango com Arroz", [("frango", 500, "g"), ("arroz", 300, "g"), ("tomate", 200, "g")], servings=2),
        make_dish("Batata Recheada", [("batata", 600, "g"), ("frango", 200, "g")], servings=2),
        make_dish("Torrada", [("pão", 200, "g")], servings=2),
    ], shopping=["frango", "arroz", "batata", "pão", "tomate"])
    request = {
        "availableIngredients": ["frango", "arroz", "batata", "pão", "tomate"],
        "servings": 6,
        "varieties": 3,
        "dietType": "low carb",
    }
    plan = generate_meal_plan(request, FakeGenerator(candidate))

    for name in ingredient_names(plan):
        for banned in ("arroz", "batata", "pao"):
            assert banned not in normalize_name(name)
    assert len(plan.dishes) == 3
    assert plan.total_servings == 6
    assert "dieta" in plan.adjustment_reason


def test_stock_scenario():
    candidate = make_plan([
        make_dish("Frango Grelhado", [("frango", 600, "g"), ("arroz", 200, "g")], servings=5),
        make_dish("Frango Desfiado", [("frango", 400, "g")], servings=5),
    ])
    request = {
        "availableIngredients": [{"name": "frango", "quantity": 100, "unit": "g"}, "arroz"],
        "servings": 10,
        "varieties": 2,
        "allowNewIngredients": False,
    }
    plan = generate_meal_plan(request, FakeGenerator(candidate))

    frango = sum(i.quantity for d in plan.dishes for i in d.ingredients if i.name == "frango" and i.unit == "g")
    assert frango <= 100 + 1e-9
    assert "estoque" in plan.adjustment_reason
    for dish in plan.dishes:
        assert dish.total_kcal == sum(i.kcal or 0 for i in dish.ingredients)


def test_stock_holds_after_variations_are_cloned():
    candidate = make_plan([make_dish("Frango", [("frango", 80, "g")], servings=2)])
    request = {
        "availableIngredients": [{"name": "frango", "quantity": 100, "unit": "g"}],
        "servings": 4,
        "varieties": 2,
    }
    plan = generate_meal_plan(request, FakeGenerator(candidate))
    assert len(plan.dishes) == 2
    assert sum(i.quantity for d in plan.dishes for i in d.ingredients) <= 100 + 1e-9


def test_variety_and_serving_scenario():
    candidate = make_plan([
        make_dish("Frango com Arroz", [("frango", 500, "g"), ("arroz", 300, "g")], servings=3),
        make_dish("Carne com Batata", [("carne moída", 500, "g"), ("batata", 300, "g")], servings=3),
    ])
    request = {
        "availableIngredients": ["frango", "arroz", "carne moída", "batata"],
        "servings": 12,
        "varieties": 4,
    }
    plan = generate_meal_plan(request, FakeGenerator(candidate))

    assert len(plan.dishes) == 4
    assert plan.total_servings == 12
    assert "variações adicionais" in plan.adjustment_reason
    assert "distribuição de porções" in plan.adjustment_reason
    assert plan.avg_kcal_per_serving == round(plan.total_kcal / 12)


@pytest.mark.parametrize("generator", [FakeGenerator(None), FakeGenerator(error=RuntimeError("timeout"))])
def test_malformed_generator_returns_fallback(generator):
    plan = generate_meal_plan({"availableIngredients": ["frango"], "servings": 9}, generator)
    expected = fallback_plan(9)
    assert [d.name for d in plan.dishes] == [d.name for d in expected.dishes]
    assert [d.servings for d in plan.dishes] == [3, 3, 3]
    assert plan.adjustment_reason == FALLBACK_MESSAGE
    assert plan.total_kcal > 0
    assert plan.total_plan_time == 95


def test_fallback_honours_exclusions_and_diet():
    request = {
        "availableIngredients": ["arroz", "tomate", "cebola"],
        "servings": 6,
        "exclusions": ["frango"],
        "dietType": "vegana",
    }
    plan = generate_meal_plan(request, FakeGenerator(None))

    assert plan.dishes
    assert plan.total_servings == 6
    for name in ingredient_names(plan):
        for banned in ("frango", "carne", "ovo"):
            assert banned not in normalize_name(name)
    assert plan.adjustment_reason.startswith(FALLBACK_MESSAGE)
    assert "exclusão: frango" in plan.adjustment_reason


def test_fallback_honours_stock_and_varieties():
    request = {
        "availableIngredients": [{"name": "frango", "quantity": 100, "unit": "g"}],
        "servings": 10,
        "varieties": 4,
    }
    plan = generate_meal_plan(request, FakeGenerator(error=RuntimeError("timeout")))

    frango = [(i.quantity, i.unit) for d in plan.dishes for i in d.ingredients if i.name == "frango"]
    assert frango and all(unit == "g" for _, unit in frango)
    assert sum(quantity for quantity, _ in frango) <= 100 + 1e-9
    assert len(plan.dishes) == 4
    assert plan.total_servings == 10
    assert "estoque" in plan.adjustment_reason


def test_never_empty_when_every_dish_is_banned():
    candidate = make_plan([make_dish("Massa", [("macarrão", 500, "g")], servings=4)])
    request = {"availableIngredients": ["frango", "arroz"], "servings": 4, "varieties": 2}
    plan = generate_meal_plan(request, FakeGenerator(candidate))
    assert len(plan.dishes) == 2
    assert plan.total_servings == 4
    for name in ingredient_names(plan):
        assert any(names_overlap(name, available) for available in ("frango", "arroz"))


def test_exclusions_hold_with_new_ingredients_allowed(sample_plan):
    request = {
        "availableIngredients": ["frango"],
        "servings": 6,
        "varieties": 2,
        "exclusions": ["Cenoura", "batata"],
        "allowNewIngredients": True,
    }
    plan = generate_meal_plan(request, FakeGenerator(sample_plan))
    for name in ingredient_names(plan):
        assert "cenoura" not in normalize_name(name)
        assert "batata" not in normalize_name(name)


def test_result_is_stable_under_resanitization(sample_plan):
    request = {"availableIngredients": ["frango", "arroz", "carne moída"], "servings": 6, "varieties": 2,
               "dietType": "low carb"}
    plan = generate_meal_plan(request, FakeGenerator(sample_plan))
    _, adjustments = sanitize_plan(plan, [], resolve_diet("low carb"), ["frango", "arroz", "carne moída"], False)
    assert adjustments == []


def test_calorie_limit_is_advisory():
    candidate = make_plan([make_dish("Frango", [("frango", 1, "kg")], servings=2)])
    request = {"availableIngredients": ["frango"], "servings": 2, "varieties": 1, "calorieLimit": 400}
    plan = generate_meal_plan(request, FakeGenerator(candidate))
    assert plan.dishes[0].servings == 2
    assert "400 kcal" in plan.adjustment_reason
    assert "sugerimos dividir \"Frango\" em 5 porções (atual: 2)" in plan.adjustment_reason
    assert "ajustei" not in plan.adjustment_reason


def test_time_budget():
    candidate = make_plan([make_dish("Frango", [("frango", 1, "kg")], servings=2)])
    request = {"availableIngredients": ["frango"], "servings": 2, "varieties": 1, "availableTime": 0.25}
    plan = generate_meal_plan(request, FakeGenerator(candidate))
    assert plan.time_fits is False
    assert plan.available_time == 0.25
    assert "tempo" in plan.adjustment_reason


def test_no_adjustments_leaves_reason_empty():
    candidate = make_plan([make_dish("Frango", [("frango", 1, "kg")], servings=2)])
    request = {"availableIngredients": ["frango"], "servings": 2, "varieties": 1, "availableTime": 2}
    plan = generate_meal_plan(request, FakeGenerator(candidate))
    assert plan.adjustment_reason is None
    assert plan.time_fits is True


def test_unknown_diet_does_not_restrict():
    candidate = make_plan([make_dish("Frango", [("frango", 1, "kg")], servings=2)])
    lookup = FakeDietLookup({"is_known": False})
    request = {"availableIngredients": ["frango"], "servings": 2, "varieties": 1, "dietType": "dieta da lua"}
    plan = generate_meal_plan(request, FakeGenerator(candidate), lookup)
    assert [i.name for i in plan.dishes[0].ingredients] == ["frango"]
    assert lookup.calls == ["dieta da lua"]


def test_invalid_requests_fail_before_generation():
    generator = FakeGenerator(make_plan([make_dish("Frango", [("frango", 1, "kg")])]))
    with pytest.raises(ValidationError):
        generate_meal_plan({"availableIngredients": ["frango"], "servings": 0}, generator)
    with pytest.raises(ValidationError):
        generate_meal_plan({"availableIngredients": [], "servings": 2}, generator)
    with pytest.raises(PlanValidationError):
        generate_meal_plan({"availableIngredients": ["frango"], "servings": 2, "exclusions": ["frango"]}, generator)
    with pytest.raises(PlanValidationError):
        generate_meal_plan({"availableIngredients": ["frango", "arroz"], "servings": 2, "dietType": "vegana",
                            "exclusions": ["arroz"]}, generator)
    assert generator.calls == []
