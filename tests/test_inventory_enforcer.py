import pytest

from conftest import make_dish, make_plan
from inventory_enforcer import enforce_stock, is_stocked_item, to_base_amount, validate_stock
from models import StockEntry


def usage_in_grams(plan, name):
    total = 0
    for dish in plan.dishes:
        for ingredient in dish.ingredients:
            if name in ingredient.name:
                amount, unit = to_base_amount(ingredient.quantity, ingredient.unit)
                assert unit == "g"
                total += amount
    return total


@pytest.mark.parametrize("quantity, unit, expected", [
    (2, "kg", (2000, "g")),
    (500, "gramas", (500, "g")),
    (1.5, "litros", (1500, "ml")),
    (3, "un", (3, "unidade")),
    (1, "xícara", (None, None)),
])
def test_to_base_amount(quantity, unit, expected):
    assert to_base_amount(quantity, unit) == expected


def test_scales_usage_down_to_stock():
    plan = make_plan([
        make_dish("Frango Assado", [("frango", 1, "kg"), ("batata", 500, "g")]),
        make_dish("Frango Xadrez", [("peito de frango", 500, "g")]),
    ])
    result, adjustments = enforce_stock(plan, [StockEntry(name="frango", quantity=600, unit="g")])

    assert usage_in_grams(result, "frango") <= 600
    assert result.dishes[0].ingredients[0].quantity == pytest.approx(400)
    assert result.dishes[0].ingredients[0].unit == "g"
    assert result.dishes[1].ingredients[0].quantity == pytest.approx(200)
    assert result.dishes[0].ingredients[1].quantity == 500
    assert len(adjustments) == 1
    assert "estoque" in adjustments[0]
    assert "frango" in adjustments[0]


def test_recomputes_calories_after_scaling():
    plan = make_plan([make_dish("Frango", [("frango", 1, "kg")], servings=4)])
    result, _ = enforce_stock(plan, [StockEntry(name="frango", quantity=500, unit="g")])
    dish = result.dishes[0]
    assert dish.total_kcal == 825
    assert dish.kcal_per_serving == round(825 / 4)
    assert result.total_kcal == 825


def test_scaled_quantities_never_exceed_stock():
    plan = make_plan([
        make_dish("A", [("arroz", 333, "g")]),
        make_dish("B", [("arroz", 333, "g")]),
        make_dish("C", [("arroz", 334, "g")]),
    ])
    result, _ = enforce_stock(plan, [StockEntry(name="arroz", quantity=100, unit="g")])
    assert usage_in_grams(result, "arroz") <= 100 + 1e-9


def test_entries_without_quantity_or_known_unit_do_not_constrain():
    plan = make_plan([make_dish("Frango", [("frango", 2, "kg")])])
    stock = [StockEntry(name="frango"), StockEntry(name="frango", quantity=1, unit="bandeja")]
    result, adjustments = enforce_stock(plan, stock)
    assert adjustments == []
    assert result.dishes[0].ingredients[0].quantity == 2


def test_within_stock_is_untouched():
    plan = make_plan([make_dish("Frango", [("frango", 300, "g")])])
    result, adjustments = enforce_stock(plan, [StockEntry(name="frango", quantity=1, unit="kg")])
    assert adjustments == []
    assert result == plan


def test_longest_stock_name_wins():
    plan = make_plan([make_dish("Carne", [("carne moída", 1, "kg"), ("carne bovina", 300, "g")])])
    stock = [
        StockEntry(name="carne", quantity=2, unit="kg"),
        StockEntry(name="carne moída", quantity=500, unit="g"),
    ]
    result, adjustments = enforce_stock(plan, stock)
    assert result.dishes[0].ingredients[0].quantity == pytest.approx(500)
    assert result.dishes[0].ingredients[1].quantity == 300
    assert len(adjustments) == 1


@pytest.mark.parametrize("ingredient, stock, expected", [
    ("frango", "Frango", True),
    ("peito de frango", "frango", True),
    ("frango grelhado", "frango", True),
    ("ovos", "ovo", True),
    ("salmão", "sal", False),
    ("salsinha", "sal", False),
    ("farinha de arroz", "arroz", False),
    ("batata-doce", "batata", False),
    ("carne moída", "carne", False),
])
def test_is_stocked_item(ingredient, stock, expected):
    assert is_stocked_item(ingredient, stock) is expected


def test_stock_of_one_item_leaves_similar_names_alone():
    plan = make_plan([make_dish("Salmão", [("salmão", 500, "g"), ("sal", 5, "g"), ("farinha de arroz", 200, "g")])])
    stock = [StockEntry(name="sal", quantity=10, unit="g"), StockEntry(name="arroz", quantity=50, unit="g")]
    result, adjustments = enforce_stock(plan, stock)
    assert [(i.name, i.quantity) for i in result.dishes[0].ingredients] == [
        ("salmão", 500), ("sal", 5), ("farinha de arroz", 200),
    ]
    assert adjustments == []


def test_different_base_unit_is_ignored():
    plan = make_plan([make_dish("Omelete", [("ovo", 6, "unidade")])])
    result, adjustments = enforce_stock(plan, [StockEntry(name="ovo", quantity=100, unit="g")])
    assert adjustments == []
    assert result.dishes[0].ingredients[0].quantity == 6


def test_validate_stock_reports_low_entries():
    entries = [
        StockEntry(name="frango", quantity=500, unit="g"),
        StockEntry(name="arroz", quantity=5, unit="kg"),
        StockEntry(name="cenoura"),
    ]
    insufficient = validate_stock(entries, 10)
    assert [item.name for item in insufficient] == ["frango"]
    assert insufficient[0].needed == 2500
    assert insufficient[0].unit == "g"


def test_validate_stock_in_kilograms():
    insufficient = validate_stock([StockEntry(name="carne", quantity=1, unit="kg")], 10)
    assert insufficient[0].needed == 3
