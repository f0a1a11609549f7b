from conftest import make_dish, make_plan
from variety_enforcer import enforce_varieties_and_servings, redistribute_servings


def test_clones_missing_varieties_round_robin():
    plan = make_plan([
        make_dish("Frango", [("frango", 500, "g")], servings=3, variations=["limão", "ervas"]),
        make_dish("Carne", [("carne", 500, "g")], servings=3),
    ])
    result, adjustments = enforce_varieties_and_servings(plan, 5, 10)

    assert [d.name for d in result.dishes] == [
        "Frango", "Carne", "Frango - Variação 1", "Carne - Variação 2", "Frango - Variação 3",
    ]
    assert result.dishes[2].variations == ["ervas"]
    assert sum(d.servings for d in result.dishes) == 10
    assert "3 variações adicionais" in adjustments[0]


def test_clones_do_not_share_ingredients():
    plan = make_plan([make_dish("Frango", [("frango", 500, "g")], servings=2)])
    result, _ = enforce_varieties_and_servings(plan, 2, 4)
    result.dishes[1].ingredients[0].quantity = 1
    assert result.dishes[0].ingredients[0].quantity == 500
    assert plan.dishes[0].ingredients[0].quantity == 500


def test_truncates_excess_dishes():
    plan = make_plan([make_dish(f"Prato {i}", [("arroz", 100, "g")], servings=2) for i in range(5)])
    result, adjustments = enforce_varieties_and_servings(plan, 3, 6)
    assert [d.name for d in result.dishes] == ["Prato 0", "Prato 1", "Prato 2"]
    assert "removemos o excesso" in adjustments[0]
    assert len(adjustments) == 1


def test_small_excess_is_tolerated():
    plan = make_plan([make_dish("A", [("arroz", 1, "kg")], servings=4),
                      make_dish("B", [("arroz", 1, "kg")], servings=4)])
    result, adjustments = enforce_varieties_and_servings(plan, 2, 6)
    assert [d.servings for d in result.dishes] == [4, 4]
    assert adjustments == []


def test_large_excess_is_redistributed():
    plan = make_plan([make_dish("A", [("arroz", 1, "kg")], servings=6),
                      make_dish("B", [("arroz", 1, "kg")], servings=6)])
    result, adjustments = enforce_varieties_and_servings(plan, 2, 7)
    assert [d.servings for d in result.dishes] == [4, 3]
    assert "7 porções" in adjustments[0]


def test_two_dishes_become_four_with_twelve_servings():
    plan = make_plan([make_dish("A", [("frango", 1, "kg")], servings=3),
                      make_dish("B", [("carne", 1, "kg")], servings=3)])
    result, adjustments = enforce_varieties_and_servings(plan, 4, 12)
    assert len(result.dishes) == 4
    assert [d.servings for d in result.dishes] == [3, 3, 3, 3]
    assert any("variações adicionais" in a for a in adjustments)
    assert any("porções" in a for a in adjustments)


def test_redistribute_servings_remainder_goes_first():
    dishes = [make_dish(n, [("arroz", 1, "kg")]) for n in "ABC"]
    assert [d.servings for d in redistribute_servings(dishes, 10)] == [4, 3, 3]
