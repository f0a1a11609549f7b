import json
import logging

from conftest import make_dish, make_plan
from main import load_request, suggest_names
from utils import load_json, load_plan, save_plan


def test_save_and_load_plan(tmp_path):
    plan = make_plan([make_dish("Frango", [("frango", 500, "g")])], shopping=["frango"])
    path = tmp_path / "out" / "plan.json"
    save_plan(plan, str(path))

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert "shoppingList" in stored
    assert "prepTime" in stored["dishes"][0]
    assert load_plan(str(path)) == plan


def test_load_plan_missing_or_invalid(tmp_path):
    assert load_plan(str(tmp_path / "missing.json")) is None
    invalid = tmp_path / "invalid.json"
    invalid.write_text('{"dishes": "nope"}', encoding="utf-8")
    assert load_plan(str(invalid)) is None


def test_load_json_missing(tmp_path):
    assert load_json(str(tmp_path / "missing.json")) == {}


def test_load_request_from_free_text(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(json.dumps({
        "ingredientsText": "1 kg frango, 500g arroz, tomate",
        "servings": 6,
        "dietType": "low carb",
    }), encoding="utf-8")
    request = load_request(str(path))
    entries = request.stock_entries()
    assert [e.name for e in entries] == ["frango", "arroz", "tomate"]
    assert (entries[0].quantity, entries[0].unit) == (1, "kg")
    assert entries[2].quantity is None
    assert request.diet_type == "low carb"


def test_suggest_names():
    assert suggest_names("brocol") == ["brócolis"]
    assert "batata" in suggest_names("batatinha")
    assert suggest_names("xyz") == []


def test_load_request_warns_about_unknown_ingredients(tmp_path, caplog):
    path = tmp_path / "request.json"
    path.write_text(json.dumps({"ingredientsText": "1 kg frango, batatinha", "servings": 4}), encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        request = load_request(str(path))
    assert request.ingredient_names() == ["frango", "batatinha"]
    assert "'batatinha' is not in the dictionary" in caplog.text
    assert "Did you mean: batata-doce, batata?" in caplog.text
