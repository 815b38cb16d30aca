from pathlib import Path

from pantryscan.receipt.item_categories import (
    CategoryRuleLayers,
    build_category_rule_layers,
    categorize_item,
    classify_dictated_item,
    estimate_shelf_life,
    lookup_dictation_food,
    normalize_unit,
)
from pantryscan.receipt.rule_files import DEFAULT_CATEGORIES_FILE, load_toml
from pantryscan.runtime import load_category_rule_layers


def test_categorize_item_uses_first_matching_table() -> None:
    assert categorize_item("Whole Milk") == "dairy"
    assert categorize_item("chicken breast") == "meat"
    assert categorize_item("Sourdough Bread") == "bakery"
    # produce is checked before pantry
    assert categorize_item("tomato soup") == "produce"


def test_unknown_item_gets_defaults() -> None:
    assert categorize_item("zzz widget") == "pantry"
    assert estimate_shelf_life("zzz widget") == 14


def test_shelf_life_buckets_shortest_first() -> None:
    assert estimate_shelf_life("bananas") == 3
    assert estimate_shelf_life("milk") == 7
    assert estimate_shelf_life("cheddar cheese") == 14
    assert estimate_shelf_life("pasta") == 90
    assert estimate_shelf_life("shampoo") == 180


def test_lookups_are_pure(rule_layers: CategoryRuleLayers) -> None:
    first = [categorize_item("eggs", rule_layers), estimate_shelf_life("eggs", rule_layers)]
    second = [categorize_item("eggs", rule_layers), estimate_shelf_life("eggs", rule_layers)]

    assert first == second == ["dairy", 14]


def test_dictation_food_table_wins_over_general_rules() -> None:
    assert lookup_dictation_food("bananas") is not None
    assert classify_dictated_item("bananas") == ("produce", 5)
    assert classify_dictated_item("tomato soup") == ("produce", 7)


def test_dictation_miss_uses_general_category_with_dictation_default() -> None:
    assert lookup_dictation_food("toothpaste") is None
    assert classify_dictated_item("toothpaste") == ("personal-care", 7)
    assert classify_dictated_item("zzz widget") == ("pantry", 7)


def test_dictation_and_receipt_agree_on_category() -> None:
    for name in ["milk", "chicken", "bread", "apples", "rice"]:
        assert classify_dictated_item(name)[0] == categorize_item(name), name


def test_normalize_unit_synonyms_and_overrides() -> None:
    assert normalize_unit("Pounds").unit == "lbs"
    assert normalize_unit("bags").unit == "bag"

    can = normalize_unit("cans")
    assert can.unit == "can"
    assert can.category == "pantry"
    assert can.shelf_life_days == 365

    unknown = normalize_unit("Crate")
    assert unknown.unit == "crate"
    assert unknown.category is None


def test_later_layer_rules_are_checked_first() -> None:
    layers = build_category_rule_layers(
        [
            load_toml(DEFAULT_CATEGORIES_FILE),
            {
                "categories": [{"key": "snacks", "keywords": ["chips", "cookie"]}],
                "shelf_life": [{"days": 60, "keywords": ["chips"]}],
                "default_category": "other",
            },
        ]
    )

    assert categorize_item("potato chips", layers) == "snacks"
    assert categorize_item("cookie dough", layers) == "snacks"
    assert estimate_shelf_life("potato chips", layers) == 60
    assert categorize_item("zzz widget", layers) == "other"
    assert categorize_item("milk", layers) == "dairy"


def test_invalid_rules_are_ignored() -> None:
    layers = build_category_rule_layers(
        [
            {
                "categories": [{"key": "", "keywords": ["x"]}, "not-a-table", {"key": "fruit", "keywords": []}],
                "shelf_life": [{"days": 0, "keywords": ["kale"]}, {"days": "soon", "keywords": ["kale"]}],
            }
        ]
    )

    assert layers.categories == ()
    assert layers.shelf_life == ()


def test_runtime_loader_layers_project_rules(project_home: Path) -> None:
    config = project_home / "config"
    config.mkdir()
    (config / "item_categories.toml").write_text(
        '[[categories]]\nkey = "snacks"\nkeywords = ["pretzel"]\n',
        encoding="utf-8",
    )

    layers = load_category_rule_layers()

    assert categorize_item("pretzel twists", layers) == "snacks"
    assert categorize_item("whole milk", layers) == "dairy"


def test_runtime_loader_without_project_file(project_home: Path) -> None:
    layers = load_category_rule_layers()

    assert categorize_item("pretzel twists", layers) == "pantry"
