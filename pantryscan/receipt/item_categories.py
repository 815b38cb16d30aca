"""Food category and shelf-life rules shared by the receipt and dictation pipelines.

Every lookup is an ordered substring match over the lowercased item name:
the first rule whose keyword occurs anywhere in the name wins. Ordering is
therefore part of the behavior (e.g. "tomato soup" is produce because the
produce table is checked before pantry).

Rules live in TOML:
- receipt/rules/default_categories.toml holds the packaged defaults
- config/item_categories.toml (project) is layered on top by the runtime
  loader; its rules are evaluated before the defaults

Functions here never touch the environment. When ``rule_layers`` is
omitted they fall back to the packaged defaults only.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pantryscan.receipt.rule_files import DEFAULT_CATEGORIES_FILE, load_toml, normalize_words

DEFAULT_CATEGORY = "pantry"
DEFAULT_SHELF_LIFE_DAYS = 14
DICTATION_DEFAULT_SHELF_LIFE_DAYS = 7


@dataclass(frozen=True)
class UnitRule:
    """Canonical spelling of a spoken unit, optionally pinning category/shelf life."""

    unit: str
    category: str | None = None
    shelf_life_days: int | None = None


@dataclass(frozen=True)
class FoodRule:
    keyword: str
    category: str
    shelf_life_days: int


@dataclass(frozen=True)
class CategoryRuleLayers:
    """In-memory category, shelf-life, dictation and unit tables."""

    categories: tuple[tuple[tuple[str, ...], str], ...]
    shelf_life: tuple[tuple[tuple[str, ...], int], ...]
    dictation_foods: tuple[FoodRule, ...]
    units: Mapping[str, UnitRule]
    default_category: str = DEFAULT_CATEGORY
    default_shelf_life_days: int = DEFAULT_SHELF_LIFE_DAYS
    dictation_default_category: str = DEFAULT_CATEGORY
    dictation_default_shelf_life_days: int = DICTATION_DEFAULT_SHELF_LIFE_DAYS


def _as_int(raw: Any) -> int | None:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def build_category_rule_layers(configs: Sequence[Mapping[str, Any]] | None = None) -> CategoryRuleLayers:
    """Merge category configs into one rule set.

    ``configs`` go from lowest to highest priority: rules of a later config
    are evaluated before rules of an earlier one, and its scalar defaults
    replace earlier ones.
    """
    categories: list[tuple[tuple[str, ...], str]] = []
    shelf_life: list[tuple[tuple[str, ...], int]] = []
    foods: list[FoodRule] = []
    units: dict[str, UnitRule] = {}
    default_category = DEFAULT_CATEGORY
    default_days = DEFAULT_SHELF_LIFE_DAYS
    dictation_category = DEFAULT_CATEGORY
    dictation_days = DICTATION_DEFAULT_SHELF_LIFE_DAYS

    for config in configs or ():
        layer_categories: list[tuple[tuple[str, ...], str]] = []
        for rule in config.get("categories", []):
            if not isinstance(rule, Mapping):
                continue
            keywords = tuple(kw.lower() for kw in normalize_words(rule.get("keywords")))
            key = str(rule.get("key") or rule.get("category") or "").strip()
            if keywords and key:
                layer_categories.append((keywords, key))
        categories[:0] = layer_categories

        layer_shelf_life: list[tuple[tuple[str, ...], int]] = []
        for rule in config.get("shelf_life", []):
            if not isinstance(rule, Mapping):
                continue
            keywords = tuple(kw.lower() for kw in normalize_words(rule.get("keywords")))
            days = _as_int(rule.get("days"))
            if keywords and days is not None and days > 0:
                layer_shelf_life.append((keywords, days))
        shelf_life[:0] = layer_shelf_life

        dictation = config.get("dictation", {})
        if isinstance(dictation, Mapping):
            layer_foods: list[FoodRule] = []
            for rule in dictation.get("foods", []):
                if not isinstance(rule, Mapping):
                    continue
                keyword = str(rule.get("keyword") or "").strip().lower()
                category = str(rule.get("category") or "").strip()
                days = _as_int(rule.get("days"))
                if keyword and category and days is not None and days > 0:
                    layer_foods.append(FoodRule(keyword, category, days))
            foods[:0] = layer_foods
            dictation_category = str(dictation.get("default_category") or dictation_category)
            dictation_days = _as_int(dictation.get("default_shelf_life_days")) or dictation_days

        for rule in config.get("units", []):
            if not isinstance(rule, Mapping):
                continue
            unit = str(rule.get("unit") or "").strip().lower()
            if not unit:
                continue
            category = str(rule.get("category") or "").strip() or None
            unit_rule = UnitRule(unit=unit, category=category, shelf_life_days=_as_int(rule.get("days")))
            for synonym in normalize_words(rule.get("synonyms")) or (unit,):
                units[synonym.lower()] = unit_rule

        default_category = str(config.get("default_category") or default_category)
        default_days = _as_int(config.get("default_shelf_life_days")) or default_days

    return CategoryRuleLayers(
        categories=tuple(categories),
        shelf_life=tuple(shelf_life),
        dictation_foods=tuple(foods),
        units=units,
        default_category=default_category,
        default_shelf_life_days=default_days,
        dictation_default_category=dictation_category,
        dictation_default_shelf_life_days=dictation_days,
    )


@lru_cache(maxsize=1)
def _get_default_rule_layers() -> CategoryRuleLayers:
    """Packaged default rules only (no project configuration)."""
    return build_category_rule_layers([load_toml(DEFAULT_CATEGORIES_FILE)])


def categorize_item(name: str, rule_layers: CategoryRuleLayers | None = None) -> str:
    """
    Return the food category for an item name.

    Args:
        name: Item name in any case (e.g., "Whole Milk")
        rule_layers: Preloaded in-memory rules (typically from runtime loader).

    Returns:
        Category key such as "dairy"; the default category when nothing matches.
    """
    layers = rule_layers or _get_default_rule_layers()
    lowered = name.lower()
    for keywords, category in layers.categories:
        if any(kw in lowered for kw in keywords):
            return category
    return layers.default_category


def estimate_shelf_life(name: str, rule_layers: CategoryRuleLayers | None = None) -> int:
    """Return the expected number of days an item stays usable."""
    layers = rule_layers or _get_default_rule_layers()
    lowered = name.lower()
    for keywords, days in layers.shelf_life:
        if any(kw in lowered for kw in keywords):
            return days
    return layers.default_shelf_life_days


def lookup_dictation_food(name: str, rule_layers: CategoryRuleLayers | None = None) -> FoodRule | None:
    """Return the first dictation food rule whose keyword occurs in ``name``."""
    layers = rule_layers or _get_default_rule_layers()
    lowered = name.lower()
    for rule in layers.dictation_foods:
        if rule.keyword in lowered:
            return rule
    return None


def classify_dictated_item(name: str, rule_layers: CategoryRuleLayers | None = None) -> tuple[str, int]:
    """Return (category, shelf life days) for a dictated name.

    The dictation food table wins; otherwise the general category applies
    with the dictation default shelf life.
    """
    layers = rule_layers or _get_default_rule_layers()
    food = lookup_dictation_food(name, rule_layers=layers)
    if food is not None:
        return food.category, food.shelf_life_days
    return categorize_item(name, rule_layers=layers), layers.dictation_default_shelf_life_days


def normalize_unit(unit: str, rule_layers: CategoryRuleLayers | None = None) -> UnitRule:
    """Map a spoken unit to its canonical spelling.

    Unknown units are returned lowercased and unchanged, without overrides.
    """
    layers = rule_layers or _get_default_rule_layers()
    lowered = unit.strip().lower()
    return layers.units.get(lowered) or UnitRule(unit=lowered)
