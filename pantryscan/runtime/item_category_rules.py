"""Runtime loader for item category and shelf-life rules."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pantryscan.receipt.item_categories import CategoryRuleLayers, build_category_rule_layers
from pantryscan.receipt.rule_files import DEFAULT_CATEGORIES_FILE, load_toml
from pantryscan.runtime.paths import get_paths


@lru_cache(maxsize=8)
def load_category_rule_layers(rule_paths: tuple[str, ...] | None = None) -> CategoryRuleLayers:
    """Load packaged defaults plus project rules into pure in-memory layers.

    Args:
        rule_paths: Files to load, lowest priority first. If None, the packaged
            defaults followed by config/item_categories.toml.
    """
    if rule_paths is None:
        files = [DEFAULT_CATEGORIES_FILE]
        project_file = get_paths().item_category_rules
        if project_file.resolve() != DEFAULT_CATEGORIES_FILE.resolve():
            files.append(project_file)
    else:
        files = [Path(path) for path in rule_paths]

    return build_category_rule_layers([load_toml(path) for path in files])
