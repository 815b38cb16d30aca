"""Access to the rule files packaged under receipt/rules/."""

from __future__ import annotations

from pathlib import Path
from typing import Any

RULES_DIR = Path(__file__).resolve().parent / "rules"
DEFAULT_VOCABULARY_FILE = RULES_DIR / "default_vocabulary.toml"
DEFAULT_CATEGORIES_FILE = RULES_DIR / "default_categories.toml"


def load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    if not path.exists():
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


def normalize_words(raw: Any) -> tuple[str, ...]:
    """Normalize a TOML string-or-list value into a tuple of stripped words."""
    if isinstance(raw, str):
        value = raw.strip()
        return (value,) if value else tuple()
    if isinstance(raw, list):
        return tuple(str(v).strip() for v in raw if str(v).strip())
    return tuple()
