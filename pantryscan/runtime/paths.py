"""Centralized path and service-endpoint settings for pantryscan.

The project root is PANTRYSCAN_HOME when set, otherwise the current
working directory. Service URLs come from the environment with local
defaults; CLI flags override both.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

HOME_ENV = "PANTRYSCAN_HOME"
OCR_SERVICE_URL_ENV = "OCR_SERVICE_URL"
ENHANCE_SERVICE_URL_ENV = "ENHANCE_SERVICE_URL"
INVENTORY_API_URL_ENV = "INVENTORY_API_URL"

DEFAULT_OCR_SERVICE_URL = "http://localhost:8001"
DEFAULT_INVENTORY_API_URL = "http://localhost:3000"


def _get_project_root() -> Path:
    home = os.environ.get(HOME_ENV, "").strip()
    return Path(home).expanduser() if home else Path.cwd()


@dataclass
class ProjectPaths:
    """Container for all project-related paths.

    All paths are computed relative to the project root.
    """

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def parser_vocabulary_rules(self) -> Path:
        """Project-level receipt line vocabulary TOML file."""
        return self.config / "parser_vocabulary.toml"

    @property
    def item_category_rules(self) -> Path:
        """Project-level category/shelf-life rules TOML file."""
        return self.config / "item_categories.toml"

    # --- Receipt paths ---
    @property
    def receipts(self) -> Path:
        return self.root / "receipts"

    @property
    def receipts_ocr_json(self) -> Path:
        """Raw OCR results (JSON), kept for debugging."""
        return self.receipts / "ocr_json"


@dataclass(frozen=True)
class ServiceUrls:
    ocr: str
    enhance: str | None
    inventory: str


def get_service_urls() -> ServiceUrls:
    """Read service endpoints from the environment."""
    return ServiceUrls(
        ocr=os.environ.get(OCR_SERVICE_URL_ENV, "").strip() or DEFAULT_OCR_SERVICE_URL,
        enhance=os.environ.get(ENHANCE_SERVICE_URL_ENV, "").strip() or None,
        inventory=os.environ.get(INVENTORY_API_URL_ENV, "").strip() or DEFAULT_INVENTORY_API_URL,
    )


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance."""
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Forget the cached ProjectPaths (after PANTRYSCAN_HOME changes)."""
    global _paths
    _paths = None
