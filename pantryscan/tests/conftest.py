"""Shared pytest fixtures for pantryscan tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from pantryscan.receipt.item_categories import CategoryRuleLayers, _get_default_rule_layers
from pantryscan.receipt.ocr_parser.common import ParserVocabulary, default_vocabulary
from pantryscan.runtime import load_category_rule_layers, load_parser_vocabulary, reset_paths


@pytest.fixture
def vocabulary() -> ParserVocabulary:
    return default_vocabulary()


@pytest.fixture
def rule_layers() -> CategoryRuleLayers:
    return _get_default_rule_layers()


@pytest.fixture
def project_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point PANTRYSCAN_HOME at an empty temporary project."""
    monkeypatch.setenv("PANTRYSCAN_HOME", str(tmp_path))
    reset_paths()
    load_category_rule_layers.cache_clear()
    load_parser_vocabulary.cache_clear()
    yield tmp_path
    reset_paths()
    load_category_rule_layers.cache_clear()
    load_parser_vocabulary.cache_clear()
