"""Runtime loader for the receipt-line parser vocabulary."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pantryscan.receipt.ocr_parser.common import ParserVocabulary, build_parser_vocabulary
from pantryscan.receipt.rule_files import DEFAULT_VOCABULARY_FILE, load_toml
from pantryscan.runtime.paths import get_paths


@lru_cache(maxsize=4)
def load_parser_vocabulary(vocabulary_paths: tuple[str, ...] | None = None) -> ParserVocabulary:
    """
    Load the packaged vocabulary extended by config/parser_vocabulary.toml.

    Args:
        vocabulary_paths: Optional TOML path override, in load order.

    Returns:
        Merged vocabulary; lists from later files extend earlier ones.
    """
    if vocabulary_paths is None:
        files = [DEFAULT_VOCABULARY_FILE, get_paths().parser_vocabulary_rules]
    else:
        files = [Path(path) for path in vocabulary_paths]
    return build_parser_vocabulary([load_toml(path) for path in files])
