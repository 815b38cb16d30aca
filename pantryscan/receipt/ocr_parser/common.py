"""Shared constants and vocabulary for OCR receipt-line parsing."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Any

from pantryscan.receipt.rule_files import DEFAULT_VOCABULARY_FILE, load_toml, normalize_words

# Item prices must lie strictly between these bounds
PRICE_MIN = Decimal("0.01")
PRICE_MAX = Decimal("100.00")

MAX_RESULT_ITEMS = 20  # Applied once, after the whole document is parsed
MAX_NAME_TOKENS = 4
MIN_NAME_LENGTH = 2

# Fragment reconstruction: how far to look for a dollars token, and its range
FRAGMENT_SEARCH_RADIUS = 3
FRAGMENT_DOLLARS_MIN = 1
FRAGMENT_DOLLARS_MAX = 50

OCR_ITEM_CONFIDENCE = 75
OCR_RESULT_CONFIDENCE = 65
STORE_SCAN_LINES = 5
DEFAULT_STORE_NAME = "Store"

# A markdown line: a leading negative amount with nothing before it
NEGATIVE_AMOUNT_LINE = re.compile(r"^\s*-\s*\d+\.\d{2}")


@dataclass(frozen=True)
class ParserVocabulary:
    """Word lists driving line classification and item-name cleanup."""

    total_indicators: tuple[str, ...]
    promo_markers: tuple[str, ...]
    name_stopwords: frozenset[str]
    grading_words: tuple[str, ...]
    promo_words: tuple[str, ...]
    structural_names: frozenset[str]
    known_stores: tuple[str, ...]
    promo_line_pattern: re.Pattern[str]
    grading_pattern: re.Pattern[str]
    promo_word_pattern: re.Pattern[str]


def _marker_regex(marker: str) -> str:
    # A space inside a marker stands for optional whitespace ("save $" ~ "save$").
    return re.escape(marker.lower()).replace(r"\ ", r"\s*")


def _word_alternation(words: Sequence[str]) -> re.Pattern[str]:
    if not words:
        return re.compile(r"(?!x)x")
    ordered = sorted({w.lower() for w in words}, key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in ordered) + r")\b", re.IGNORECASE)


def _extend(target: list[str], values: Sequence[str]) -> None:
    for value in values:
        if value not in target:
            target.append(value)


def build_parser_vocabulary(configs: Sequence[Mapping[str, Any]] | None = None) -> ParserVocabulary:
    """Merge vocabulary configs; every list in a later config extends the earlier ones."""
    lists: dict[str, list[str]] = {
        "total_indicators": [],
        "promo_markers": [],
        "name_stopwords": [],
        "grading_words": [],
        "promo_words": [],
        "structural_names": [],
        "known_stores": [],
    }
    for config in configs or ():
        for key, target in lists.items():
            _extend(target, normalize_words(config.get(key)))

    promo_markers = tuple(m.lower() for m in lists["promo_markers"])
    if promo_markers:
        promo_line_pattern = re.compile(
            r"^\s*(?:" + "|".join(_marker_regex(m) for m in promo_markers) + r")",
            re.IGNORECASE,
        )
    else:
        promo_line_pattern = re.compile(r"(?!x)x")

    return ParserVocabulary(
        total_indicators=tuple(w.lower() for w in lists["total_indicators"]),
        promo_markers=promo_markers,
        name_stopwords=frozenset(w.upper() for w in lists["name_stopwords"]),
        grading_words=tuple(w.lower() for w in lists["grading_words"]),
        promo_words=tuple(w.lower() for w in lists["promo_words"]),
        structural_names=frozenset(w.lower() for w in lists["structural_names"]),
        known_stores=tuple(w.lower() for w in lists["known_stores"]),
        promo_line_pattern=promo_line_pattern,
        grading_pattern=_word_alternation(lists["grading_words"]),
        promo_word_pattern=_word_alternation(lists["promo_words"]),
    )


@lru_cache(maxsize=1)
def default_vocabulary() -> ParserVocabulary:
    """Packaged vocabulary only (no project configuration)."""
    return build_parser_vocabulary([load_toml(DEFAULT_VOCABULARY_FILE)])
