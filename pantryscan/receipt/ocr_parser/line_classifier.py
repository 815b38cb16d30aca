"""Separate product lines from promotional and total/payment lines."""

from __future__ import annotations

import logging
from enum import Enum

from .common import NEGATIVE_AMOUNT_LINE, ParserVocabulary, default_vocabulary

logger = logging.getLogger(__name__)


class LineKind(Enum):
    PRODUCT = "product"
    PROMOTIONAL = "promotional"
    TOTAL = "total"


def is_promotional_line(line: str, vocabulary: ParserVocabulary | None = None) -> bool:
    """Return True for markdown lines: a leading promo marker or a leading negative amount."""
    vocab = vocabulary or default_vocabulary()
    return bool(vocab.promo_line_pattern.match(line) or NEGATIVE_AMOUNT_LINE.match(line))


def is_total_line(line: str, vocabulary: ParserVocabulary | None = None) -> bool:
    """Return True when any word of the line contains a total/payment/tax indicator.

    Matching is by substring inside each word, so "COFFEE" counts (it contains
    "fee") and so does "CASHEW" ("cash"). Those products are dropped along
    with real total lines.
    """
    vocab = vocabulary or default_vocabulary()
    for word in line.lower().split():
        if any(indicator in word for indicator in vocab.total_indicators):
            return True
    return False


def classify_line(line: str, vocabulary: ParserVocabulary | None = None) -> LineKind:
    """Classify one OCR line. The promotional check runs before the total check."""
    if is_promotional_line(line, vocabulary):
        logger.debug("Skipping promotional line: %r", line)
        return LineKind.PROMOTIONAL
    if is_total_line(line, vocabulary):
        logger.debug("Skipping total line: %r", line)
        return LineKind.TOTAL
    return LineKind.PRODUCT
