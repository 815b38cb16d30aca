"""Store name and total amount extraction helpers."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from .common import DEFAULT_STORE_NAME, STORE_SCAN_LINES, ParserVocabulary, default_vocabulary

TOTAL_PATTERN = re.compile(r"TOTAL[\s:]*(\d+\.?\d*)", re.IGNORECASE)


def extract_store_name(text: str, vocabulary: ParserVocabulary | None = None) -> str:
    """
    Find the store name in the first few lines of the receipt.

    Returns the first of the leading lines mentioning a known retailer, in
    its original case, or "Store" when none does.
    """
    vocab = vocabulary or default_vocabulary()
    lines = [line.strip() for line in text.split("\n")]
    for line in lines[:STORE_SCAN_LINES]:
        lowered = line.lower()
        if any(store in lowered for store in vocab.known_stores):
            return line
    return DEFAULT_STORE_NAME


def extract_total_amount(text: str) -> Decimal | None:
    """Return the amount after the first "TOTAL" in the text (SUBTOTAL included)."""
    match = TOTAL_PATTERN.search(text)
    if not match:
        return None
    try:
        return Decimal(match.group(1).rstrip("."))
    except InvalidOperation:
        return None
