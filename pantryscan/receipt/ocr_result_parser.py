"""Parse raw OCR text into a ProcessingResult."""

from __future__ import annotations

import logging
import time
from datetime import date

from pantryscan.domain import ProcessingResult, RawLine

from .item_categories import CategoryRuleLayers
from .ocr_parser import (
    ItemMerger,
    LineKind,
    ParserVocabulary,
    classify_line,
    extract_item,
    extract_store_name,
    extract_total_amount,
    reconstruct_prices,
)
from .ocr_parser.common import MAX_RESULT_ITEMS, OCR_RESULT_CONFIDENCE

logger = logging.getLogger(__name__)


def split_raw_lines(text: str) -> list[RawLine]:
    """Split OCR text into trimmed, non-empty lines numbered from 0."""
    stripped = (line.strip() for line in text.split("\n"))
    return [RawLine(text=line, index=i) for i, line in enumerate(line for line in stripped if line)]


def join_ocr_texts(texts: list[str]) -> str:
    """Concatenate the text of several images, one block per image."""
    return "".join(text + "\n" for text in texts)


def new_receipt_id(prefix: str = "ocr") -> str:
    return f"{prefix}-{int(time.time() * 1000)}"


def parse_receipt_text(
    text: str,
    *,
    receipt_id: str | None = None,
    purchase_date: date | None = None,
    vocabulary: ParserVocabulary | None = None,
    rule_layers: CategoryRuleLayers | None = None,
) -> ProcessingResult:
    """
    Parse OCR text into items, store name and total.

    This is a best-effort parser - results should be reviewed by the user.

    Args:
        text: OCR text of one or more receipt images, newline separated
        receipt_id: Identifier for the result (default "ocr-<epoch millis>")
        purchase_date: Defaults to today
        vocabulary: Preloaded line vocabulary (typically from runtime loader)
        rule_layers: Preloaded category rules (typically from runtime loader)

    Returns:
        ProcessingResult with at most MAX_RESULT_ITEMS items, possibly none.
    """
    merger = ItemMerger()
    for raw in split_raw_lines(text):
        if classify_line(raw.text, vocabulary) is not LineKind.PRODUCT:
            continue
        reconstruction = reconstruct_prices(raw.text)
        item = extract_item(
            reconstruction,
            item_id=f"ocr-{len(merger)}",
            vocabulary=vocabulary,
            rule_layers=rule_layers,
        )
        if item is None:
            logger.debug("Dropped line %d: %r", raw.index, raw.text)
            continue
        merger.add(item)

    items = merger.items(MAX_RESULT_ITEMS)
    logger.debug("Extracted %d items (%d before truncation)", len(items), len(merger))
    return ProcessingResult(
        receipt_id=receipt_id or new_receipt_id("ocr"),
        purchase_date=purchase_date or date.today(),
        items=items,
        confidence=OCR_RESULT_CONFIDENCE,
        store_name=extract_store_name(text, vocabulary),
        total_amount=extract_total_amount(text),
        raw_text=text,
        processing_method="ocr",
    )
