"""Dictation and manual-entry workflows: the fallback tiers when OCR fails."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from datetime import date
from typing import Literal

from pantryscan.domain import MANUAL_CONFIDENCE, ManualItem, ProcessingResult, promote_items
from pantryscan.receipt.dictation_parser import dictation_result
from pantryscan.runtime import get_logger, load_category_rule_layers

logger = get_logger(__name__)

DictationStatus = Literal["empty_transcript", "no_items", "parsed"]
ManualEntryStatus = Literal["no_items", "entered"]

MANUAL_ID_PREFIX = "manual"


@dataclass(frozen=True)
class DictationResult:
    status: DictationStatus
    result: ProcessingResult | None = None
    error: str | None = None


@dataclass(frozen=True)
class ManualEntryResult:
    status: ManualEntryStatus
    result: ProcessingResult | None = None
    error: str | None = None


def run_dictation(transcript: str, purchase_date: date | None = None) -> DictationResult:
    """Parse a final speech transcript into a dictation ProcessingResult."""
    if not transcript.strip():
        return DictationResult(status="empty_transcript", error="No dictated text to process")

    result = dictation_result(
        transcript,
        purchase_date=purchase_date,
        rule_layers=load_category_rule_layers(),
    )
    if not result.items:
        return DictationResult(
            status="no_items",
            result=result,
            error="Could not extract items from dictated text. Try a clearer format.",
        )
    logger.info("Extracted %d items from dictation", len(result.items))
    return DictationResult(status="parsed", result=result)


def run_manual_entry(items: list[ManualItem], purchase_date: date | None = None) -> ManualEntryResult:
    """Promote typed items; names are trimmed and lowercased, blank names skipped."""
    cleaned = [
        replace(item, name=item.name.strip().lower(), confidence=MANUAL_CONFIDENCE)
        for item in items
        if item.name.strip()
    ]
    if not cleaned:
        return ManualEntryResult(status="no_items", error="Please add at least one item")

    result = ProcessingResult(
        receipt_id=f"{MANUAL_ID_PREFIX}-{int(time.time() * 1000)}",
        purchase_date=purchase_date or date.today(),
        items=promote_items(cleaned, MANUAL_ID_PREFIX),
        confidence=MANUAL_CONFIDENCE,
        processing_method="manual",
    )
    return ManualEntryResult(status="entered", result=result)
