"""Receipt scan workflow orchestration."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pantryscan.receipt.ocr_result_parser import parse_receipt_text
from pantryscan.runtime import get_logger, load_category_rule_layers, load_parser_vocabulary
from pantryscan.runtime.receipt_pipeline import OCRServiceUnavailable, recognize_images, save_ocr_json

if TYPE_CHECKING:
    import httpx

    from pantryscan.domain import ProcessingResult

logger = get_logger(__name__)

ScanStatus = Literal[
    "file_not_found",
    "ocr_unavailable",
    "no_items",
    "scanned",
]

OCR_FAILED_MESSAGE = "OCR processing failed. Please try manual entry or dictation."
NO_ITEMS_MESSAGE = "No items found on the receipt. Add them manually or dictate them instead."


@dataclass(frozen=True)
class ReceiptScanRequest:
    """Inputs for running receipt scan workflow."""

    image_paths: Sequence[Path]
    ocr_url: str
    purchase_date: date | None = None
    keep_ocr_json: bool = True
    on_progress: Callable[[int, int], None] | None = None


@dataclass(frozen=True)
class ReceiptScanResult:
    """Outcome from receipt scan workflow."""

    status: ScanStatus
    result: ProcessingResult | None = None
    error: str | None = None


def _parse(text: str, purchase_date: date | None) -> ReceiptScanResult:
    result = parse_receipt_text(
        text,
        purchase_date=purchase_date,
        vocabulary=load_parser_vocabulary(),
        rule_layers=load_category_rule_layers(),
    )
    if not result.items:
        return ReceiptScanResult(status="no_items", result=result, error=NO_ITEMS_MESSAGE)
    return ReceiptScanResult(status="scanned", result=result)


def run_receipt_scan(request: ReceiptScanRequest, client: httpx.Client | None = None) -> ReceiptScanResult:
    """Run scan flow: OCR every image in order -> join text -> parse."""
    missing = [path for path in request.image_paths if not path.exists()]
    if missing or not request.image_paths:
        return ReceiptScanResult(
            status="file_not_found",
            error=f"Receipt file not found: {missing[0] if missing else '(none given)'}",
        )

    raw_results: list[dict] = []
    try:
        images = [(path.name, path.read_bytes()) for path in request.image_paths]
        text = recognize_images(
            images,
            request.ocr_url,
            on_progress=request.on_progress,
            client=client,
            raw_results=raw_results,
        )
    except (OCRServiceUnavailable, OSError) as exc:
        logger.error("Receipt OCR failed: %s", exc)
        return ReceiptScanResult(status="ocr_unavailable", error=f"{OCR_FAILED_MESSAGE} ({exc})")

    if request.keep_ocr_json:
        for path, raw in zip(request.image_paths, raw_results):
            save_ocr_json(raw, path)

    return _parse(text, request.purchase_date)


def run_text_scan(text: str, purchase_date: date | None = None) -> ReceiptScanResult:
    """Parse OCR text produced elsewhere (e.g. a saved OCR dump)."""
    return _parse(text, purchase_date)
