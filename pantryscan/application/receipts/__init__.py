"""Receipt, dictation and review workflows."""

from pantryscan.application.receipts.dictation import (
    DictationResult,
    ManualEntryResult,
    run_dictation,
    run_manual_entry,
)
from pantryscan.application.receipts.enhance import EnhancementOutcome, enhance_result
from pantryscan.application.receipts.review import CommitResult, ReviewSession
from pantryscan.application.receipts.scan import (
    ReceiptScanRequest,
    ReceiptScanResult,
    run_receipt_scan,
    run_text_scan,
)

__all__ = [
    "ReceiptScanRequest",
    "ReceiptScanResult",
    "run_receipt_scan",
    "run_text_scan",
    "DictationResult",
    "ManualEntryResult",
    "run_dictation",
    "run_manual_entry",
    "EnhancementOutcome",
    "enhance_result",
    "CommitResult",
    "ReviewSession",
]
