"""Core domain models for pantryscan.

This module provides the data models shared by both extraction pipelines:
- RawLine, ReconstructedPrice: intermediate OCR parsing records
- ExtractedItem, ManualItem: items produced by OCR, dictation or manual entry
- ProcessingResult: one receipt batch or dictation session

Usage:
    from pantryscan.domain import ExtractedItem, ProcessingResult
"""

from pantryscan.domain.receipt import (
    DEFAULT_UNIT,
    MANUAL_CONFIDENCE,
    ExtractedItem,
    ManualItem,
    ProcessingResult,
    RawLine,
    ReconstructedPrice,
    promote_items,
)

__all__ = [
    "DEFAULT_UNIT",
    "MANUAL_CONFIDENCE",
    "ExtractedItem",
    "ManualItem",
    "ProcessingResult",
    "RawLine",
    "ReconstructedPrice",
    "promote_items",
]
