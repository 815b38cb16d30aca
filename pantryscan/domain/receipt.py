"""Data models for receipt and dictation item extraction."""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal

DEFAULT_UNIT = "each"
MANUAL_CONFIDENCE = 100


@dataclass(frozen=True)
class RawLine:
    """A single line of OCR text and its 0-based position in the document."""

    text: str
    index: int


@dataclass(frozen=True)
class ReconstructedPrice:
    """A price recovered from one or more tokens of a normalized line."""

    amount: Decimal
    token_indices: frozenset[int]
    source_tokens: tuple[str, ...]
    strategy: str

    @property
    def is_positive(self) -> bool:
        return self.amount > 0


@dataclass
class ExtractedItem:
    """A purchasable item ready for review and inventory ingestion.

    Identity within one processing run is the lowercased name. Only
    quantity and price change after creation (during deduplication).
    """

    id: str
    name: str
    quantity: int = 1
    unit: str = DEFAULT_UNIT
    price: Decimal | None = None
    category: str = "pantry"
    estimated_shelf_life: int = 14
    confidence: int = 75

    @property
    def key(self) -> str:
        return self.name.lower().strip()


@dataclass
class ManualItem:
    """Item typed or dictated by the user before promotion to ExtractedItem."""

    name: str
    quantity: int = 1
    unit: str = DEFAULT_UNIT
    category: str = "pantry"
    estimated_shelf_life: int = 7
    confidence: int = MANUAL_CONFIDENCE

    def to_extracted(self, item_id: str) -> ExtractedItem:
        return ExtractedItem(
            id=item_id,
            name=self.name,
            quantity=max(1, self.quantity),
            unit=self.unit,
            price=None,
            category=self.category,
            estimated_shelf_life=self.estimated_shelf_life,
            confidence=self.confidence,
        )


def promote_items(items: list[ManualItem], id_prefix: str) -> list[ExtractedItem]:
    """Promote ManualItems to ExtractedItems numbered ``<prefix>-0``, ``<prefix>-1``..."""
    return [item.to_extracted(f"{id_prefix}-{n}") for n, item in enumerate(items)]


@dataclass
class ProcessingResult:
    """Outcome of one image batch or one dictation session."""

    receipt_id: str
    purchase_date: date
    items: list[ExtractedItem] = field(default_factory=list)
    confidence: int = 0
    store_name: str | None = None
    total_amount: Decimal | None = None
    raw_text: str = ""
    processing_method: str = "ocr"  # "ocr", "dictation" or "manual"

    def with_items(self, items: list[ExtractedItem], confidence: int | None = None) -> "ProcessingResult":
        """Return a copy carrying a different item list (the original is left untouched)."""
        return replace(
            self,
            items=list(items),
            confidence=self.confidence if confidence is None else confidence,
        )
