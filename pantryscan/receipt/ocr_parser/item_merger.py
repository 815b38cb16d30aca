"""Collapse repeated product lines into one item with a summed quantity."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from pantryscan.domain import ExtractedItem

from .common import MAX_RESULT_ITEMS

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
# Prices closer than this are treated as the same price
PRICE_TOLERANCE = Decimal("0.01")


class ItemMerger:
    """Incremental, order-preserving deduplication keyed by lowercase name.

    A repeated item gains one unit of quantity. When the repeat's price
    differs by more than a cent, the stored price becomes the running mean
    of all occurrences, which rewrites the price already shown for the
    earlier occurrence.
    """

    def __init__(self) -> None:
        self._items: dict[str, ExtractedItem] = {}

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: ExtractedItem) -> ExtractedItem:
        """Add an item and return the stored entry it was merged into."""
        existing = self._items.get(item.key)
        if existing is None:
            self._items[item.key] = item
            return item

        existing.quantity += 1
        if existing.price is not None and item.price is not None:
            if abs(existing.price - item.price) > PRICE_TOLERANCE:
                n = existing.quantity
                mean = (existing.price * (n - 1) + item.price) / n
                existing.price = mean.quantize(CENTS, rounding=ROUND_HALF_UP)
        logger.debug("Merged duplicate %r: quantity=%d price=%s", existing.name, existing.quantity, existing.price)
        return existing

    def items(self, limit: int | None = MAX_RESULT_ITEMS) -> list[ExtractedItem]:
        """Items in first-seen order, truncated to ``limit``."""
        merged = list(self._items.values())
        return merged if limit is None else merged[:limit]


def merge_items(items: Iterable[ExtractedItem], limit: int | None = MAX_RESULT_ITEMS) -> list[ExtractedItem]:
    merger = ItemMerger()
    for item in items:
        merger.add(item)
    return merger.items(limit)
