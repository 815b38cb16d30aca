"""Review a processing result and commit the approved items to inventory."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Literal

from pantryscan.domain import ExtractedItem, ManualItem, ProcessingResult
from pantryscan.runtime import get_logger
from pantryscan.runtime.inventory_client import InventoryCommitFailed

if TYPE_CHECKING:
    from pantryscan.runtime.inventory_client import InventoryClient

logger = get_logger(__name__)

CommitStatus = Literal["no_items", "commit_failed", "committed"]

EDITABLE_FIELDS = frozenset({"name", "quantity", "unit", "price", "category", "estimated_shelf_life"})


def _whole_quantity(raw: Any) -> int:
    """Coerce an edited quantity to an int >= 1; fractional values are rejected."""
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid quantity: {raw!r}") from exc
    if not value.is_finite() or value != value.to_integral_value():
        raise ValueError(f"Quantity must be a whole number: {raw!r}")
    if value < 1:
        raise ValueError("Quantity must be at least 1")
    return int(value)


@dataclass(frozen=True)
class CommitResult:
    status: CommitStatus
    items_added: int = 0
    error: str | None = None


class ReviewSession:
    """User edits over a copy of a result's items.

    The wrapped ProcessingResult is never modified; ``confirm`` commits the
    reviewed copy.
    """

    def __init__(self, result: ProcessingResult) -> None:
        self.result = result
        self.review_items: list[ExtractedItem] = [replace(item) for item in result.items]
        self._added = 0

    def _find(self, item_id: str) -> ExtractedItem:
        for item in self.review_items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)

    def update_item(self, item_id: str, **fields: Any) -> ExtractedItem:
        """Change fields of one reviewed item.

        Raises:
            KeyError: Unknown item id.
            ValueError: Field that cannot be edited or an invalid value.
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")
        if "quantity" in fields:
            fields["quantity"] = _whole_quantity(fields["quantity"])
        if "name" in fields and not str(fields["name"]).strip():
            raise ValueError("Name cannot be empty")
        if fields.get("price") is not None:
            fields["price"] = Decimal(str(fields["price"]))

        item = self._find(item_id)
        for key, value in fields.items():
            setattr(item, key, value)
        return item

    def remove_item(self, item_id: str) -> None:
        self.review_items.remove(self._find(item_id))

    def _next_manual_id(self) -> str:
        taken = {item.id for item in self.review_items}
        while f"manual-{self._added}" in taken:
            self._added += 1
        item_id = f"manual-{self._added}"
        self._added += 1
        return item_id

    def add_item(self, item: ManualItem) -> ExtractedItem:
        """Append a hand-typed item to the review list under an unused ``manual-<n>`` id."""
        extracted = item.to_extracted(self._next_manual_id())
        extracted.name = extracted.name.strip().lower()
        self.review_items.append(extracted)
        return extracted

    def confirm(self, client: InventoryClient, purchase_date: date | None = None) -> CommitResult:
        """Commit the reviewed items."""
        if not self.review_items:
            return CommitResult(status="no_items", error="No items to add")
        try:
            added = client.commit_items(
                self.result.receipt_id,
                self.review_items,
                purchase_date or self.result.purchase_date,
            )
        except InventoryCommitFailed as exc:
            logger.error("Commit failed for %s: %s", self.result.receipt_id, exc)
            return CommitResult(status="commit_failed", error=str(exc))
        logger.info("Added %d items to inventory", added)
        return CommitResult(status="committed", items_added=added)
