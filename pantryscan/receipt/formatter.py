"""Serialize processing results as camelCase JSON payloads and text tables."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from pantryscan.domain import DEFAULT_UNIT, ExtractedItem, ProcessingResult

CENTS = Decimal("0.01")


def _money(value: Decimal | None) -> float | None:
    if value is None:
        return None
    return float(value.quantize(CENTS))


def item_to_payload(item: ExtractedItem) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": item.id,
        "name": item.name,
        "quantity": item.quantity,
        "unit": item.unit,
        "category": item.category,
        "estimatedShelfLife": item.estimated_shelf_life,
        "confidence": item.confidence,
    }
    if item.price is not None:
        payload["price"] = _money(item.price)
    return payload


def result_to_payload(result: ProcessingResult) -> dict[str, Any]:
    """Build the review payload: receiptId, storeName, purchaseDate, totalAmount, items, confidence."""
    payload: dict[str, Any] = {
        "receiptId": result.receipt_id,
        "purchaseDate": result.purchase_date.isoformat(),
        "items": [item_to_payload(item) for item in result.items],
        "confidence": result.confidence,
    }
    if result.store_name is not None:
        payload["storeName"] = result.store_name
    if result.total_amount is not None:
        payload["totalAmount"] = _money(result.total_amount)
    return payload


def commit_payload(receipt_id: str, items: list[ExtractedItem], purchase_date: date) -> dict[str, Any]:
    """Body of an inventory commit request."""
    return {
        "receiptId": receipt_id,
        "items": [item_to_payload(item) for item in items],
        "purchaseDate": purchase_date.isoformat(),
    }


def _parse_price(raw: Any) -> Decimal | None:
    if raw is None or raw == "":
        return None
    try:
        return Decimal(str(raw)).quantize(CENTS)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid price: {raw!r}") from exc


def item_from_payload(data: Mapping[str, Any], defaults: ExtractedItem | None = None) -> ExtractedItem:
    """
    Read an item payload, filling missing fields from ``defaults``.

    Raises:
        ValueError: If the payload has no usable name or a malformed number.
    """
    name = str(data.get("name") or (defaults.name if defaults else "")).strip()
    if not name:
        raise ValueError("Item payload has no name")

    def pick(key: str, fallback: Any) -> Any:
        value = data.get(key)
        return fallback if value is None else value

    try:
        quantity = int(pick("quantity", defaults.quantity if defaults else 1))
        shelf_life = int(pick("estimatedShelfLife", defaults.estimated_shelf_life if defaults else 14))
        confidence = int(pick("confidence", defaults.confidence if defaults else 0))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Malformed item payload: {exc}") from exc

    price = _parse_price(data["price"]) if "price" in data else (defaults.price if defaults else None)
    return ExtractedItem(
        id=str(pick("id", defaults.id if defaults else "")),
        name=name,
        quantity=max(1, quantity),
        unit=str(pick("unit", defaults.unit if defaults else DEFAULT_UNIT)),
        price=price,
        category=str(pick("category", defaults.category if defaults else "pantry")),
        estimated_shelf_life=shelf_life,
        confidence=confidence,
    )


def format_processing_result(result: ProcessingResult) -> str:
    """Render a result as an aligned plain-text table for the terminal."""
    lines = [
        f"Receipt:    {result.receipt_id}",
        f"Store:      {result.store_name or '-'}",
        f"Date:       {result.purchase_date.isoformat()}",
        f"Total:      {_format_amount(result.total_amount)}",
        f"Confidence: {result.confidence}%",
        f"Items:      {len(result.items)}",
    ]
    if not result.items:
        return "\n".join(lines)

    rows = [
        (
            item.name,
            f"{item.quantity} {item.unit}",
            _format_amount(item.price),
            item.category,
            f"{item.estimated_shelf_life}d",
        )
        for item in result.items
    ]
    headers = ("Name", "Qty", "Price", "Category", "Shelf")
    widths = [max(len(row[col]) for row in [headers, *rows]) for col in range(len(headers))]

    lines.append("")
    for row in [headers, *rows]:
        name, qty, price, category, shelf = row
        lines.append(
            f"  {name.ljust(widths[0])}  {qty.ljust(widths[1])}  {price.rjust(widths[2])}"
            f"  {category.ljust(widths[3])}  {shelf.rjust(widths[4])}".rstrip()
        )
    return "\n".join(lines)


def _format_amount(value: Decimal | None) -> str:
    return "-" if value is None else f"{value:.2f}"
