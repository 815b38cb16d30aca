from datetime import date
from decimal import Decimal

import pytest

from pantryscan.domain import ExtractedItem, ProcessingResult
from pantryscan.receipt.formatter import (
    commit_payload,
    format_processing_result,
    item_from_payload,
    item_to_payload,
    result_to_payload,
)


def _result() -> ProcessingResult:
    return ProcessingResult(
        receipt_id="ocr-1",
        purchase_date=date(2025, 8, 20),
        items=[
            ExtractedItem(id="ocr-0", name="Whole Milk", quantity=2, price=Decimal("3.55"), category="dairy", estimated_shelf_life=7),
            ExtractedItem(id="ocr-1", name="Bananas", price=Decimal("1.29"), category="produce", estimated_shelf_life=3),
        ],
        confidence=65,
        store_name="PUBLIX",
        total_amount=Decimal("16.17"),
    )


def test_item_payload_uses_camel_case() -> None:
    payload = item_to_payload(_result().items[0])

    assert payload == {
        "id": "ocr-0",
        "name": "Whole Milk",
        "quantity": 2,
        "unit": "each",
        "price": 3.55,
        "category": "dairy",
        "estimatedShelfLife": 7,
        "confidence": 75,
    }


def test_item_payload_omits_missing_price() -> None:
    payload = item_to_payload(ExtractedItem(id="dictation-0", name="apples", confidence=100))

    assert "price" not in payload


def test_result_payload() -> None:
    payload = result_to_payload(_result())

    assert payload["receiptId"] == "ocr-1"
    assert payload["purchaseDate"] == "2025-08-20"
    assert payload["storeName"] == "PUBLIX"
    assert payload["totalAmount"] == 16.17
    assert payload["confidence"] == 65
    assert [item["id"] for item in payload["items"]] == ["ocr-0", "ocr-1"]


def test_result_payload_without_store_or_total() -> None:
    result = ProcessingResult(receipt_id="dictation-1", purchase_date=date(2025, 8, 20), processing_method="dictation")

    payload = result_to_payload(result)

    assert "storeName" not in payload
    assert "totalAmount" not in payload
    assert payload["items"] == []


def test_commit_payload() -> None:
    result = _result()

    payload = commit_payload(result.receipt_id, result.items, result.purchase_date)

    assert set(payload) == {"receiptId", "items", "purchaseDate"}
    assert payload["purchaseDate"] == "2025-08-20"


def test_item_from_payload_fills_missing_fields_from_defaults() -> None:
    original = _result().items[1]

    item = item_from_payload({"name": "Organic Bananas", "category": "produce", "estimatedShelfLife": 5}, defaults=original)

    assert item.id == "ocr-1"
    assert item.name == "Organic Bananas"
    assert item.estimated_shelf_life == 5
    assert item.price == Decimal("1.29")
    assert item.quantity == 1


def test_item_from_payload_rejects_bad_data() -> None:
    with pytest.raises(ValueError):
        item_from_payload({"name": "  "})
    with pytest.raises(ValueError):
        item_from_payload({"name": "milk", "quantity": "lots"})
    with pytest.raises(ValueError):
        item_from_payload({"name": "milk", "price": "free"})


def test_format_processing_result_table() -> None:
    text = format_processing_result(_result())

    assert "Store:      PUBLIX" in text
    assert "Total:      16.17" in text
    assert "Items:      2" in text
    lines = text.splitlines()
    milk_line = next(line for line in lines if "Whole Milk" in line)
    assert "2 each" in milk_line
    assert "3.55" in milk_line
    assert "dairy" in milk_line
    assert milk_line.endswith("7d")


def test_format_empty_result() -> None:
    result = ProcessingResult(receipt_id="ocr-2", purchase_date=date(2025, 8, 20))

    text = format_processing_result(result)

    assert "Items:      0" in text
    assert "Name" not in text
