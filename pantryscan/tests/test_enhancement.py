import json
from datetime import date
from decimal import Decimal

import httpx
import pytest

from pantryscan.application.receipts.enhance import FALLBACK_NOTICE, enhance_result
from pantryscan.domain import ExtractedItem, ProcessingResult
from pantryscan.runtime.enhancement_gateway import (
    ENHANCED_DEFAULT_CONFIDENCE,
    EnhancementGateway,
    EnhancementUnavailable,
)


def _item(item_id: str, name: str, price: str = "1.00") -> ExtractedItem:
    return ExtractedItem(id=item_id, name=name, price=Decimal(price))


def _result(*items: ExtractedItem) -> ProcessingResult:
    return ProcessingResult(
        receipt_id="ocr-1",
        purchase_date=date(2025, 8, 20),
        items=list(items),
        confidence=65,
        store_name="PUBLIX",
    )


def _gateway(handler) -> EnhancementGateway:
    return EnhancementGateway("http://enhance.test/", client=httpx.Client(transport=httpx.MockTransport(handler)))


class FakeGateway:
    def __init__(self, replies: dict[str, ExtractedItem | Exception]) -> None:
        self.replies = replies
        self.calls: list[str] = []

    def enhance_item(self, item: ExtractedItem, store_name: str | None, purchase_date: date) -> ExtractedItem:
        self.calls.append(item.name)
        reply = self.replies[item.name]
        if isinstance(reply, Exception):
            raise reply
        return reply


def test_gateway_sends_one_item_and_merges_reply() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"items": [{"name": "Whole Milk 2%", "category": "dairy", "estimatedShelfLife": 10}]})

    enhanced = _gateway(handler).enhance_item(_item("ocr-0", "Whole Milk", "3.50"), "PUBLIX", date(2025, 8, 20))

    assert seen[0]["storeName"] == "PUBLIX"
    assert seen[0]["purchaseDate"] == "2025-08-20"
    assert [item["name"] for item in seen[0]["items"]] == ["Whole Milk"]
    assert enhanced.id == "ocr-0"
    assert enhanced.name == "Whole Milk 2%"
    assert enhanced.estimated_shelf_life == 10
    assert enhanced.price == Decimal("3.50")
    assert enhanced.confidence == ENHANCED_DEFAULT_CONFIDENCE


def test_gateway_defaults_store_name() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"items": [{"name": "eggs", "confidence": 90}]})

    enhanced = _gateway(handler).enhance_item(_item("ocr-0", "Eggs"), None, date(2025, 8, 20))

    assert seen[0]["storeName"] == "Store"
    assert enhanced.confidence == 90


@pytest.mark.parametrize("reply_price", [250.0, 100.0, 0.01, -1.0])
def test_gateway_keeps_original_price_when_reply_price_out_of_range(reply_price: float) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": [{"name": "Milk", "price": reply_price}]})

    enhanced = _gateway(handler).enhance_item(_item("ocr-0", "Milk", "3.50"), "PUBLIX", date(2025, 8, 20))

    assert enhanced.price == Decimal("3.50")


def test_gateway_accepts_in_range_reply_price() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": [{"name": "Milk", "price": 3.75}]})

    enhanced = _gateway(handler).enhance_item(_item("ocr-0", "Milk", "3.50"), "PUBLIX", date(2025, 8, 20))

    assert enhanced.price == Decimal("3.75")


def test_enhance_result_never_carries_out_of_range_price() -> None:
    gateway = _gateway(lambda request: httpx.Response(200, json={"items": [{"name": "Milk", "price": 250.0}]}))

    outcome = enhance_result(_result(_item("ocr-0", "Milk", "3.50")), gateway, sleep=lambda s: None)

    assert outcome.result.items[0].price == Decimal("3.50")


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500),
        httpx.Response(200, content=b"<html>"),
        httpx.Response(200, json={"items": []}),
        httpx.Response(200, json={"result": "ok"}),
    ],
)
def test_gateway_failures_raise_unavailable(response: httpx.Response) -> None:
    with pytest.raises(EnhancementUnavailable):
        _gateway(lambda request: response).enhance_item(_item("ocr-0", "Eggs"), "PUBLIX", date(2025, 8, 20))


def test_enhance_result_boosts_confidence_and_sleeps_between_items() -> None:
    gateway = FakeGateway(
        {
            "Milk": ExtractedItem(id="ocr-0", name="Whole Milk", category="dairy", confidence=85),
            "Eggs": ExtractedItem(id="ocr-1", name="Large Eggs", category="dairy", confidence=85),
        }
    )
    sleeps: list[float] = []
    progress: list[tuple[int, int, str]] = []
    original = _result(_item("ocr-0", "Milk"), _item("ocr-1", "Eggs"))

    outcome = enhance_result(
        original,
        gateway,
        on_progress=lambda i, n, name: progress.append((i, n, name)),
        sleep=sleeps.append,
    )

    assert [item.name for item in outcome.result.items] == ["Whole Milk", "Large Eggs"]
    assert outcome.result.confidence == 80
    assert outcome.enhanced_count == 2
    assert outcome.notice is None
    assert sleeps == [0.3]
    assert progress == [(1, 2, "Milk"), (2, 2, "Eggs")]
    # the input result is left untouched
    assert [item.name for item in original.items] == ["Milk", "Eggs"]


def test_enhance_result_falls_back_per_item() -> None:
    gateway = FakeGateway(
        {
            "Milk": ExtractedItem(id="ocr-0", name="Whole Milk", category="dairy", confidence=85),
            "Chicken Thighs": EnhancementUnavailable("timeout"),
        }
    )

    outcome = enhance_result(_result(_item("ocr-0", "Milk"), _item("ocr-1", "Chicken Thighs")), gateway, sleep=lambda s: None)

    fallback = outcome.result.items[1]
    assert fallback.name == "Chicken Thighs"
    assert fallback.category == "meat"
    assert fallback.estimated_shelf_life == 7
    assert fallback.confidence == 75
    assert outcome.fallback_count == 1
    assert outcome.notice == FALLBACK_NOTICE
    assert outcome.result.confidence == 80


def test_enhance_result_without_gateway_is_local_only() -> None:
    outcome = enhance_result(_result(_item("ocr-0", "Bananas")), None, sleep=lambda s: None)

    assert outcome.enhanced_count == 0
    assert outcome.result.items[0].category == "produce"
    assert outcome.result.confidence == 70
    assert outcome.notice == FALLBACK_NOTICE


def test_enhance_result_caps_confidence() -> None:
    gateway = FakeGateway({"Milk": ExtractedItem(id="ocr-0", name="Milk", confidence=85)})
    result = _result(_item("ocr-0", "Milk"))
    result.confidence = 90

    outcome = enhance_result(result, gateway, sleep=lambda s: None)

    assert outcome.result.confidence == 95
