"""HTTP client for the external item-enhancement service."""

from __future__ import annotations

from datetime import date
from typing import Any

import httpx

from pantryscan.domain import ExtractedItem
from pantryscan.receipt.formatter import item_from_payload, item_to_payload
from pantryscan.receipt.ocr_parser.common import DEFAULT_STORE_NAME, PRICE_MAX, PRICE_MIN
from pantryscan.runtime.logging import get_logger

logger = get_logger(__name__)

ENHANCE_TIMEOUT_SECONDS = 30.0
# Confidence assumed for an enhanced item whose reply carries none
ENHANCED_DEFAULT_CONFIDENCE = 85


class EnhancementUnavailable(RuntimeError):
    """Raised when the enhancement service fails or replies with something unusable."""


class EnhancementGateway:
    """Send one item at a time to ``<base_url>/api/enhance-items``.

    Request:  {"items": [item], "storeName": ..., "purchaseDate": "YYYY-MM-DD"}
    Response: {"items": [item]}
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.Client | None = None,
        timeout: float = ENHANCE_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/api/enhance-items"

    def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._client is None:
            return httpx.post(self.endpoint, json=payload, timeout=self._timeout)
        return self._client.post(self.endpoint, json=payload, timeout=self._timeout)

    def enhance_item(self, item: ExtractedItem, store_name: str | None, purchase_date: date) -> ExtractedItem:
        """
        Ask the service for a better name, category and shelf life.

        Fields missing from the reply keep the item's values, and so does a
        reply price outside the item price bounds.

        Raises:
            EnhancementUnavailable: On transport errors, non-2xx replies or malformed bodies.
        """
        payload = {
            "items": [item_to_payload(item)],
            "storeName": store_name or DEFAULT_STORE_NAME,
            "purchaseDate": purchase_date.isoformat(),
        }
        try:
            response = self._post(payload)
        except httpx.RequestError as e:
            raise EnhancementUnavailable(f"Failed to connect to enhancement service: {e}") from e

        if not response.is_success:
            raise EnhancementUnavailable(f"Enhancement service error: {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise EnhancementUnavailable("Enhancement service returned invalid JSON") from e

        items = body.get("items") if isinstance(body, dict) else None
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            raise EnhancementUnavailable("Enhancement service returned no items")

        reply = items[0]
        try:
            enhanced = item_from_payload(reply, defaults=item)
        except ValueError as e:
            raise EnhancementUnavailable(f"Enhancement service returned a malformed item: {e}") from e

        if enhanced.price is not None and not PRICE_MIN < enhanced.price < PRICE_MAX:
            logger.warning("Ignoring out-of-range price %s for %r from enhancement service", enhanced.price, item.name)
            enhanced.price = item.price
        if not reply.get("confidence"):
            enhanced.confidence = ENHANCED_DEFAULT_CONFIDENCE
        logger.debug("Enhanced %r -> %r (%s)", item.name, enhanced.name, enhanced.category)
        return enhanced
