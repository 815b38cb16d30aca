"""HTTP client for committing reviewed items to the inventory service."""

from __future__ import annotations

from datetime import date
from typing import Any

import httpx

from pantryscan.domain import ExtractedItem
from pantryscan.receipt.formatter import commit_payload
from pantryscan.runtime.logging import get_logger

logger = get_logger(__name__)

COMMIT_TIMEOUT_SECONDS = 30.0


class InventoryCommitFailed(RuntimeError):
    """Raised when the inventory service rejects or cannot receive a commit."""


class InventoryClient:
    """POST ``{receiptId, items, purchaseDate}`` to ``<base_url>/api/add-receipt-items``."""

    def __init__(
        self,
        base_url: str,
        client: httpx.Client | None = None,
        timeout: float = COMMIT_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/api/add-receipt-items"

    def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._client is None:
            return httpx.post(self.endpoint, json=payload, timeout=self._timeout)
        return self._client.post(self.endpoint, json=payload, timeout=self._timeout)

    def commit_items(self, receipt_id: str, items: list[ExtractedItem], purchase_date: date) -> int:
        """
        Commit items and return how many the inventory reports as added.

        Raises:
            InventoryCommitFailed: On transport errors, non-2xx replies or an
                explicit ``success: false``.
        """
        logger.info("Committing %d items from %s to %s", len(items), receipt_id, self.endpoint)
        try:
            response = self._post(commit_payload(receipt_id, items, purchase_date))
        except httpx.RequestError as e:
            logger.error("Failed to connect to inventory service: %s", e)
            raise InventoryCommitFailed(f"Failed to connect to inventory service: {e}") from e

        if not response.is_success:
            message = f"Inventory service error: {response.status_code}"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                message = f"{message} - {body['error']}"
            logger.error(message)
            raise InventoryCommitFailed(message)

        try:
            body = response.json()
        except ValueError:
            body = {}
        if isinstance(body, dict) and body.get("success") is False:
            raise InventoryCommitFailed(str(body.get("error") or "Inventory service reported failure"))

        added = body.get("itemsAdded") if isinstance(body, dict) else None
        return int(added) if isinstance(added, int) else len(items)
