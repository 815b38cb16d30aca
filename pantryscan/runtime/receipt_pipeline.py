"""Runtime helpers for the receipt OCR edge call (non-server)."""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import httpx

from pantryscan.receipt.ocr_helpers import prepare_image_bytes, transform_ocr_detections
from pantryscan.receipt.ocr_result_parser import join_ocr_texts
from pantryscan.runtime.logging import get_logger
from pantryscan.runtime.paths import get_paths

logger = get_logger(__name__)

OCR_TIMEOUT_SECONDS = 60.0

ProgressCallback = Callable[[int, int], None]


class OCRServiceUnavailable(RuntimeError):
    """Raised when the OCR service cannot be reached, errors, or the image is unreadable."""


def _post(client: httpx.Client | None, url: str, **kwargs: Any) -> httpx.Response:
    if client is None:
        return httpx.post(url, **kwargs)
    return client.post(url, **kwargs)


def call_ocr_image(
    image_bytes: bytes,
    filename: str,
    ocr_url: str,
    client: httpx.Client | None = None,
) -> tuple[dict[str, Any], str]:
    """
    Send one image to the OCR service.

    Returns:
        Tuple of (raw_result, recognized_text).
    """
    ocr_url = ocr_url.rstrip("/")
    logger.info("Sending %s to OCR service at %s...", filename, ocr_url)

    try:
        prepared = prepare_image_bytes(image_bytes)
    except OSError as e:
        # PIL's UnidentifiedImageError is an OSError
        logger.error("Cannot read image %s: %s", filename, e)
        raise OCRServiceUnavailable(f"Cannot read image {filename}: {e}") from e

    try:
        start_time = time.time()
        response = _post(
            client,
            f"{ocr_url}/ocr",
            files={"file": (filename, prepared, "image/jpeg")},
            timeout=OCR_TIMEOUT_SECONDS,
        )
        logger.info("OCR service returned in %.2f seconds", time.time() - start_time)
    except httpx.RequestError as e:
        logger.error("Failed to connect to OCR service: %s", e)
        raise OCRServiceUnavailable(f"Failed to connect to OCR service: {e}") from e

    if response.status_code != 200:
        logger.error("OCR service error: %s", response.status_code)
        raise OCRServiceUnavailable(f"OCR service error: {response.status_code}")

    try:
        raw_result = response.json()
    except ValueError as e:
        raise OCRServiceUnavailable("OCR service returned invalid JSON") from e
    if not isinstance(raw_result, dict):
        raise OCRServiceUnavailable("OCR service returned an unexpected payload")

    try:
        text = transform_ocr_detections(raw_result)
    except (TypeError, ValueError, KeyError, IndexError) as e:
        raise OCRServiceUnavailable(f"OCR service returned malformed detections: {e}") from e
    return raw_result, text


def call_ocr_service(
    receipt_path: Path,
    ocr_url: str,
    client: httpx.Client | None = None,
) -> tuple[dict[str, Any], str]:
    """Read an image file and send it to the OCR service."""
    try:
        image_bytes = receipt_path.read_bytes()
    except OSError as e:
        raise OCRServiceUnavailable(f"Cannot read image {receipt_path}: {e}") from e
    return call_ocr_image(image_bytes, receipt_path.name, ocr_url, client=client)


def recognize_images(
    images: Sequence[tuple[str, bytes]],
    ocr_url: str,
    on_progress: ProgressCallback | None = None,
    client: httpx.Client | None = None,
    raw_results: list[dict[str, Any]] | None = None,
) -> str:
    """
    OCR a batch of images one after another and join their text.

    Args:
        images: (filename, image bytes) pairs in upload order
        ocr_url: Base URL of the OCR service
        on_progress: Called with (completed, total) after each image
        client: Optional httpx client (tests pass one with a mock transport)
        raw_results: When given, raw OCR payloads are appended to it

    Raises:
        OCRServiceUnavailable: If any image fails; the batch is not partially parsed.
    """
    texts: list[str] = []
    total = len(images)
    for index, (filename, image_bytes) in enumerate(images, start=1):
        raw, text = call_ocr_image(image_bytes, filename, ocr_url, client=client)
        texts.append(text)
        if raw_results is not None:
            raw_results.append(raw)
        if on_progress is not None:
            on_progress(index, total)
    return join_ocr_texts(texts)


def save_ocr_json(ocr_result: dict[str, Any], receipt_path: Path) -> Path:
    """Save OCR result JSON for debugging."""
    ocr_json_dir = get_paths().receipts_ocr_json
    ocr_json_dir.mkdir(parents=True, exist_ok=True)
    ocr_json_path = ocr_json_dir / f"{receipt_path.stem}.json"
    ocr_json_path.write_text(json.dumps(ocr_result, indent=2))
    logger.debug("OCR JSON saved to: %s", ocr_json_path)
    return ocr_json_path
