"""FastAPI server turning receipt photos, OCR text and dictation into item lists."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from pantryscan.domain import ProcessingResult
from pantryscan.receipt.dictation_parser import dictation_result
from pantryscan.receipt.formatter import result_to_payload
from pantryscan.receipt.ocr_result_parser import parse_receipt_text
from pantryscan.runtime.item_category_rules import load_category_rule_layers
from pantryscan.runtime.logging import get_logger
from pantryscan.runtime.paths import get_service_urls
from pantryscan.runtime.receipt_pipeline import OCRServiceUnavailable, recognize_images
from pantryscan.runtime.vocabulary_rules import load_parser_vocabulary

logger = get_logger(__name__)

OCR_FAILED_MESSAGE = "OCR processing failed. Please try manual entry or dictation."
NO_ITEMS_MESSAGE = "No items could be extracted. Try manual entry or dictation."
NO_DICTATION_ITEMS_MESSAGE = "Could not extract items from dictated text. Try a clearer format."

app = FastAPI(title="Pantry Scanner")


def _error(message: str, status_code: int, **extra: Any) -> JSONResponse:
    return JSONResponse({"status": "error", "message": message, **extra}, status_code=status_code)


def _result_response(result: ProcessingResult, no_items_message: str) -> JSONResponse:
    payload = result_to_payload(result)
    if not result.items:
        return _error(no_items_message, 422, code="no_items", result=payload)
    return JSONResponse({"status": "success", "result": payload})


async def _json_field(request: Request, field: str) -> str | None:
    try:
        body = await request.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    value = body.get(field)
    return value if isinstance(value, str) else None


@app.post("/process-receipt")
async def process_receipt(request: Request) -> JSONResponse:
    """Receive one or more receipt images, OCR them in order and parse the text."""
    form = await request.form()

    images: list[tuple[str, bytes]] = []
    for key, value in form.multi_items():
        if hasattr(value, "read"):
            filename = getattr(value, "filename", None) or f"{key}.jpg"
            images.append((filename, await value.read()))

    if not images:
        return _error("No image found in request", 400)

    logger.info("Received %d receipt image(s)", len(images))
    try:
        text = await run_in_threadpool(recognize_images, images, get_service_urls().ocr)
    except OCRServiceUnavailable as e:
        logger.error("Receipt OCR failed: %s", e)
        return _error(OCR_FAILED_MESSAGE, 503)

    result = parse_receipt_text(
        text,
        vocabulary=load_parser_vocabulary(),
        rule_layers=load_category_rule_layers(),
    )
    logger.info("Parsed %d items from %d image(s)", len(result.items), len(images))
    return _result_response(result, NO_ITEMS_MESSAGE)


@app.post("/process-text")
async def process_text(request: Request) -> JSONResponse:
    """Parse OCR text that was recognized elsewhere: {"text": "..."}."""
    text = await _json_field(request, "text")
    if not text or not text.strip():
        return _error("No OCR text provided", 400)

    result = parse_receipt_text(
        text,
        vocabulary=load_parser_vocabulary(),
        rule_layers=load_category_rule_layers(),
    )
    return _result_response(result, NO_ITEMS_MESSAGE)


@app.post("/dictation")
async def dictation(request: Request) -> JSONResponse:
    """Parse a final speech transcript: {"transcript": "..."}."""
    transcript = await _json_field(request, "transcript")
    if not transcript or not transcript.strip():
        return _error("No dictated text to process", 400)

    result = dictation_result(transcript, rule_layers=load_category_rule_layers())
    return _result_response(result, NO_DICTATION_ITEMS_MESSAGE)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


def serve(host: str = "127.0.0.1", port: int = 8000) -> None:
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    serve()
