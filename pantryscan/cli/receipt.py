"""Receipt command handlers used by the unified CLI."""

import argparse
import json
import sys
from datetime import date
from pathlib import Path

from pantryscan.domain import ProcessingResult
from pantryscan.receipt.formatter import format_processing_result, result_to_payload
from pantryscan.runtime import get_logger, get_service_urls

logger = get_logger(__name__)


def _purchase_date(args: argparse.Namespace) -> date | None:
    raw = getattr(args, "purchase_date", None)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        print(f"Error: invalid --purchase-date {raw!r} (expected YYYY-MM-DD)")
        sys.exit(2)


def _print_progress(index: int, total: int) -> None:
    print(f"OCR {index}/{total} done", file=sys.stderr)


def _finish(result: ProcessingResult, args: argparse.Namespace) -> None:
    """Optional enhancement, output, optional commit."""
    from pantryscan.application.receipts.enhance import enhance_result
    from pantryscan.application.receipts.review import ReviewSession
    from pantryscan.runtime.enhancement_gateway import EnhancementGateway
    from pantryscan.runtime.inventory_client import InventoryClient

    urls = get_service_urls()
    if getattr(args, "enhance", False):
        enhance_url = args.enhance_url or urls.enhance
        gateway = EnhancementGateway(enhance_url) if enhance_url else None
        outcome = enhance_result(
            result,
            gateway,
            on_progress=lambda i, n, name: print(f'Enhancing "{name}" ({i}/{n})...', file=sys.stderr),
        )
        if outcome.notice:
            print(outcome.notice, file=sys.stderr)
        result = outcome.result

    if args.json:
        print(json.dumps(result_to_payload(result), indent=2))
    else:
        print(format_processing_result(result))

    if not args.commit:
        return

    session = ReviewSession(result)
    commit = session.confirm(InventoryClient(args.inventory_url or urls.inventory))
    if commit.status == "committed":
        print(f"Added {commit.items_added} items to inventory.", file=sys.stderr)
        return
    print(f"Error: {commit.error}", file=sys.stderr)
    sys.exit(1)


def cmd_scan(args: argparse.Namespace) -> None:
    """OCR one or more receipt images and parse the items."""
    from pantryscan.application.receipts.scan import ReceiptScanRequest, run_receipt_scan

    scan = run_receipt_scan(
        ReceiptScanRequest(
            image_paths=tuple(Path(image) for image in args.images),
            ocr_url=args.ocr_url or get_service_urls().ocr,
            purchase_date=_purchase_date(args),
            keep_ocr_json=not args.no_ocr_json,
            on_progress=_print_progress,
        )
    )

    if scan.status == "file_not_found":
        logger.error("%s", scan.error)
        print(f"Error: {scan.error}")
        sys.exit(1)

    if scan.status == "ocr_unavailable":
        print(f"OCR service unavailable: {scan.error}")
        print("Use `pantryscan dictate` to enter the items by voice transcript instead.")
        sys.exit(1)

    if scan.status == "no_items" or scan.result is None:
        print(scan.error or "No items found.")
        sys.exit(1)

    _finish(scan.result, args)


def cmd_parse_text(args: argparse.Namespace) -> None:
    """Parse OCR text from a file (or stdin when the path is "-")."""
    from pantryscan.application.receipts.scan import run_text_scan

    if args.text_file == "-":
        text = sys.stdin.read()
    else:
        path = Path(args.text_file)
        if not path.exists():
            print(f"Error: file not found: {path}")
            sys.exit(1)
        text = path.read_text(encoding="utf-8")

    scan = run_text_scan(text, purchase_date=_purchase_date(args))
    if scan.status == "no_items" or scan.result is None:
        print(scan.error or "No items found.")
        sys.exit(1)
    _finish(scan.result, args)


def cmd_dictate(args: argparse.Namespace) -> None:
    """Parse a dictated grocery list given inline or in a file."""
    from pantryscan.application.receipts.dictation import run_dictation

    if args.file:
        path = Path(args.file)
        if not path.exists():
            print(f"Error: file not found: {path}")
            sys.exit(1)
        transcript = path.read_text(encoding="utf-8")
    else:
        transcript = " ".join(args.transcript or [])

    dictation = run_dictation(transcript, purchase_date=_purchase_date(args))
    if dictation.status != "parsed" or dictation.result is None:
        print(f"Error: {dictation.error}")
        sys.exit(1)
    _finish(dictation.result, args)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI server for receipt uploads and dictation."""
    from pantryscan.runtime import receipt_server as server

    print(f"Starting pantry scanner on {args.host}:{args.port}")
    print(f"Endpoints: http://{args.host}:{args.port}/process-receipt | /process-text | /dictation")
    print("Press Ctrl+C to stop")

    server.serve(host=args.host, port=args.port)
