#!/usr/bin/env python3

import argparse
import logging
from collections.abc import Callable, Sequence

from pantryscan.runtime import set_log_level


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Run a command handler that may call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--purchase-date", help="Purchase date YYYY-MM-DD (default: today)")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--enhance", action="store_true", help="Run the enhancement pass before output")
    parser.add_argument("--enhance-url", help="Enhancement service URL (default: $ENHANCE_SERVICE_URL)")
    parser.add_argument("--commit", action="store_true", help="Add the items to inventory")
    parser.add_argument("--inventory-url", help="Inventory API URL (default: $INVENTORY_API_URL)")


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Turn grocery receipts and dictated lists into pantry items",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  scan <image>...            OCR receipt photos and extract items
  parse-text <file|->        Extract items from OCR text
  dictate <text...>          Extract items from a dictated list
  serve [--host] [--port]    Start the HTTP server

Fallback order when a tier fails: enhancement -> OCR -> dictation -> manual.
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Scan receipt images")
    scan_parser.add_argument("images", nargs="+", help="Receipt image paths, in page order")
    scan_parser.add_argument("--ocr-url", help="OCR service URL (default: $OCR_SERVICE_URL or http://localhost:8001)")
    scan_parser.add_argument("--no-ocr-json", action="store_true", help="Do not keep raw OCR JSON")
    _add_output_options(scan_parser)

    text_parser = subparsers.add_parser("parse-text", help="Parse OCR text")
    text_parser.add_argument("text_file", help='Text file, or "-" for stdin')
    _add_output_options(text_parser)

    dictate_parser = subparsers.add_parser("dictate", help="Parse a dictated grocery list")
    dictate_parser.add_argument("transcript", nargs="*", help="Dictated text")
    dictate_parser.add_argument("--file", help="Read the transcript from a file")
    _add_output_options(dictate_parser)

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.verbose:
        set_log_level(logging.DEBUG)

    if args.command == "scan":
        from pantryscan.cli.receipt import cmd_scan

        return _run_command(cmd_scan, args)
    elif args.command == "parse-text":
        from pantryscan.cli.receipt import cmd_parse_text

        return _run_command(cmd_parse_text, args)
    elif args.command == "dictate":
        from pantryscan.cli.receipt import cmd_dictate

        return _run_command(cmd_dictate, args)
    elif args.command == "serve":
        from pantryscan.cli.receipt import cmd_serve

        return _run_command(cmd_serve, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
