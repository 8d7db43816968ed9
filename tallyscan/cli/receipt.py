"""Receipt command handlers used by the unified CLI."""

import argparse
import json
import sys
from pathlib import Path

from tallyscan.domain.receipt import ExtractionResult
from tallyscan.runtime import get_logger, load_assistant_settings

logger = get_logger(__name__)


def _money(value: object) -> str:
    return f"${value:.2f}" if value is not None else "UNKNOWN"


def format_extraction_result(result: ExtractionResult) -> str:
    """Render an extraction result for terminal review."""
    lines = [
        "=" * 60,
        "PARSED RECEIPT",
        "=" * 60,
        f"Store: {result.store_name or 'UNKNOWN'}",
        f"Date: {result.date or 'UNKNOWN'}",
        f"Total: {_money(result.total)}",
    ]
    if result.subtotal is not None:
        lines.append(f"Subtotal: {_money(result.subtotal)}")
    if result.tax is not None:
        lines.append(f"Tax: {_money(result.tax)}")
    lines.append(f"\nItems ({len(result.items)}):")
    for i, item in enumerate(result.items, 1):
        qty_str = f" x{item.quantity}" if item.quantity > 1 else ""
        lines.append(f"  {i}. {item.name}{qty_str} - ${item.price:.2f}")
    lines.append("=" * 60)
    lines.append(f"Source: {result.source}  Confidence: {result.confidence:.2f}")
    for warning in result.warnings:
        lines.append(f"  note: {warning.message}")
    return "\n".join(lines)


def cmd_parse(args: argparse.Namespace) -> None:
    """Parse an OCR dump into a structured receipt and print it."""
    from tallyscan.application.receipts.scan import ReceiptParseRequest, run_receipt_parse

    settings = None if args.rules_only else load_assistant_settings(args.config)
    result = run_receipt_parse(
        ReceiptParseRequest(
            ocr_path=Path(args.ocr_file),
            rules_only=args.rules_only,
            settings=settings,
        )
    )

    if result.status != "parsed" or result.result is None:
        logger.error("%s", result.error)
        print(f"Error: {result.error}")
        sys.exit(1)

    if args.json:
        print(json.dumps(result.result.to_dict(), indent=2))
        return

    print(format_extraction_result(result.result))


def cmd_stitch(args: argparse.Namespace) -> None:
    """Print the logical lines stitched from an OCR dump."""
    from tallyscan.application.receipts.scan import run_receipt_stitch

    result = run_receipt_stitch(Path(args.ocr_file))
    if result.status != "parsed" or result.lines is None:
        logger.error("%s", result.error)
        print(f"Error: {result.error}")
        sys.exit(1)

    for line in result.lines:
        print(line)
