"""Receipt parse workflow orchestration."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from tallyscan.domain.receipt import ExtractionResult
from tallyscan.receipt.hybrid_parser import parse_receipt_text_sync
from tallyscan.receipt.line_stitcher import stitch_lines
from tallyscan.receipt.ocr_helpers import fragments_from_ocr_result, has_geometry
from tallyscan.runtime import AssistantSettings, build_assistants, get_logger

logger = get_logger(__name__)

JSON_SUFFIXES = {".json"}

ParseStatus = Literal[
    "file_not_found",
    "invalid_ocr_payload",
    "parsed",
]


@dataclass(frozen=True)
class ReceiptParseRequest:
    """Inputs for running the receipt parse workflow."""

    ocr_path: Path
    rules_only: bool = False
    settings: AssistantSettings | None = None


@dataclass(frozen=True)
class ReceiptParseResult:
    """Outcome from the receipt parse workflow."""

    status: ParseStatus
    result: ExtractionResult | None = None
    lines: list[str] | None = None
    error: str | None = None


class InvalidOCRPayload(ValueError):
    """Raised when an OCR dump cannot be turned into receipt lines."""


def load_ocr_lines(path: Path) -> list[str]:
    """
    Load an OCR dump and return stitched logical lines.

    ``.json`` files hold an OCR engine result (see fragments_from_ocr_result);
    anything else is read as plain text, one line per row.
    """
    if path.suffix.lower() not in JSON_SUFFIXES:
        return path.read_text(encoding="utf-8").split("\n")

    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InvalidOCRPayload(f"Invalid OCR JSON in {path}: {exc}") from exc

    try:
        fragments = fragments_from_ocr_result(payload)
    except TypeError as exc:
        raise InvalidOCRPayload(f"Unsupported OCR JSON layout in {path}: {exc}") from exc

    logger.debug("Loaded %d OCR fragments from %s (geometry=%s)", len(fragments), path, has_geometry(fragments))
    return stitch_lines(fragments)


def run_receipt_stitch(ocr_path: Path) -> ReceiptParseResult:
    """Run stitch flow: load OCR dump -> logical lines."""
    if not ocr_path.exists():
        return ReceiptParseResult(status="file_not_found", error=f"OCR file not found: {ocr_path}")

    try:
        lines = load_ocr_lines(ocr_path)
    except InvalidOCRPayload as exc:
        return ReceiptParseResult(status="invalid_ocr_payload", error=str(exc))

    return ReceiptParseResult(status="parsed", lines=lines)


def run_receipt_parse(request: ReceiptParseRequest) -> ReceiptParseResult:
    """Run parse flow: load OCR dump -> stitch -> hybrid extraction."""
    stitched = run_receipt_stitch(request.ocr_path)
    if stitched.status != "parsed" or stitched.lines is None:
        return stitched

    on_device = cloud = None
    if not request.rules_only:
        on_device, cloud = build_assistants(request.settings or AssistantSettings())

    text = "\n".join(stitched.lines)
    result = parse_receipt_text_sync(text, on_device=on_device, cloud=cloud)
    return ReceiptParseResult(status="parsed", result=result, lines=stitched.lines)
