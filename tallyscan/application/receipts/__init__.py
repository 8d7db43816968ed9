"""Receipt workflows."""

from tallyscan.application.receipts.scan import (
    InvalidOCRPayload,
    ReceiptParseRequest,
    ReceiptParseResult,
    load_ocr_lines,
    run_receipt_parse,
    run_receipt_stitch,
)

__all__ = [
    "InvalidOCRPayload",
    "ReceiptParseRequest",
    "ReceiptParseResult",
    "load_ocr_lines",
    "run_receipt_parse",
    "run_receipt_stitch",
]
