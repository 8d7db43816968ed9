"""Prompt construction and response mapping for generative receipt assistants."""

import json
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from tallyscan.domain.receipt import ExtractionResult, ExtractionSource, LineItem
from tallyscan.runtime.assistants import AssistantResponseError
from tallyscan.runtime.logging import get_logger

from .ocr_parser import extract_date

logger = get_logger(__name__)

SYSTEM_PROMPT = """\
You are a receipt parser. Extract structured data from OCR text of a store receipt.
Item lines usually have the shape "ITEM NAME CODE PRICE FLAG".
Example: "SBUX CREAMER PC 4.00 B" -> {"name": "SBUX CREAMER", "price": 4.00, "quantity": 1}

Rules:
1. Extract every purchased item. Item lines carry a price with two decimals.
2. Remove trailing codes such as "PC", "SC", "WT", "QP" from item names.
3. Do not report savings, coupons, payment lines or card numbers as items.
4. Use null for anything that is not on the receipt.
5. Return only one JSON object.

Schema:
{
  "storeName": string | null,
  "date": string | null (YYYY-MM-DD),
  "total": number | null,
  "tax": number | null,
  "items": [
    {"name": string, "price": number, "quantity": number}
  ]
}
"""

BARE_PRICE_LINE_REGEX = re.compile(r"^\$?\d+\.\d{2}$")
CODE_FENCE_REGEX = re.compile(r"```(?:json)?", re.IGNORECASE)
MIN_WORD_LINE_LENGTH = 3
CENTS = Decimal("0.01")


def preprocess_for_assistant(text: str) -> str:
    """
    Drop short OCR garbage before handing text to an assistant.

    Lines are trimmed. Empty lines survive as separators, bare price lines
    survive, and anything else must be at least three characters long.
    """
    kept = []
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line or BARE_PRICE_LINE_REGEX.match(line) or len(line) >= MIN_WORD_LINE_LENGTH:
            kept.append(line)
    return "\n".join(kept)


def build_messages(text: str) -> list[dict[str, str]]:
    """The two-message conversation sent to both assistant kinds."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": text},
    ]


def strip_code_fences(content: str) -> str:
    """Remove Markdown code fence markers (```json ... ```) around a JSON body."""
    return CODE_FENCE_REGEX.sub("", content).strip()


def load_assistant_json(content: str) -> dict[str, Any]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise AssistantResponseError(f"Assistant response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise AssistantResponseError(f"Assistant response must be a JSON object, got {type(data).__name__}")
    return data


def _money(value: Any) -> Decimal | None:
    # bool is an int subclass; true/false are not amounts.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        amount = Decimal(str(value)).quantize(CENTS)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def _text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _iso_date(value: Any) -> str | None:
    text = _text(value)
    if text is None:
        return None
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", text):
        return text
    # Assistants occasionally echo the printed date instead of ISO.
    return extract_date(text)


def _quantity(value: Any) -> int:
    if isinstance(value, bool):
        return 1
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value >= 1:
        return value
    return 1


def _line_item(entry: Any) -> LineItem | None:
    if not isinstance(entry, dict):
        return None
    name = _text(entry.get("name"))
    price = _money(entry.get("price"))
    if name is None or price is None or price < 0:
        return None
    return LineItem(name=name, price=price, quantity=_quantity(entry.get("quantity")))


def result_from_assistant_payload(
    data: dict[str, Any],
    raw_text: str,
    confidence: float,
    source: ExtractionSource,
) -> ExtractionResult:
    """
    Map an assistant's JSON object onto an ExtractionResult.

    A payload without an ``items`` list is malformed. Individual items missing
    a name or a numeric price are dropped; quantity defaults to 1.

    Raises:
        AssistantResponseError: If the payload does not have the expected shape
    """
    entries = data.get("items")
    if not isinstance(entries, list):
        raise AssistantResponseError("Assistant response has no items list")

    items: list[LineItem] = []
    for entry in entries:
        item = _line_item(entry)
        if item is None:
            logger.debug("Dropping malformed assistant item: %r", entry)
            continue
        items.append(item)

    return ExtractionResult(
        raw_text=raw_text,
        items=items,
        store_name=_text(data.get("storeName")),
        date=_iso_date(data.get("date")),
        subtotal=_money(data.get("subtotal")),
        tax=_money(data.get("tax")),
        total=_money(data.get("total")),
        confidence=confidence,
        source=source,
    )
