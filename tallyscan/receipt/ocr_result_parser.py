"""Parse stitched OCR text into a structured ExtractionResult.

The parser makes a single top-to-bottom pass with an explicit cursor over an
immutable tuple of lines. Each line is offered to the rules in order (skip,
subtotal, total, tax, quantity modifier, item, orphaned price); the first rule
that recognizes the line decides it. Lookahead and lookback are pure helpers
that report how far from the cursor their match came from, so the only state
carried between lines lives in ``_PassState``.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from tallyscan.domain.receipt import ExtractionResult, ExtractionWarning, LineItem
from tallyscan.runtime.logging import get_logger

from .confidence import score_confidence
from .ocr_parser import (
    _extract_date,
    _extract_store_name,
    _extract_subtotal,
    _extract_tax,
    _extract_total,
    extract_price_from_line,
    find_name_above,
    is_price_line,
    is_rejected_name,
    is_subtotal_label,
    is_tax_label,
    is_total_label,
    parse_item_line,
    parse_quantity_modifier,
    quantity_matches_price,
    repair_short_name,
    should_skip_line,
)

logger = get_logger(__name__)


@dataclass
class _PassState:
    """Running totals and bookkeeping for one parsing pass."""

    items: list[LineItem] = field(default_factory=list)
    total: Decimal | None = None
    subtotal: Decimal | None = None
    tax: Decimal | None = None
    # Lines already used as a lookahead value without being stepped over.
    claimed: set[int] = field(default_factory=set)
    # Line that supplied the most recent item's name, and the line that priced it.
    last_name_index: int | None = None
    last_item_index: int | None = None
    warnings: list[ExtractionWarning] = field(default_factory=list)

    def add_item(self, item: LineItem, name_index: int, item_index: int) -> None:
        self.items.append(item)
        self.last_name_index = name_index
        self.last_item_index = item_index

    def keep_total(self, value: Decimal) -> None:
        # Receipts repeat TOTAL at checkout and again in the card summary;
        # the larger value is taken as the grand total.
        if self.total is None or value > self.total:
            self.total = value


def _split_lines(text: str) -> tuple[str, ...]:
    return tuple(line.strip() for line in text.split("\n") if line.strip())


def _handle_orphan_price(
    lines: Sequence[str],
    index: int,
    price: Decimal,
    state: _PassState,
    quantity: int = 1,
) -> None:
    """Find a name for a price that sits on a line of its own."""
    if index > 0:
        previous = lines[index - 1]
        if should_skip_line(previous) and "SAVINGS" in previous.upper():
            state.warnings.append(ExtractionWarning(f"Discarded discount amount {price}", line_index=index))
            return

    match = find_name_above(lines, index, reserved_index=state.last_name_index)
    if match is None:
        state.warnings.append(ExtractionWarning(f"No item name found for price {price}", line_index=index))
        return
    if is_rejected_name(match.name):
        state.warnings.append(
            ExtractionWarning(f"Discarded price {price} next to transaction code {match.name}", line_index=index)
        )
        return

    state.add_item(
        LineItem(name=match.name, price=price, quantity=quantity),
        name_index=index - match.offset,
        item_index=index,
    )


def _apply_quantity_modifier(index: int, quantity: int, unit_price: Decimal, state: _PassState) -> None:
    """Attach a "3 @ $1.99" line to the item printed just above it."""
    if not state.items or state.last_item_index != index - 1:
        state.warnings.append(
            ExtractionWarning(f"Ignored quantity line {quantity} @ {unit_price} with no item above", line_index=index)
        )
        return
    item = state.items[-1]
    if not quantity_matches_price(quantity, unit_price, item.price):
        state.warnings.append(
            ExtractionWarning(
                f"Ignored quantity line {quantity} @ {unit_price} that does not add up to {item.price}",
                line_index=index,
            )
        )
        return
    item.quantity = quantity
    item.price = unit_price


def _process_line(lines: Sequence[str], index: int, state: _PassState) -> int:
    """
    Apply the first matching rule to ``lines[index]``.

    Returns the number of extra lines the rule consumed beyond the current one.
    """
    line = lines[index]
    if index in state.claimed or should_skip_line(line):
        return 0

    if is_subtotal_label(line):
        match = _extract_subtotal(lines, index)
        if match is not None:
            state.subtotal = match.value
            return match.offset
        return 0

    if is_total_label(line) and not is_tax_label(line):
        match = _extract_total(lines, index)
        if match is not None:
            state.keep_total(match.value)
            return match.offset
        return 0

    if is_tax_label(line):
        match = _extract_tax(lines, index)
        if match is not None:
            state.tax = match.value
            if match.offset:
                # Lines between the label and its value are still parsed.
                state.claimed.add(index + match.offset)
        return 0

    modifier = parse_quantity_modifier(line)
    if modifier is not None:
        _apply_quantity_modifier(index, *modifier, state)
        return 0

    item_line = parse_item_line(line)
    if item_line is not None and item_line.has_name:
        name, name_index = repair_short_name(lines, index, item_line.name)
        state.add_item(
            LineItem(name=name, price=item_line.price, quantity=item_line.quantity),
            name_index=name_index if name_index is not None else index,
            item_index=index,
        )
        return 0

    if item_line is not None:
        # "2 @ 1.50 A": the quantity survives even when the name is noise.
        _handle_orphan_price(lines, index, item_line.price, state, quantity=item_line.quantity)
    elif is_price_line(line):
        orphan_price = extract_price_from_line(line)
        if orphan_price is not None:
            _handle_orphan_price(lines, index, orphan_price, state)
    return 0


def parse_receipt_lines(text: str) -> ExtractionResult:
    """
    Parse receipt text with the deterministic rule-based extractor.

    This is a best-effort parser: it never raises for low-quality text and
    reports a completeness-based confidence instead.

    Args:
        text: Stitched receipt text, one logical line per row

    Returns:
        ExtractionResult whose ``raw_text`` is ``text`` verbatim
    """
    if not isinstance(text, str):
        raise TypeError(f"Receipt text must be str, got {type(text).__name__}")

    lines = _split_lines(text)
    if not lines:
        return ExtractionResult.empty(text)

    state = _PassState()
    index = 0
    while index < len(lines):
        consumed = _process_line(lines, index, state)
        index += 1 + consumed

    store_name = _extract_store_name(lines)
    receipt_date = _extract_date(lines)
    confidence = score_confidence(state.total, receipt_date, store_name, state.items)

    logger.debug(
        "Rule-based parse: %d lines, %d items, total=%s, confidence=%.2f",
        len(lines),
        len(state.items),
        state.total,
        confidence,
    )

    return ExtractionResult(
        raw_text=text,
        items=state.items,
        store_name=store_name,
        date=receipt_date,
        subtotal=state.subtotal,
        tax=state.tax,
        total=state.total,
        confidence=confidence,
        source="rules",
        warnings=state.warnings,
    )
