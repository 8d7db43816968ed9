"""Store name, date and summary amount extraction helpers."""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from .common import clean_name, extract_date, extract_price_from_line, is_price_line, should_skip_line

# Store name is looked for among the first few lines only.
STORE_NAME_WINDOW = 5
MIN_STORE_NAME_LENGTH = 3

# A masked card number may sit between "TAX" and its value.
TAX_LOOKAHEAD_WINDOW = 2
TOTAL_LOOKAHEAD_WINDOW = 1
SUBTOTAL_LOOKAHEAD_WINDOW = 1


@dataclass(frozen=True)
class AmountMatch:
    """An amount found for a label, and where it came from."""

    value: Decimal
    offset: int  # 0 when the amount is on the label line itself


def _extract_store_name(lines: Sequence[str]) -> str | None:
    """Return the first plausible store name among the first few lines."""
    for line in lines[:STORE_NAME_WINDOW]:
        if len(line) < MIN_STORE_NAME_LENGTH:
            continue
        if re.match(r"^\d", line):
            continue
        if should_skip_line(line):
            continue
        name = clean_name(line)
        if name:
            return name
    return None


def _extract_date(lines: Sequence[str]) -> str | None:
    """Return the first date found anywhere in the receipt (ISO format)."""
    for line in lines:
        found = extract_date(line)
        if found is not None:
            return found
    return None


def find_price_ahead(lines: Sequence[str], index: int, window: int) -> AmountMatch | None:
    """
    Find the first bare price line within ``window`` lines after ``index``.

    Lines in between that are not bare prices are passed over.
    """
    for offset in range(1, window + 1):
        ahead = index + offset
        if ahead >= len(lines):
            break
        if is_price_line(lines[ahead]):
            value = extract_price_from_line(lines[ahead])
            if value is not None:
                return AmountMatch(value=value, offset=offset)
    return None


def _extract_labeled_amount(lines: Sequence[str], index: int, window: int) -> AmountMatch | None:
    """Amount on the label line itself, else a bare price just below it."""
    value = extract_price_from_line(lines[index])
    if value is not None:
        return AmountMatch(value=value, offset=0)
    return find_price_ahead(lines, index, window)


def _extract_total(lines: Sequence[str], index: int) -> AmountMatch | None:
    return _extract_labeled_amount(lines, index, TOTAL_LOOKAHEAD_WINDOW)


def _extract_subtotal(lines: Sequence[str], index: int) -> AmountMatch | None:
    return _extract_labeled_amount(lines, index, SUBTOTAL_LOOKAHEAD_WINDOW)


def _extract_tax(lines: Sequence[str], index: int) -> AmountMatch | None:
    return _extract_labeled_amount(lines, index, TAX_LOOKAHEAD_WINDOW)
