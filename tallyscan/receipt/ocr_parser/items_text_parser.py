"""Text-line based receipt item extraction."""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from .common import (
    PRICE_FLAG,
    clean_name,
    extract_price_from_line,
    is_noise,
    is_price_line,
    is_tax_label,
    is_total_label,
    looks_like_transaction_hash,
    should_skip_line,
)

# "NAME ... PRICE [FLAG]", e.g. "SBUX CREAMER PC 4.00 B"
ITEM_PRICE_AT_END_REGEX = re.compile(rf"^(.+?)\s+\$?(\d+\.\d{{2}})\s*({PRICE_FLAG})?$")
# "QTY @ UNIT_PRICE NAME", e.g. "2 @ 1.50 APPLES"
ITEM_QTY_PREFIX_REGEX = re.compile(r"^(\d+)\s*[@x]\s*\$?(\d+\.\d{2})\s+(.+)$", re.IGNORECASE)
TRAILING_PRICE_REGEX = re.compile(rf"\s+\$?\d+\.\d{{2}}\s*{PRICE_FLAG}?$")

# Names this short are usually product codes ("PC", "SC") split off by OCR.
SHORT_NAME_LENGTH = 4
# How far back an orphaned price may look for its name.
NAME_LOOKBACK_WINDOW = 3


@dataclass(frozen=True)
class ItemLine:
    """Result of matching one line against the item patterns."""

    name: str
    price: Decimal
    quantity: int = 1

    @property
    def has_name(self) -> bool:
        return not is_noise(self.name)


@dataclass(frozen=True)
class NameMatch:
    """A line above an orphaned price that can serve as its name."""

    name: str
    offset: int  # Lines back from the price line


def parse_item_line(line: str) -> ItemLine | None:
    """
    Match a single line against the item patterns.

    Returns the item even when its name is noise, so the caller can still
    treat the price as orphaned. Returns None when the line holds no item price.
    """
    qty_match = ITEM_QTY_PREFIX_REGEX.match(line)
    if qty_match:
        # "2 @ 1.50 APPLES 3.00" carries the extended price after the name.
        name_text = TRAILING_PRICE_REGEX.sub("", qty_match.group(3))
        return ItemLine(
            name=clean_name(name_text),
            price=Decimal(qty_match.group(2)),
            quantity=max(1, int(qty_match.group(1))),
        )

    match = ITEM_PRICE_AT_END_REGEX.match(line)
    if match:
        return ItemLine(name=clean_name(match.group(1)), price=Decimal(match.group(2)))
    return None


def is_name_candidate(line: str) -> bool:
    """Return True if a line could hold an item name: no price, no label, no noise."""
    if should_skip_line(line) or is_noise(clean_name(line)):
        return False
    if is_total_label(line) or is_tax_label(line):
        return False
    return extract_price_from_line(line) is None and not is_price_line(line)


def repair_short_name(lines: Sequence[str], index: int, name: str) -> tuple[str, int | None]:
    """
    Replace a terse code-like name with the previous line's text.

    OCR column splitting often pushes the real name ("BLIM JUICE") onto its
    own line above "PC 1.89 B". Returns the name and the index of the line it
    came from (None when the name was kept).
    """
    if len(name) > SHORT_NAME_LENGTH or index == 0:
        return name, None

    previous = lines[index - 1]
    if should_skip_line(previous) or is_noise(clean_name(previous)):
        return name, None
    if is_price_line(previous) or extract_price_from_line(previous) is not None:
        return name, None
    return clean_name(previous), index - 1


def find_name_above(
    lines: Sequence[str],
    index: int,
    window: int = NAME_LOOKBACK_WINDOW,
    reserved_index: int | None = None,
) -> NameMatch | None:
    """
    Look back up to ``window`` lines for the nearest usable item name.

    ``reserved_index`` is the line already used as the previous item's name.
    A short code-like candidate defers to a longer candidate further up in
    the same window.
    """
    found: NameMatch | None = None
    for offset in range(1, window + 1):
        candidate_index = index - offset
        if candidate_index < 0:
            break
        if candidate_index == reserved_index:
            continue
        line = lines[candidate_index]
        if not is_name_candidate(line):
            continue

        candidate = NameMatch(name=clean_name(line), offset=offset)
        if found is None:
            found = candidate
            if len(candidate.name) > SHORT_NAME_LENGTH:
                break
        elif len(candidate.name) > SHORT_NAME_LENGTH:
            return candidate
    return found


def is_rejected_name(name: str) -> bool:
    """Return True for names that are transaction codes rather than products."""
    compact = name.replace(" ", "")
    if compact.isdigit():
        return True
    if name.startswith("TC"):
        return True
    return looks_like_transaction_hash(name)


# "3 @ $1.99" on its own line, qualifying the item printed just above it.
QUANTITY_MODIFIER_REGEX = re.compile(r"^(\d+)\s*[@x]\s*\$?(\d+\.\d{2})\s*(?:ea|each)?\s*$", re.IGNORECASE)
QUANTITY_PRICE_TOLERANCE = Decimal("0.02")


def parse_quantity_modifier(line: str) -> tuple[int, Decimal] | None:
    """Return (quantity, unit_price) for a bare "N @ PRICE" line."""
    match = QUANTITY_MODIFIER_REGEX.match(line)
    if match is None:
        return None
    quantity = int(match.group(1))
    if quantity < 1:
        return None
    return quantity, Decimal(match.group(2))


def quantity_matches_price(quantity: int, unit_price: Decimal, line_price: Decimal) -> bool:
    """Validate that quantity x unit price is the printed line price."""
    return abs(quantity * unit_price - line_price) <= QUANTITY_PRICE_TOLERANCE
