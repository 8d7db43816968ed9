"""Composable OCR receipt parser components."""

from .common import (
    clean_name,
    extract_date,
    extract_price_from_line,
    is_date_line,
    is_noise,
    is_price_line,
    is_subtotal_label,
    is_tax_label,
    is_total_label,
    looks_like_transaction_hash,
    should_skip_line,
)
from .fields_parser import (
    AmountMatch,
    _extract_date,
    _extract_store_name,
    _extract_subtotal,
    _extract_tax,
    _extract_total,
    find_price_ahead,
)
from .items_text_parser import (
    ItemLine,
    NameMatch,
    find_name_above,
    is_rejected_name,
    parse_item_line,
    parse_quantity_modifier,
    quantity_matches_price,
    repair_short_name,
)

__all__ = [
    "AmountMatch",
    "ItemLine",
    "NameMatch",
    "_extract_date",
    "_extract_store_name",
    "_extract_subtotal",
    "_extract_tax",
    "_extract_total",
    "clean_name",
    "extract_date",
    "extract_price_from_line",
    "find_name_above",
    "find_price_ahead",
    "is_date_line",
    "is_noise",
    "is_price_line",
    "is_rejected_name",
    "is_subtotal_label",
    "is_tax_label",
    "is_total_label",
    "looks_like_transaction_hash",
    "parse_item_line",
    "parse_quantity_modifier",
    "quantity_matches_price",
    "repair_short_name",
    "should_skip_line",
]
