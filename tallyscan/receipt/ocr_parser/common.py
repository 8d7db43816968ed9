"""Shared patterns and lexical classifiers for OCR receipt parsing.

Every function here is a pure predicate or extractor over one trimmed line.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation

# A bare price, optionally with a currency symbol and a tax-code flag,
# e.g. "12.34", "$12.34", "1.89 B", "4.00 QP"
PRICE_FLAG = r"(?:[A-Z]{1,2}|[*TQF])"
PRICE_LINE_REGEX = re.compile(rf"^\$?(\d+\.\d{{2}})\s*({PRICE_FLAG})?$")

PRICE_AT_END_REGEX = re.compile(r"(\d+\.\d{2})\s*(?:[A-Z]{1,2}|\*)?\s*$")
PRICE_AT_START_REGEX = re.compile(r"^\$?(\d+\.\d{2})")

# "DATE 01/19/26", "01-20-2026", "3.7.2026". Month comes first (US receipts).
DATE_REGEX = re.compile(r"(?<!\d)(\d{1,2})[/.-](\d{1,2})[/.-](\d{4}|\d{2})(?!\d)")

# Total labels may appear anywhere on the line ("**** BALANCE", "122254 TOTAL:").
TOTAL_LABEL_REGEX = re.compile(r"TOTAL|BALANCE|AMOUNT\s*DUE|GRAND\s*TOTAL|PAYMENT|PAID", re.IGNORECASE)
SUBTOTAL_LABEL_REGEX = re.compile(r"\bSUB[\s-]*TOTAL", re.IGNORECASE)
# Tax labels are anchored at line start; "TAXABLE"/"TAXED" are category headers.
TAX_LABEL_REGEX = re.compile(r"^(?:TAX(?!ABLE|ED)|SALES\s*TAX|HST|GST|VAT)", re.IGNORECASE)

# Store-policy text, payment-terminal metadata, card networks, greetings/footers.
SKIP_LINE_REGEX = re.compile(
    r"^(?:welcome|visit|store|receipt|change|savings|auth|ref|merchant|terminal|trace|appr|aid|"
    r"tvr|tsi|arc|iad|visa|mastercard|amex|discover|debit|credit|chip|swipe|insert|tap|usd\$?|"
    r"amount(?!\s*due)|customer|card|fuel|points|entry|id|fresh|for|with\s*our|prices|you\s*saved)\b",
    re.IGNORECASE,
)
# Item counts and discount summaries share the TOTAL keyword but carry no total.
COUNT_SUMMARY_REGEX = re.compile(r"TOTAL\s+(?:NUMBER|ITEMS|DISCOUNT)", re.IGNORECASE)

# Card-transaction hash, e.g. "4AC8A26D631B1AE5" printed after "TC:"
TRANSACTION_HASH_REGEX = re.compile(r"^(?=[A-Z0-9]*[A-Z])(?=[A-Z0-9]*\d)[A-Z0-9]{8,}$", re.IGNORECASE)

NAME_STRIP_REGEX = re.compile(r"[^\w\s&'-]|_")


def _to_decimal(value: str) -> Decimal | None:
    try:
        return Decimal(value)
    except InvalidOperation:
        return None


def is_price_line(line: str) -> bool:
    """Return True if the whole line is a price like "12.34", "$1.89 B"."""
    return PRICE_LINE_REGEX.match(line.strip()) is not None


def extract_price_from_line(line: str) -> Decimal | None:
    """Extract a two-decimal price, preferring one at line end over line start."""
    text = line.strip()
    match = PRICE_AT_END_REGEX.search(text) or PRICE_AT_START_REGEX.match(text)
    if match is None:
        return None
    return _to_decimal(match.group(1))


def extract_date(line: str) -> str | None:
    """
    Extract a date from a line as an ISO ``YYYY-MM-DD`` string.

    Two-digit years map to 20YY. When the first component cannot be a month
    but the second can, the pair is read as day/month instead.
    """
    for match in DATE_REGEX.finditer(line):
        month, day, year = int(match.group(1)), int(match.group(2)), int(match.group(3))
        if year < 100:
            year += 2000
        if month > 12 and day <= 12:
            month, day = day, month
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            continue
    return None


def is_date_line(line: str) -> bool:
    return extract_date(line) is not None


def is_total_label(line: str) -> bool:
    return TOTAL_LABEL_REGEX.search(line) is not None


def is_subtotal_label(line: str) -> bool:
    return SUBTOTAL_LABEL_REGEX.search(line) is not None


def is_tax_label(line: str) -> bool:
    return TAX_LABEL_REGEX.match(line.strip()) is not None


def should_skip_line(line: str) -> bool:
    """Return True for boilerplate that is never an item, total or tax."""
    text = line.strip()
    if SKIP_LINE_REGEX.match(text):
        return True
    # Discount lines are skipped wherever the word appears.
    if "SAVINGS" in text.upper():
        return True
    return COUNT_SUMMARY_REGEX.search(text) is not None


def clean_name(text: str) -> str:
    """Keep letters, digits, spaces, hyphens, ampersands, apostrophes; upper-case."""
    cleaned = NAME_STRIP_REGEX.sub("", text)
    return re.sub(r"\s+", " ", cleaned).strip().upper()


def is_noise(text: str) -> bool:
    """Return True for very short tokens, bare numbers and skip-lines."""
    text = text.strip()
    if len(text) < 2:
        return True
    if text.isdigit():
        return True
    return should_skip_line(text)


def looks_like_transaction_hash(text: str) -> bool:
    """Return True for 8+ char alphanumeric runs mixing letters and digits."""
    return TRANSACTION_HASH_REGEX.match(text.strip()) is not None
