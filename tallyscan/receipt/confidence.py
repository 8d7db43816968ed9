"""Completeness-based confidence score for rule-based extraction."""

from collections.abc import Sequence
from decimal import Decimal

from tallyscan.domain.receipt import LineItem

TOTAL_WEIGHT = 0.4
DATE_WEIGHT = 0.3
STORE_NAME_WEIGHT = 0.2
ITEMS_WEIGHT = 0.1


def score_confidence(
    total: Decimal | None,
    date: str | None,
    store_name: str | None,
    items: Sequence[LineItem],
) -> float:
    """
    Score how complete an extraction is, in [0, 1].

    This rewards the presence of fields, not their correctness.
    """
    score = 0.0
    if total is not None:
        score += TOTAL_WEIGHT
    if date:
        score += DATE_WEIGHT
    if store_name:
        score += STORE_NAME_WEIGHT
    if items:
        score += ITEMS_WEIGHT
    return round(min(score, 1.0), 2)
