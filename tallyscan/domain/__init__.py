"""Core domain models for tallyscan.

This module provides the data models shared by the receipt pipeline:
- TextFragment: OCR text unit with optional bounding geometry
- LineItem, ExtractionResult: structured receipt records

Usage:
    from tallyscan.domain import ExtractionResult, LineItem, TextFragment
"""

from tallyscan.domain.receipt import ExtractionResult, ExtractionSource, ExtractionWarning, LineItem, TextFragment

__all__ = [
    "ExtractionResult",
    "ExtractionSource",
    "ExtractionWarning",
    "LineItem",
    "TextFragment",
]
