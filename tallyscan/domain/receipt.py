"""Data models for receipt understanding."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Literal

ExtractionSource = Literal["on_device", "cloud", "rules"]


@dataclass(frozen=True)
class TextFragment:
    """One OCR-recognized text unit with optional bounding geometry."""

    text: str
    top: float | None = None
    left: float | None = None
    height: float | None = None

    @property
    def has_geometry(self) -> bool:
        return self.top is not None and self.left is not None and self.height is not None

    @property
    def center_y(self) -> float:
        if self.top is None or self.height is None:
            raise ValueError(f"Fragment {self.text!r} has no vertical geometry")
        return self.top + self.height / 2


@dataclass
class LineItem:
    """A single line item on a receipt."""

    name: str
    price: Decimal
    quantity: int = 1


@dataclass
class ExtractionWarning:
    """Parser note about a line that was deliberately dropped."""

    message: str
    # Index into the non-empty receipt lines. None means no anchor.
    line_index: int | None = None


@dataclass
class ExtractionResult:
    """Structured receipt record produced by the extraction pipeline."""

    raw_text: str
    items: list[LineItem] = field(default_factory=list)
    store_name: str | None = None
    date: str | None = None  # ISO YYYY-MM-DD
    subtotal: Decimal | None = None
    tax: Decimal | None = None
    total: Decimal | None = None
    confidence: float = 0.0
    source: ExtractionSource = "rules"
    warnings: list[ExtractionWarning] = field(default_factory=list)

    @classmethod
    def empty(cls, raw_text: str) -> "ExtractionResult":
        return cls(raw_text=raw_text)

    def to_dict(self) -> dict[str, Any]:
        """Render the record with the field names used by the assistant schema."""

        def _money(value: Decimal | None) -> float | None:
            return float(value) if value is not None else None

        return {
            "items": [
                {"name": item.name, "price": float(item.price), "quantity": item.quantity} for item in self.items
            ],
            "storeName": self.store_name,
            "date": self.date,
            "subtotal": _money(self.subtotal),
            "tax": _money(self.tax),
            "total": _money(self.total),
            "rawText": self.raw_text,
            "confidence": self.confidence,
            "source": self.source,
        }
