"""Regroup positioned OCR fragments into logical receipt lines."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from tallyscan.domain.receipt import TextFragment

# Fragments whose vertical centers differ by less than this share of the
# average fragment height are placed on the same row.
ROW_THRESHOLD_RATIO = 0.5

# A fragment, a plain text line, or an OCR block holding more of either.
FragmentInput = TextFragment | str | Iterable[Any]


def _flatten_fragments(fragments: Iterable[FragmentInput]) -> list[TextFragment]:
    """Flatten fragments across whatever block/line grouping the OCR engine used."""
    flat: list[TextFragment] = []
    for fragment in fragments:
        if isinstance(fragment, TextFragment):
            flat.append(fragment)
        elif isinstance(fragment, str):
            flat.append(TextFragment(text=fragment))
        elif isinstance(fragment, Iterable) and not isinstance(fragment, (Mapping, bytes)):
            flat.extend(_flatten_fragments(fragment))
        else:
            raise TypeError(f"Unsupported OCR fragment type: {type(fragment).__name__}")
    return flat


def _row_threshold(fragments: Sequence[TextFragment]) -> float:
    heights = [f.height for f in fragments if f.height is not None]
    avg_height = sum(heights) / len(heights)
    return avg_height * ROW_THRESHOLD_RATIO


def _group_rows(fragments: Sequence[TextFragment]) -> list[list[TextFragment]]:
    """
    Greedily partition top-sorted fragments into rows.

    A fragment joins the current row when its vertical center is within the
    threshold of the row's first fragment; otherwise it opens a new row.
    Rows are never revisited once closed.
    """
    y_threshold = _row_threshold(fragments)

    rows: list[list[TextFragment]] = []
    for fragment in fragments:
        if rows and abs(fragment.center_y - rows[-1][0].center_y) < y_threshold:
            rows[-1].append(fragment)
        else:
            rows.append([fragment])
    return rows


def stitch_lines(fragments: Iterable[FragmentInput]) -> list[str]:
    """
    Merge spatially fragmented OCR recognitions into ordered logical lines.

    Geometry-free input (plain strings, or fragments without bounding boxes)
    is treated as already-logical lines and returned unchanged, in order.
    Otherwise fragments lacking geometry are discarded.
    """
    flat = _flatten_fragments(fragments)
    positioned = [f for f in flat if f.has_geometry]

    if not positioned:
        return [f.text for f in flat]

    # top is set for every positioned fragment
    positioned.sort(key=lambda f: f.top)  # type: ignore[arg-type, return-value]

    lines: list[str] = []
    for row in _group_rows(positioned):
        row.sort(key=lambda f: f.left)  # type: ignore[arg-type, return-value]
        lines.append(" ".join(f.text for f in row))
    return lines


def stitch_text(fragments: Iterable[FragmentInput]) -> str:
    """Stitch fragments and join the logical lines with newlines."""
    return "\n".join(stitch_lines(fragments))
