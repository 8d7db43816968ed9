"""Pure OCR payload helpers for receipt parsing.

OCR engines hand back text in several shapes: a flat list of recognized
lines, a ``{"text", "blocks"}`` result, nested block/line/element trees with
a bounding box per node, or PaddleOCR-style ``detections`` pairs. These
helpers turn any of them into flat ``TextFragment`` lists for the line
stitcher.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from tallyscan.domain.receipt import TextFragment

# Child collections used by OCR engines to nest smaller text units.
CHILD_KEYS = ("lines", "elements", "words", "fragments")
# Keys that may hold a node's bounding box.
BOX_KEYS = ("boundingBox", "bounding_box", "bbox", "frame")


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _geometry_from_points(points: Sequence[Any]) -> tuple[float, float, float] | None:
    """Return (top, left, height) from a polygon like [[x1,y1], [x2,y2], ...]."""
    try:
        xs = [float(p[0]) for p in points]
        ys = [float(p[1]) for p in points]
    except (TypeError, ValueError, IndexError):
        return None
    if not xs:
        return None
    return min(ys), min(xs), max(ys) - min(ys)


def _geometry_from_box(box: Any) -> tuple[float, float, float] | None:
    """Return (top, left, height) from a box dict or polygon."""
    if isinstance(box, Mapping):
        top = _as_float(box.get("top", box.get("y")))
        left = _as_float(box.get("left", box.get("x")))
        height = _as_float(box.get("height"))
        if top is None or left is None or height is None:
            return None
        return top, left, height
    if isinstance(box, Sequence) and not isinstance(box, str):
        return _geometry_from_points(box)
    return None


def _geometry_from_node(node: Mapping[str, Any]) -> tuple[float, float, float] | None:
    top = _as_float(node.get("top"))
    left = _as_float(node.get("left"))
    height = _as_float(node.get("height"))
    if top is not None and left is not None and height is not None:
        return top, left, height

    for key in BOX_KEYS:
        if key in node:
            geometry = _geometry_from_box(node[key])
            if geometry is not None:
                return geometry
    return None


def _fragment_from_node(node: Mapping[str, Any]) -> TextFragment | None:
    text = node.get("text")
    if not isinstance(text, str):
        return None
    geometry = _geometry_from_node(node)
    if geometry is None:
        return TextFragment(text=text)
    top, left, height = geometry
    return TextFragment(text=text, top=top, left=left, height=height)


def _children(node: Mapping[str, Any]) -> list[Any]:
    for key in CHILD_KEYS:
        children = node.get(key)
        if isinstance(children, Sequence) and not isinstance(children, str) and children:
            return list(children)
    return []


def _collect_leaf_fragments(nodes: Sequence[Any]) -> list[TextFragment]:
    """Walk nested OCR nodes and keep the finest-grained units that carry text."""
    fragments: list[TextFragment] = []
    for node in nodes:
        if isinstance(node, TextFragment):
            fragments.append(node)
        elif isinstance(node, str):
            fragments.append(TextFragment(text=node))
        elif isinstance(node, Mapping):
            children = _children(node)
            child_fragments = _collect_leaf_fragments(children) if children else []
            if child_fragments:
                fragments.extend(child_fragments)
                continue
            fragment = _fragment_from_node(node)
            if fragment is not None:
                fragments.append(fragment)
        elif isinstance(node, Sequence) and len(node) == 2 and _is_detection_pair(node):
            fragments.append(_fragment_from_detection(node))
        elif isinstance(node, Sequence) and not isinstance(node, bytes):
            fragments.extend(_collect_leaf_fragments(node))
        else:
            raise TypeError(f"Unsupported OCR node type: {type(node).__name__}")
    return fragments


def _is_detection_pair(node: Sequence[Any]) -> bool:
    """Return True for PaddleOCR pairs like [bbox, [text, confidence]]."""
    bbox, recognition = node
    return (
        isinstance(bbox, Sequence)
        and isinstance(recognition, Sequence)
        and not isinstance(recognition, str)
        and len(recognition) >= 1
        and isinstance(recognition[0], str)
    )


def _fragment_from_detection(node: Sequence[Any]) -> TextFragment:
    bbox, recognition = node
    text = recognition[0]
    geometry = _geometry_from_points(bbox)
    if geometry is None:
        return TextFragment(text=text)
    top, left, height = geometry
    return TextFragment(text=text, top=top, left=left, height=height)


def fragments_from_ocr_result(payload: Any) -> list[TextFragment]:
    """
    Normalize an OCR payload into a flat list of text fragments.

    Args:
        payload: A list of lines/fragments/nodes, or a result dict with
            ``blocks``, ``detections``, ``lines`` or plain ``text``.

    Returns:
        Fragments in payload order; geometry is kept where the payload has it.
    """
    if isinstance(payload, str):
        return [TextFragment(text=line) for line in payload.split("\n")]

    if isinstance(payload, Mapping):
        if "detections" in payload:
            return _collect_leaf_fragments(payload.get("detections") or [])

        nodes = payload.get("blocks") or _children(payload)
        fragments = _collect_leaf_fragments(nodes) if nodes else []

        full_text = payload.get("text")
        if isinstance(full_text, str) and not any(f.has_geometry for f in fragments):
            # Geometry-free blocks are just the text lines again.
            return [TextFragment(text=line) for line in full_text.split("\n")]
        return fragments

    if isinstance(payload, Sequence):
        return _collect_leaf_fragments(payload)

    raise TypeError(f"Unsupported OCR payload type: {type(payload).__name__}")


def has_geometry(fragments: Sequence[TextFragment]) -> bool:
    """Return True if any fragment carries bounding geometry."""
    return any(f.has_geometry for f in fragments)
