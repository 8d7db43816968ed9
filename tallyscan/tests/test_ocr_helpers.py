"""Tests for OCR payload normalization helpers."""

import pytest
from tallyscan.domain.receipt import TextFragment
from tallyscan.receipt.line_stitcher import stitch_lines
from tallyscan.receipt.ocr_helpers import fragments_from_ocr_result, has_geometry


def _bbox(x0: int, y0: int, x1: int, y1: int) -> list[list[int]]:
    return [[x0, y0], [x1, y0], [x1, y1], [x0, y1]]


def test_plain_text_payload_becomes_geometry_free_lines() -> None:
    fragments = fragments_from_ocr_result("Receipt\nTotal 20.00")

    assert [f.text for f in fragments] == ["Receipt", "Total 20.00"]
    assert not has_geometry(fragments)


def test_line_list_payload() -> None:
    fragments = fragments_from_ocr_result(["Receipt", "Total 20.00"])

    assert fragments == [TextFragment(text="Receipt"), TextFragment(text="Total 20.00")]


def test_text_and_blocks_without_geometry_fall_back_to_text_lines() -> None:
    payload = {
        "text": "Receipt\nTotal 20.00",
        "blocks": [{"text": "Receipt"}, {"text": "Total 20.00"}],
    }

    assert [f.text for f in fragments_from_ocr_result(payload)] == ["Receipt", "Total 20.00"]


def test_nested_blocks_keep_finest_units_with_frames() -> None:
    payload = {
        "text": "MILK 3.50",
        "blocks": [
            {
                "text": "MILK 3.50",
                "lines": [
                    {
                        "text": "MILK 3.50",
                        "elements": [
                            {"text": "MILK", "frame": {"x": 10, "y": 100, "width": 50, "height": 20}},
                            {"text": "3.50", "frame": {"x": 200, "y": 102, "width": 40, "height": 20}},
                        ],
                    }
                ],
            }
        ],
    }

    fragments = fragments_from_ocr_result(payload)

    assert fragments == [
        TextFragment(text="MILK", top=100.0, left=10.0, height=20.0),
        TextFragment(text="3.50", top=102.0, left=200.0, height=20.0),
    ]
    assert stitch_lines(fragments) == ["MILK 3.50"]


def test_fragment_dicts_with_flat_geometry_and_bounding_box() -> None:
    payload = [
        {"text": "BREAD", "top": 140, "left": 10, "height": 20},
        {"text": "2.00", "boundingBox": {"top": 141, "left": 200, "height": 18}},
    ]

    fragments = fragments_from_ocr_result(payload)

    assert all(f.has_geometry for f in fragments)
    assert stitch_lines(fragments) == ["BREAD 2.00"]


def test_detection_pairs_use_polygon_geometry() -> None:
    payload = {
        "detections": [
            [_bbox(200, 102, 240, 122), ["3.50", 0.99]],
            [_bbox(10, 100, 60, 120), ["MILK", 0.97]],
        ]
    }

    fragments = fragments_from_ocr_result(payload)

    assert fragments[1] == TextFragment(text="MILK", top=100.0, left=10.0, height=20.0)
    assert stitch_lines(fragments) == ["MILK 3.50"]


def test_unsupported_payload_type_raises() -> None:
    with pytest.raises(TypeError):
        fragments_from_ocr_result(42)

    with pytest.raises(TypeError):
        fragments_from_ocr_result([b"MILK"])
