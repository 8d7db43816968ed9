"""Tests for the OCR dump -> ExtractionResult workflow and CLI wiring."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest
from tallyscan.application.receipts.scan import ReceiptParseRequest, run_receipt_parse, run_receipt_stitch
from tallyscan.cli.main import main

RECEIPT_TEXT = "Kroger\n01/19/26\nItem 1 1.99\nItem 2 3.50\nTax 0.45\nTotal 5.94\n"


def _bbox(x0: int, y0: int, x1: int, y1: int) -> list[list[int]]:
    return [[x0, y0], [x1, y0], [x1, y1], [x0, y1]]


@pytest.fixture
def text_dump(tmp_path: Path) -> Path:
    path = tmp_path / "kroger.txt"
    path.write_text(RECEIPT_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def json_dump(tmp_path: Path) -> Path:
    path = tmp_path / "walmart.ocr.json"
    path.write_text(
        json.dumps(
            {
                "detections": [
                    [_bbox(300, 42, 340, 62), ["3.50", 0.99]],
                    [_bbox(10, 10, 120, 30), ["Walmart", 0.98]],
                    [_bbox(20, 40, 120, 60), ["MILK 1GAL", 0.97]],
                    [_bbox(20, 80, 100, 100), ["TOTAL", 0.99]],
                    [_bbox(300, 81, 340, 101), ["3.50", 0.99]],
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


def test_run_receipt_parse_rules_only(text_dump: Path) -> None:
    result = run_receipt_parse(ReceiptParseRequest(ocr_path=text_dump, rules_only=True))

    assert result.status == "parsed"
    assert result.result is not None
    assert result.result.source == "rules"
    assert result.result.total == Decimal("5.94")
    assert result.result.raw_text == RECEIPT_TEXT


def test_run_receipt_parse_json_dump_is_stitched(json_dump: Path) -> None:
    result = run_receipt_parse(ReceiptParseRequest(ocr_path=json_dump, rules_only=True))

    assert result.lines == ["Walmart", "MILK 1GAL 3.50", "TOTAL 3.50"]
    assert result.result is not None
    assert result.result.store_name == "WALMART"
    assert [item.name for item in result.result.items] == ["MILK 1GAL"]
    assert result.result.total == Decimal("3.50")


def test_missing_file(tmp_path: Path) -> None:
    result = run_receipt_parse(ReceiptParseRequest(ocr_path=tmp_path / "nope.txt", rules_only=True))

    assert result.status == "file_not_found"
    assert result.error is not None


@pytest.mark.parametrize("content", ["{not json", "42"])
def test_invalid_json_dump(tmp_path: Path, content: str) -> None:
    path = tmp_path / "broken.json"
    path.write_text(content, encoding="utf-8")

    result = run_receipt_stitch(path)

    assert result.status == "invalid_ocr_payload"
    assert result.lines is None


def test_cli_parse_json_output(text_dump: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["parse", str(text_dump), "--rules-only", "--json"])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["storeName"] == "KROGER"
    assert output["total"] == 5.94
    assert output["source"] == "rules"
    assert [item["name"] for item in output["items"]] == ["ITEM 1", "ITEM 2"]


def test_cli_parse_text_output(text_dump: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["parse", str(text_dump), "--rules-only"]) == 0

    output = capsys.readouterr().out
    assert "Store: KROGER" in output
    assert "Total: $5.94" in output
    assert "1. ITEM 1 - $1.99" in output


def test_cli_stitch(json_dump: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["stitch", str(json_dump)]) == 0

    assert capsys.readouterr().out.splitlines() == ["Walmart", "MILK 1GAL 3.50", "TOTAL 3.50"]


def test_cli_missing_file_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["stitch", str(tmp_path / "nope.json")]) == 1
    assert "Error:" in capsys.readouterr().out


def test_cli_without_command_prints_help() -> None:
    assert main([]) == 1
