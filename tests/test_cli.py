"""Tests for the unified CLI entry point."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from _pytest.monkeypatch import MonkeyPatch

from pricemerge.application.receipts import scan as scan_workflow
from pricemerge.cli.main import main
from pricemerge.runtime.ocr_client import OCRServiceUnavailable


def _records_file(tmp_path: Path) -> Path:
    path = tmp_path / "section.json"
    path.write_text(
        json.dumps(
            [
                {"item_name": "Rice", "price": "120.00", "confidence": 0.7, "position": 30},
                {"item_name": "Rice 1lb", "price": "120.00", "confidence": 0.9, "position": 30},
                {"item_name": "Ackee", "price": "350.00", "confidence": 0.8, "position": 10},
            ]
        )
    )
    return path


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    assert "Receipt price merge CLI" in capsys.readouterr().out


def test_merge_command_prints_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["merge", str(_records_file(tmp_path)), "--json"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert [p["item_name"] for p in output["prices"]] == ["Ackee", "Rice 1lb"]
    assert output["total"] == "470.00"


def test_merge_command_prints_table(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["merge", str(_records_file(tmp_path)), "--policy", "strict"]) == 0

    output = capsys.readouterr().out
    assert "MERGED RECEIPT" in output
    assert "Items (2):" in output


def test_merge_command_fails_on_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["merge", str(tmp_path / "missing.json")]) == 1
    assert "File not found" in capsys.readouterr().out


def test_merge_command_rejects_bad_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = tmp_path / "merge.toml"
    config.write_text("[merge]\nunknown = 1\n")

    assert main(["merge", str(_records_file(tmp_path)), "--config", str(config)]) == 1
    assert "Invalid merge config" in capsys.readouterr().out


def test_scan_command_reports_ocr_outage(
    tmp_path: Path, monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    image = tmp_path / "receipt.jpg"
    image.write_bytes(b"jpeg")

    def failing_call(image_path: Path, ocr_url: str) -> dict[str, Any]:
        raise OCRServiceUnavailable("Failed to connect to OCR service: refused")

    monkeypatch.setattr(scan_workflow, "call_ocr_service", failing_call)

    assert main(["scan", str(image), "--ocr-url", "http://ocr.local"]) == 1
    assert "OCR service unavailable (section 1)" in capsys.readouterr().out


def test_scan_command_reports_missing_image(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["scan", str(tmp_path / "missing.jpg")]) == 1
    assert "Receipt file not found" in capsys.readouterr().out
