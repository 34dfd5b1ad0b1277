"""Tests for the OCR service client and its error taxonomy."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest
from _pytest.monkeypatch import MonkeyPatch

from pricemerge.runtime import ocr_client
from pricemerge.runtime.ocr_client import (
    NoContentExtracted,
    OCRServiceUnavailable,
    OCRSourceUnavailable,
    call_ocr_service,
    save_ocr_json,
)

RAW = {"image_width": 600, "image_height": 800, "detections": [[[[0, 0], [1, 0], [1, 1], [0, 1]], ["RICE 1.00", 0.9]]]}


def _image(tmp_path: Path) -> Path:
    image = tmp_path / "receipt.jpg"
    image.write_bytes(b"not really a jpeg")
    return image


def _fake_post(response: httpx.Response | Exception, calls: list[dict[str, Any]]) -> Any:
    def fake_post(url: str, **kwargs: Any) -> httpx.Response:
        calls.append({"url": url, **kwargs})
        if isinstance(response, Exception):
            raise response
        return response

    return fake_post


def test_call_ocr_service_returns_raw_payload(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(ocr_client.httpx, "post", _fake_post(httpx.Response(200, json=RAW), calls))

    result = call_ocr_service(_image(tmp_path), "http://ocr.local:8001/")

    assert result == RAW
    assert calls[0]["url"] == "http://ocr.local:8001/ocr"
    assert calls[0]["files"]["file"][0] == "receipt.jpg"


def test_non_200_response_is_retryable_service_error(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr(ocr_client.httpx, "post", _fake_post(httpx.Response(503, text="busy"), []))

    with pytest.raises(OCRServiceUnavailable) as excinfo:
        call_ocr_service(_image(tmp_path), "http://ocr.local")

    assert excinfo.value.retryable
    assert isinstance(excinfo.value, RuntimeError)


@pytest.mark.parametrize(
    "error",
    [httpx.ConnectError("refused"), httpx.ReadTimeout("slow")],
)
def test_transport_failures_map_to_service_unavailable(
    tmp_path: Path, monkeypatch: MonkeyPatch, error: Exception
) -> None:
    monkeypatch.setattr(ocr_client.httpx, "post", _fake_post(error, []))

    with pytest.raises(OCRServiceUnavailable):
        call_ocr_service(_image(tmp_path), "http://ocr.local")


def test_empty_detections_raise_no_content(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    empty = {"image_width": 600, "image_height": 800, "detections": []}
    monkeypatch.setattr(ocr_client.httpx, "post", _fake_post(httpx.Response(200, json=empty), []))

    with pytest.raises(NoContentExtracted) as excinfo:
        call_ocr_service(_image(tmp_path), "http://ocr.local")

    assert not excinfo.value.retryable


def test_missing_image_is_source_unavailable(tmp_path: Path) -> None:
    with pytest.raises(OCRSourceUnavailable):
        call_ocr_service(tmp_path / "missing.jpg", "http://ocr.local")


def test_save_ocr_json_defaults_to_project_cache(tmp_path: Path, isolated_project_root: Path) -> None:
    path = save_ocr_json(RAW, tmp_path / "section_2.jpg")

    assert path == isolated_project_root.resolve() / "receipts" / "ocr_json" / "section_2.json"
    assert json.loads(path.read_text()) == RAW
