"""FastAPI server exposing the merge engine to the mobile client."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pricemerge.domain.prices import ExtractedPriceRecord, MergePolicy
from pricemerge.receipt.formatter import merged_result_to_dict, record_from_dict
from pricemerge.receipt.merge import merge
from pricemerge.runtime import get_logger
from pricemerge.runtime.settings import load_merge_config

logger = get_logger(__name__)

app = FastAPI(title="Receipt Price Merge")


def _error(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"status": "error", "message": message}, status_code=status_code)


def _parse_sections(payload: Any) -> list[list[ExtractedPriceRecord]]:
    sections = payload.get("sections")
    if not isinstance(sections, list) or not all(isinstance(section, list) for section in sections):
        raise ValueError("'sections' must be a list of record lists")
    return [[record_from_dict(item) for item in section] for section in sections]


@app.post("/merge")
async def merge_sections(request: Request) -> JSONResponse:
    """Merge per-section price records posted by the client."""
    try:
        payload = await request.json()
    except ValueError:
        return _error("Request body must be JSON")
    if not isinstance(payload, dict):
        return _error("Request body must be a JSON object")

    try:
        policy = MergePolicy.parse(str(payload.get("policy", MergePolicy.SIMPLE.value)))
        sections = _parse_sections(payload)
    except ValueError as e:
        logger.info("Rejected merge request: %s", e)
        return _error(str(e))

    result = merge(sections, policy, load_merge_config())
    logger.info(
        "Merged %d section(s) into %d item(s) [%s]",
        result.total_sections_considered,
        len(result.prices),
        policy.value,
    )
    return JSONResponse({"status": "success", **merged_result_to_dict(result)})


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
