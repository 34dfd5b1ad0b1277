"""Receipt command handlers used by the unified CLI."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from pricemerge.domain.prices import MergedResult, MergePolicy
from pricemerge.receipt.formatter import format_merged_result, merged_result_to_dict
from pricemerge.runtime import get_logger
from pricemerge.runtime.settings import load_merge_config

logger = get_logger(__name__)


def _print_result(result: MergedResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(merged_result_to_dict(result), indent=2))
        return

    print("=" * 60)
    print("MERGED RECEIPT")
    print("=" * 60)
    print(format_merged_result(result))
    print("=" * 60)


def cmd_scan(args: argparse.Namespace) -> int:
    """OCR one or more receipt section images and print the merged price list."""
    from pricemerge.application.receipts.scan import ReceiptScanRequest, run_receipt_scan

    try:
        config = load_merge_config(args.config)
    except ValueError as exc:
        print(f"Invalid merge config: {exc}")
        return 1

    result = run_receipt_scan(
        ReceiptScanRequest(
            image_paths=tuple(Path(p) for p in args.images),
            ocr_url=args.ocr_url,
            policy=MergePolicy.parse(args.policy),
            config=config,
            save_json=not args.no_save,
        )
    )

    if result.status == "file_not_found":
        logger.error("%s", result.error)
        print(f"Error: {result.error}")
        return 1

    if result.status == "ocr_unavailable":
        logger.error("%s", result.error)
        print(f"OCR service unavailable (section {result.failed_section}): {result.error}")
        print("Make sure the OCR service is running, then scan again.")
        return 1

    if result.status == "no_content":
        print(f"No text found in section {result.failed_section}. Retake the photo with the receipt in frame.")
        return 1

    if result.result is None:
        print("Scan failed: missing merge output.")
        return 1

    _print_result(result.result, args.json)
    if result.saved_json and not args.json:
        print(f"OCR JSON saved: {', '.join(str(p) for p in result.saved_json)}")
    return 0


def cmd_merge(args: argparse.Namespace) -> int:
    """Merge cached OCR JSON / record files without calling the OCR service."""
    from pricemerge.application.receipts.cached import CachedMergeRequest, run_cached_merge

    try:
        config = load_merge_config(args.config)
    except ValueError as exc:
        print(f"Invalid merge config: {exc}")
        return 1

    result = run_cached_merge(
        CachedMergeRequest(
            json_paths=tuple(Path(p) for p in args.files),
            policy=MergePolicy.parse(args.policy),
            config=config,
        )
    )
    if result.status != "merged" or result.result is None:
        print(f"Error: {result.error}")
        return 1

    _print_result(result.result, args.json)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the FastAPI merge server."""
    import uvicorn

    from pricemerge.runtime import merge_server as server

    print(f"Starting merge server on {args.host}:{args.port}")
    print(f"Merge endpoint: http://{args.host}:{args.port}/merge")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=args.host, port=args.port)
    return 0
