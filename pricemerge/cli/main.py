#!/usr/bin/env python3

import argparse
import os
from collections.abc import Sequence

from pricemerge.domain.prices import MergePolicy

DEFAULT_OCR_URL = "http://localhost:8001"


def _add_merge_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--policy",
        choices=[p.value for p in MergePolicy],
        default=MergePolicy.SIMPLE.value,
        help="Duplicate policy: simple (same price) or strict (also similar name/price) (default: simple)",
    )
    parser.add_argument("--config", default=None, help="Merge settings TOML (default: config/merge.toml)")
    parser.add_argument("--json", action="store_true", help="Print the merged result as JSON")


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Receipt price merge CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  scan <image>...            OCR receipt section images (capture order) and merge
  merge <json>...            Merge cached OCR JSON or record files
  serve [--port]             Start the HTTP merge server

Notes:
  receipts/ocr_json/ = raw OCR results saved by scan, usable with merge
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Scan receipt section images")
    scan_parser.add_argument("images", nargs="+", help="Receipt image(s), one per section, in capture order")
    scan_parser.add_argument(
        "--ocr-url",
        default=os.environ.get("OCR_SERVICE_URL", DEFAULT_OCR_URL),
        help=f"OCR service URL (default: $OCR_SERVICE_URL or {DEFAULT_OCR_URL})",
    )
    scan_parser.add_argument("--no-save", action="store_true", help="Do not cache raw OCR JSON")
    _add_merge_options(scan_parser)

    merge_parser = subparsers.add_parser("merge", help="Merge cached OCR results")
    merge_parser.add_argument("files", nargs="+", help="OCR JSON or record JSON file(s), one per section")
    _add_merge_options(merge_parser)

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP merge server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "scan":
        from pricemerge.cli.receipt import cmd_scan

        return cmd_scan(args)
    if args.command == "merge":
        from pricemerge.cli.receipt import cmd_merge

        return cmd_merge(args)
    if args.command == "serve":
        from pricemerge.cli.receipt import cmd_serve

        return cmd_serve(args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
