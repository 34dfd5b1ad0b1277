"""Receipt workflows."""

from pricemerge.application.receipts.cached import CachedMergeRequest, CachedMergeResult, run_cached_merge
from pricemerge.application.receipts.scan import ReceiptScanRequest, ReceiptScanResult, run_receipt_scan

__all__ = [
    "CachedMergeRequest",
    "CachedMergeResult",
    "run_cached_merge",
    "ReceiptScanRequest",
    "ReceiptScanResult",
    "run_receipt_scan",
]
