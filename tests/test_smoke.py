"""Public smoke tests for basic module wiring.

Keep these minimal and free of any real-world data.
"""

from __future__ import annotations


def test_imports() -> None:
    import pricemerge
    import pricemerge.application.receipts
    import pricemerge.cli.main
    import pricemerge.receipt.merge
    import pricemerge.runtime
    import pricemerge.runtime.merge_server

    assert pricemerge is not None
    assert pricemerge.application.receipts is not None
    assert pricemerge.cli.main is not None
    assert pricemerge.receipt.merge is not None
    assert pricemerge.runtime is not None
    assert pricemerge.runtime.merge_server is not None


def test_logger_is_namespaced() -> None:
    from pricemerge.runtime import get_logger

    assert get_logger("pricemerge.receipt.merge").name == "pricemerge.receipt.merge"
    assert get_logger("scratch").name == "pricemerge.scratch"
