"""Unified command-line interface for the pricemerge project.

Usage:
    pricemerge scan <image> [<image> ...] [--policy strict]
    pricemerge merge <ocr.json> [<ocr.json> ...] [--json]
    pricemerge serve [--port]
"""
