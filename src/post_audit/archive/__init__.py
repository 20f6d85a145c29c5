"""Archive ingestion."""

from .parser import load_items, parse_items, strip_js_wrapper

__all__ = [
    "load_items",
    "parse_items",
    "strip_js_wrapper",
]
