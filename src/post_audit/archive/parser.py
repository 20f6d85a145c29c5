"""Archive ingestion.

Reads the vendor's archive export, a JavaScript file of the form::

    window.YTD.tweets.part0 = [ {"tweet": {...}}, ... ]

and produces immutable Item records in archive order. Reposts are
excluded. A bare JSON array (with or without the ``tweet`` wrapper) is
accepted as well.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from post_audit.exceptions import IngestionError
from post_audit.logging import get_logger
from post_audit.schemas import Item

logger = get_logger(__name__)


def strip_js_wrapper(content: str) -> str:
    """Drop everything before the first ``[``.

    Raises:
        IngestionError: If the content is empty or has no JSON array
    """
    if not content.strip():
        raise IngestionError("Archive file is empty")
    start = content.find("[")
    if start == -1:
        raise IngestionError("Invalid format: JSON array not found")
    return content[start:]


def _to_item(entry: Any, index: int) -> Item:
    record = entry.get("tweet", entry) if isinstance(entry, dict) else None
    if not isinstance(record, dict):
        raise IngestionError(f"Entry {index} is not an object")

    item_id = record.get("id_str") or record.get("id")
    if not item_id:
        raise IngestionError(f"Entry {index} has no id_str")

    try:
        return Item(
            id=str(item_id),
            text=record.get("full_text") or record.get("text") or "",
            created_at=record.get("created_at"),
        )
    except ValidationError as e:
        raise IngestionError(f"Entry {index} ({item_id}) is invalid: {e}") from e


def parse_items(content: str) -> list[Item]:
    """Parse archive content into items, excluding reposts.

    Raises:
        IngestionError: If the content is not a well-formed archive
    """
    try:
        entries = json.loads(strip_js_wrapper(content))
    except json.JSONDecodeError as e:
        raise IngestionError(f"Malformed archive JSON: {e}") from e
    if not isinstance(entries, list):
        raise IngestionError("Invalid format: expected a JSON array")

    if not entries:
        logger.warning("No posts found in archive")
        return []

    items = [_to_item(entry, index) for index, entry in enumerate(entries)]
    kept = [item for item in items if not item.is_repost]
    logger.info("Parsed {} posts, removed {} reposts", len(kept), len(items) - len(kept))
    return kept


def load_items(path: str | Path) -> list[Item]:
    """Load the items of an archive file.

    Args:
        path: Archive file to read

    Returns:
        Items in archive order, reposts excluded

    Raises:
        IngestionError: If the file is missing, unreadable or malformed
    """
    archive = Path(path)
    logger.info("Loading archive from {}", archive)
    if not archive.is_file():
        raise IngestionError(f"Archive file not found: {archive}")
    try:
        content = archive.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IngestionError(f"Cannot read archive {archive}: {e}") from e
    return parse_items(content)
