"""Atomic JSON file persistence shared by the quota ledger and checkpoint store."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError

from post_audit.exceptions import CorruptPersistedStateError
from post_audit.schemas.base import SchemaBase

T = TypeVar("T", bound=SchemaBase)


def write_atomic(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` so readers never observe a partial file.

    The content goes to a temporary file in the same directory which then
    replaces the target.

    Raises:
        OSError: If the directory cannot be created or the write fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_record(path: Path, model: type[T]) -> T | None:
    """Load a record from ``path``.

    Returns:
        The parsed record, or None if the file does not exist

    Raises:
        CorruptPersistedStateError: If the file exists but cannot be read or parsed
    """
    if not path.exists():
        return None
    try:
        return model.from_json(path.read_bytes())
    except (OSError, ValidationError, ValueError) as e:
        raise CorruptPersistedStateError(f"Unreadable state file {path}: {e}") from e
