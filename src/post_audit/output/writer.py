"""CSV listing of flagged and errored posts."""

from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path

from post_audit.exceptions import OutputError
from post_audit.logging import get_logger
from post_audit.schemas import EvaluationResult
from post_audit.schemas.item import POST_URL_TEMPLATE

logger = get_logger(__name__)

CSV_HEADER = ("post_url", "post_id", "status", "matched_criteria", "reason")
CRITERIA_SEPARATOR = "|"


def to_row(result: EvaluationResult) -> list[str]:
    """Render one reportable result as a CSV row."""
    return [
        POST_URL_TEMPLATE.format(id=result.item_id),
        result.item_id,
        result.status,
        CRITERIA_SEPARATOR.join(result.matched_criteria),
        result.reason,
    ]


class ResultWriter:
    """Writes the audit listing.

    Only flagged and errored results are written; clean results are
    omitted. The header is always written, so a completed run produces a
    file even when nothing was flagged.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the writer.

        Args:
            path: CSV file to (over)write
        """
        self._path = path

    @property
    def path(self) -> Path:
        """Location of the CSV file."""
        return self._path

    def emit(self, results: Sequence[EvaluationResult]) -> None:
        """Write the reportable results.

        Raises:
            OutputError: If the file cannot be written
        """
        reportable = [r for r in results if r.is_reportable]
        flagged = sum(1 for r in reportable if r.is_flagged)
        logger.info(
            "Writing {} flagged and {} errored posts to {}",
            flagged,
            len(reportable) - flagged,
            self._path,
        )

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", newline="", encoding="utf-8") as fh:
                writer = csv.writer(fh)
                writer.writerow(CSV_HEADER)
                writer.writerows(to_row(r) for r in reportable)
        except OSError as e:
            raise OutputError(f"Failed to write results to {self._path}: {e}") from e
