"""Tests for the CSV result listing."""

import csv
from pathlib import Path

import pytest

from post_audit.exceptions import OutputError
from post_audit.output import CSV_HEADER, ResultWriter, to_row
from tests.factories import make_clean, make_error, make_flagged


def read_rows(path: Path) -> list[list[str]]:
    with path.open(newline="", encoding="utf-8") as fh:
        return list(csv.reader(fh))


class TestToRow:
    """Tests for rendering single results."""

    def test_flagged_row(self) -> None:
        """Flagged rows carry URL, criteria and rationale."""
        row = to_row(make_flagged("42", "Mentions crypto", ["Forbidden words", "Professionalism"]))

        assert row == [
            "https://x.com/i/status/42",
            "42",
            "FLAGGED",
            "Forbidden words|Professionalism",
            "Mentions crypto",
        ]

    def test_error_row(self) -> None:
        """Error rows carry the failure message and no criteria."""
        row = to_row(make_error("7", "Provider rejected request (400)"))

        assert row[2:] == ["ERROR", "", "Provider rejected request (400)"]


class TestResultWriter:
    """Tests for ResultWriter.emit."""

    def test_writes_only_reportable(self, tmp_path: Path) -> None:
        """Clean results are omitted from the listing."""
        path = tmp_path / "results" / "flagged_posts.csv"
        results = [make_clean("1"), make_flagged("2"), make_error("3")]

        ResultWriter(path).emit(results)

        rows = read_rows(path)
        assert rows[0] == list(CSV_HEADER)
        assert [row[1] for row in rows[1:]] == ["2", "3"]

    def test_header_only_when_nothing_flagged(self, tmp_path: Path) -> None:
        """A run with nothing to report still produces a file."""
        path = tmp_path / "flagged_posts.csv"

        ResultWriter(path).emit([make_clean("1")])

        assert read_rows(path) == [list(CSV_HEADER)]

    def test_quotes_commas_and_newlines(self, tmp_path: Path) -> None:
        """Rationales with separators survive a CSV round trip."""
        path = tmp_path / "flagged_posts.csv"
        reason = 'Says "damn", twice\nand is rude'

        ResultWriter(path).emit([make_flagged("9", reason)])

        assert read_rows(path)[1][4] == reason

    def test_overwrites(self, tmp_path: Path) -> None:
        """A later emit replaces the earlier listing."""
        path = tmp_path / "flagged_posts.csv"
        writer = ResultWriter(path)
        writer.emit([make_flagged("1"), make_flagged("2")])
        writer.emit([make_error("3")])

        assert [row[1] for row in read_rows(path)[1:]] == ["3"]

    def test_unwritable_path(self, tmp_path: Path) -> None:
        """Write failures surface as OutputError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        with pytest.raises(OutputError, match="Failed to write results"):
            ResultWriter(blocker / "flagged_posts.csv").emit([make_flagged("1")])
