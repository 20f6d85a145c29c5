"""Result rendering."""

from .writer import CSV_HEADER, ResultWriter, to_row

__all__ = [
    "CSV_HEADER",
    "ResultWriter",
    "to_row",
]
