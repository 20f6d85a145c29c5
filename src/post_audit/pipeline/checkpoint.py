"""Checkpoint store for resumable audit runs.

Holds exactly one record for the current run. Every save is a full
overwrite; there is no merge or append.
"""

from __future__ import annotations

from pathlib import Path

from post_audit.exceptions import CheckpointStoreError, CorruptPersistedStateError
from post_audit.logging import get_logger
from post_audit.persistence import read_record, write_atomic
from post_audit.schemas import ProcessingCheckpoint

logger = get_logger(__name__)


class CheckpointStore:
    """File-backed store for the single ProcessingCheckpoint of a run.

    Usage:
        store = CheckpointStore(Path("results/checkpoint.json"))
        checkpoint = store.load()  # None on a fresh run
        ...
        store.save(updated)
        ...
        store.delete()  # only after a fully completed run
    """

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: JSON file holding the checkpoint
        """
        self._path = path

    @property
    def path(self) -> Path:
        """Location of the checkpoint file."""
        return self._path

    def exists(self) -> bool:
        """Whether a checkpoint is currently stored."""
        return self._path.exists()

    def load(self) -> ProcessingCheckpoint | None:
        """Load the stored checkpoint.

        A corrupt file is logged and treated as absent.

        Returns:
            The checkpoint, or None if there is nothing usable to resume from
        """
        try:
            checkpoint = read_record(self._path, ProcessingCheckpoint)
        except CorruptPersistedStateError as e:
            logger.warning("Ignoring unreadable checkpoint: {}", e)
            return None

        if checkpoint is not None:
            logger.info(
                "Loaded checkpoint: {} processed ({} flagged, {} errors) as of {}",
                checkpoint.total_processed,
                checkpoint.flagged_count,
                checkpoint.error_count,
                checkpoint.timestamp.isoformat() if checkpoint.timestamp else "unknown",
            )
        return checkpoint

    def save(self, checkpoint: ProcessingCheckpoint) -> None:
        """Durably overwrite the stored checkpoint.

        Raises:
            CheckpointStoreError: If the file cannot be written
        """
        try:
            write_atomic(self._path, checkpoint.to_json())
        except OSError as e:
            raise CheckpointStoreError(f"Failed to save checkpoint to {self._path}: {e}") from e
        logger.debug("Checkpoint saved: {}/{} processed", checkpoint.total_processed, checkpoint.total_items)

    def delete(self) -> None:
        """Remove the stored checkpoint if present.

        Raises:
            CheckpointStoreError: If the file exists but cannot be removed
        """
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise CheckpointStoreError(f"Failed to delete checkpoint {self._path}: {e}") from e
        logger.info("Checkpoint cleared")
