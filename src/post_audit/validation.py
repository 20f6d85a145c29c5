"""Startup validation of run settings.

Runs before any provider call so misconfiguration fails fast with every
problem listed at once.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from post_audit.config import Settings
from post_audit.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

MIN_API_KEY_LENGTH = 30
MAX_RECOMMENDED_BATCH_SIZE = 100
API_KEY_URL = "https://aistudio.google.com/app/apikey"


def _check_api_key(api_key: str) -> list[str]:
    if not api_key.strip():
        return [f"GEMINI_API_KEY is not set. Get a key at {API_KEY_URL}"]
    if len(api_key) < MIN_API_KEY_LENGTH:
        return [
            f"GEMINI_API_KEY looks invalid: expected at least {MIN_API_KEY_LENGTH} "
            f"characters, got {len(api_key)}"
        ]
    return []


def _check_archive(archive_path: str) -> list[str]:
    if not archive_path.strip():
        return ["Archive path is not configured"]

    path = Path(archive_path)
    if not path.exists():
        return [f"Archive file not found: {path}"]
    if not path.is_file():
        return [f"Archive path is not a file: {path}"]
    if not os.access(path, os.R_OK):
        return [f"Archive file is not readable: {path}"]
    if path.stat().st_size == 0:
        return [f"Archive file is empty: {path}"]

    if path.suffix != ".js":
        logger.warning("Archive file does not have a .js extension: %s", path)
    return []


def _check_output(output_path: str) -> list[str]:
    if not output_path.strip():
        return ["Output path is not configured"]
    parent = Path(output_path).parent
    if parent.exists() and not os.access(parent, os.W_OK):
        return [f"Output directory is not writable: {parent}"]
    return []


def validate_run_settings(settings: Settings) -> None:
    """Validate everything an audit run needs before it starts.

    Args:
        settings: Effective settings, including CLI overrides

    Raises:
        ConfigurationError: Listing every problem found
    """
    logger.info("Validating configuration")
    problems: list[str] = []

    problems += _check_api_key(settings.gemini_api_key)
    problems += _check_archive(settings.paths.archive_path)
    problems += _check_output(settings.paths.output_path)

    criteria = settings.criteria
    if not criteria.forbidden_words:
        problems.append("Criteria: forbidden words list is empty")
    if not criteria.context.strip():
        problems.append("Criteria: context is not set")
    if not criteria.desired_tone.strip():
        problems.append("Criteria: desired tone is not set")

    batch_size = settings.batch.batch_size
    if batch_size <= 0:
        problems.append(f"Batch size must be greater than 0, got {batch_size}")
    elif batch_size > MAX_RECOMMENDED_BATCH_SIZE:
        logger.warning(
            "Batch size %d is above the recommended maximum of %d",
            batch_size,
            MAX_RECOMMENDED_BATCH_SIZE,
        )

    if problems:
        raise ConfigurationError(
            "Invalid configuration:\n" + "\n".join(f"  - {p}" for p in problems),
            problems=problems,
        )
    logger.info("Configuration validation passed")
