"""Pacing of provider calls.

Components:
- PacingGovernor: Adaptive inter-call delay tuned from latency and errors
- sleep_unless_stopped: Interruptible sleep shared by all waits
- ProgressTracker: Observable progress reporting with throughput and ETA
"""

from .governor import PacingGovernor, sleep_unless_stopped
from .progress import (
    ProgressCallback,
    ProgressState,
    ProgressTracker,
    ProgressUpdate,
    format_duration,
)

__all__ = [
    # Pacing
    "PacingGovernor",
    "sleep_unless_stopped",
    # Progress tracking
    "ProgressCallback",
    "ProgressState",
    "ProgressTracker",
    "ProgressUpdate",
    "format_duration",
]
