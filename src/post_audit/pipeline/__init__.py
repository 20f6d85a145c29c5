"""Batch evaluation pipeline.

This module provides:
- AuditScheduler: Resumable, quota-aware orchestration of an audit run
- CheckpointStore: Persisted resumable progress
- RetryPolicy / classify_error: Retry decisions for failed provider calls
- AuditRunResult: Structured outcome of a run
"""

from .checkpoint import CheckpointStore
from .enums import OutputFormat, RunStatus, SchedulerState
from .results import AuditRunResult
from .retry import ErrorKind, RetryDecision, RetryPolicy, classify_error
from .scheduler import AuditScheduler, Evaluator, ItemLoader, ResultEmitter

__all__ = [
    # Scheduler
    "AuditScheduler",
    "Evaluator",
    "ItemLoader",
    "ResultEmitter",
    # Checkpointing
    "CheckpointStore",
    # Retry
    "ErrorKind",
    "RetryDecision",
    "RetryPolicy",
    "classify_error",
    # Results & enums
    "AuditRunResult",
    "OutputFormat",
    "RunStatus",
    "SchedulerState",
]
