"""Audit Scheduler - Drives one provider call per item through the pipeline.

Composes the quota ledger, pacing governor, retry policy and checkpoint
store around the external collaborators:

    loader()                  -> items to audit
    evaluator(item, criteria) -> EvaluationResult, or raises a provider error
    emitter(results)          -> writes the flagged/errored listing

Lifecycle:

    INIT -> RESUMING -> RUNNING <-> PAUSING -> FINALIZING -> DONE
                           |
                           +-> SHUTTING_DOWN  (daily quota reached)
                           +-> CANCELLED      (stop requested)

Items are processed strictly one at a time. Progress is committed to the
checkpoint store after every batch (or every item, if configured). The
checkpoint is deleted only after a fully completed run.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from enum import Enum

from post_audit.config import AuditCriteria, BatchConfig, get_settings
from post_audit.logging import bind_batch, bind_item, get_logger
from post_audit.pacing import PacingGovernor, ProgressTracker, sleep_unless_stopped
from post_audit.quota import QuotaLedger, QuotaStatus
from post_audit.schemas import EvaluationResult, Item, ProcessingCheckpoint

from .checkpoint import CheckpointStore
from .enums import RunStatus, SchedulerState
from .results import AuditRunResult
from .retry import ErrorKind, RetryPolicy, classify_error

logger = get_logger(__name__)

ItemLoader = Callable[[], Sequence[Item]]
Evaluator = Callable[[Item, AuditCriteria], Awaitable[EvaluationResult]]
ResultEmitter = Callable[[Sequence[EvaluationResult]], None]


class _Halt(Enum):
    """Reasons an item could not be finished in this invocation."""

    QUOTA = "quota"
    STOPPED = "stopped"


class AuditScheduler:
    """Orchestrates a resumable, quota-aware audit run.

    Usage:
        scheduler = AuditScheduler(
            loader=lambda: load_items(archive_path),
            evaluator=client.evaluate,
            emitter=writer.emit,
            criteria=settings.criteria,
            ledger=QuotaLedger(quota_path),
            governor=PacingGovernor(),
            checkpoint_store=CheckpointStore(checkpoint_path),
            retry_policy=RetryPolicy(),
        )
        result = await scheduler.run()

    The scheduler owns the checkpoint store exclusively for the duration of
    the run. ``request_stop()`` interrupts any pending wait and ends the run
    with status CANCELLED, leaving the last saved checkpoint in place.
    """

    def __init__(
        self,
        loader: ItemLoader,
        evaluator: Evaluator,
        emitter: ResultEmitter,
        *,
        criteria: AuditCriteria,
        ledger: QuotaLedger,
        governor: PacingGovernor,
        checkpoint_store: CheckpointStore,
        retry_policy: RetryPolicy,
        batch_config: BatchConfig | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            loader: Produces the items to audit (ingestion collaborator)
            evaluator: Evaluates one item against the criteria
            emitter: Writes the final result listing
            criteria: Alignment criteria passed to every evaluation
            ledger: Daily quota ledger
            governor: Adaptive pacing governor
            checkpoint_store: Store for resumable progress
            retry_policy: Decides retries for failed calls
            batch_config: Optional batch configuration (uses settings if not provided)
            stop_event: Optional event that stops the run when set
        """
        self._loader = loader
        self._evaluator = evaluator
        self._emitter = emitter
        self._criteria = criteria
        self._ledger = ledger
        self._governor = governor
        self._store = checkpoint_store
        self._retry_policy = retry_policy
        self._batch_config = batch_config or get_settings().batch
        self._stop_event = stop_event or asyncio.Event()

        self._state = SchedulerState.INIT
        self._total_items = 0
        self._processed_ids: set[str] = set()
        self._last_processed_id: str | None = None
        self._flagged = 0
        self._errors = 0
        self._stored_results: list[EvaluationResult] = []
        self._new_results: list[EvaluationResult] = []

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def state(self) -> SchedulerState:
        """Current lifecycle state."""
        return self._state

    @property
    def stop_requested(self) -> bool:
        """Whether a stop has been requested."""
        return self._stop_event.is_set()

    def request_stop(self) -> None:
        """Ask the run to stop at the next suspension point."""
        if not self._stop_event.is_set():
            logger.warning("Stop requested, finishing current call and keeping last checkpoint")
        self._stop_event.set()

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------
    async def run(self) -> AuditRunResult:
        """Run the audit until completion, quota exhaustion or a stop request.

        Returns:
            AuditRunResult describing how the run ended

        Raises:
            IngestionError: If the loader cannot produce items
            CheckpointStoreError: If progress cannot be persisted
            OutputError: If the final listing cannot be written
        """
        started = time.monotonic()

        self._state = SchedulerState.INIT
        items = list(self._loader())
        self._total_items = len(items)
        logger.info("Loaded {} items to audit", self._total_items)

        self._state = SchedulerState.RESUMING
        self._restore(self._store.load())
        remaining = [item for item in items if item.id not in self._processed_ids]
        already_processed = self._total_items - len(remaining)
        if already_processed:
            logger.info(
                "Resuming: {} already processed, {} remaining",
                already_processed,
                len(remaining),
            )

        batch_size = self._batch_config.batch_size
        batches = [remaining[i : i + batch_size] for i in range(0, len(remaining), batch_size)]
        batches_completed = 0

        tracker = ProgressTracker(total=len(remaining), name="audit")
        tracker.start()

        def finish(status: RunStatus, quota_reset: str | None = None) -> AuditRunResult:
            return AuditRunResult(
                status=status,
                total_items=self._total_items,
                already_processed=already_processed,
                processed=len(self._processed_ids),
                flagged=self._flagged,
                errors=self._errors,
                batches_completed=batches_completed,
                duration_seconds=time.monotonic() - started,
                quota_reset=quota_reset,
                results=self._reportable_results(),
            )

        for number, batch in enumerate(batches, start=1):
            self._state = SchedulerState.RUNNING
            batch_logger = bind_batch(number, len(batches))
            batch_logger.info("Processing batch of {} items", len(batch))

            for item in batch:
                if self.stop_requested:
                    return self._cancel(tracker, finish)

                tracker.set_current(item.id)
                outcome = await self._process_item(item)

                if outcome is _Halt.QUOTA:
                    self._state = SchedulerState.SHUTTING_DOWN
                    reset = self._ledger.reset_time_description()
                    self._commit()
                    tracker.pause(f"daily quota reached, resets at {reset}")
                    logger.warning(
                        "Daily quota reached after {} items; progress saved, resume after {}",
                        len(self._processed_ids),
                        reset,
                    )
                    return finish(RunStatus.PAUSED_QUOTA, quota_reset=reset)
                if outcome is _Halt.STOPPED:
                    return self._cancel(tracker, finish)

                self._record(item.id, outcome)
                if outcome.is_error:
                    tracker.increment_failed()
                else:
                    tracker.increment(flagged=outcome.is_flagged)

                if self._batch_config.checkpoint_granularity == "item":
                    self._commit()

            self._commit()
            batches_completed += 1
            batch_logger.info(
                "Batch complete: {}/{} processed, {} flagged, {} errors",
                len(self._processed_ids),
                self._total_items,
                self._flagged,
                self._errors,
            )

            if number < len(batches):
                self._state = SchedulerState.PAUSING
                pause = self._batch_config.inter_batch_pause_seconds
                if pause > 0:
                    logger.info("Pausing {:.0f}s before next batch", pause)
                if not await sleep_unless_stopped(pause, self._stop_event):
                    return self._cancel(tracker, finish)

        self._state = SchedulerState.FINALIZING
        self._emitter(self._stored_results + self._new_results)
        self._store.delete()
        tracker.complete()
        self._state = SchedulerState.DONE

        result = finish(RunStatus.COMPLETED)
        logger.info(
            "Audit complete: {} processed, {} flagged, {} errors, {} clean",
            result.processed,
            result.flagged,
            result.errors,
            result.clean,
        )
        return result

    # -------------------------------------------------------------------------
    # Item Processing
    # -------------------------------------------------------------------------
    async def _process_item(self, item: Item) -> EvaluationResult | _Halt:
        """Evaluate one item under the quota, pacing and retry rules.

        Every issued attempt is counted against the daily quota. Quota
        exhaustion between retries halts without marking the item processed.
        """
        item_logger = bind_item(item.id)
        attempt = 0

        while True:
            attempt += 1

            if self._ledger.check_quota() is QuotaStatus.EXHAUSTED:
                return _Halt.QUOTA
            if not await self._governor.wait(self._stop_event):
                return _Halt.STOPPED

            call_started = time.monotonic()
            try:
                result = await self._evaluator(item, self._criteria)
            except Exception as e:
                self._ledger.increment_request_count()
                kind = classify_error(e)
                self._feed_governor(kind)

                decision = self._retry_policy.decide(
                    kind,
                    attempt,
                    retry_after=getattr(e, "retry_after", None),
                )
                if not decision.retry:
                    item_logger.warning(
                        "Evaluation failed after {} attempt(s) ({}): {}",
                        attempt,
                        kind.value,
                        e,
                    )
                    return EvaluationResult.from_error(item.id, _describe_error(e, attempt))

                item_logger.info(
                    "Attempt {} failed ({}), retrying in {:.1f}s",
                    attempt,
                    kind.value,
                    decision.delay_seconds,
                )
                if not await sleep_unless_stopped(decision.delay_seconds, self._stop_event):
                    return _Halt.STOPPED
                continue

            self._ledger.increment_request_count()
            self._governor.on_success((time.monotonic() - call_started) * 1000)
            if result.is_flagged:
                item_logger.info("Flagged: {}", result.reason)
            else:
                item_logger.debug("Clean")
            return result

    def _feed_governor(self, kind: ErrorKind) -> None:
        if kind is ErrorKind.RATE_LIMITED:
            self._governor.on_rate_limited()
        elif kind in (ErrorKind.SERVER_ERROR, ErrorKind.TIMEOUT):
            self._governor.on_server_error()

    # -------------------------------------------------------------------------
    # Progress State
    # -------------------------------------------------------------------------
    def _restore(self, checkpoint: ProcessingCheckpoint | None) -> None:
        self._processed_ids = set()
        self._last_processed_id = None
        self._flagged = 0
        self._errors = 0
        self._stored_results = []
        self._new_results = []
        if checkpoint is None:
            return

        self._processed_ids = set(checkpoint.processed_ids)
        self._last_processed_id = checkpoint.last_processed_id
        self._flagged = checkpoint.flagged_count
        self._errors = checkpoint.error_count
        self._stored_results = list(checkpoint.results)
        if checkpoint.total_items and checkpoint.total_items != self._total_items:
            logger.warning(
                "Checkpoint was taken against {} items, archive now has {}",
                checkpoint.total_items,
                self._total_items,
            )

    def _record(self, item_id: str, result: EvaluationResult) -> None:
        self._processed_ids.add(item_id)
        self._last_processed_id = item_id
        self._new_results.append(result)
        if result.is_error:
            self._errors += 1
        elif result.is_flagged:
            self._flagged += 1

    def _reportable_results(self) -> list[EvaluationResult]:
        return [r for r in self._stored_results + self._new_results if r.is_reportable]

    def _commit(self) -> None:
        checkpoint = ProcessingCheckpoint(
            processed_ids=set(self._processed_ids),
            last_processed_id=self._last_processed_id,
            timestamp=datetime.now(UTC),
            total_processed=len(self._processed_ids),
            total_items=self._total_items,
            flagged_count=self._flagged,
            error_count=self._errors,
            results=self._reportable_results(),
        )
        self._store.save(checkpoint)

    def _cancel(
        self,
        tracker: ProgressTracker,
        finish: Callable[[RunStatus], AuditRunResult],
    ) -> AuditRunResult:
        self._state = SchedulerState.CANCELLED
        tracker.cancel()
        logger.warning("Run cancelled; resume will continue from the last saved checkpoint")
        return finish(RunStatus.CANCELLED)


def _describe_error(error: Exception, attempts: int) -> str:
    message = str(error) or type(error).__name__
    if attempts > 1:
        return f"{message} (after {attempts} attempts)"
    return message
