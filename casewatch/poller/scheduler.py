"""Batch scheduling for case lookups.

Batches run strictly one after another. Inside a batch every lookup is in
flight at once on a thread pool exactly as wide as the batch, so there are
never more outstanding requests than one batch holds. Results are appended to
the run state only after the whole batch has resolved.
"""

from __future__ import annotations

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from enum import Enum
from itertools import islice
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from . import config
from .identifiers import InvalidRangeError
from .logging_utils import _poller_event
from .models import LookupResult
from .state import CancellationToken, RunState
from .utils import log_line

LookupFn = Callable[[str], LookupResult]
BatchCallback = Callable[[int, Sequence[LookupResult]], None]


class SchedulerPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"
    BLOCKED = "blocked"
    TERMINATED = "terminated"


def iter_batches(case_numbers: Iterable[str], size: int) -> Iterator[List[str]]:
    """Yield consecutive lists of ``size`` case numbers; the last may be shorter."""

    iterator = iter(case_numbers)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


class BatchScheduler:
    """Drive lookups batch by batch until done, blocked or cancelled."""

    def __init__(
        self,
        lookup: LookupFn,
        *,
        batch_size: int,
        run_state: RunState,
        token: Optional[CancellationToken] = None,
        poll_interval: float = config.CANCEL_POLL_SECONDS,
        on_batch: Optional[BatchCallback] = None,
    ) -> None:
        if batch_size < 1:
            raise InvalidRangeError(f"batch size must be positive, got {batch_size}")
        self._lookup = lookup
        self.batch_size = batch_size
        self.run_state = run_state
        self.token = token or CancellationToken()
        self.poll_interval = max(0.01, poll_interval)
        self._on_batch = on_batch
        self.phase = SchedulerPhase.IDLE
        self.transitions: list[SchedulerPhase] = [SchedulerPhase.IDLE]
        self.stop_reason: Optional[SchedulerPhase] = None
        self.batches_completed = 0
        self.batches_abandoned = 0

    def _enter(self, phase: SchedulerPhase) -> None:
        self.phase = phase
        self.transitions.append(phase)

    def run(self, case_numbers: Iterable[str]) -> SchedulerPhase:
        """Poll every case number and return why polling stopped.

        The return value is ``DONE``, ``BLOCKED`` or ``DRAINING``; afterwards
        ``phase`` is ``TERMINATED``.
        """

        if self.phase is not SchedulerPhase.IDLE:
            raise RuntimeError(f"scheduler already used (phase={self.phase.value})")

        self._enter(SchedulerPhase.RUNNING)
        _poller_event("state", phase="scheduler", kind="start", batch_size=self.batch_size)

        stop = SchedulerPhase.DONE
        executor = ThreadPoolExecutor(
            max_workers=self.batch_size, thread_name_prefix="casewatch-lookup"
        )
        try:
            for index, batch in enumerate(iter_batches(case_numbers, self.batch_size), start=1):
                if self.token.cancelled:
                    stop = SchedulerPhase.DRAINING
                    break
                if self.run_state.blocked:
                    stop = SchedulerPhase.BLOCKED
                    break

                results = self._run_batch(executor, batch)
                if results is None:
                    self.batches_abandoned += 1
                    log_line(
                        f"[POLL] Batch {index} abandoned on interrupt; "
                        f"{len(batch)} in-flight cases are not reported"
                    )
                    stop = SchedulerPhase.DRAINING
                    break

                self.run_state.append_batch(results, advance=len(batch))
                self.batches_completed += 1
                log_line(
                    f"[POLL] Batch {index} complete: {len(results)} cases "
                    f"({batch[0]}..{batch[-1]}), {self.run_state.cursor} polled so far"
                )
                if self._on_batch is not None:
                    self._on_batch(index, results)
            else:
                if self.run_state.blocked:
                    stop = SchedulerPhase.BLOCKED
        finally:
            # An abandoned batch is not awaited: its threads finish on their own.
            executor.shutdown(wait=stop is not SchedulerPhase.DRAINING, cancel_futures=True)

        self._enter(stop)
        self.stop_reason = stop
        self._log_stop(stop)
        self._enter(SchedulerPhase.TERMINATED)
        return stop

    def _run_batch(
        self, executor: ThreadPoolExecutor, batch: Sequence[str]
    ) -> Optional[List[LookupResult]]:
        """Run one batch; ``None`` means it was abandoned due to cancellation."""

        pending: set[Future[LookupResult]] = {
            executor.submit(self._lookup, case_number) for case_number in batch
        }
        completed: List[LookupResult] = []
        while pending:
            done, pending = wait(pending, timeout=self.poll_interval, return_when=FIRST_COMPLETED)
            for future in done:
                completed.append(future.result())
            if pending and self.token.cancelled:
                for future in pending:
                    future.cancel()
                return None
        return completed

    def _log_stop(self, stop: SchedulerPhase) -> None:
        _poller_event(
            "state",
            phase="scheduler",
            kind="stop",
            stop_reason=stop.value,
            batches_completed=self.batches_completed,
            batches_abandoned=self.batches_abandoned,
            cursor=self.run_state.cursor,
        )
        if stop is SchedulerPhase.BLOCKED:
            log_line(
                "[POLL][BLOCKED] The status service is rejecting requests "
                f"(first detected on case {self.run_state.blocked_by}). "
                f"Stopped after {self.batches_completed} batches; "
                "reporting the results collected so far."
            )
        elif stop is SchedulerPhase.DRAINING:
            log_line(
                f"[POLL] Interrupted ({self.token.reason or 'cancelled'}) after "
                f"{self.batches_completed} batches; reporting the results collected so far."
            )


__all__ = ["BatchScheduler", "SchedulerPhase", "iter_batches"]
