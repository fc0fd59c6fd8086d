"""In-memory state shared by one polling run."""

from __future__ import annotations

import threading
from typing import Iterable, Optional

from .logging_utils import _poller_event
from .models import LookupResult


class CancellationToken:
    """One-shot cancellation flag observed by the scheduler between batches."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)


class RunState:
    """Accumulated results, cursor and blocked flag for a single run.

    Only the scheduler appends results and moves the cursor, and only after a
    whole batch has resolved. Lookups running inside a batch may raise the
    blocked flag, which is an ``Event`` so that write is safe from any
    worker thread.
    """

    def __init__(self) -> None:
        self._results: list[LookupResult] = []
        self._cursor: int = 0
        self._blocked = threading.Event()
        self._blocked_by: Optional[str] = None
        self._blocked_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def blocked(self) -> bool:
        return self._blocked.is_set()

    @property
    def blocked_by(self) -> Optional[str]:
        return self._blocked_by

    @property
    def results(self) -> tuple[LookupResult, ...]:
        return self.snapshot()

    def __len__(self) -> int:
        return len(self._results)

    # ------------------------------------------------------------------
    # Mutation helpers
    # ------------------------------------------------------------------

    def append_batch(self, results: Iterable[LookupResult], *, advance: int) -> None:
        batch = list(results)
        self._results.extend(batch)
        self._cursor += max(0, advance)

    def mark_blocked(self, case_number: str) -> None:
        with self._blocked_lock:
            if self._blocked.is_set():
                return
            self._blocked_by = case_number
            self._blocked.set()
        _poller_event("state", phase="blocked", case_number=case_number)

    def snapshot(self) -> tuple[LookupResult, ...]:
        """Return an immutable copy of the results appended so far."""

        return tuple(self._results)


__all__ = ["CancellationToken", "RunState"]
