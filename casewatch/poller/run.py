"""Case status polling run.

Workflow:

- Validate the invocation (prefix, start number, total, batch width).
- Generate the zero-padded case numbers to poll.
- Poll them batch by batch: every case of a batch is in flight at once,
  batches run one after another.
- Stop early when the status service starts blocking us or when the run is
  interrupted (SIGINT/SIGTERM); whatever was collected is kept.
- Group the results by day and status, write the CSV exports and print the
  chronological summary.

Wired to the CLI via ``casewatch.main``.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from . import config
from .aggregator import Bucket, BucketKey, group_results, total_count
from .config_validation import validate_options
from .dates import Clock, unix_time, utc_now
from .extract import extract_status_fields
from .identifiers import generate_case_numbers
from .interrupt import InterruptHandler
from .logging_utils import _poller_event
from .models import LookupResult
from .poller import CasePoller, ExtractFn
from .reporting import ReportResult, WriteFn, report
from .scheduler import BatchCallback, BatchScheduler, SchedulerPhase
from .state import CancellationToken, RunState
from .transport import CaseStatusTransport
from .utils import ensure_dirs, log_line, setup_run_logger


@dataclass(frozen=True)
class RunOptions:
    prefix: str = config.DEFAULT_PREFIX
    start: str | int = config.DEFAULT_START
    total: int = config.DEFAULT_TOTAL
    batch_size: int = config.DEFAULT_BATCH_SIZE
    outfile: Optional[str] = None


@dataclass
class PollSummary:
    stop_reason: SchedulerPhase
    results: Tuple[LookupResult, ...]
    groups: Dict[BucketKey, Bucket] = field(default_factory=dict)
    report: Optional[ReportResult] = None
    blocked: bool = False
    interrupted: bool = False

    @property
    def has_results(self) -> bool:
        return bool(self.results)


def _signals_allowed() -> bool:
    return threading.current_thread() is threading.main_thread()


def flush_results(
    run_state: RunState,
    stop_reason: SchedulerPhase,
    *,
    token: CancellationToken,
    outfile: Optional[str] = None,
    exports_dir: Optional[Path] = None,
    clock: Clock = utc_now,
    write: WriteFn = print,
) -> PollSummary:
    """Aggregate and report over everything appended to ``run_state``."""

    results = run_state.snapshot()
    summary = PollSummary(
        stop_reason=stop_reason,
        results=results,
        blocked=run_state.blocked,
        interrupted=token.cancelled,
    )
    if not results:
        log_line("[POLL] No results")
        return summary

    summary.groups = group_results(results)
    summary.report = report(
        results,
        summary.groups,
        outfile=outfile,
        exports_dir=exports_dir,
        run_stamp=unix_time(clock()),
        write=write,
    )
    _poller_event(
        "report",
        stop_reason=stop_reason.value,
        results=len(results),
        buckets=len(summary.groups),
        bucketed=total_count(summary.groups),
        write_errors=len(summary.report.errors),
    )
    return summary


def run_poll(
    options: RunOptions,
    *,
    transport: Optional[Any] = None,
    extractor: Optional[ExtractFn] = None,
    token: Optional[CancellationToken] = None,
    install_signals: bool = True,
    clock: Clock = utc_now,
    delay_seconds: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    exports_dir: Optional[Path] = None,
    on_batch: Optional[BatchCallback] = None,
    write: WriteFn = print,
) -> PollSummary:
    """Public entrypoint: poll, then aggregate and report however the run ended."""

    validate_options(options)
    case_numbers = generate_case_numbers(options.prefix, options.start, options.total)

    ensure_dirs()
    setup_run_logger()
    log_line(
        f"[POLL] Polling {len(case_numbers)} cases from {case_numbers.format(case_numbers.start)} "
        f"in batches of {options.batch_size}"
    )

    run_state = RunState()
    token = token or CancellationToken()
    owns_transport = transport is None
    if transport is None:
        transport = CaseStatusTransport(pool_size=options.batch_size)

    poller = CasePoller(
        transport,
        extractor or extract_status_fields,
        run_state=run_state,
        clock=clock,
        delay_seconds=config.REQUEST_DELAY_SECONDS if delay_seconds is None else delay_seconds,
        sleep=sleep,
    )
    scheduler = BatchScheduler(
        poller,
        batch_size=options.batch_size,
        run_state=run_state,
        token=token,
        on_batch=on_batch,
    )

    handler = InterruptHandler(token) if install_signals and _signals_allowed() else None
    try:
        if handler is not None:
            handler.install()
        stop_reason = scheduler.run(case_numbers)
    finally:
        if handler is not None:
            handler.uninstall()
        # Abandoned lookups may still be using the session.
        if owns_transport and scheduler.stop_reason is not SchedulerPhase.DRAINING:
            transport.close()

    return flush_results(
        run_state,
        stop_reason,
        token=token,
        outfile=options.outfile,
        exports_dir=exports_dir,
        clock=clock,
        write=write,
    )


__all__ = ["PollSummary", "RunOptions", "flush_results", "run_poll"]
