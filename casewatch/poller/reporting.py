"""Console summary and CSV exports for a finished (or interrupted) run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

import pandas as pd

from . import config
from .aggregator import Bucket, BucketKey, buckets_by_day
from .error_codes import ErrorCode
from .logging_utils import _poller_event
from .models import LookupResult
from .utils import log_line

RAW_COLUMNS = ["Date", "Unix Time", "Type", "Case Number"]
GROUPED_COLUMNS = ["Date", "Unix Time", "Type", "Applications"]
SEPARATOR = "***************************"

WriteFn = Callable[[str], None]


class OutputWriteFailure(Exception):
    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path
        self.error_code = ErrorCode.OUTPUT_WRITE_FAILED


@dataclass
class ReportResult:
    raw_path: Optional[Path] = None
    grouped_path: Optional[Path] = None
    lines: List[str] = field(default_factory=list)
    errors: List[OutputWriteFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def summary_lines(groups: Dict[BucketKey, Bucket]) -> List[str]:
    lines: List[str] = []
    for label, buckets in buckets_by_day(groups):
        lines.append(f"Statistics for {label}")
        for bucket in buckets:
            lines.append(f"\t{bucket.status.value}: {bucket.count}")
        lines.append(SEPARATOR)
    return lines


def print_summary(groups: Dict[BucketKey, Bucket], write: WriteFn = print) -> List[str]:
    lines = summary_lines(groups)
    for line in lines:
        write(line)
    return lines


def raw_frame(results: Iterable[LookupResult]) -> pd.DataFrame:
    df = pd.DataFrame([result.as_row() for result in results], columns=RAW_COLUMNS)
    return df.sort_values("Unix Time", kind="stable").reset_index(drop=True)


def grouped_frame(groups: Dict[BucketKey, Bucket]) -> pd.DataFrame:
    rows = [
        {
            "Date": bucket.date_label,
            "Unix Time": bucket.timestamp,
            "Type": bucket.status.value,
            "Applications": bucket.count,
        }
        for bucket in groups.values()
    ]
    df = pd.DataFrame(rows, columns=GROUPED_COLUMNS)
    return df.sort_values("Unix Time", kind="stable").reset_index(drop=True)


def _write_frame(df: pd.DataFrame, path: Path, *, kind: str) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(path, index=False)
    except (OSError, ValueError) as exc:
        _poller_event(
            "error",
            phase="report",
            kind=kind,
            path=str(path),
            error_code=ErrorCode.OUTPUT_WRITE_FAILED,
            error=str(exc),
        )
        log_line(f"[REPORT] Failed to save {kind} file {path}: {exc}")
        raise OutputWriteFailure(path, str(exc)) from exc
    log_line(f"[REPORT] Wrote {len(df)} {kind} rows to {path}")
    return path


def write_raw_export(results: Iterable[LookupResult], path: Path) -> Path:
    return _write_frame(raw_frame(results), path, kind="raw")


def write_grouped_export(groups: Dict[BucketKey, Bucket], path: Path) -> Path:
    return _write_frame(grouped_frame(groups), path, kind="grouped")


def report(
    results: Iterable[LookupResult],
    groups: Dict[BucketKey, Bucket],
    *,
    outfile: Optional[str | Path] = None,
    exports_dir: Optional[Path] = None,
    run_stamp: Optional[int] = None,
    write: WriteFn = print,
) -> ReportResult:
    """Write the exports and print the summary.

    A failed export is logged and recorded on the result; it never stops
    the summary from printing.
    """

    results = list(results)
    outcome = ReportResult()
    target_dir = Path(exports_dir) if exports_dir is not None else config.EXPORTS_DIR
    stamp = run_stamp if run_stamp is not None else int(pd.Timestamp.now(tz="UTC").timestamp())

    try:
        outcome.raw_path = write_raw_export(results, target_dir / f"cases_{stamp}.csv")
    except OutputWriteFailure as exc:
        outcome.errors.append(exc)

    if outfile and groups:
        try:
            outcome.grouped_path = write_grouped_export(groups, Path(outfile))
        except OutputWriteFailure as exc:
            outcome.errors.append(exc)

    outcome.lines = print_summary(groups, write=write)
    return outcome


__all__ = [
    "GROUPED_COLUMNS",
    "OutputWriteFailure",
    "RAW_COLUMNS",
    "ReportResult",
    "grouped_frame",
    "print_summary",
    "raw_frame",
    "report",
    "summary_lines",
    "write_grouped_export",
    "write_raw_export",
]
