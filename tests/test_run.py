from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from casewatch.poller import run as run_module
from casewatch.poller.error_codes import ErrorCode
from casewatch.poller.identifiers import InvalidRangeError
from casewatch.poller.reporting import SEPARATOR
from casewatch.poller.run import RunOptions, run_poll
from casewatch.poller.scheduler import SchedulerPhase
from casewatch.poller.state import CancellationToken
from casewatch.poller.taxonomy import StatusType

from tests.pages import (
    APPROVED_TEXT,
    FIXED_NOW,
    RECEIVED_TEXT,
    ScriptedTransport,
    blocked_page,
    network_error,
    not_found_page,
    status_page,
)


def _run(options: RunOptions, transport: ScriptedTransport, tmp_path: Path, **kwargs):
    printed: list[str] = []
    kwargs.setdefault("install_signals", False)
    summary = run_poll(
        options,
        transport=transport,
        clock=lambda: FIXED_NOW,
        delay_seconds=0,
        exports_dir=tmp_path / "exports",
        write=printed.append,
        **kwargs,
    )
    return summary, printed


def test_full_run_groups_and_reports(tmp_path: Path) -> None:
    transport = ScriptedTransport(
        {
            "IOE0900677923": status_page("Case Was Received", RECEIVED_TEXT),
            "IOE0900677924": status_page("Case Was Approved", APPROVED_TEXT),
            "IOE0900677925": status_page("Case Was Approved", APPROVED_TEXT),
            "IOE0900677926": not_found_page(),
            "IOE0900677927": network_error(),
        }
    )
    outfile = tmp_path / "grouped.csv"

    summary, printed = _run(
        RunOptions(prefix="IOE", start="0900677923", total=5, batch_size=2, outfile=str(outfile)),
        transport,
        tmp_path,
    )

    assert summary.stop_reason is SchedulerPhase.DONE
    assert summary.blocked is False
    assert summary.interrupted is False
    assert len(summary.results) == 5
    assert sorted(transport.calls) == [f"IOE09006779{n}" for n in range(23, 28)]
    assert transport.closed is False

    statuses = {result.case_number: result.status for result in summary.results}
    assert statuses["IOE0900677926"] is StatusType.NOT_FOUND
    assert statuses["IOE0900677927"] is StatusType.TRANSPORT_FAILED

    assert printed[0] == "Statistics for Monday, August 22nd 2016"
    assert "\tDECISION_MAILED: 2" in printed
    assert summary.report is not None and summary.report.ok

    grouped = pd.read_csv(outfile)
    assert grouped["Applications"].sum() == 5
    assert grouped["Unix Time"].is_monotonic_increasing
    raw = pd.read_csv(summary.report.raw_path)
    assert len(raw) == 5


def test_block_stops_the_run_but_keeps_results(tmp_path: Path) -> None:
    transport = ScriptedTransport(
        {"IOE0000000003": blocked_page()},
        default=status_page("Case Was Approved", APPROVED_TEXT),
    )

    summary, printed = _run(
        RunOptions(prefix="IOE", start="0000000001", total=10, batch_size=2),
        transport,
        tmp_path,
    )

    assert summary.stop_reason is SchedulerPhase.BLOCKED
    assert summary.blocked is True
    assert len(transport.calls) == 4
    assert len(summary.results) == 4
    blocked = [r for r in summary.results if r.error_code == ErrorCode.BLOCKED]
    assert [r.case_number for r in blocked] == ["IOE0000000003"]
    assert printed


def test_interrupt_flushes_completed_batches(tmp_path: Path) -> None:
    token = CancellationToken()
    transport = ScriptedTransport(default=status_page("Case Was Approved", APPROVED_TEXT))

    def on_batch(index, results):
        if index == 1:
            token.cancel("SIGINT")

    summary, printed = _run(
        RunOptions(prefix="IOE", start=1, total=6, batch_size=2),
        transport,
        tmp_path,
        token=token,
        on_batch=on_batch,
    )

    assert summary.stop_reason is SchedulerPhase.DRAINING
    assert summary.interrupted is True
    assert len(summary.results) == 2
    assert printed == [
        "Statistics for Tuesday, August 23rd 2016",
        "\tDECISION_MAILED: 2",
        SEPARATOR,
    ]


def test_no_results_skips_reporting(tmp_path: Path) -> None:
    token = CancellationToken()
    token.cancel()
    transport = ScriptedTransport()

    summary, printed = _run(RunOptions(total=3), transport, tmp_path, token=token)

    assert summary.has_results is False
    assert summary.report is None
    assert printed == []
    assert transport.calls == []


def test_invalid_options_fail_before_any_request(tmp_path: Path) -> None:
    transport = ScriptedTransport()

    with pytest.raises(InvalidRangeError):
        _run(RunOptions(prefix="IOE", start="abc", total=0), transport, tmp_path)

    assert transport.calls == []


def test_signal_handler_installed_only_on_request(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    installed: list[bool] = []

    class _Handler:
        def __init__(self, token):
            self.token = token

        def install(self):
            installed.append(True)
            return self

        def uninstall(self):
            installed.append(False)

    monkeypatch.setattr(run_module, "InterruptHandler", _Handler)
    transport = ScriptedTransport(default=status_page("Case Was Approved", APPROVED_TEXT))

    _run(RunOptions(total=1, batch_size=1), transport, tmp_path, install_signals=True)

    assert installed == [True, False]
