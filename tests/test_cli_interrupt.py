from __future__ import annotations

import os
import signal
import subprocess
import sys
import textwrap
import time
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Cases 1 and 2 answer at once; cases 3 and 4 hang far longer than the test allows.
CLI_SCRIPT = textwrap.dedent(
    """
    import time

    from casewatch import main as cli
    from casewatch.poller.run import run_poll
    from tests.pages import APPROVED_TEXT, status_page


    class HangingTransport:
        def submit(self, case_number):
            if case_number[-1] in "34":
                print("IN FLIGHT", case_number, flush=True)
                time.sleep(60)
            return status_page("Case Was Approved", APPROVED_TEXT)

        def close(self):
            pass


    cli.run_poll = lambda options: run_poll(options, transport=HangingTransport(), delay_seconds=0)
    raise SystemExit(cli.main(["-p", "IOE", "-n", "0000000001", "-t", "4", "-l", "2"]))
    """
)


@pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signal delivery")
def test_sigint_mid_batch_exits_right_after_flush(tmp_path: Path) -> None:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")]))
    env["CASEWATCH_DATA_DIR"] = str(tmp_path / "data")
    env["CASEWATCH_EXPORTS_DIR"] = str(tmp_path / "exports")
    env["CASEWATCH_CANCEL_POLL_SECONDS"] = "0.05"

    proc = subprocess.Popen(
        [sys.executable, "-c", CLI_SCRIPT],
        cwd=PROJECT_ROOT,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )
    try:
        before: list[str] = []
        for line in proc.stdout:
            before.append(line)
            if line.startswith("IN FLIGHT"):
                break
        else:
            pytest.fail("second batch never started:\n" + "".join(before))

        proc.send_signal(signal.SIGINT)
        interrupted_at = time.monotonic()
        rest, _ = proc.communicate(timeout=20)
        elapsed = time.monotonic() - interrupted_at
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.wait()

    assert proc.returncode == 130
    assert elapsed < 10
    assert "Statistics for Tuesday, August 23rd 2016" in rest
    assert "\tDECISION_MAILED: 2" in rest
    assert list((tmp_path / "exports").glob("cases_*.csv"))
