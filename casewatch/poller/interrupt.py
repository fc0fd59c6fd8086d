from __future__ import annotations

import signal
from types import FrameType
from typing import Any, Dict, Optional, Sequence

from .logging_utils import _poller_event
from .state import CancellationToken
from .utils import log_line

DEFAULT_SIGNALS: tuple[int, ...] = tuple(
    sig for sig in (getattr(signal, "SIGINT", None), getattr(signal, "SIGTERM", None)) if sig is not None
)


class InterruptHandler:
    """Turn a termination signal into a cancellation of the current run.

    The first signal cancels ``token`` and puts the previous handlers back,
    so a second Ctrl-C while the report is being flushed falls through to the
    default behaviour. Installing twice is a no-op.
    """

    def __init__(
        self,
        token: CancellationToken,
        signals: Sequence[int] = DEFAULT_SIGNALS,
    ) -> None:
        self.token = token
        self.signals = tuple(signals)
        self._previous: Dict[int, Any] = {}
        self._installed = False
        self.received: Optional[int] = None

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> "InterruptHandler":
        if self._installed:
            return self
        for sig in self.signals:
            self._previous[sig] = signal.getsignal(sig)
            signal.signal(sig, self._handle)
        self._installed = True
        return self

    def uninstall(self) -> None:
        if not self._installed:
            return
        for sig, previous in self._previous.items():
            signal.signal(sig, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()
        self._installed = False

    def _handle(self, signum: int, frame: Optional[FrameType]) -> None:  # noqa: ARG002
        self.received = signum
        name = signal.Signals(signum).name
        log_line(f"[POLL] {name} received; finishing up with the results collected so far.")
        _poller_event("state", phase="interrupt", signal=name)
        self.token.cancel(reason=name)
        self.uninstall()

    def __enter__(self) -> "InterruptHandler":
        return self.install()

    def __exit__(self, *exc_info: object) -> None:
        self.uninstall()


__all__ = ["DEFAULT_SIGNALS", "InterruptHandler"]
