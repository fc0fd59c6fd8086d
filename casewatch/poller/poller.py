from __future__ import annotations

import time
from typing import Callable, Optional

from . import config
from .classifier import Classification, classify_failure, classify_status
from .dates import Clock, utc_now
from .error_codes import ErrorCode
from .extract import ExtractionError, StatusFields, extract_status_fields
from .logging_utils import _poller_event
from .models import LookupResult
from .state import RunState
from .taxonomy import StatusType
from .transport import TransportError
from .utils import log_debug, log_line

SubmitFn = Callable[[str], str]
ExtractFn = Callable[[str], StatusFields]


def _short_error_message(exc: BaseException, max_length: int = 200) -> str:
    message = str(exc) or exc.__class__.__name__
    if len(message) > max_length:
        return message[: max_length - 3] + "..."
    return message


class CasePoller:
    """Looks up one case number and always hands back a ``LookupResult``.

    Transport and extraction failures are folded into the returned record so
    that one bad case never costs the rest of its batch. A detected block is
    the single side effect: it raises the run's blocked flag.
    """

    def __init__(
        self,
        transport: SubmitFn,
        extractor: ExtractFn = extract_status_fields,
        *,
        run_state: Optional[RunState] = None,
        clock: Clock = utc_now,
        delay_seconds: float = config.REQUEST_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._submit = getattr(transport, "submit", transport)
        self._extract = extractor
        self.run_state = run_state
        self.clock = clock
        self.delay_seconds = max(0.0, float(delay_seconds))
        self._sleep = sleep

    def __call__(self, case_number: str) -> LookupResult:
        return self.lookup(case_number)

    def _result(self, case_number: str, classification: Classification) -> LookupResult:
        return LookupResult(
            case_number=case_number,
            status=classification.status,
            occurred_at=classification.occurred_at,
            raw_heading=classification.heading,
            raw_text=classification.text,
            error_code=classification.error_code,
        )

    def _failed(self, case_number: str, status: StatusType, error_code: str) -> LookupResult:
        return LookupResult(
            case_number=case_number,
            status=status,
            occurred_at=self.clock(),
            error_code=error_code,
        )

    def lookup(self, case_number: str) -> LookupResult:
        try:
            return self._lookup(case_number)
        except Exception as exc:  # noqa: BLE001
            _poller_event(
                "error",
                phase="lookup",
                case_number=case_number,
                error=_short_error_message(exc),
            )
            return self._failed(case_number, StatusType.UNKNOWN_STATUS, ErrorCode.INTERNAL)

    def _lookup(self, case_number: str) -> LookupResult:
        if self.delay_seconds:
            self._sleep(self.delay_seconds)

        try:
            raw_body = self._submit(case_number)
        except TransportError as exc:
            log_line(f"[POLL] Initial retrieval failed for case {case_number}: {exc}")
            return self._failed(case_number, StatusType.TRANSPORT_FAILED, exc.error_code)
        except Exception as exc:  # noqa: BLE001
            log_line(f"[POLL] Initial retrieval failed for case {case_number}: {exc}")
            return self._failed(case_number, StatusType.TRANSPORT_FAILED, ErrorCode.NETWORK)

        try:
            fields = self._extract(raw_body)
        except ExtractionError as exc:
            log_debug(f"[POLL] Extracting info failed for case {case_number}: {exc}")
            classification = classify_failure(
                exc.document, case_number=case_number, clock=self.clock
            )
            if classification.blocked and self.run_state is not None:
                self.run_state.mark_blocked(case_number)
            return self._result(case_number, classification)

        return self._result(
            case_number, classify_status(fields.heading, fields.text, clock=self.clock)
        )


__all__ = ["CasePoller"]
