"""Status classification for extracted pages and failure pages.

The status site answers both "no such case" and "you are being throttled"
with the same generic error page. The only way to tell them apart is the
secondary markers listed in ``FAILURE_SIGNATURES``; detecting the block is
what lets a run stop instead of hammering the endpoint.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from bs4 import BeautifulSoup

from .dates import Clock, parse_status_date, utc_now
from .error_codes import ErrorCode
from .extract import parse_document
from .taxonomy import StatusType, status_for_heading
from .utils import log_warning


class FailureKind(Enum):
    BLOCKED = "blocked"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FailureSignature:
    kind: FailureKind
    selector: str
    # Case-insensitive fragment the matched element must contain; ``None``
    # means the element being present is enough.
    fragment: Optional[str] = None


# Checked in order: a block must win over a plain validation error.
FAILURE_SIGNATURES: tuple[FailureSignature, ...] = (
    FailureSignature(FailureKind.BLOCKED, ".fieldViolation, .field-violation"),
    FailureSignature(FailureKind.BLOCKED, "#formErrorMessages", "access violation"),
    FailureSignature(FailureKind.BLOCKED, "#formErrorMessages", "unusual activity"),
    FailureSignature(FailureKind.NOT_FOUND, "#formErrorMessages", "validation error"),
    FailureSignature(FailureKind.NOT_FOUND, "#formErrorMessages", "receipt number entered is invalid"),
)


@dataclass(frozen=True)
class Classification:
    status: StatusType
    occurred_at: datetime
    heading: str = ""
    text: str = ""
    blocked: bool = False
    error_code: Optional[str] = None


def classify_status(heading: str, text: str, *, clock: Clock = utc_now) -> Classification:
    """Classify an extracted ``(heading, text)`` pair."""

    return Classification(
        status=status_for_heading(heading),
        occurred_at=parse_status_date(text, clock=clock),
        heading=heading or "",
        text=text or "",
    )


def _as_document(document: BeautifulSoup | str | bytes | None) -> Optional[BeautifulSoup]:
    if document is None:
        return None
    if isinstance(document, BeautifulSoup):
        return document
    try:
        return parse_document(document)
    except Exception:  # noqa: BLE001
        return None


def detect_failure_kind(document: BeautifulSoup | str | bytes | None) -> FailureKind:
    """Return which known failure signature ``document`` carries, if any."""

    soup = _as_document(document)
    if soup is None:
        return FailureKind.UNKNOWN

    for signature in FAILURE_SIGNATURES:
        for element in soup.select(signature.selector):
            if signature.fragment is None:
                return signature.kind
            text = element.get_text(" ", strip=True).lower()
            if signature.fragment.lower() in text:
                return signature.kind
    return FailureKind.UNKNOWN


def classify_failure(
    document: BeautifulSoup | str | bytes | None,
    *,
    case_number: str = "",
    clock: Clock = utc_now,
) -> Classification:
    """Classify a page the extractor could not read."""

    kind = detect_failure_kind(document)
    if kind is FailureKind.BLOCKED:
        return Classification(
            status=StatusType.NOT_FOUND,
            occurred_at=clock(),
            blocked=True,
            error_code=ErrorCode.BLOCKED,
        )
    if kind is FailureKind.NOT_FOUND:
        return Classification(
            status=StatusType.NOT_FOUND,
            occurred_at=clock(),
            error_code=ErrorCode.NOT_FOUND,
        )

    log_warning(
        f"[CLASSIFIER][WARN] Unrecognised failure page for case={case_number or '?'}; "
        "the status page structure may have changed"
    )
    return Classification(
        status=StatusType.UNKNOWN_STATUS,
        occurred_at=clock(),
        error_code=ErrorCode.UNKNOWN_FAILURE,
    )


__all__ = [
    "Classification",
    "FAILURE_SIGNATURES",
    "FailureKind",
    "FailureSignature",
    "classify_failure",
    "classify_status",
    "detect_failure_kind",
]
