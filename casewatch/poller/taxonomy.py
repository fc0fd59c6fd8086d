"""Closed taxonomy of case statuses and the heading text that maps onto it.

The remote page reports a status as free heading text. Only exact matches in
``STATUS_BY_HEADING`` are recognised; when the site introduces new wording it
is a data edit here, not a code change.
"""

from __future__ import annotations

from enum import Enum

from .utils import log_warning


class StatusType(Enum):
    BIOMETRICS_SCHEDULED = "BIOMETRICS_SCHEDULED"
    RECEIPT_NOTICE = "RECEIPT_NOTICE"
    DECISION_MAILED = "DECISION_MAILED"
    EVIDENCE_REQUESTED = "EVIDENCE_REQUESTED"
    EVIDENCE_RECEIVED = "EVIDENCE_RECEIVED"
    CARD_ISSUED = "CARD_ISSUED"
    CARD_DELIVERED = "CARD_DELIVERED"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    WITHDRAWN = "WITHDRAWN"
    EXPLANATION_SENT = "EXPLANATION_SENT"
    SUSPENDED = "SUSPENDED"
    REJECTED = "REJECTED"
    UNKNOWN_STATUS = "UNKNOWN_STATUS"
    NOT_FOUND = "NOT_FOUND"
    TRANSPORT_FAILED = "TRANSPORT_FAILED"

    @property
    def order(self) -> int:
        """Declaration index, used to break ties between buckets of one day."""

        return _ORDER[self]


_ORDER = {status: index for index, status in enumerate(StatusType)}


STATUS_BY_HEADING: dict[str, StatusType] = {
    "Biometrics Appointment Was Scheduled": StatusType.BIOMETRICS_SCHEDULED,
    "Case Was Received and A Receipt Notice Was Emailed": StatusType.RECEIPT_NOTICE,
    "Case Was Received": StatusType.RECEIPT_NOTICE,
    "Decision Notice Mailed": StatusType.DECISION_MAILED,
    "Case Was Approved": StatusType.DECISION_MAILED,
    "Request for Additional Evidence Was Mailed": StatusType.EVIDENCE_REQUESTED,
    "Response To USCIS' Request For Evidence Was Received": StatusType.EVIDENCE_RECEIVED,
    "Card Is Being Produced": StatusType.CARD_ISSUED,
    "Card Was Mailed To Me": StatusType.CARD_ISSUED,
    "Card Was Delivered To Me By The Post Office": StatusType.CARD_DELIVERED,
    "Interview Was Scheduled": StatusType.INTERVIEW_SCHEDULED,
    "Withdrawal Acknowledgement Notice Was Sent": StatusType.WITHDRAWN,
    "Notice Explaining USCIS Actions Was Mailed": StatusType.EXPLANATION_SENT,
    "Case Was Suspended": StatusType.SUSPENDED,
    "Case Rejected Because I Sent An Incorrect Fee": StatusType.REJECTED,
    "Case Was Rejected Because It Was Improperly Filed": StatusType.REJECTED,
}


def status_for_heading(heading: str | None) -> StatusType:
    """Map a heading to its status; unmapped headings become ``UNKNOWN_STATUS``.

    A miss is logged so the table above can be extended.
    """

    key = (heading or "").strip()
    status = STATUS_BY_HEADING.get(key)
    if status is None:
        log_warning(f"[TAXONOMY][WARN] Unrecognised status heading: {key!r}")
        return StatusType.UNKNOWN_STATUS
    return status


__all__ = ["StatusType", "STATUS_BY_HEADING", "status_for_heading"]
