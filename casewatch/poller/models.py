from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .dates import day_epoch, day_label, unix_time
from .taxonomy import StatusType


@dataclass(frozen=True)
class LookupResult:
    """Outcome of polling one case number. Built once, never mutated."""

    case_number: str
    status: StatusType
    occurred_at: datetime
    raw_heading: str = ""
    raw_text: str = ""
    error_code: Optional[str] = None

    @property
    def date_label(self) -> str:
        return day_label(self.occurred_at)

    @property
    def unix_time(self) -> int:
        return unix_time(self.occurred_at)

    @property
    def day_epoch(self) -> int:
        return day_epoch(self.occurred_at)

    def as_row(self) -> dict[str, Any]:
        return {
            "Date": self.date_label,
            "Unix Time": self.unix_time,
            "Type": self.status.value,
            "Case Number": self.case_number,
        }


__all__ = ["LookupResult"]
