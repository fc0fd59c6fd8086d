"""Configuration constants for the case status poller."""
from __future__ import annotations

import os
from pathlib import Path

DATA_DIR: Path = Path(os.getenv("CASEWATCH_DATA_DIR", "data"))
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"
EXPORTS_DIR: Path = Path(os.getenv("CASEWATCH_EXPORTS_DIR", str(DATA_DIR / "exports")))

STATUS_URL: str = os.getenv(
    "CASEWATCH_STATUS_URL", "https://egov.uscis.gov/casestatus/mycasestatus.do"
)

# Fields the status form always posts alongside the receipt number.
FORM_DEFAULTS: dict[str, object] = {
    "changeLocale": "",
    "completedActionsCurrentPage": 0,
    "upcomingActionsCurrentPage": 0,
    "caseStatusSearchBtn": "CHECK STATUS",
}
RECEIPT_FIELD: str = "appReceiptNum"

CASE_NUMBER_WIDTH: int = 10
DEFAULT_PREFIX: str = "IOE"
DEFAULT_START: str = "0900677923"
DEFAULT_TOTAL: int = 1


def _parse_timeout_seconds(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Parse a timeout value in seconds from the environment with bounds."""

    return max(minimum, _env_int(env_var, default))


def _env_int(env_var: str, default: int) -> int:
    """Integer from the environment; unset or malformed values give ``default``."""

    try:
        return int(os.getenv(env_var, str(default)).strip())
    except ValueError:
        return default


def _env_float(env_var: str, default: float) -> float:
    try:
        return float(os.getenv(env_var, str(default)).strip())
    except ValueError:
        return default


DEFAULT_BATCH_SIZE: int = _env_int("CASEWATCH_BATCH_SIZE", 10)
REQUEST_TIMEOUT_SECONDS: int = _parse_timeout_seconds("CASEWATCH_REQUEST_TIMEOUT_SECONDS", 30)
# Pause before each individual lookup; 0 disables it.
REQUEST_DELAY_SECONDS: float = _env_float("CASEWATCH_REQUEST_DELAY", 0.0)
# The status site has historically served a broken certificate chain.
VERIFY_TLS: bool = os.getenv("CASEWATCH_VERIFY_TLS", "0").strip().lower() not in {"0", "false", ""}

# How often the scheduler wakes up to look for cancellation while a batch is in flight.
CANCEL_POLL_SECONDS: float = _env_float("CASEWATCH_CANCEL_POLL_SECONDS", 0.2)

DEBUG: bool = os.getenv("CASEWATCH_DEBUG", "0").strip().lower() not in {"0", "false", ""}

COMMON_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}
