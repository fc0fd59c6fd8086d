from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from . import config
from .identifiers import InvalidRangeError, parse_start
from .logging_utils import _poller_event
from .utils import log_line

if TYPE_CHECKING:  # pragma: no cover
    from .run import RunOptions

Entrypoint = Literal["cli", "tests", "library"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _poller_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def validate_runtime_config(entrypoint: Entrypoint) -> None:
    """Validate module-level configuration for the given entrypoint.

    Raises ``ValueError`` on a blocking misconfiguration. A negative request
    delay is clamped to zero and logged rather than rejected.
    """

    if config.REQUEST_TIMEOUT_SECONDS <= 0:
        _raise_config_error(
            "REQUEST_TIMEOUT_SECONDS must be greater than zero.",
            entrypoint=entrypoint,
            error="invalid_timeout",
        )

    if config.CANCEL_POLL_SECONDS <= 0:
        _raise_config_error(
            "CANCEL_POLL_SECONDS must be greater than zero.",
            entrypoint=entrypoint,
            error="invalid_poll_interval",
        )

    if config.REQUEST_DELAY_SECONDS < 0:
        _poller_event(
            "state",
            phase="config",
            context="runtime_validation",
            kind="config_adjustment",
            field="REQUEST_DELAY_SECONDS",
            value=config.REQUEST_DELAY_SECONDS,
            adjusted=0.0,
            entrypoint=entrypoint,
        )
        log_line("[CONFIG] REQUEST_DELAY_SECONDS < 0; clamping to 0.")
        config.REQUEST_DELAY_SECONDS = 0.0

    if not config.STATUS_URL.startswith(("http://", "https://")):
        _raise_config_error(
            f"STATUS_URL must be an http(s) URL, got {config.STATUS_URL!r}.",
            entrypoint=entrypoint,
            error="invalid_status_url",
        )


def validate_options(options: "RunOptions") -> None:
    """Reject invocation options that cannot describe a polling run.

    Raises ``InvalidRangeError`` before any network activity happens.
    """

    problems: list[str] = []
    if not (options.prefix or "").strip():
        problems.append("prefix must be a non-empty string")
    try:
        if parse_start(options.start) < 0:
            problems.append("start must be non-negative")
    except InvalidRangeError as exc:
        problems.append(str(exc))
    if options.total <= 0:
        problems.append(f"total must be positive, got {options.total}")
    if options.batch_size <= 0:
        problems.append(f"batch size must be positive, got {options.batch_size}")

    if problems:
        _poller_event("error", phase="config", context="options", problems=problems)
        raise InvalidRangeError("; ".join(problems))


__all__ = ["Entrypoint", "validate_options", "validate_runtime_config"]
