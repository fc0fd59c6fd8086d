"""Structured ``[POLLER][LABEL][phase]`` events.

Every event names one of a fixed set of labels and, usually, a phase of the
run. Lines for a single case lead with ``case_number=`` so a run log can be
grepped per case. ``error`` events are written at WARNING level.
"""

from __future__ import annotations

from typing import Any, Optional

from .utils import log_line, log_warning

EVENT_LABELS = frozenset({"state", "error", "report"})
EVENT_PHASES = frozenset(
    {"config", "lookup", "scheduler", "interrupt", "blocked", "report"}
)

# Rendered before the remaining, alphabetically sorted, fields.
_LEADING_FIELDS = ("case_number", "kind")


def _format_fields(fields: dict[str, Any]) -> str:
    ordered = [key for key in _LEADING_FIELDS if key in fields]
    ordered += sorted(key for key in fields if key not in _LEADING_FIELDS)
    return ", ".join(f"{key}={fields[key]!r}" for key in ordered)


def _event_line(label: str, phase: Optional[str], fields: dict[str, Any]) -> str:
    if label not in EVENT_LABELS:
        fields["unregistered_label"] = label
        label = "event"
    head = f"[POLLER][{label.upper()}]"
    if phase and phase != label:
        if phase not in EVENT_PHASES:
            fields["unregistered_phase"] = phase
        else:
            head += f"[{phase}]"
    payload = _format_fields(fields)
    return f"{head} {payload}" if payload else head


def _poller_event(label: str = "", *, phase: str | None = None, **fields: Any) -> None:
    """Emit one structured event line; logging problems are swallowed.

    ``label`` defaults to ``phase`` so ``_poller_event(phase="report")`` is
    a report event.
    """

    try:
        line = _event_line(label or (phase or ""), phase, dict(fields))
        if line.startswith("[POLLER][ERROR]"):
            log_warning(line)
        else:
            log_line(line)
    except Exception:  # noqa: BLE001
        return


__all__ = ["EVENT_LABELS", "EVENT_PHASES", "_poller_event"]
