from __future__ import annotations

import pytest

from casewatch.poller import taxonomy
from casewatch.poller.taxonomy import STATUS_BY_HEADING, StatusType, status_for_heading


def test_case_was_approved_maps_to_decision_mailed() -> None:
    assert status_for_heading("Case Was Approved") is StatusType.DECISION_MAILED
    assert status_for_heading("Decision Notice Mailed") is StatusType.DECISION_MAILED


def test_unknown_heading_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    warnings: list[str] = []
    monkeypatch.setattr(taxonomy, "log_warning", warnings.append)

    assert status_for_heading("Something New") is StatusType.UNKNOWN_STATUS
    assert len(warnings) == 1
    assert "'Something New'" in warnings[0]


def test_lookup_is_exact_match(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(taxonomy, "log_warning", lambda msg: None)

    assert status_for_heading("case was approved") is StatusType.UNKNOWN_STATUS
    assert status_for_heading("  Case Was Approved  ") is StatusType.DECISION_MAILED
    assert status_for_heading(None) is StatusType.UNKNOWN_STATUS


def test_mapping_only_targets_real_statuses() -> None:
    synthetic = {StatusType.UNKNOWN_STATUS, StatusType.NOT_FOUND, StatusType.TRANSPORT_FAILED}
    assert not synthetic & set(STATUS_BY_HEADING.values())


def test_order_follows_declaration() -> None:
    orders = [status.order for status in StatusType]
    assert orders == list(range(len(StatusType)))
    assert StatusType.BIOMETRICS_SCHEDULED.order < StatusType.TRANSPORT_FAILED.order
