from __future__ import annotations

from typing import Any, Optional

import pytest
import requests

from casewatch.poller import config
from casewatch.poller.error_codes import ErrorCode
from casewatch.poller.transport import (
    CaseStatusTransport,
    TransportError,
    _classify_http_status,
    build_http_session,
)


class _DummyResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.content = text.encode("utf-8")
        self.status_code = status_code


class _DummySession:
    def __init__(self, response: Optional[_DummyResponse] = None, error: Optional[Exception] = None):
        self._response = response
        self._error = error
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> _DummyResponse:
        self.calls.append({"url": url, **kwargs})
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


def test_submit_posts_status_form() -> None:
    session = _DummySession(_DummyResponse("<html>ok</html>"))
    transport = CaseStatusTransport(session, url="https://status.example.com/check", timeout=7)

    body = transport.submit("IOE0900677923")

    assert body == "<html>ok</html>"
    call = session.calls[0]
    assert call["url"] == "https://status.example.com/check"
    assert call["timeout"] == 7
    assert call["verify"] is False
    assert call["data"]["appReceiptNum"] == "IOE0900677923"
    assert call["data"]["caseStatusSearchBtn"] == "CHECK STATUS"


def test_connection_errors_become_transport_errors() -> None:
    session = _DummySession(error=requests.ConnectionError("connection refused"))
    transport = CaseStatusTransport(session)

    with pytest.raises(TransportError) as excinfo:
        transport.submit("IOE0900677923")

    assert excinfo.value.error_code == ErrorCode.NETWORK
    assert excinfo.value.http_status is None


def test_http_errors_carry_status() -> None:
    transport = CaseStatusTransport(_DummySession(_DummyResponse("slow down", status_code=429)))

    with pytest.raises(TransportError) as excinfo:
        transport("IOE0900677923")

    assert excinfo.value.error_code == ErrorCode.HTTP_429
    assert excinfo.value.http_status == 429


@pytest.mark.parametrize(
    "status, expected",
    [
        (None, ErrorCode.INTERNAL),
        (403, ErrorCode.HTTP_403),
        (404, ErrorCode.HTTP_404),
        (429, ErrorCode.HTTP_429),
        (418, ErrorCode.HTTP_4XX),
        (503, ErrorCode.HTTP_5XX),
    ],
)
def test_classify_http_status(status: Optional[int], expected: str) -> None:
    assert _classify_http_status(status) == expected


def test_session_pool_matches_batch_width() -> None:
    session = build_http_session(25)

    adapter = session.get_adapter("https://egov.uscis.gov/")
    assert adapter._pool_maxsize == 25  # type: ignore[attr-defined]
    assert session.headers["User-Agent"] == config.COMMON_HEADERS["User-Agent"]
    session.close()
