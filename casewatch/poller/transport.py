from __future__ import annotations

from typing import Any, Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter

from . import config
from .error_codes import ErrorCode
from .utils import log_debug


class TransportError(Exception):
    def __init__(self, error_code: str, message: str, *, http_status: int | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.http_status = http_status


def _classify_http_status(status: Optional[int]) -> str:
    if status is None:
        return ErrorCode.INTERNAL
    if status == 403:
        return ErrorCode.HTTP_403
    if status == 404:
        return ErrorCode.HTTP_404
    if status == 429:
        return ErrorCode.HTTP_429
    if 400 <= status < 500:
        return ErrorCode.HTTP_4XX
    if status >= 500:
        return ErrorCode.HTTP_5XX
    return ErrorCode.INTERNAL


def build_http_session(pool_size: int = config.DEFAULT_BATCH_SIZE) -> requests.Session:
    """Return a requests session sized for ``pool_size`` concurrent lookups."""

    session = requests.Session()
    session.headers.update(config.COMMON_HEADERS)
    pool = max(1, pool_size)
    adapter = HTTPAdapter(pool_connections=pool, pool_maxsize=pool)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class CaseStatusTransport:
    """POSTs the case status form for one receipt number at a time.

    The session is shared across the worker threads of a batch; requests
    sessions tolerate that for plain POSTs with a pool as wide as the batch.
    """

    def __init__(
        self,
        session: Optional[Any] = None,
        *,
        url: str = config.STATUS_URL,
        timeout: int = config.REQUEST_TIMEOUT_SECONDS,
        verify: bool = config.VERIFY_TLS,
        pool_size: int = config.DEFAULT_BATCH_SIZE,
    ) -> None:
        self.session = session if session is not None else build_http_session(pool_size)
        self.url = url
        self.timeout = timeout
        self.verify = verify
        if not verify:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def form_for(self, case_number: str) -> dict[str, object]:
        form = dict(config.FORM_DEFAULTS)
        form[config.RECEIPT_FIELD] = case_number
        return form

    def submit(self, case_number: str) -> str:
        """Return the raw response body for ``case_number``.

        Raises ``TransportError`` on connection problems and HTTP errors.
        """

        try:
            response = self.session.post(
                self.url,
                data=self.form_for(case_number),
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.RequestException as exc:
            raise TransportError(ErrorCode.NETWORK, f"{type(exc).__name__}: {exc}") from exc

        status = getattr(response, "status_code", None)
        if status is not None and int(status) >= 400:
            raise TransportError(
                _classify_http_status(int(status)),
                f"HTTP {status}",
                http_status=int(status),
            )

        log_debug(f"[TRANSPORT] case={case_number} status={status} bytes={len(response.content or b'')}")
        return response.text

    __call__ = submit

    def close(self) -> None:
        close = getattr(self.session, "close", None)
        if callable(close):
            close()


__all__ = ["CaseStatusTransport", "TransportError", "build_http_session"]
