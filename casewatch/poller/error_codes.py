"""Error code taxonomy for lookup and output failures.

These codes end up on ``LookupResult.error_code`` and in structured logs so a
report can explain why a case has no real status. Keep them stable.
"""

from __future__ import annotations


class ErrorCode:
    NETWORK = "network_error"
    HTTP_4XX = "http_4xx"
    HTTP_403 = "http_403_forbidden"
    HTTP_404 = "http_404_not_found"
    HTTP_429 = "http_429_rate_limited"
    HTTP_5XX = "http_5xx"
    BLOCKED = "blocked"
    NOT_FOUND = "not_found"
    UNKNOWN_FAILURE = "unknown_failure"
    SITE_STRUCTURE = "site_structure_changed"
    OUTPUT_WRITE_FAILED = "output_write_failed"
    INTERNAL = "internal_error"


__all__ = ["ErrorCode"]
