"""Extraction of the status heading and body text from a status page."""
from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class StatusSelectors:
    """Selector hints for the case status page.

    The status lives in a single ``div.rows`` container: the ``h1`` holds
    the status heading and the first paragraph carries the dated description.
    """

    main: str = "div.rows"
    heading: str = "h1"
    text: str = "p"

    @property
    def heading_selector(self) -> str:
        return f"{self.main} {self.heading}"

    @property
    def text_selector(self) -> str:
        return f"{self.main} {self.text}"


STATUS_SELECTORS = StatusSelectors()


@dataclass(frozen=True)
class StatusFields:
    heading: str
    text: str


class ExtractionError(Exception):
    def __init__(self, message: str, *, document: BeautifulSoup | str | bytes | None = None) -> None:
        super().__init__(message)
        self.document = document


def parse_document(raw_body: str | bytes) -> BeautifulSoup:
    return BeautifulSoup(raw_body, "html5lib")


def _extract_single(document: BeautifulSoup, selector: str) -> str | None:
    """Return the stripped text of the only element matching ``selector``."""

    matches = document.select(selector)
    if len(matches) != 1:
        return None
    text = matches[0].get_text(" ", strip=True)
    return text or None


def extract_status_fields(
    raw_body: str | bytes,
    selectors: StatusSelectors = STATUS_SELECTORS,
) -> StatusFields:
    """Pull the heading and body text out of ``raw_body``.

    Raises ``ExtractionError`` carrying the parsed document when either field
    is missing or ambiguous, so the caller can inspect the failure page.
    """

    try:
        document = parse_document(raw_body)
    except Exception as exc:  # noqa: BLE001
        raise ExtractionError(f"Unable to parse status page: {exc}", document=raw_body) from exc

    heading = _extract_single(document, selectors.heading_selector)
    text = _extract_single(document, selectors.text_selector)
    if not heading or not text:
        raise ExtractionError("info extraction failed", document=document)

    return StatusFields(heading=heading, text=text)


__all__ = [
    "ExtractionError",
    "STATUS_SELECTORS",
    "StatusFields",
    "StatusSelectors",
    "extract_status_fields",
    "parse_document",
]
