"""Generation of the sequential case numbers a run polls."""
from __future__ import annotations

from typing import Iterator

from . import config


class InvalidRangeError(ValueError):
    """Raised when a prefix/start/count combination cannot be polled."""


def parse_start(value: str | int) -> int:
    """Return the numeric start position from ``"0900677923"`` or ``900677923``."""

    if isinstance(value, bool):
        raise InvalidRangeError(f"Invalid start case number: {value!r}")
    if isinstance(value, int):
        return value
    raw = str(value).strip()
    if not raw.isdigit():
        raise InvalidRangeError(f"Invalid start case number: {value!r}")
    return int(raw)


class CaseNumberRange:
    """Lazy, restartable sequence of ``count`` zero-padded case numbers.

    Every call to ``iter()`` starts again from ``start``; nothing is
    materialised up front so very large ranges stay cheap.
    """

    def __init__(
        self,
        prefix: str,
        start: int,
        count: int,
        *,
        width: int = config.CASE_NUMBER_WIDTH,
    ) -> None:
        if not prefix or not prefix.strip():
            raise InvalidRangeError("prefix must be a non-empty string")
        if start < 0:
            raise InvalidRangeError(f"start must be non-negative, got {start}")
        if count <= 0:
            raise InvalidRangeError(f"count must be positive, got {count}")
        last = start + count - 1
        if len(str(last)) > width:
            raise InvalidRangeError(
                f"case number {last} does not fit in {width} digits"
            )

        self.prefix = prefix.strip()
        self.start = start
        self.count = count
        self.width = width

    def __iter__(self) -> Iterator[str]:
        for offset in range(self.count):
            yield self.format(self.start + offset)

    def __len__(self) -> int:
        return self.count

    def __repr__(self) -> str:
        return (
            f"CaseNumberRange(prefix={self.prefix!r}, start={self.start}, "
            f"count={self.count}, width={self.width})"
        )

    def format(self, number: int) -> str:
        return f"{self.prefix}{str(number).zfill(self.width)}"


def generate_case_numbers(
    prefix: str,
    start: str | int,
    count: int,
    *,
    width: int = config.CASE_NUMBER_WIDTH,
) -> CaseNumberRange:
    """Return the case numbers ``prefix + zfill(start + i)`` for ``i < count``."""

    return CaseNumberRange(prefix, parse_start(start), count, width=width)


__all__ = [
    "CaseNumberRange",
    "InvalidRangeError",
    "generate_case_numbers",
    "parse_start",
]
