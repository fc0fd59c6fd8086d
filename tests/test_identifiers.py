from __future__ import annotations

import pytest

from casewatch.poller.identifiers import (
    CaseNumberRange,
    InvalidRangeError,
    generate_case_numbers,
    parse_start,
)


def test_generates_padded_sequence() -> None:
    numbers = generate_case_numbers("IOE", 900677923, 3)

    assert list(numbers) == ["IOE0900677923", "IOE0900677924", "IOE0900677925"]


def test_accepts_zero_padded_start_string() -> None:
    numbers = generate_case_numbers("IOE", "0900677923", 2)

    assert list(numbers) == ["IOE0900677923", "IOE0900677924"]


@pytest.mark.parametrize("start, count", [(0, 1), (5, 17), (9999999000, 999)])
def test_count_width_order_and_uniqueness(start: int, count: int) -> None:
    numbers = list(generate_case_numbers("NSC", start, count))

    assert len(numbers) == count
    assert len(set(numbers)) == count
    assert all(len(n) == len("NSC") + 10 for n in numbers)
    assert numbers == sorted(numbers)
    assert [int(n[3:]) for n in numbers] == list(range(start, start + count))


def test_sequence_is_restartable_and_lazy() -> None:
    numbers = CaseNumberRange("IOE", 1, 4)

    first = iter(numbers)
    assert next(first) == "IOE0000000001"
    assert list(numbers) == ["IOE0000000001", "IOE0000000002", "IOE0000000003", "IOE0000000004"]
    assert len(numbers) == 4


@pytest.mark.parametrize(
    "prefix, start, count",
    [
        ("IOE", 0, 0),
        ("IOE", 10, -1),
        ("IOE", -1, 3),
        ("", 1, 1),
        ("IOE", 9999999999, 2),
    ],
)
def test_invalid_ranges_rejected(prefix: str, start: int, count: int) -> None:
    with pytest.raises(InvalidRangeError):
        CaseNumberRange(prefix, start, count)


@pytest.mark.parametrize("value", ["-12", "abc", "", True])
def test_parse_start_rejects_garbage(value: object) -> None:
    with pytest.raises(InvalidRangeError):
        parse_start(value)  # type: ignore[arg-type]


def test_invalid_range_error_is_value_error() -> None:
    assert issubclass(InvalidRangeError, ValueError)
