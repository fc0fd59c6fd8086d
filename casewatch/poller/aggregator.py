from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, NamedTuple, Tuple

from .models import LookupResult
from .taxonomy import StatusType


class BucketKey(NamedTuple):
    date_label: str
    status: StatusType


@dataclass
class Bucket:
    date_label: str
    status: StatusType
    # Day-truncated unix time of the first member; the sort key.
    timestamp: int
    count: int = 0
    members: List[LookupResult] = field(default_factory=list)

    @property
    def key(self) -> BucketKey:
        return BucketKey(self.date_label, self.status)

    def add(self, result: LookupResult) -> None:
        self.members.append(result)
        self.count += 1


def _sort_key(bucket: Bucket) -> Tuple[int, int]:
    return bucket.timestamp, bucket.status.order


def group_results(results: Iterable[LookupResult]) -> Dict[BucketKey, Bucket]:
    """Group results by ``(day label, status)``.

    The returned mapping iterates in ascending canonical timestamp; buckets of
    the same day are ordered by status declaration order.
    """

    buckets: Dict[BucketKey, Bucket] = {}
    for result in results:
        key = BucketKey(result.date_label, result.status)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = Bucket(
                date_label=key.date_label,
                status=key.status,
                timestamp=result.day_epoch,
            )
            buckets[key] = bucket
        bucket.add(result)

    return {bucket.key: bucket for bucket in sorted(buckets.values(), key=_sort_key)}


def buckets_by_day(groups: Dict[BucketKey, Bucket]) -> List[Tuple[str, List[Bucket]]]:
    """Return ``[(day label, [buckets...]), ...]`` in chronological order."""

    days: Dict[str, List[Bucket]] = {}
    for bucket in sorted(groups.values(), key=_sort_key):
        days.setdefault(bucket.date_label, []).append(bucket)
    return list(days.items())


def total_count(groups: Dict[BucketKey, Bucket]) -> int:
    return sum(bucket.count for bucket in groups.values())


__all__ = ["Bucket", "BucketKey", "buckets_by_day", "group_results", "total_count"]
