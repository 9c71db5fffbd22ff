"""Search filtering and bucketing of the reconciled record set."""

from dataclasses import dataclass, field

from .ordering import sort_overdue, sort_scheduled, sort_urgent
from .records import Bucket, ClassifiedRecord


@dataclass
class Columns:
    """Records split into ordered bucket columns."""

    overdue: list[ClassifiedRecord] = field(default_factory=list)
    urgent: list[ClassifiedRecord] = field(default_factory=list)
    scheduled: list[ClassifiedRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.overdue) + len(self.urgent) + len(self.scheduled)

    def column(self, bucket: Bucket) -> list[ClassifiedRecord]:
        return getattr(self, bucket.value)

    def ids(self, bucket: Bucket) -> list[int]:
        return [r.id for r in self.column(bucket)]


def matches_query(record: ClassifiedRecord, query: str) -> bool:
    """
    All-digit queries match against the identity digits, anything else
    against the lowercased name.
    """
    if query.isascii() and query.isdigit():
        return query in record.identity_digits
    return query.lower() in record.name_lower


def filter_records(records: list[ClassifiedRecord], query: str) -> list[ClassifiedRecord]:
    """Filter records by a search query. Empty query keeps everything."""
    if not query:
        return list(records)
    return [r for r in records if matches_query(r, query)]


def project(records: list[ClassifiedRecord], query: str = "") -> Columns:
    """
    Filter, bucket and order records for display.

    Pure function - no I/O. The same inputs always yield the same columns.
    """
    grouped: dict[Bucket, list[ClassifiedRecord]] = {b: [] for b in Bucket}
    for record in filter_records(records, query):
        grouped[record.bucket].append(record)

    return Columns(
        overdue=sort_overdue(grouped[Bucket.OVERDUE]),
        urgent=sort_urgent(grouped[Bucket.URGENT]),
        scheduled=sort_scheduled(grouped[Bucket.SCHEDULED]),
    )
