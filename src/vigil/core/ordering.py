"""Per-bucket ordering of classified records.

All sorts are stable and return new lists; inputs are never mutated.
"""

from .records import ClassifiedRecord


def sort_overdue(records: list[ClassifiedRecord]) -> list[ClassifiedRecord]:
    """Most overdue first."""
    return sorted(records, key=lambda r: r.days_overdue, reverse=True)


def sort_urgent(records: list[ClassifiedRecord]) -> list[ClassifiedRecord]:
    """Soonest first."""
    return sorted(records, key=lambda r: r.days_remaining)


def sort_scheduled(records: list[ClassifiedRecord]) -> list[ClassifiedRecord]:
    """Earliest next-due instant first."""
    return sorted(records, key=lambda r: r.next_due)

