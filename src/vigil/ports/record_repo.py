"""Record repository interface."""

from typing import Protocol

from vigil.core.records import RawRecord


class RecordRepository(Protocol):
    """Interface for reading monitored records and submitting visits.

    Implementations raise ApiError on any failure.
    """

    def fetch_all(self) -> list[RawRecord]:
        """Fetch every record."""
        ...

    def update_last_verified(self, record_id: int, timestamp: str) -> None:
        """Set a record's last-verified timestamp (wire format)."""
        ...
