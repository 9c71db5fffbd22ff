"""Visit monitor - orchestrates fetching, acknowledging and reconciling records.

Shared layer between the CLI and any other front end. The clock is read
once per operation; the resulting instant drives both the wire timestamp
and the optimistic re-classification.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from .core.errors import ApiError
from .core.projection import Columns, project
from .core.records import classify_all, format_for_wire
from .ports.record_repo import RecordRepository
from .store import ReconciliationStore

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Per-id outcome of a batch acknowledgment, in request order."""

    succeeded: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    errors: dict[int, ApiError] = field(default_factory=dict)


class VisitMonitor:
    """Fetches the authoritative record set and registers visits against it."""

    def __init__(
        self,
        repo: RecordRepository,
        store: ReconciliationStore | None = None,
        clock: Callable[[], datetime] = datetime.now,
        include_inactive: bool = False,
    ):
        self.repo = repo
        self.store = store or ReconciliationStore()
        self.clock = clock
        self.include_inactive = include_inactive
        self.error: ApiError | None = None
        self._refreshes_in_flight = 0

    @property
    def loading(self) -> bool:
        return self._refreshes_in_flight > 0

    def columns(self, query: str = "") -> Columns:
        """Bucketed, ordered view of the effective records."""
        return project(self.store.records, query)

    async def refresh(self) -> bool:
        """
        Re-fetch the authoritative record set.

        Failures are kept in `self.error` and leave loaded data in place.
        A fetch overtaken by a newer completed one touches neither the
        records nor the error. Returns True if fresh records were installed.
        """
        ticket = self.store.begin_refresh()
        self._refreshes_in_flight += 1
        try:
            raw = await asyncio.to_thread(self.repo.fetch_all)
        except ApiError as e:
            if self.store.is_stale(ticket):
                logger.debug(f"Ignoring failure of stale refresh {ticket}: {e.message}")
                return False
            logger.warning(f"Fetch failed ({e.kind.value}): {e.message}")
            self.error = e
            return False
        finally:
            self._refreshes_in_flight -= 1

        if not self.include_inactive:
            raw = [r for r in raw if r.active]

        classified = classify_all(raw, self.clock())
        if len(classified) < len(raw):
            logger.debug(f"Dropped {len(raw) - len(classified)} unclassifiable records")

        if not self.store.replace(classified, ticket):
            return False
        self.error = None
        logger.info(f"Loaded {len(classified)} records")
        return True

    async def acknowledge(self, record_id: int) -> None:
        """
        Register a visit for one record.

        The view reflects the visit immediately; the record set is always
        re-fetched afterwards. Raises ApiError if the update was rejected.
        """
        now = self.clock()
        timestamp = format_for_wire(now)
        self.store.apply(record_id, timestamp, now)
        try:
            await asyncio.to_thread(self.repo.update_last_verified, record_id, timestamp)
        except ApiError as e:
            logger.warning(f"Visit for {record_id} failed ({e.kind.value}): {e.message}")
            self.store.settle(record_id, ok=False)
            raise
        else:
            self.store.settle(record_id, ok=True)
        finally:
            await self.refresh()

    async def acknowledge_batch(self, record_ids: list[int]) -> BatchResult:
        """
        Register visits for several records concurrently.

        Every id is marked pending before any request goes out. Requests
        are independent: a failure never cancels the others. One refresh
        runs after all of them settle.
        """
        ids = list(dict.fromkeys(record_ids))
        result = BatchResult()
        if not ids:
            return result

        now = self.clock()
        timestamp = format_for_wire(now)
        self.store.apply_many(ids, timestamp, now)

        outcomes = await asyncio.gather(*(self._submit(i, timestamp) for i in ids))

        for record_id, error in zip(ids, outcomes):
            if error is None:
                result.succeeded.append(record_id)
            else:
                result.failed.append(record_id)
                result.errors[record_id] = error

        logger.info(f"Batch of {len(ids)}: {len(result.succeeded)} succeeded, {len(result.failed)} failed")
        await self.refresh()
        return result

    async def _submit(self, record_id: int, timestamp: str) -> ApiError | None:
        """Send one update, returning the error instead of raising it."""
        try:
            await asyncio.to_thread(self.repo.update_last_verified, record_id, timestamp)
        except ApiError as e:
            error = e
        except Exception as e:
            logger.exception(f"Unexpected error registering visit for {record_id}")
            error = ApiError.unknown(str(e))
        else:
            self.store.settle(record_id, ok=True)
            return None

        logger.warning(f"Visit for {record_id} failed ({error.kind.value}): {error.message}")
        self.store.settle(record_id, ok=False)
        return error
