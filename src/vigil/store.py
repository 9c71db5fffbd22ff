"""Optimistic reconciliation store.

Holds the authoritative (server-confirmed) record set and an overlay of
acknowledgments that are still in flight. The effective view is the
authoritative set with overlay entries applied, each re-classified as of
the instant its acknowledgment was made. A completed refresh always
replaces the authoritative set and clears the overlay.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable

from .core.records import ClassifiedRecord, classify

logger = logging.getLogger(__name__)


class AckState(Enum):
    """Lifecycle of one acknowledgment attempt."""

    IDLE = "idle"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REVERTED = "reverted"


@dataclass(frozen=True)
class OverlayEntry:
    """A proposed last-verified timestamp and the instant it was captured."""

    timestamp: str
    captured_at: datetime


Listener = Callable[["ReconciliationStore"], None]


class ReconciliationStore:
    """Authoritative records plus an optimistic overlay, with change notification."""

    def __init__(self):
        self._records: list[ClassifiedRecord] = []
        self._overlay: dict[int, OverlayEntry] = {}
        self._outcomes: dict[int, bool] = {}
        self._states: dict[int, AckState] = {}
        self._effective: list[ClassifiedRecord] | None = None
        self._listeners: list[Listener] = []
        self._issued_ticket = 0
        self._applied_ticket = 0

    @property
    def authoritative(self) -> list[ClassifiedRecord]:
        return list(self._records)

    @property
    def overlay(self) -> dict[int, OverlayEntry]:
        return dict(self._overlay)

    @property
    def pending_ids(self) -> list[int]:
        return list(self._overlay)

    @property
    def records(self) -> list[ClassifiedRecord]:
        """Effective records: authoritative set with the overlay applied."""
        if self._effective is None:
            self._effective = self._derive()
        return list(self._effective)

    def get(self, record_id: int) -> ClassifiedRecord | None:
        return next((r for r in self.records if r.id == record_id), None)

    def state(self, record_id: int) -> AckState:
        return self._states.get(record_id, AckState.IDLE)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def begin_refresh(self) -> int:
        """Issue a ticket for a refresh that is about to start."""
        self._issued_ticket += 1
        return self._issued_ticket

    def is_stale(self, ticket: int) -> bool:
        """True if a refresh that started after `ticket` has already landed."""
        return ticket < self._applied_ticket

    def replace(self, records: list[ClassifiedRecord], ticket: int | None = None) -> bool:
        """
        Install a freshly fetched authoritative set and clear the overlay.

        A refresh that started before the last applied one is discarded.
        Returns True if the records were installed.
        """
        if ticket is not None:
            if self.is_stale(ticket):
                logger.debug(f"Discarding stale refresh {ticket} (applied {self._applied_ticket})")
                return False
            self._applied_ticket = ticket

        for record_id in self._overlay:
            outcome = self._outcomes.get(record_id)
            if outcome is None:
                self._states[record_id] = AckState.IDLE
            else:
                self._states[record_id] = AckState.CONFIRMED if outcome else AckState.REVERTED

        self._records = list(records)
        self._overlay.clear()
        self._outcomes.clear()
        self._changed()
        return True

    def apply(self, record_id: int, timestamp: str, now: datetime) -> None:
        """Optimistically mark one record as verified at `timestamp`."""
        self.apply_many([record_id], timestamp, now)

    def apply_many(self, record_ids: list[int], timestamp: str, now: datetime) -> None:
        """Optimistically mark several records as verified, notifying once."""
        entry = OverlayEntry(timestamp=timestamp, captured_at=now)
        for record_id in record_ids:
            self._overlay[record_id] = entry
            self._outcomes.pop(record_id, None)
            self._states[record_id] = AckState.PENDING
        self._changed()

    def settle(self, record_id: int, ok: bool) -> None:
        """
        Record the remote outcome for a pending acknowledgment.

        The overlay entry stays until the next refresh folds it in.
        """
        if record_id not in self._overlay:
            logger.debug(f"Ignoring outcome for {record_id}: no pending acknowledgment")
            return
        self._outcomes[record_id] = ok
        self._changed()

    def _derive(self) -> list[ClassifiedRecord]:
        effective = []
        for record in self._records:
            entry = self._overlay.get(record.id)
            if entry is None:
                effective.append(record)
                continue
            updated = classify(replace(record.raw, last_verified=entry.timestamp), entry.captured_at)
            effective.append(updated or record)
        return effective

    def _changed(self) -> None:
        self._effective = None
        for listener in list(self._listeners):
            listener(self)
