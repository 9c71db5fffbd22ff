"""Pure record classification logic - no I/O dependencies."""

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

URGENT_THRESHOLD_DAYS = 2
WIRE_FORMAT = "%Y/%m/%d %H:%M:%S"
DISPLAY_FORMAT = "%d/%m/%Y %H:%M"

_DAY = timedelta(days=1)
_NON_DIGITS = re.compile(r"\D")


class Bucket(Enum):
    """Urgency classification for a monitored record."""

    OVERDUE = "overdue"
    URGENT = "urgent"
    SCHEDULED = "scheduled"


@dataclass(frozen=True)
class RawRecord:
    """A monitored individual as stored by the remote API."""

    id: int
    name: str
    identity_code: str
    active: bool
    last_verified: str
    frequency_days: int

    @classmethod
    def from_api(cls, data: dict) -> "RawRecord":
        """Create RawRecord from an API response item.

        Raises KeyError/ValueError/TypeError on items that cannot be read.
        """
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            identity_code=data.get("cpf") or "",
            active=bool(data.get("active", False)),
            last_verified=data.get("last_verified_date") or "",
            frequency_days=int(data.get("verify_frequency_in_days") or 0),
        )


@dataclass(frozen=True)
class ClassifiedRecord:
    """A record classified into a bucket as of a given instant."""

    id: int
    name: str
    identity_code: str
    active: bool
    last_verified: str
    frequency_days: int
    last_verified_at: datetime
    next_due: datetime
    bucket: Bucket
    days_overdue: int
    days_remaining: int
    name_lower: str
    identity_digits: str

    @property
    def raw(self) -> RawRecord:
        return RawRecord(
            id=self.id,
            name=self.name,
            identity_code=self.identity_code,
            active=self.active,
            last_verified=self.last_verified,
            frequency_days=self.frequency_days,
        )

    @property
    def day_offset(self) -> int:
        """Signed days until due (negative if overdue)."""
        return self.days_remaining - self.days_overdue

    def relative_label(self) -> str:
        return relative_label(self.bucket, self.day_offset)


def _local_naive(dt: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive passes through."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse a wire timestamp (YYYY/MM/DD HH:mm:ss).

    Falls back to ISO-8601 (with slashes tolerated as date separators).
    Returns None for empty or unparseable input.
    """
    if not value or not isinstance(value, str):
        return None
    value = value.strip()
    try:
        return datetime.strptime(value, WIRE_FORMAT)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(value.replace("/", "-"))
    except ValueError:
        return None
    return _local_naive(parsed)


def format_for_wire(instant: datetime) -> str:
    """Format an instant for submission to the API (local civil time)."""
    return _local_naive(instant).strftime(WIRE_FORMAT)


def format_display_date(instant: datetime) -> str:
    """Format an instant for the operator display (DD/MM/YYYY HH:mm)."""
    return _local_naive(instant).strftime(DISPLAY_FORMAT)


def identity_digits(code: str) -> str:
    """Strip everything but digits. No check-digit validation."""
    return _NON_DIGITS.sub("", code or "")


def format_identity(code: str) -> str:
    """Render an 11-digit identity code as ddd.ddd.ddd-dd, else unchanged."""
    digits = identity_digits(code)
    if len(digits) != 11:
        return code
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def determine_bucket(day_offset: int) -> Bucket:
    """Bucket for a signed day offset."""
    if day_offset < 0:
        return Bucket.OVERDUE
    if day_offset <= URGENT_THRESHOLD_DAYS:
        return Bucket.URGENT
    return Bucket.SCHEDULED


def day_offset(next_due: datetime, now: datetime) -> int:
    """
    Signed whole days from now until next_due.

    Ceiling division: 23 hours left counts as 1 day remaining, and a
    record only becomes overdue once a full day has passed its due instant.
    """
    return math.ceil((next_due - now) / _DAY)


def classify(record: RawRecord, now: datetime) -> ClassifiedRecord | None:
    """
    Classify a record as of `now`.

    Returns None if the frequency is not positive or the last-verified
    timestamp cannot be parsed.
    Pure function - no I/O.
    """
    if record.frequency_days <= 0:
        return None

    last_verified_at = parse_timestamp(record.last_verified)
    if last_verified_at is None:
        return None

    next_due = last_verified_at + timedelta(days=record.frequency_days)
    offset = day_offset(next_due, _local_naive(now))

    return ClassifiedRecord(
        id=record.id,
        name=record.name,
        identity_code=record.identity_code,
        active=record.active,
        last_verified=record.last_verified,
        frequency_days=record.frequency_days,
        last_verified_at=last_verified_at,
        next_due=next_due,
        bucket=determine_bucket(offset),
        days_overdue=max(0, -offset),
        days_remaining=max(0, offset),
        name_lower=record.name.lower(),
        identity_digits=identity_digits(record.identity_code),
    )


def classify_all(records: list[RawRecord], now: datetime) -> list[ClassifiedRecord]:
    """Classify records, silently dropping the ones that cannot be classified."""
    classified = []
    for record in records:
        result = classify(record, now)
        if result is not None:
            classified.append(result)
    return classified


def relative_label(bucket: Bucket, magnitude: int) -> str:
    """
    Short label for how far away the next visit is.

    Overdue buckets (or negative magnitudes) read as "N days overdue".
    """
    if bucket is Bucket.OVERDUE or magnitude < 0:
        days = abs(magnitude)
        return "1 day overdue" if days == 1 else f"{days} days overdue"
    if magnitude == 0:
        return "today"
    if magnitude == 1:
        return "tomorrow"
    return f"in {magnitude} days"


def last_visit_label(last_verified_at: datetime, now: datetime) -> str:
    """Relative description of when the last visit happened."""
    now = _local_naive(now)
    if last_verified_at.date() == now.date():
        return "today"
    if last_verified_at.date() == (now - _DAY).date():
        return "yesterday"
    if last_verified_at > now:
        return format_display_date(last_verified_at)

    # Calendar days, so anything older than yesterday reads as 2+ days
    days = (now.date() - last_verified_at.date()).days
    if days < 30:
        return f"{days} days ago"
    if days < 365:
        months = max(1, round(days / 30))
        return "about 1 month ago" if months == 1 else f"about {months} months ago"
    years = days // 365
    return "over 1 year ago" if years == 1 else f"over {years} years ago"
