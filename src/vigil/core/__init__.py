"""Functional core - pure business logic with no I/O."""

from .records import (
    Bucket,
    RawRecord,
    ClassifiedRecord,
    classify,
    classify_all,
    parse_timestamp,
    format_for_wire,
    identity_digits,
    relative_label,
)
from .ordering import sort_overdue, sort_urgent, sort_scheduled
from .projection import Columns, project
from .errors import ApiError, ErrorKind
from .selection import Selection

__all__ = [
    # Records
    "Bucket",
    "RawRecord",
    "ClassifiedRecord",
    "classify",
    "classify_all",
    "parse_timestamp",
    "format_for_wire",
    "identity_digits",
    "relative_label",
    # Ordering
    "sort_overdue",
    "sort_urgent",
    "sort_scheduled",
    # Projection
    "Columns",
    "project",
    # Errors
    "ApiError",
    "ErrorKind",
    # Selection
    "Selection",
]
