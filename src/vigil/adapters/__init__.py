"""Adapters - I/O implementations of ports."""

from .http_api import HttpRecordAdapter

__all__ = [
    "HttpRecordAdapter",
]
