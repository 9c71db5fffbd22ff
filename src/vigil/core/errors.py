"""Typed errors surfaced by the remote record API."""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a failed API call."""

    NETWORK = "network"
    SERVER = "server"
    TIMEOUT = "timeout"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class ApiError(Exception):
    """Raised when a call to the record API fails."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        user_message: str,
        retryable: bool = True,
        status: int | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.user_message = user_message
        self.retryable = retryable
        self.status = status

    def __repr__(self) -> str:
        return f"ApiError(kind={self.kind.value!r}, message={self.message!r}, retryable={self.retryable})"

    @classmethod
    def from_status(cls, status: int) -> "ApiError":
        """Build an error from a non-2xx HTTP status."""
        if status == 404:
            return cls(
                ErrorKind.SERVER,
                "Resource not found",
                "The requested records could not be found.",
                retryable=False,
                status=status,
            )
        if status >= 500:
            return cls(
                ErrorKind.SERVER,
                f"Server error: {status}",
                "The server is temporarily unavailable.",
                status=status,
            )
        return cls(
            ErrorKind.SERVER,
            f"Request rejected: HTTP {status}",
            "The server rejected the request. Try again.",
            status=status,
        )

    @classmethod
    def timeout(cls) -> "ApiError":
        return cls(
            ErrorKind.TIMEOUT,
            "Request timeout",
            "The connection timed out. Check your internet connection.",
        )

    @classmethod
    def network(cls, detail: str = "") -> "ApiError":
        message = f"Network error: {detail}" if detail else "Network error"
        return cls(
            ErrorKind.NETWORK,
            message,
            "Could not reach the server. Check your connection.",
        )

    @classmethod
    def validation(cls, detail: str) -> "ApiError":
        return cls(
            ErrorKind.VALIDATION,
            detail,
            "The server returned data in an unexpected format.",
        )

    @classmethod
    def unknown(cls, detail: str = "") -> "ApiError":
        return cls(
            ErrorKind.UNKNOWN,
            detail or "Unknown error",
            "An unexpected error occurred. Try again.",
        )
