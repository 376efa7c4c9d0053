"""Exceptions raised by the event transport."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


class TransportError(Exception):
    """Base error for all transport failures."""

    def __init__(self, message: str, *, context: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class InvalidConnectionStringError(TransportError):
    """Raised when a connection string cannot be resolved to an endpoint."""


class RateLimitedError(TransportError):
    """Raised without touching the network while the transport is locked out."""

    def __init__(self, until: float) -> None:
        stamp = format_timestamp(until)
        super().__init__(f"Transport locked till {stamp} due to too many requests.", context=until)
        self.until = until


class HttpError(TransportError):
    """Raised when the server answers outside the 2xx range."""

    def __init__(self, status: int, detail: str | None = None) -> None:
        message = f"HTTP Error ({status})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, context=detail)
        self.status = status
        self.detail = detail


class NetworkError(TransportError):
    """Raised when no response status could be obtained."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Network error: {cause}", context=cause)
        self.cause = cause


def format_timestamp(epoch_seconds: float) -> str:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).isoformat()


__all__ = [
    "HttpError",
    "InvalidConnectionStringError",
    "NetworkError",
    "RateLimitedError",
    "TransportError",
    "format_timestamp",
]
