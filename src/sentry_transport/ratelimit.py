"""Server backpressure handling: Retry-After parsing and the send lockout."""

from __future__ import annotations

import threading
import time
from email.utils import parsedate_to_datetime
from typing import Callable, Mapping

Clock = Callable[[], float]

DEFAULT_RETRY_AFTER = 60.0
TOO_MANY_REQUESTS = 429


def parse_retry_after(value: str | None, now: float) -> float | None:
    """Return the absolute unlock time (epoch seconds) encoded by a Retry-After value.

    Retry-After is either a count of seconds or an HTTP date. Returns None when
    the value is missing or unparseable.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if text.replace(".", "", 1).isdigit():
        return now + float(text)
    try:
        retry_date = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if retry_date is None:
        return None
    return retry_date.timestamp()


def lockout_deadline(status: int, headers: Mapping[str, str], now: float) -> float | None:
    """Decide the new lockout deadline for a failed response, if any.

    Any non-2xx response carrying Retry-After locks the transport. A 429
    without a usable Retry-After falls back to DEFAULT_RETRY_AFTER.
    """
    deadline = parse_retry_after(headers.get("retry-after"), now)
    if deadline is None and status == TOO_MANY_REQUESTS:
        deadline = now + DEFAULT_RETRY_AFTER
    return deadline


class Lockout:
    """Single-deadline lockout shared by every send on one transport."""

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._disabled_until: float | None = None
        self._last_now = float("-inf")

    def now(self) -> float:
        """Read the clock, never returning a value earlier than a previous read."""
        with self._lock:
            current = self._clock()
            if current < self._last_now:
                current = self._last_now
            self._last_now = current
            return current

    @property
    def disabled_until(self) -> float | None:
        return self._disabled_until

    def active_until(self) -> float | None:
        """Return the deadline if the lockout is in force right now."""
        now = self.now()
        with self._lock:
            until = self._disabled_until
        if until is not None and now < until:
            return until
        return None

    def is_active(self) -> bool:
        return self.active_until() is not None

    def update(self, deadline: float | None) -> bool:
        """Record a new deadline. Returns True when the lockout now extends into the future."""
        if deadline is None:
            return False
        now = self.now()
        with self._lock:
            self._disabled_until = deadline
        return deadline > now

    def reset(self) -> None:
        with self._lock:
            self._disabled_until = None


__all__ = [
    "Clock",
    "DEFAULT_RETRY_AFTER",
    "Lockout",
    "TOO_MANY_REQUESTS",
    "lockout_deadline",
    "parse_retry_after",
]
