"""TTL bookkeeping for cached rates."""

from __future__ import annotations

import time
from typing import Callable

from oxr_bank.utils.logger import get_logger

LOGGER = get_logger(__name__)

Clock = Callable[[], float]


class TTLExpiryController:
    """Track when loaded rates go stale and drive their refresh.

    Without a TTL the rates never expire. With one, ``expires_at`` is always
    the reference timestamp (the loaded document's own timestamp, or the
    current time before any document is known) plus the TTL.
    """

    __slots__ = ("_ttl_seconds", "reference_timestamp", "expires_at", "clock")

    def __init__(self, ttl_seconds: int | None = None, *, clock: Clock | None = None) -> None:
        self.clock: Clock = clock or time.time
        self.reference_timestamp: float | None = None
        self.expires_at: float | None = None
        self._ttl_seconds: int | None = None
        self.set_ttl(ttl_seconds)

    @property
    def ttl_seconds(self) -> int | None:
        return self._ttl_seconds

    @ttl_seconds.setter
    def ttl_seconds(self, value: int | None) -> None:
        self.set_ttl(value)

    def set_ttl(self, seconds: int | None) -> None:
        if seconds is not None:
            if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds <= 0:
                raise ValueError("ttl_in_seconds must be a positive integer or None")
        self._ttl_seconds = seconds
        if seconds is None:
            self.expires_at = None
            return
        self._recompute()

    def mark_refreshed(self, timestamp: float | None) -> None:
        """Record the timestamp of freshly loaded rates and restart the window."""

        self.reference_timestamp = timestamp
        if self._ttl_seconds is not None:
            self._recompute()

    def is_stale(self) -> bool:
        if self._ttl_seconds is None or self.expires_at is None:
            return False
        return self.clock() > self.expires_at

    def check_and_expire(self, refresh: Callable[[], float | None]) -> bool:
        """Run ``refresh`` when stale; return whether it ran.

        ``refresh`` returns the new document timestamp, or ``None`` when it
        kept the previous rates, in which case the window stays expired.
        """

        if not self.is_stale():
            return False
        LOGGER.info("Rates expired at %s; refreshing", self.expires_at)
        timestamp = refresh()
        if timestamp is None:
            LOGGER.warning("Refresh kept the previous rates; expiry not reset")
            return True
        self.mark_refreshed(timestamp)
        return True

    def _recompute(self) -> None:
        reference = self.reference_timestamp
        if reference is None:
            reference = self.clock()
        self.expires_at = reference + self._ttl_seconds  # type: ignore[operator]


__all__ = ["Clock", "TTLExpiryController"]
