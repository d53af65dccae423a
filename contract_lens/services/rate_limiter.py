"""Fixed-window, in-memory rate limiting keyed by caller identity"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from contract_lens.models.rate_limit import RateLimitDecision, RateLimitInfo, RateRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW_SECONDS = 3600.0


class RateLimitStore(ABC):
    """Storage for rate records. Swappable for a shared backend."""

    @abstractmethod
    def get(self, key: str) -> Optional[RateRecord]:
        """Return the record for key, or None."""

    @abstractmethod
    def put(self, record: RateRecord) -> None:
        """Create or replace the record for record.key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Drop the record for key if present."""

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys currently tracked."""


class InMemoryRateLimitStore(RateLimitStore):
    """Dict-backed store, lost on restart"""

    def __init__(self):
        self._records: dict[str, RateRecord] = {}

    def get(self, key: str) -> Optional[RateRecord]:
        return self._records.get(key)

    def put(self, record: RateRecord) -> None:
        self._records[record.key] = record

    def delete(self, key: str) -> None:
        self._records.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)


class RateLimiter:
    """Per-key request counting in fixed time windows.

    A caller gets ``max_requests`` admissions per window. The window starts
    at the caller's first request and is replaced by a fresh one on the
    first request after it expires. Refused requests do not count.

    Check-then-increment runs under a single lock so concurrent requests
    for the same key cannot overshoot the cap.
    """

    def __init__(
        self,
        store: Optional[RateLimitStore] = None,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()

    def _is_expired(self, record: RateRecord, now: float) -> bool:
        return now > record.window_reset_at

    def check_and_consume(self, key: str) -> RateLimitDecision:
        """Consume one unit of quota for key if any is left."""
        with self._lock:
            now = self._clock()
            record = self.store.get(key)

            if record is None or self._is_expired(record, now):
                self.store.put(RateRecord(key=key, count=1, window_reset_at=now + self.window_seconds))
                return RateLimitDecision(allowed=True, remaining=self.max_requests - 1)

            if record.count >= self.max_requests:
                logger.info(f"Rate limit hit for {key}")
                return RateLimitDecision(allowed=False, remaining=0)

            record.count += 1
            self.store.put(record)
            return RateLimitDecision(allowed=True, remaining=self.max_requests - record.count)

    def peek(self, key: str) -> RateLimitInfo:
        """Report remaining quota for key without consuming any."""
        with self._lock:
            now = self._clock()
            record = self.store.get(key)
            if record is None or self._is_expired(record, now):
                return RateLimitInfo(
                    remaining=self.max_requests,
                    window_reset_at=now + self.window_seconds,
                )
            return RateLimitInfo(
                remaining=max(0, self.max_requests - record.count),
                window_reset_at=record.window_reset_at,
            )

    def sweep(self) -> int:
        """Remove records whose window has passed. Returns count removed."""
        with self._lock:
            now = self._clock()
            expired = []
            for key in self.store.keys():
                record = self.store.get(key)
                if record is not None and self._is_expired(record, now):
                    expired.append(key)
            for key in expired:
                self.store.delete(key)
            return len(expired)

    @property
    def tracked_keys(self) -> int:
        return len(self.store.keys())
