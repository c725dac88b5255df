"""Fixed-window rate limiting for contact form submissions."""

import time
from threading import Lock
from typing import Dict, Optional, Protocol, Tuple

from pydantic import BaseModel


RATE_LIMIT_MAX_REQUESTS = 5  # Max 5 submissions per window
RATE_LIMIT_WINDOW_MS = 60 * 60 * 1000  # 1 hour


class RateLimitEntry(BaseModel):
    count: int
    reset_time: int  # epoch milliseconds


class RateLimitResult(BaseModel):
    allowed: bool
    reset_time: Optional[int] = None  # epoch milliseconds, set when denied


class RateLimitStore(Protocol):
    """Key-value storage for rate limit counters. Swap in a shared cache for multi-process deployments."""

    def get(self, key: str, now_ms: Optional[int] = None) -> Optional[RateLimitEntry]:
        ...

    def set(self, key: str, entry: RateLimitEntry, ttl_ms: int, now_ms: Optional[int] = None) -> None:
        ...


def _now_ms() -> int:
    return int(time.time() * 1000)


class InMemoryRateLimitStore:
    """
    Process-local store. Counters are not shared between workers.

    An entry past its TTL reads as absent and is dropped on that read; entries
    for clients that never come back stay in memory until restart.
    """

    def __init__(self):
        self._entries: Dict[str, Tuple[RateLimitEntry, int]] = {}
        self._lock = Lock()

    def get(self, key: str, now_ms: Optional[int] = None) -> Optional[RateLimitEntry]:
        now_ms = _now_ms() if now_ms is None else now_ms
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            entry, expires_at = item
            if now_ms > expires_at:
                del self._entries[key]
                return None
            return entry

    def set(self, key: str, entry: RateLimitEntry, ttl_ms: int, now_ms: Optional[int] = None) -> None:
        now_ms = _now_ms() if now_ms is None else now_ms
        with self._lock:
            self._entries[key] = (entry, now_ms + ttl_ms)

    def __len__(self) -> int:
        return len(self._entries)


class ContactRateLimiter:
    """Allows `limit` submissions per client IP within a fixed window."""

    def __init__(
        self,
        store: Optional[RateLimitStore] = None,
        limit: int = RATE_LIMIT_MAX_REQUESTS,
        window_ms: int = RATE_LIMIT_WINDOW_MS,
    ):
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.limit = limit
        self.window_ms = window_ms
        self._lock = Lock()

    def check(self, ip_address: str, now_ms: Optional[int] = None) -> RateLimitResult:
        """
        Count a submission from `ip_address`.

        Args:
            ip_address: Client IP, or "unknown" when none could be determined
            now_ms: Current time in epoch milliseconds (defaults to the clock)

        Returns:
            RateLimitResult; when denied, reset_time says when the window ends
        """
        now_ms = _now_ms() if now_ms is None else now_ms
        key = f"contact_{ip_address or 'unknown'}"

        # Read-modify-write must not interleave between requests
        with self._lock:
            entry = self.store.get(key, now_ms=now_ms)
            if entry is None or now_ms > entry.reset_time:
                reset_time = now_ms + self.window_ms
                self.store.set(
                    key, RateLimitEntry(count=1, reset_time=reset_time), ttl_ms=self.window_ms, now_ms=now_ms
                )
                return RateLimitResult(allowed=True)

            if entry.count >= self.limit:
                return RateLimitResult(allowed=False, reset_time=entry.reset_time)

            # reset_time decides the window; the store TTL only bounds retention
            self.store.set(
                key,
                RateLimitEntry(count=entry.count + 1, reset_time=entry.reset_time),
                ttl_ms=self.window_ms,
                now_ms=now_ms,
            )
            return RateLimitResult(allowed=True)
