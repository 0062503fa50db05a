"""
Payment status cache.

Remembers the outcome of payment verification per order id so ranking
can prefer verified orders without calling Stripe for every record.
"""
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional


class PaymentStatusCache:
    """
    Bounded LRU cache with per-entry TTL.

    Safe to share between threads; every access takes the lock.
    """

    def __init__(
        self,
        max_entries: int = 5000,
        ttl_seconds: float = 900,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[bool, float]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, order_id: str) -> Optional[bool]:
        """Cached verification result, or None if unknown or expired."""
        with self._lock:
            entry = self._entries.get(order_id)
            if entry is None:
                return None
            verified, stored_at = entry
            if self._clock() - stored_at > self.ttl_seconds:
                del self._entries[order_id]
                return None
            self._entries.move_to_end(order_id)
            return verified

    def set(self, order_id: str, verified: bool) -> None:
        with self._lock:
            self._entries[order_id] = (verified, self._clock())
            self._entries.move_to_end(order_id)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate(self, order_id: str) -> None:
        with self._lock:
            self._entries.pop(order_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
