"""
Burn-Time Prediction - Time-To-Live Result Cache

Holds the last computed result of an expensive calculation together with the
time it was computed and the key it was computed for. A result is reused
until the TTL elapses or the key changes (e.g. a different vessel or a part
count change), or until it is explicitly invalidated.
"""

import time
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar

T = TypeVar("T")


class TtlCache(Generic[T]):
    """
    Single-entry cache with a time-to-live.

    Args:
        ttl: Seconds a result stays fresh. Zero means always recompute.
        clock: Monotonic clock in seconds (injectable for tests)
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = float(ttl)
        self._clock = clock
        self._value: Optional[T] = None
        self._key: Any = None
        self._computed_at: Optional[float] = None

    @property
    def has_value(self) -> bool:
        return self._computed_at is not None

    @property
    def value(self) -> Optional[T]:
        return self._value

    @property
    def last_computed_at(self) -> Optional[float]:
        return self._computed_at

    def is_fresh(self, key: Hashable = None) -> bool:
        """True if a value exists, was computed for `key`, and is within the TTL."""
        if self._computed_at is None or key != self._key:
            return False
        return (self._clock() - self._computed_at) < self.ttl

    def get_or_compute(self, compute: Callable[[], T], key: Hashable = None) -> T:
        """Return the cached value if fresh, else compute, store and return it."""
        if self.is_fresh(key):
            return self._value
        return self.store(compute(), key)

    def store(self, value: T, key: Hashable = None) -> T:
        self._value = value
        self._key = key
        self._computed_at = self._clock()
        return value

    def invalidate(self) -> None:
        self._value = None
        self._key = None
        self._computed_at = None
