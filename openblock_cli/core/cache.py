"""
Time-boxed in-memory cache.

Holds a single value together with the time it was stored. The clock is
injectable so expiry can be tested without sleeping.
"""

import logging
import time
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 3600.0


class TtlCache(Generic[T]):
    """
    Single-slot cache with a fixed time-to-live.

    Example:
        >>> cache = TtlCache(ttl_seconds=60)
        >>> cache.set({"toolchains": []})
        >>> cache.get()
        {'toolchains': []}
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize cache.

        Args:
            ttl_seconds: How long a stored value stays fresh
            clock: Monotonic time source in seconds (default: time.monotonic)
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._value: Optional[T] = None
        self._stored_at: Optional[float] = None

    def get(self) -> Optional[T]:
        """Return the cached value, or None if empty or expired."""
        if self._stored_at is None:
            return None

        age = self._clock() - self._stored_at
        if age >= self.ttl_seconds:
            logger.debug(f"Cache entry expired after {age:.0f}s")
            return None

        return self._value

    def set(self, value: T) -> None:
        """Store a value and stamp it with the current time."""
        self._value = value
        self._stored_at = self._clock()

    def clear(self) -> None:
        """Drop the cached value."""
        self._value = None
        self._stored_at = None

    @property
    def is_fresh(self) -> bool:
        return self.get() is not None
