"""
Token bucket rate limiter
"""

import threading
import time


class RateLimiter:
    """
    Token bucket with reservation semantics.

    acquire() takes tokens immediately, going into debt if the bucket is empty,
    and sleeps off the debt outside the lock. Concurrent callers therefore queue
    up in arrival order. clock and sleep are injectable for tests.
    """

    def __init__(self, rate: float, capacity: float = 1.0, clock=time.monotonic, sleep=time.sleep):
        if rate <= 0:
            raise ValueError("rate must be > 0")
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.rate = rate
        self.capacity = capacity
        self.clock = clock
        self.sleep = sleep
        self.tokens = capacity
        self.updated = clock()
        self._lock = threading.Lock()

    @classmethod
    def from_delay(cls, delay: float, **kwargs) -> "RateLimiter":
        """One request every `delay` seconds, no burst"""
        return cls(rate=1.0 / delay, capacity=1.0, **kwargs)

    def _refill(self):
        now = self.clock()
        elapsed = max(0.0, now - self.updated)
        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
        self.updated = now

    def acquire(self, cost: float = 1.0) -> float:
        """Take `cost` tokens, sleeping as needed. Returns seconds waited."""
        if cost > self.capacity:
            raise ValueError(f"cost {cost} exceeds bucket capacity {self.capacity}")

        with self._lock:
            self._refill()
            self.tokens -= cost
            wait = -self.tokens / self.rate if self.tokens < 0 else 0.0

        if wait > 0:
            self.sleep(wait)
        return wait
