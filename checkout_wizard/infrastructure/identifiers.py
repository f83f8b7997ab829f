"""Opaque identifiers for accepted steps.

Identifiers are a prefix followed by a millisecond timestamp. The
timestamp part never repeats within a process: when two calls land in
the same millisecond the second one is pushed one millisecond ahead.
"""

import threading
import time
from typing import Callable

ACCOUNT_PREFIX = "acc_"
SHIPPING_PREFIX = "ship_"
PAYMENT_PREFIX = "pay_"
ORDER_PREFIX = "ORD-"


class IdentifierGenerator:
    """Generates unique, monotonically increasing step identifiers."""

    def __init__(self, clock_ms: Callable[[], int] | None = None) -> None:
        """Initialize generator.

        Args:
            clock_ms: Source of the current time in milliseconds.
        """
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._last = 0
        self._lock = threading.Lock()

    def _next_value(self) -> int:
        with self._lock:
            value = max(self._clock_ms(), self._last + 1)
            self._last = value
            return value

    def generate(self, prefix: str) -> str:
        return f"{prefix}{self._next_value()}"

    def account_id(self) -> str:
        return self.generate(ACCOUNT_PREFIX)

    def shipping_id(self) -> str:
        return self.generate(SHIPPING_PREFIX)

    def payment_id(self) -> str:
        return self.generate(PAYMENT_PREFIX)

    def order_id(self) -> str:
        return self.generate(ORDER_PREFIX)
