"""Human-readable order numbers: ``ORD-`` followed by six digits.

The digits are the trailing six digits of a millisecond timestamp. Within a
process the underlying value is strictly increasing, so two checkouts in the
same millisecond still get different numbers. Across processes the candidate
is checked against the store and bumped until it is free.
"""

import threading
import time

PREFIX = "ORD-"
DIGITS = 6
MAX_ATTEMPTS = 20


class OrderNumberExhausted(Exception):
    pass


def format_order_number(value: int) -> str:
    return f"{PREFIX}{value % 10**DIGITS:0{DIGITS}d}"


class OrderNumberSequence:
    def __init__(self, clock=None):
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._last = 0
        self._lock = threading.Lock()

    def _next_value(self) -> int:
        with self._lock:
            self._last = max(self._clock(), self._last + 1)
            return self._last

    def next_number(self, orders) -> str:
        """Next number not yet taken by an order in ``orders``."""
        for _ in range(MAX_ATTEMPTS):
            candidate = format_order_number(self._next_value())
            if not orders.number_taken(candidate):
                return candidate
        raise OrderNumberExhausted("Could not allocate a free order number")


sequence = OrderNumberSequence()


def next_order_number(orders) -> str:
    return sequence.next_number(orders)
