"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state. The one exception is the
contended product, which is shared on purpose so that checkouts race for
the same stock.
"""

import threading
from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks state for a single simulated customer."""

    customer_id: str | None = None
    order_ids: list[str] = field(default_factory=list)
    rejected: int = 0


@dataclass
class VendorState:
    """Tracks state for a single simulated vendor."""

    vendor_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    referral_codes: list[str] = field(default_factory=list)


class ContendedProduct:
    """A product listed once per test run and shared by every shopper."""

    _lock = threading.Lock()
    product_id: str | None = None

    @classmethod
    def get_or_list(cls, list_product):
        with cls._lock:
            if cls.product_id is None:
                cls.product_id = list_product()
            return cls.product_id
