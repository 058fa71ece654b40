"""Typed failures raised by the marketplace core.

Checkout rejections are validation errors with a machine-readable ``code``
and, where one item is at fault, the offending ``product_id``. The API layer
turns them into 400 responses; ``AccessDenied`` becomes a 403.
"""

from protean.exceptions import ValidationError


class CheckoutRejected(ValidationError):
    code = "checkout_rejected"

    def __init__(self, message: str, product_id: str | None = None):
        self.message = message
        self.product_id = product_id
        super().__init__({"checkout": [message]})


class EmptyCart(CheckoutRejected):
    code = "empty_cart"

    def __init__(self):
        super().__init__("Cart is empty")


class ProductInactive(CheckoutRejected):
    code = "product_inactive"

    def __init__(self, product_id: str):
        super().__init__("One or more products are inactive", product_id=product_id)


class InsufficientStock(CheckoutRejected):
    code = "insufficient_stock"

    def __init__(self, product_id: str):
        super().__init__("Not enough stock for one or more items", product_id=product_id)


class StockContention(Exception):
    """The stock record kept changing underneath a guarded update."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Stock for product {product_id} is under contention")


class AccessDenied(Exception):
    """The caller is authenticated but not allowed to touch this resource."""

    def __init__(self, message: str = "Not authorized"):
        self.message = message
        super().__init__(message)
