"""Marketplace API package."""

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import (
    admin_router,
    cart_router,
    checkout_router,
    order_router,
    referral_router,
    review_router,
    vendor_router,
)

routers = [
    cart_router,
    checkout_router,
    order_router,
    vendor_router,
    admin_router,
    referral_router,
    review_router,
]

__all__ = ["routers", "register_error_handlers"]
