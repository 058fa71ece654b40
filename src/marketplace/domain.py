"""Marketplace bounded context — Cart, Checkout, Orders, Inventory and Referrals.

Handles the pre-purchase cart (CQRS), the checkout pipeline that converts a
cart into an order while keeping inventory consistent, the order status
lifecycle, and referral-link attribution. The catalogue is modelled only as
far as checkout needs it: price, active flag, vendor.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

marketplace = Domain(name="marketplace")
