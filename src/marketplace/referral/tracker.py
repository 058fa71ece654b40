"""Referral attribution — resolving codes, logging clicks, views and purchases.

Clicks are logged for any existing link, valid or not, with the validity at
click time recorded in the entry's metadata. Views are logged the same way.
A purchase is attributed at most once per order, and only through a link
that is valid at checkout time.

Attribution is advisory. Callers on the checkout path treat a failed write
as a logged warning, never as a reason to fail the purchase.
"""

from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.referral.event import ReferralEvent, ReferralEventType
from marketplace.referral.link import ReferralLink

logger = structlog.get_logger(__name__)


def conversion_rate(purchases: int, clicks: int) -> float:
    """Purchases per click as a ratio between 0 and 1 (not a percentage)."""
    if clicks <= 0:
        return 0.0
    return round(purchases / clicks, 4)


class ReferralTracker:
    def __init__(self, links=None, events=None):
        self.links = links if links is not None else current_domain.repository_for(ReferralLink)
        self.events = events if events is not None else current_domain.repository_for(ReferralEvent)

    def resolve(self, code) -> ReferralLink | None:
        """The link behind ``code``, whether or not it is still valid."""
        if not code:
            return None
        return self.links.find_by_code(code)

    def resolve_valid(self, code, now=None) -> ReferralLink | None:
        link = self.resolve(code)
        if link is None or not link.is_valid(now):
            return None
        return link

    def log_event(self, link, event_type, customer_id=None, order_id=None, session_id=None, meta=None):
        entry = ReferralEvent.record(
            referral_link_id=str(link.id),
            event_type=event_type,
            customer_id=customer_id,
            order_id=order_id,
            session_id=session_id,
            meta=meta,
        )
        self.events.add(entry)
        return entry

    # -------------------------------------------------------------------
    # Public entry points
    # -------------------------------------------------------------------
    def record_click(self, code, customer_id=None, session_id=None):
        """Log a click and describe the link for the landing page.

        Raises ObjectNotFoundError when no link carries the code.
        """
        link = self.resolve(code)
        if link is None:
            raise ObjectNotFoundError("Referral link not found")

        valid = link.is_valid()
        self.log_event(
            link,
            ReferralEventType.CLICK.value,
            customer_id=customer_id,
            session_id=session_id,
            meta={"is_valid": valid},
        )

        try:
            product_name = current_domain.repository_for(Product).get(str(link.product_id)).name
        except ObjectNotFoundError:
            product_name = None

        return {
            "code": link.code,
            "product_id": str(link.product_id),
            "product_name": product_name,
            "discount_percent": link.discount_percent,
            "expires_at": link.expires_at,
            "is_valid": valid,
        }

    def record_view(self, code, customer_id=None, session_id=None):
        """Log a view for any existing link. Raises ObjectNotFoundError for an unknown code."""
        link = self.resolve(code)
        if link is None:
            raise ObjectNotFoundError("Referral link not found")

        self.log_event(
            link,
            ReferralEventType.VIEW.value,
            customer_id=customer_id,
            session_id=session_id,
            meta={"product_id": str(link.product_id), "is_valid": link.is_valid()},
        )

    def record_purchase(self, code, order_id, customer_id=None, meta=None, now=None):
        """Attribute ``order_id`` to the link behind ``code``, at most once.

        Returns the logged entry, or None when the code does not resolve to a
        valid link or the order was already attributed.
        """
        link = self.resolve_valid(code, now)
        if link is None:
            logger.info("Referral code not attributable", code=code, order_id=str(order_id))
            return None

        if self.events.purchase_for_order(order_id) is not None:
            return None

        entry = self.log_event(
            link,
            ReferralEventType.PURCHASE.value,
            customer_id=customer_id,
            order_id=str(order_id),
            meta=meta,
        )
        logger.info("Purchase attributed to referral", code=code, order_id=str(order_id))
        return entry

    def performance(self, vendor_id, since=None, until=None):
        """Per-link click, view and purchase counts for a vendor's links."""
        until = until or datetime.now(UTC)
        links = []
        totals = {"clicks": 0, "views": 0, "purchases": 0}

        for link in self.links.for_vendor(vendor_id):
            clicks = self.events.count(link.id, ReferralEventType.CLICK.value, since, until)
            views = self.events.count(link.id, ReferralEventType.VIEW.value, since, until)
            purchases = self.events.count(link.id, ReferralEventType.PURCHASE.value, since, until)

            totals["clicks"] += clicks
            totals["views"] += views
            totals["purchases"] += purchases

            links.append(
                {
                    "code": link.code,
                    "product_id": str(link.product_id),
                    "discount_percent": link.discount_percent,
                    "is_valid": link.is_valid(),
                    "clicks": clicks,
                    "views": views,
                    "purchases": purchases,
                    "conversion_rate": conversion_rate(purchases, clicks),
                }
            )

        totals["conversion_rate"] = conversion_rate(totals["purchases"], totals["clicks"])
        return {"links": links, "totals": totals}
