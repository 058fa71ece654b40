"""Domain events for referral links and the referral event ledger."""

from protean.fields import DateTime, Float, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="ReferralLink")
class ReferralLinkCreated:
    __version__ = 1

    link_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    product_id = Identifier(required=True)
    code = String(required=True)
    discount_percent = Float()


@marketplace.event(part_of="ReferralEvent")
class ReferralEventLogged:
    """A click, view or purchase was attributed to a referral link."""

    __version__ = 1

    referral_link_id = Identifier(required=True)
    event_type = String(required=True)
    order_id = Identifier()
    logged_at = DateTime(required=True)
