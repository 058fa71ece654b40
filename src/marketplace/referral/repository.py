"""Repositories for referral links and the referral event ledger."""

from marketplace.domain import marketplace
from marketplace.referral.event import ReferralEvent, ReferralEventType
from marketplace.referral.link import ReferralLink


@marketplace.repository(part_of=ReferralLink)
class ReferralLinkRepository:
    def find_by_code(self, code) -> ReferralLink | None:
        links = self._dao.query.filter(code=code).all().items
        return links[0] if links else None

    def code_taken(self, code) -> bool:
        return self.find_by_code(code) is not None

    def for_vendor(self, vendor_id) -> list[ReferralLink]:
        return self._dao.query.filter(vendor_id=str(vendor_id)).order_by("created_at").limit(1000).all().items


@marketplace.repository(part_of=ReferralEvent)
class ReferralEventRepository:
    def count(self, referral_link_id, event_type, since=None, until=None) -> int:
        criteria = {
            "referral_link_id": str(referral_link_id),
            "event_type": ReferralEventType(event_type).value,
        }
        if since is not None:
            criteria["created_at__gte"] = since
        if until is not None:
            criteria["created_at__lte"] = until
        return self._dao.query.filter(**criteria).all().total

    def purchase_for_order(self, order_id) -> ReferralEvent | None:
        events = self._dao.query.filter(
            order_id=str(order_id),
            event_type=ReferralEventType.PURCHASE.value,
        ).all().items
        return events[0] if events else None
