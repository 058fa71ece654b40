"""ReferralEvent aggregate — one entry of the append-only attribution ledger.

Entries are written once and never changed or deleted. There are no mutating
methods on purpose; a correction is a new entry.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from marketplace.domain import marketplace
from marketplace.referral.events import ReferralEventLogged


class ReferralEventType(Enum):
    CLICK = "click"
    VIEW = "view"
    PURCHASE = "purchase"


@marketplace.aggregate
class ReferralEvent:
    referral_link_id = Identifier(required=True)
    event_type = String(required=True, choices=ReferralEventType)
    customer_id = Identifier()
    session_id = String(max_length=255)
    order_id = Identifier()
    meta = Text()  # JSON object
    created_at = DateTime(required=True)

    @classmethod
    def record(cls, referral_link_id, event_type, customer_id=None, order_id=None, session_id=None, meta=None):
        event_type = ReferralEventType(event_type)
        now = datetime.now(UTC)

        entry = cls(
            referral_link_id=referral_link_id,
            event_type=event_type.value,
            customer_id=customer_id,
            session_id=session_id,
            order_id=order_id,
            meta=json.dumps(meta or {}, default=str),
            created_at=now,
        )
        entry.raise_(
            ReferralEventLogged(
                referral_link_id=str(referral_link_id),
                event_type=event_type.value,
                order_id=str(order_id) if order_id else None,
                logged_at=now,
            )
        )
        return entry

    @property
    def metadata(self) -> dict:
        return json.loads(self.meta) if self.meta else {}
