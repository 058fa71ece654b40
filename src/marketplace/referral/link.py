"""ReferralLink aggregate — a vendor-issued trackable code for one product.

A link is valid when it is active and not expired. Validity is computed
every time it is asked for and never stored.
"""

import secrets
from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Float, Identifier, String

from marketplace.domain import marketplace
from marketplace.referral.events import ReferralLinkCreated

CODE_BYTES = 6
CODE_LENGTH = 2 * CODE_BYTES


def share_path(code: str) -> str:
    return f"/r/{code}"


def generate_code() -> str:
    return secrets.token_hex(CODE_BYTES)


@marketplace.aggregate
class ReferralLink:
    vendor_id = Identifier(required=True)
    product_id = Identifier(required=True)
    code = String(required=True, max_length=CODE_LENGTH, unique=True)
    discount_percent = Float(default=0.0, min_value=0.0, max_value=90.0)
    expires_at = DateTime()
    is_active = Boolean(default=True)
    created_at = DateTime()

    @classmethod
    def create(cls, vendor_id, product_id, code, discount_percent=0.0, expires_at=None):
        link = cls(
            vendor_id=vendor_id,
            product_id=product_id,
            code=code,
            discount_percent=discount_percent,
            expires_at=expires_at,
            is_active=True,
            created_at=datetime.now(UTC),
        )
        link.raise_(
            ReferralLinkCreated(
                link_id=str(link.id),
                vendor_id=str(vendor_id),
                product_id=str(product_id),
                code=code,
                discount_percent=discount_percent,
            )
        )
        return link

    @property
    def share_path(self) -> str:
        return share_path(self.code)

    def is_valid(self, now=None) -> bool:
        if not self.is_active:
            return False
        if self.expires_at is None:
            return True

        now = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at > now
