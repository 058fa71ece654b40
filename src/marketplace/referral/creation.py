"""Vendors mint referral links for their own products."""

import structlog
from protean import handle
from protean.fields import DateTime, Float, Identifier
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.referral.link import ReferralLink, generate_code

logger = structlog.get_logger(__name__)

MAX_CODE_ATTEMPTS = 5


class ReferralCodeExhausted(Exception):
    pass


@marketplace.command(part_of="ReferralLink")
class CreateReferralLink:
    vendor_id = Identifier(required=True)
    product_id = Identifier(required=True)
    discount_percent = Float(default=0.0, min_value=0.0, max_value=90.0)
    expires_at = DateTime()


@marketplace.command_handler(part_of=ReferralLink)
class CreateReferralLinkHandler:
    @handle(CreateReferralLink)
    def create_referral_link(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        product.assert_owned_by(command.vendor_id)

        repo = current_domain.repository_for(ReferralLink)
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_code()
            if not repo.code_taken(code):
                break
        else:
            raise ReferralCodeExhausted("Could not allocate a unique referral code")

        link = ReferralLink.create(
            vendor_id=command.vendor_id,
            product_id=command.product_id,
            code=code,
            discount_percent=command.discount_percent or 0.0,
            expires_at=command.expires_at,
        )
        repo.add(link)

        logger.info("Referral link created", vendor_id=str(command.vendor_id), product_id=str(command.product_id))
        return code
