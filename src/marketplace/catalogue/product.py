"""Product aggregate (CQRS) — the slice of the catalogue that checkout reads.

Vendors own products. Checkout only ever reads price, the active flag and the
owning vendor; everything else about a product (images, categories, search)
lives outside this context.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, String

from marketplace.catalogue.events import ProductDeactivated, ProductListed, ProductPriceChanged
from marketplace.domain import marketplace
from marketplace.errors import AccessDenied


@marketplace.aggregate
class Product:
    vendor_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, vendor_id, name, price, is_active=True):
        now = datetime.now(UTC)
        product = cls(
            vendor_id=vendor_id,
            name=name,
            price=price,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                vendor_id=str(vendor_id),
                name=name,
                price=price,
            )
        )
        return product

    def assert_owned_by(self, vendor_id):
        if str(self.vendor_id) != str(vendor_id):
            raise AccessDenied("Not your product")

    def change_price(self, new_price):
        if new_price is None or new_price < 0:
            raise ValidationError({"price": ["Price must be zero or positive"]})

        previous = self.price
        self.price = new_price
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous,
                new_price=new_price,
            )
        )

    def activate(self):
        self.is_active = True
        self.updated_at = datetime.now(UTC)

    def deactivate(self):
        if not self.is_active:
            return

        self.is_active = False
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductDeactivated(product_id=str(self.id)))
