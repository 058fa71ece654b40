"""InventoryRecord aggregate — the authoritative stock counter for one product.

Stock is shared mutable state across every concurrent checkout that touches
the product, so quantity changes on the checkout path never go through
load/modify/save of this aggregate. They go through the guarded updates in
``InventoryLedger`` instead. The aggregate itself is only saved for the
administrative overwrite.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer

from marketplace.domain import marketplace

SCHEMA_NAME = "inventory_records"


@marketplace.aggregate(schema_name=SCHEMA_NAME)
class InventoryRecord:
    product_id = Identifier(identifier=True, required=True)
    stock_quantity = Integer(default=0)
    updated_at = DateTime()

    @invariant.post
    def stock_is_never_negative(self):
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValidationError({"stock_quantity": ["Stock quantity cannot be negative"]})

    @classmethod
    def create(cls, product_id, stock_quantity=0):
        return cls(
            product_id=product_id,
            stock_quantity=stock_quantity,
            updated_at=datetime.now(UTC),
        )

    def overwrite(self, stock_quantity):
        self.stock_quantity = stock_quantity
        self.updated_at = datetime.now(UTC)
