"""Order aggregate (CQRS) — the record of a completed checkout.

An order and its items are created together, exactly once per successful
checkout, and are never deleted. Items freeze the unit price and the owning
vendor at purchase time; they are the audit trail of what was sold, no matter
how the catalogue changes afterwards. Only the status moves after creation.

Lifecycle:
    pending → processing → shipped → delivered      (happy path)
    pending | processing → cancelled                 (abort path)

The aggregate only enforces that the target status is one of the known
values. Which transitions a vendor or admin may perform is decided by the
caller.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from marketplace.referral.link import CODE_LENGTH


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError({"status": ["Invalid status"]}) from None


CENT = Decimal("0.01")


def line_total(unit_price, quantity) -> Decimal:
    return Decimal(str(unit_price)) * quantity


def money(amount: Decimal) -> float:
    return float(amount.quantize(CENT))


@marketplace.entity(part_of="Order")
class OrderItem:
    """A line of an order, immutable once the order exists."""

    product_id = Identifier(required=True)
    vendor_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    price_at_purchase = Float(required=True, min_value=0.0)


@marketplace.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    customer_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    total_amount = Float(required=True, min_value=0.0)
    referral_code = String(max_length=CODE_LENGTH)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_matches_items(self):
        if not self.items:
            return
        expected = money(sum((line_total(i.price_at_purchase, i.quantity) for i in self.items), Decimal("0")))
        if abs(expected - (self.total_amount or 0.0)) > 0.005:
            raise ValidationError({"total_amount": ["Order total must equal the sum of its items"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_number, customer_id, lines, referral_code=None):
        """Create a pending order from priced lines.

        Args:
            order_number: Unique human-readable number (``ORD-123456``).
            customer_id: The buyer.
            lines: Iterable of objects exposing product_id, vendor_id,
                quantity and unit_price, as frozen at checkout.
            referral_code: Code that accompanied the checkout, if any.
        """
        lines = list(lines)
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        total = money(sum((line_total(line.unit_price, line.quantity) for line in lines), Decimal("0")))
        now = datetime.now(UTC)

        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            status=OrderStatus.PENDING.value,
            total_amount=total,
            referral_code=referral_code,
            created_at=now,
            updated_at=now,
        )
        with atomic_change(order):
            for line in lines:
                order.add_items(
                    OrderItem(
                        product_id=line.product_id,
                        vendor_id=line.vendor_id,
                        quantity=line.quantity,
                        price_at_purchase=line.unit_price,
                    )
                )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                item_count=len(lines),
                total_amount=total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def contains_product(self, product_id) -> bool:
        return any(str(i.product_id) == str(product_id) for i in self.items)

    def has_items_from(self, vendor_id) -> bool:
        return any(str(i.vendor_id) == str(vendor_id) for i in self.items)

    def items_from(self, vendor_id):
        return [i for i in self.items if str(i.vendor_id) == str(vendor_id)]

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def change_status(self, new_status, changed_by=None):
        target = OrderStatus.parse(new_status)
        previous = self.status

        self.status = target.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_by=changed_by,
                changed_at=self.updated_at,
            )
        )

    def cancel(self, reason):
        """Abort the order. Used by checkout when a later step fails."""
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=reason,
                cancelled_at=self.updated_at,
            )
        )
