"""Pricing snapshot — what the catalogue and the ledger say right now.

Checkout never trusts anything cached in the cart. Every line is re-read here:
price, active flag and owning vendor from the catalogue, stock from the
ledger. A product that no longer exists is captured as an inactive line.
"""

from dataclasses import dataclass
from decimal import Decimal

from protean.exceptions import ObjectNotFoundError

from marketplace.errors import CheckoutRejected, InsufficientStock, ProductInactive
from marketplace.order.order import line_total, money


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    vendor_id: str | None
    quantity: int
    unit_price: float
    active: bool
    stock: int

    @property
    def total(self) -> Decimal:
        return line_total(self.unit_price, self.quantity)

    @property
    def covered(self) -> bool:
        return self.stock >= self.quantity


@dataclass(frozen=True)
class Rejection:
    line: PricedLine
    error: type[CheckoutRejected]

    @property
    def code(self) -> str:
        return self.error.code


@dataclass(frozen=True)
class PricingSnapshot:
    lines: tuple[PricedLine, ...]

    @classmethod
    def take(cls, cart_items, products, ledger) -> "PricingSnapshot":
        lines = []
        for item in cart_items:
            product_id = str(item.product_id)
            try:
                product = products.get(product_id)
            except ObjectNotFoundError:
                product = None

            lines.append(
                PricedLine(
                    product_id=product_id,
                    vendor_id=str(product.vendor_id) if product else None,
                    quantity=item.quantity,
                    unit_price=product.price if product else 0.0,
                    active=bool(product and product.is_active),
                    stock=ledger.get_stock(product_id),
                )
            )
        return cls(lines=tuple(lines))

    def first_rejection(self) -> Rejection | None:
        """The first line, in cart order, that is inactive or not covered by stock."""
        for line in self.lines:
            if not line.active:
                return Rejection(line=line, error=ProductInactive)
            if not line.covered:
                return Rejection(line=line, error=InsufficientStock)
        return None

    @property
    def total(self) -> float:
        return money(sum((line.total for line in self.lines), Decimal("0")))
