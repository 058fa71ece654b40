"""Checkout — turning a customer's cart into a pending order.

Steps, each of which can fail on its own:

    1. Load the cart; no cart or no items is ``EmptyCart``.
    2. Take a pricing snapshot. The first line in cart order that is inactive
       (or deleted) is ``ProductInactive``, or not covered by live stock is
       ``InsufficientStock``. This check only rejects obviously bad carts
       early, the ledger decides in step 6.
    3. Total the order from the snapshot prices.
    4. Allocate an order number.
    5. Persist the order with its items in one write. A number taken by
       another process in the meantime is replaced and the write retried.
    6. Decrement stock line by line through the ledger's guarded update.
       When a line is refused, every line already decremented is restored
       and the order is cancelled before ``InsufficientStock`` is raised.
    7. Empty the cart. If that fails, all stock is restored and the order
       cancelled before the error propagates.
    8. Attribute the purchase to the referral code, if one was given.
       Failure here is logged and otherwise ignored.
    9. Return the order summary.

The orchestrator does not run inside one unit of work: the stock ledger is
shared by concurrent checkouts and each guarded update must be committed on
its own. Collaborators are passed in explicitly so that tests, and other
callers, can see exactly which stores a checkout touches.
"""

from dataclasses import dataclass

import structlog
from protean import UnitOfWork
from protean.exceptions import DatabaseError, ValidationError
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.catalogue.product import Product
from marketplace.checkout.pricing import PricingSnapshot
from marketplace.errors import EmptyCart, InsufficientStock
from marketplace.inventory.record import InventoryRecord
from marketplace.order.numbering import sequence
from marketplace.order.order import Order
from marketplace.referral.link import CODE_LENGTH
from marketplace.referral.tracker import ReferralTracker

logger = structlog.get_logger(__name__)

MAX_NUMBER_COLLISIONS = 3


@dataclass(frozen=True)
class OrderSummary:
    order_id: str
    order_number: str
    total: float
    status: str

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "order_number": self.order_number,
            "total": self.total,
            "status": self.status,
        }


class CheckoutOrchestrator:
    def __init__(self, carts, products, ledger, orders, referrals, numbers=None):
        self.carts = carts
        self.products = products
        self.ledger = ledger
        self.orders = orders
        self.referrals = referrals
        self.numbers = numbers or sequence

    @classmethod
    def from_domain(cls, domain=None) -> "CheckoutOrchestrator":
        domain = domain or current_domain
        return cls(
            carts=domain.repository_for(Cart),
            products=domain.repository_for(Product),
            ledger=domain.repository_for(InventoryRecord),
            orders=domain.repository_for(Order),
            referrals=ReferralTracker(),
        )

    def checkout(self, customer_id, referral_code=None) -> OrderSummary:
        log = logger.bind(customer_id=str(customer_id))

        if referral_code and len(referral_code) > CODE_LENGTH:
            log.info("Referral code ignored", reason="malformed", length=len(referral_code))
            referral_code = None

        # 1. Cart
        cart = self.carts.find_for_customer(customer_id)
        if cart is None or not cart.items:
            log.info("Checkout rejected", reason="empty_cart")
            raise EmptyCart()

        # 2. Snapshot and advisory checks, first failing line in cart order
        snapshot = PricingSnapshot.take(cart.items, self.products, self.ledger)

        rejection = snapshot.first_rejection()
        if rejection is not None:
            line = rejection.line
            log.info(
                "Checkout rejected",
                reason=rejection.code,
                product_id=line.product_id,
                requested=line.quantity,
                available=line.stock,
            )
            raise rejection.error(line.product_id)

        # 3-5. Total, number, persist order and items together
        order = self._place_order(customer_id, snapshot, referral_code, log)
        log = log.bind(order_id=str(order.id), order_number=order.order_number)
        log.debug("Order persisted", total=order.total_amount)

        # 6. Stock
        self._commit_stock(order, snapshot, log)

        # 7. Cart
        try:
            cart.clear(order_id=str(order.id))
            with UnitOfWork():
                self.carts.add(cart)
        except Exception:
            log.exception("Cart could not be emptied after stock commit")
            self._compensate(order, snapshot.lines, "Cart update failed", log)
            raise

        # 8. Referral attribution
        if referral_code:
            self._attribute(referral_code, order, log)

        log.info("Checkout completed", total=order.total_amount)
        return OrderSummary(
            order_id=str(order.id),
            order_number=order.order_number,
            total=order.total_amount,
            status=order.status,
        )

    def _place_order(self, customer_id, snapshot, referral_code, log):
        """Persist a new order, renumbering it when another process took its number first."""
        for attempt in range(1, MAX_NUMBER_COLLISIONS + 1):
            order = Order.place(
                order_number=self.numbers.next_number(self.orders),
                customer_id=str(customer_id),
                lines=snapshot.lines,
                referral_code=referral_code,
            )
            try:
                with UnitOfWork():
                    self.orders.add(order)
                return order
            except (ValidationError, DatabaseError):
                if attempt == MAX_NUMBER_COLLISIONS or not self.orders.number_taken(order.order_number):
                    raise
                log.warning("Order number collision", order_number=order.order_number, attempt=attempt)

    # -------------------------------------------------------------------
    # Stock commit and compensation
    # -------------------------------------------------------------------
    def _commit_stock(self, order, snapshot, log):
        applied = []
        try:
            for line in snapshot.lines:
                change = self.ledger.decrement(line.product_id, line.quantity)
                if change.insufficient:
                    log.info("Stock refused at commit", product_id=line.product_id, requested=line.quantity)
                    self._compensate(order, applied, f"Insufficient stock for product {line.product_id}", log)
                    raise InsufficientStock(line.product_id)
                applied.append(line)
        except InsufficientStock:
            raise
        except Exception:
            log.exception("Stock commit failed")
            self._compensate(order, applied, "Stock update failed", log)
            raise

    def _compensate(self, order, applied, reason, log):
        for line in reversed(applied):
            self.ledger.increment(line.product_id, line.quantity)
            log.info("Stock restored", product_id=line.product_id, quantity=line.quantity)

        order.cancel(reason)
        self.orders.add(order)
        log.warning("Order cancelled during checkout", reason=reason)

    def _attribute(self, referral_code, order, log):
        try:
            self.referrals.record_purchase(
                referral_code,
                order_id=str(order.id),
                customer_id=str(order.customer_id),
                meta={"total": order.total_amount, "order_number": order.order_number},
            )
        except Exception:
            log.warning("Referral purchase not recorded", referral_code=referral_code, exc_info=True)


def checkout(customer_id, referral_code=None) -> OrderSummary:
    return CheckoutOrchestrator.from_domain().checkout(customer_id, referral_code=referral_code)
