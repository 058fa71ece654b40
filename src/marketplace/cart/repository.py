"""Repository for the Cart aggregate."""

from marketplace.cart.cart import Cart
from marketplace.domain import marketplace


@marketplace.repository(part_of=Cart)
class CartRepository:
    def find_for_customer(self, customer_id) -> Cart | None:
        """The customer's cart, or None if they never had one."""
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return carts[0] if carts else None

    def get_or_create(self, customer_id) -> Cart:
        """Return the customer's cart, creating it on first access."""
        cart = self.find_for_customer(customer_id)
        if cart is None:
            cart = Cart.create(customer_id=str(customer_id))
            self.add(cart)
        return cart
