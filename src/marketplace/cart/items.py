"""Cart item management — commands and handler.

Adding and updating re-read live stock as an early, advisory rejection. The
authoritative stock check happens again inside checkout.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.errors import InsufficientStock
from marketplace.inventory.record import InventoryRecord


@marketplace.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class UpdateCartQuantity:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    new_quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


def _ensure_stock_covers(product_id, quantity):
    # Raises ObjectNotFoundError for unknown products
    current_domain.repository_for(Product).get(product_id)

    stock = current_domain.repository_for(InventoryRecord).get_stock(product_id)
    if stock < quantity:
        raise InsufficientStock(str(product_id))


@marketplace.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.customer_id)

        _ensure_stock_covers(command.product_id, cart.quantity_of(command.product_id) + command.quantity)

        cart.add_item(product_id=command.product_id, quantity=command.quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.customer_id)

        _ensure_stock_covers(command.product_id, command.new_quantity)

        cart.update_item_quantity(product_id=command.product_id, new_quantity=command.new_quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.customer_id)
        cart.remove_item(product_id=command.product_id)
        repo.add(cart)
