"""The customer's cart as shown before checkout, priced at today's prices."""

from decimal import Decimal

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.catalogue.product import Product
from marketplace.inventory.record import InventoryRecord
from marketplace.order.order import line_total, money


def cart_view(customer_id):
    cart = current_domain.repository_for(Cart).get_or_create(customer_id)
    products = current_domain.repository_for(Product)
    ledger = current_domain.repository_for(InventoryRecord)

    lines = []
    subtotal = Decimal("0")
    for item in cart.items:
        try:
            product = products.get(str(item.product_id))
        except ObjectNotFoundError:
            product = None

        price = product.price if product else 0.0
        stock = ledger.get_stock(item.product_id)
        total = line_total(price, item.quantity)
        subtotal += total

        lines.append(
            {
                "product_id": str(item.product_id),
                "name": product.name if product else "",
                "quantity": item.quantity,
                "unit_price": price,
                "line_total": money(total),
                "stock_quantity": stock,
                "in_stock": bool(product and product.is_active) and stock >= item.quantity,
            }
        )

    return {"cart_id": str(cart.id), "items": lines, "subtotal": money(subtotal)}
