"""Read-side shaping of orders for customers, vendors and admins.

Views reference orders, they never write them. Product names are looked up
for display; a product that no longer exists shows with an empty name.
"""

from decimal import Decimal

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.errors import AccessDenied
from marketplace.order.order import Order, line_total, money

MAX_PAGE_SIZE = 20


def _product_name(product_id, cache):
    key = str(product_id)
    if key not in cache:
        try:
            cache[key] = current_domain.repository_for(Product).get(key).name
        except ObjectNotFoundError:
            cache[key] = ""
    return cache[key]


def _item_view(item, names):
    return {
        "product_id": str(item.product_id),
        "name": _product_name(item.product_id, names),
        "quantity": item.quantity,
        "price": item.price_at_purchase,
    }


def _order_view(order, names):
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "total": order.total_amount,
        "date": order.created_at,
        "items": [_item_view(item, names) for item in order.items],
    }


def customer_orders(customer_id, page=1, limit=5, search=""):
    """A page of the customer's order history, optionally filtered by order number."""
    page = max(1, int(page))
    limit = min(MAX_PAGE_SIZE, max(1, int(limit)))

    orders = current_domain.repository_for(Order).for_customer(customer_id)
    if search:
        needle = search.lower()
        orders = [o for o in orders if needle in o.order_number.lower()]

    total = len(orders)
    start = (page - 1) * limit
    names = {}

    return {
        "results": [_order_view(order, names) for order in orders[start : start + limit]],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": -(-total // limit),
        },
    }


def customer_order(customer_id, order_id):
    order = current_domain.repository_for(Order).get(order_id)
    if str(order.customer_id) != str(customer_id):
        raise AccessDenied("Not your order")
    return _order_view(order, {})


def vendor_orders(vendor_id):
    """Orders as a vendor sees them: only their own lines and their own subtotal."""
    names = {}
    results = []
    for order in current_domain.repository_for(Order).with_items_from(vendor_id):
        items = order.items_from(vendor_id)
        results.append(
            {
                "id": str(order.id),
                "order_number": order.order_number,
                "status": order.status,
                "total": money(sum((line_total(i.price_at_purchase, i.quantity) for i in items), Decimal("0"))),
                "date": order.created_at,
                "customer_id": str(order.customer_id),
                "items": [_item_view(item, names) for item in items],
            }
        )
    return {"results": results}


def all_orders():
    return {
        "results": [
            {
                "id": str(order.id),
                "order_number": order.order_number,
                "status": order.status,
                "total": order.total_amount,
                "date": order.created_at,
                "customer_id": str(order.customer_id),
                "items_count": len(order.items),
            }
            for order in current_domain.repository_for(Order).everything()
        ]
    }


def can_review(customer_id, product_id) -> bool:
    """A product may be reviewed once an order of the customer containing it was delivered."""
    delivered = current_domain.repository_for(Order).delivered_for(customer_id)
    return any(order.contains_product(product_id) for order in delivered)
