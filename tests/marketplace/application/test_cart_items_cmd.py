"""Application tests for cart item management commands."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from marketplace.cart.cart import Cart
from marketplace.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from marketplace.cart.views import cart_view
from marketplace.errors import InsufficientStock


def _cart(customer_id="cust-001"):
    return current_domain.repository_for(Cart).find_for_customer(customer_id)


class TestAddToCartCommand:
    def test_first_add_creates_the_cart(self, list_product, add_to_cart):
        product_id = list_product()
        assert _cart() is None

        cart_id = add_to_cart("cust-001", product_id, 2)

        cart = _cart()
        assert str(cart.id) == cart_id
        assert cart.quantity_of(product_id) == 2

    def test_repeated_add_merges(self, list_product, add_to_cart):
        product_id = list_product(stock=10)
        add_to_cart("cust-001", product_id, 2)
        add_to_cart("cust-001", product_id, 3)
        assert _cart().quantity_of(product_id) == 5

    def test_one_cart_per_customer(self, list_product, add_to_cart):
        first = list_product()
        second = list_product(name="Oak Coaster")
        cart_id = add_to_cart("cust-001", first, 1)
        assert add_to_cart("cust-001", second, 1) == cart_id

    def test_unknown_product_is_not_found(self, add_to_cart):
        with pytest.raises(ObjectNotFoundError):
            add_to_cart("cust-001", "prod-404", 1)

    def test_quantity_above_stock_is_rejected(self, list_product, add_to_cart):
        product_id = list_product(stock=2)
        with pytest.raises(InsufficientStock):
            add_to_cart("cust-001", product_id, 3)

    def test_merged_quantity_above_stock_is_rejected(self, list_product, add_to_cart):
        product_id = list_product(stock=4)
        add_to_cart("cust-001", product_id, 3)
        with pytest.raises(InsufficientStock):
            add_to_cart("cust-001", product_id, 2)
        assert _cart().quantity_of(product_id) == 3

    def test_zero_quantity_is_rejected(self, list_product):
        product_id = list_product()
        with pytest.raises(ValidationError):
            current_domain.process(
                AddToCart(customer_id="cust-001", product_id=product_id, quantity=0),
                asynchronous=False,
            )


class TestUpdateAndRemoveCommands:
    def test_update_overwrites(self, list_product, add_to_cart):
        product_id = list_product(stock=10)
        add_to_cart("cust-001", product_id, 2)
        current_domain.process(
            UpdateCartQuantity(customer_id="cust-001", product_id=product_id, new_quantity=7),
            asynchronous=False,
        )
        assert _cart().quantity_of(product_id) == 7

    def test_update_above_stock_is_rejected(self, list_product, add_to_cart):
        product_id = list_product(stock=3)
        add_to_cart("cust-001", product_id, 1)
        with pytest.raises(InsufficientStock):
            current_domain.process(
                UpdateCartQuantity(customer_id="cust-001", product_id=product_id, new_quantity=4),
                asynchronous=False,
            )

    def test_remove(self, list_product, add_to_cart):
        product_id = list_product()
        add_to_cart("cust-001", product_id, 1)
        current_domain.process(
            RemoveFromCart(customer_id="cust-001", product_id=product_id),
            asynchronous=False,
        )
        assert len(_cart().items) == 0


class TestCartView:
    def test_view_prices_lines_at_current_price(self, list_product, add_to_cart):
        product_id = list_product(price=12.5, stock=4)
        add_to_cart("cust-001", product_id, 2)

        view = cart_view("cust-001")

        line = view["items"][0]
        assert line["unit_price"] == 12.5
        assert line["line_total"] == 25.0
        assert line["stock_quantity"] == 4
        assert line["in_stock"] is True
        assert view["subtotal"] == 25.0

    def test_view_of_new_customer_is_empty(self):
        view = cart_view("cust-new")
        assert view["items"] == []
        assert view["subtotal"] == 0.0
