"""Tests for the Cart aggregate."""

import pytest
from protean.exceptions import ValidationError

from marketplace.cart.cart import Cart
from marketplace.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated


def _make_cart():
    return Cart.create(customer_id="cust-001")


class TestAddItem:
    def test_add_item(self):
        cart = _make_cart()
        cart.add_item("prod-001", 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_add_same_product_merges_quantity(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart.add_item("prod-001", 2)
        assert len(cart.items) == 1
        assert cart.quantity_of("prod-001") == 3

    def test_add_different_products(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart.add_item("prod-002", 4)
        assert len(cart.items) == 2

    def test_add_item_raises_event(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart.add_item("prod-001", 2)
        added = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(added) == 2
        assert added[-1].quantity == 2
        assert added[-1].new_quantity == 3

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, None, "2"])
    def test_rejects_invalid_quantity(self, quantity):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.add_item("prod-001", quantity)
        assert len(cart.items) == 0


class TestUpdateQuantity:
    def test_update_overwrites_quantity(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart.update_item_quantity("prod-001", 5)
        assert cart.quantity_of("prod-001") == 5

    def test_update_raises_event(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart.update_item_quantity("prod-001", 4)
        updated = [e for e in cart._events if isinstance(e, CartQuantityUpdated)]
        assert updated[0].previous_quantity == 1
        assert updated[0].new_quantity == 4

    def test_update_unknown_product_fails(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.update_item_quantity("prod-404", 2)

    def test_update_to_zero_fails(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        with pytest.raises(ValidationError):
            cart.update_item_quantity("prod-001", 0)
        assert cart.quantity_of("prod-001") == 1


class TestRemoveAndClear:
    def test_remove_item(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart.add_item("prod-002", 1)
        cart.remove_item("prod-001")
        assert [str(i.product_id) for i in cart.items] == ["prod-002"]
        assert any(isinstance(e, CartItemRemoved) for e in cart._events)

    def test_remove_absent_item_is_noop(self):
        cart = _make_cart()
        cart.remove_item("prod-404")
        assert len(cart.items) == 0
        assert not any(isinstance(e, CartItemRemoved) for e in cart._events)

    def test_clear_empties_items_but_keeps_cart(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart.add_item("prod-002", 2)
        cart_id = cart.id

        cart.clear(order_id="order-001")

        assert len(cart.items) == 0
        assert cart.id == cart_id
        cleared = [e for e in cart._events if isinstance(e, CartCleared)]
        assert cleared[0].order_id == "order-001"
