"""Checkout load test scenarios.

Two journeys:

- ``ShopperJourney``: browse a vendor's product, add it to the cart, check
  out, read the order history. Most checkouts succeed.
- ``StockContentionUser``: every user checks out against one shared product
  with little stock. Checkouts must either succeed or be rejected with
  ``insufficient_stock``; any other outcome is a failure, and the product's
  stock must never be oversold.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cart_item_data, caller_headers, product_data, user_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ContendedProduct, ShopperState, VendorState

CONTENDED_STOCK = 25


def _list_product(client, vendor_id, stock_quantity=None):
    resp = client.post(
        "/vendor/products",
        json=product_data(stock_quantity),
        headers=caller_headers(vendor_id, "vendor"),
        name="POST /vendor/products",
    )
    resp.raise_for_status()
    return resp.json()["product_id"]


class ShopperJourney(SequentialTaskSet):
    """List Product -> Add To Cart -> Checkout -> Order History."""

    def on_start(self):
        self.vendor = VendorState(vendor_id=user_id("vend"))
        self.shopper = ShopperState(customer_id=user_id("cust"))
        self.vendor.product_ids.append(_list_product(self.client, self.vendor.vendor_id))

    @task
    def add_to_cart(self):
        with self.client.post(
            "/cart/items",
            json=cart_item_data(self.vendor.product_ids[0]),
            headers=caller_headers(self.shopper.customer_id, "customer"),
            catch_response=True,
            name="POST /cart/items",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Add to cart failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def checkout(self):
        with self.client.post(
            "/checkout",
            json={},
            headers=caller_headers(self.shopper.customer_id, "customer"),
            catch_response=True,
            name="POST /checkout",
        ) as resp:
            if resp.status_code == 201:
                self.shopper.order_ids.append(resp.json()["order_id"])
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def order_history(self):
        with self.client.get(
            "/orders",
            headers=caller_headers(self.shopper.customer_id, "customer"),
            catch_response=True,
            name="GET /orders",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Order history failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    tasks = [ShopperJourney]
    wait_time = between(0.5, 2)


class StockContentionUser(HttpUser):
    """Hammers checkout for a single low-stock product."""

    wait_time = between(0.1, 0.5)

    def on_start(self):
        vendor_id = user_id("vend")
        self.product_id = ContendedProduct.get_or_list(
            lambda: _list_product(self.client, vendor_id, CONTENDED_STOCK)
        )
        self.shopper = ShopperState(customer_id=user_id("cust"))

    @task
    def buy_one(self):
        headers = caller_headers(self.shopper.customer_id, "customer")

        self.client.post(
            "/cart/items",
            json={"product_id": self.product_id, "quantity": 1},
            headers=headers,
            name="POST /cart/items (contended)",
        )

        with self.client.post(
            "/checkout",
            json={},
            headers=headers,
            catch_response=True,
            name="POST /checkout (contended)",
        ) as resp:
            if resp.status_code == 201:
                self.shopper.order_ids.append(resp.json()["order_id"])
            elif resp.status_code == 400 and resp.json().get("code") in ("insufficient_stock", "empty_cart"):
                # Expected once the stock runs out
                self.shopper.rejected += 1
                resp.success()
            else:
                resp.failure(f"Contended checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
