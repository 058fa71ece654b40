"""Shared fixtures for marketplace tests: products, stock, carts and an API client."""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from protean import current_domain

from marketplace.api import register_error_handlers, routers
from marketplace.cart.items import AddToCart
from marketplace.catalogue.listing import ListProduct
from marketplace.checkout.orchestrator import CheckoutOrchestrator
from marketplace.domain import marketplace
from marketplace.inventory.record import InventoryRecord


@pytest.fixture()
def ledger():
    return current_domain.repository_for(InventoryRecord)


@pytest.fixture()
def list_product():
    """Factory listing a product through the vendor command; returns its id."""

    def _list(price=10.0, stock=5, vendor_id="vendor-001", name="Walnut Desk Tray", is_active=True):
        return current_domain.process(
            ListProduct(
                vendor_id=vendor_id,
                name=name,
                price=price,
                stock_quantity=stock,
                is_active=is_active,
            ),
            asynchronous=False,
        )

    return _list


@pytest.fixture()
def add_to_cart():
    def _add(customer_id, product_id, quantity):
        return current_domain.process(
            AddToCart(customer_id=customer_id, product_id=product_id, quantity=quantity),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def orchestrator():
    return CheckoutOrchestrator.from_domain()


@pytest.fixture()
def client():
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with marketplace.domain_context():
            return await call_next(request)

    for router in routers:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app, raise_server_exceptions=False)


class Callers:
    """Gateway headers identifying the caller of an API request."""

    @staticmethod
    def customer(customer_id="cust-001"):
        return {"X-User-Id": customer_id, "X-User-Role": "customer"}

    @staticmethod
    def vendor(vendor_id="vendor-001"):
        return {"X-User-Id": vendor_id, "X-User-Role": "vendor"}

    @staticmethod
    def admin(admin_id="admin-001"):
        return {"X-User-Id": admin_id, "X-User-Role": "admin"}


@pytest.fixture()
def callers():
    return Callers
