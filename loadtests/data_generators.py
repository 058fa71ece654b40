"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names of the marketplace API's pydantic request
schemas and pass the domain's validation rules.
"""

import random
import uuid

from faker import Faker

fake = Faker()


def user_id(prefix: str) -> str:
    """Caller ids like 'cust-lt-a1b2c3d4', forwarded in X-User-Id."""
    return f"{prefix}-lt-{uuid.uuid4().hex[:8]}"


def caller_headers(user: str, role: str) -> dict:
    return {"X-User-Id": user, "X-User-Role": role}


def product_data(stock_quantity: int | None = None) -> dict:
    return {
        "name": fake.catch_phrase()[:255],
        "price": round(random.uniform(1.0, 250.0), 2),
        "stock_quantity": stock_quantity if stock_quantity is not None else random.randint(5, 50),
        "is_active": True,
    }


def cart_item_data(product_id: str, max_quantity: int = 3) -> dict:
    return {"product_id": product_id, "quantity": random.randint(1, max_quantity)}


def referral_link_data(product_id: str) -> dict:
    return {"product_id": product_id, "discount_percent": random.choice([0, 5, 10, 15, 25])}
