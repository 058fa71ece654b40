"""Integration tests for referral links, clicks, views and analytics."""

import re

import pytest


@pytest.fixture()
def product_id(client, callers):
    return client.post(
        "/vendor/products",
        json={"name": "Desk Tray", "price": 10.0, "stock_quantity": 5},
        headers=callers.vendor(),
    ).json()["product_id"]


def _create_link(client, callers, product_id, **body):
    return client.post("/vendor/referrals/links", json={"product_id": product_id, **body}, headers=callers.vendor())


class TestCreateLinkAPI:
    def test_create_returns_code_and_share_path(self, client, callers, product_id):
        response = _create_link(client, callers, product_id, discount_percent=20)
        assert response.status_code == 201
        body = response.json()
        assert re.fullmatch(r"[0-9a-f]{12}", body["code"])
        assert body["share_path"] == f"/r/{body['code']}"

    @pytest.mark.parametrize("discount", [-5, 91])
    def test_discount_out_of_range_is_400(self, client, callers, product_id, discount):
        assert _create_link(client, callers, product_id, discount_percent=discount).status_code == 400

    def test_other_vendor_is_403(self, client, callers, product_id):
        response = client.post(
            "/vendor/referrals/links", json={"product_id": product_id}, headers=callers.vendor("vendor-002")
        )
        assert response.status_code == 403

    def test_unknown_product_is_404(self, client, callers):
        assert _create_link(client, callers, "prod-404").status_code == 404


class TestPublicReferralAPI:
    def test_resolve_logs_click(self, client, callers, product_id):
        code = _create_link(client, callers, product_id, discount_percent=10).json()["code"]

        response = client.get(f"/referrals/{code}", headers={"X-Session-Id": "sess-001"})

        assert response.status_code == 200
        body = response.json()
        assert body["product_id"] == product_id
        assert body["discount_percent"] == 10.0
        assert body["is_valid"] is True

        analytics = client.get("/vendor/referrals/analytics", headers=callers.vendor()).json()
        assert analytics["links"][0]["clicks"] == 1

    def test_expired_link_resolves_as_invalid(self, client, callers, product_id):
        code = _create_link(client, callers, product_id, expires_at="2020-01-01T00:00:00").json()["code"]
        assert client.get(f"/referrals/{code}").json()["is_valid"] is False
        assert client.post(f"/referrals/{code}/view").status_code == 200

    def test_view(self, client, callers, product_id):
        code = _create_link(client, callers, product_id).json()["code"]
        assert client.post(f"/referrals/{code}/view").status_code == 200

        analytics = client.get("/vendor/referrals/analytics", headers=callers.vendor()).json()
        assert analytics["totals"]["views"] == 1

    def test_unknown_code_is_404(self, client):
        assert client.get("/referrals/ffffffffffff").status_code == 404


class TestAnalyticsAPI:
    def test_window_in_the_future_counts_nothing(self, client, callers, product_id):
        code = _create_link(client, callers, product_id).json()["code"]
        client.get(f"/referrals/{code}")

        body = client.get(
            "/vendor/referrals/analytics", params={"from": "2999-01-01T00:00:00"}, headers=callers.vendor()
        ).json()

        assert body["totals"]["clicks"] == 0
        assert body["totals"]["conversion_rate"] == 0.0

    def test_customers_cannot_read_analytics(self, client, callers):
        assert client.get("/vendor/referrals/analytics", headers=callers.customer()).status_code == 403
