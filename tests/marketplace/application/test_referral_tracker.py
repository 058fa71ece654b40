"""Application tests for referral link creation and attribution."""

import re
from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from marketplace.errors import AccessDenied
from marketplace.referral import creation
from marketplace.referral.creation import CreateReferralLink, ReferralCodeExhausted
from marketplace.referral.event import ReferralEvent
from marketplace.referral.link import ReferralLink
from marketplace.referral.tracker import ReferralTracker


def _create(product_id, vendor_id="vendor-001", **overrides):
    return current_domain.process(
        CreateReferralLink(vendor_id=vendor_id, product_id=product_id, **overrides),
        asynchronous=False,
    )


def _events(event_type):
    return [
        e for e in current_domain.repository_for(ReferralEvent)._dao.query.all().items if e.event_type == event_type
    ]


@pytest.fixture()
def product_id(list_product):
    return list_product(vendor_id="vendor-001", name="Desk Tray")


class TestCreateLink:
    def test_returns_hex_code(self, product_id):
        code = _create(product_id, discount_percent=15.0)
        assert re.fullmatch(r"[0-9a-f]{12}", code)
        link = current_domain.repository_for(ReferralLink).find_by_code(code)
        assert link.discount_percent == 15.0
        assert str(link.vendor_id) == "vendor-001"

    def test_unknown_product(self):
        with pytest.raises(ObjectNotFoundError):
            _create("prod-404")

    def test_other_vendors_product(self, product_id):
        with pytest.raises(AccessDenied):
            _create(product_id, vendor_id="vendor-002")

    def test_collision_is_retried(self, product_id, monkeypatch):
        taken = _create(product_id)
        codes = iter([taken, taken, "0123456789ab"])
        monkeypatch.setattr(creation, "generate_code", lambda: next(codes))

        assert _create(product_id) == "0123456789ab"

    def test_gives_up_after_repeated_collisions(self, product_id, monkeypatch):
        taken = _create(product_id)
        monkeypatch.setattr(creation, "generate_code", lambda: taken)

        with pytest.raises(ReferralCodeExhausted):
            _create(product_id)


class TestClicksAndViews:
    def test_click_on_valid_link(self, product_id):
        code = _create(product_id, discount_percent=10.0)

        landing = ReferralTracker().record_click(code, session_id="sess-001")

        assert landing["is_valid"] is True
        assert landing["product_id"] == product_id
        assert landing["product_name"] == "Desk Tray"
        clicks = _events("click")
        assert len(clicks) == 1
        assert clicks[0].session_id == "sess-001"
        assert clicks[0].metadata == {"is_valid": True}

    def test_click_on_expired_link_is_logged_as_invalid(self, product_id):
        code = _create(product_id, expires_at=datetime.now(UTC) - timedelta(hours=1))

        landing = ReferralTracker().record_click(code)

        assert landing["is_valid"] is False
        assert _events("click")[0].metadata == {"is_valid": False}

    def test_click_on_unknown_code(self):
        with pytest.raises(ObjectNotFoundError):
            ReferralTracker().record_click("ffffffffffff")

    def test_view_records_product(self, product_id):
        code = _create(product_id)
        ReferralTracker().record_view(code)
        assert _events("view")[0].metadata == {"product_id": product_id, "is_valid": True}

    def test_view_on_expired_link_is_logged_as_invalid(self, product_id):
        code = _create(product_id, expires_at=datetime.now(UTC) - timedelta(hours=1))
        ReferralTracker().record_view(code, session_id="sess-001")

        views = _events("view")
        assert len(views) == 1
        assert views[0].session_id == "sess-001"
        assert views[0].metadata == {"product_id": product_id, "is_valid": False}

    def test_view_on_unknown_code(self):
        with pytest.raises(ObjectNotFoundError):
            ReferralTracker().record_view("ffffffffffff")


class TestPurchases:
    def test_purchase_is_recorded_once_per_order(self, product_id):
        code = _create(product_id)
        tracker = ReferralTracker()

        assert tracker.record_purchase(code, order_id="order-001", customer_id="cust-001") is not None
        assert tracker.record_purchase(code, order_id="order-001", customer_id="cust-001") is None
        assert len(_events("purchase")) == 1

    def test_purchase_carries_order_details(self, product_id):
        code = _create(product_id)

        ReferralTracker().record_purchase(
            code, order_id="order-001", meta={"total": 30.0, "order_number": "ORD-000123"}
        )

        assert _events("purchase")[0].metadata == {"total": 30.0, "order_number": "ORD-000123"}

    def test_purchase_through_expired_link_is_not_attributed(self, product_id):
        code = _create(product_id, expires_at=datetime.now(UTC) - timedelta(hours=1))
        assert ReferralTracker().record_purchase(code, order_id="order-001") is None
        assert _events("purchase") == []


class TestPerformance:
    def test_counts_and_conversion(self, product_id):
        code = _create(product_id)
        tracker = ReferralTracker()
        for _ in range(4):
            tracker.record_click(code)
        tracker.record_view(code)
        tracker.record_purchase(code, order_id="order-001")

        report = tracker.performance("vendor-001")

        link = report["links"][0]
        assert (link["clicks"], link["views"], link["purchases"]) == (4, 1, 1)
        assert link["conversion_rate"] == 0.25
        assert report["totals"]["conversion_rate"] == 0.25

    def test_window_excludes_older_events(self, product_id):
        code = _create(product_id)
        tracker = ReferralTracker()
        tracker.record_click(code)

        report = tracker.performance("vendor-001", since=datetime.now(UTC) + timedelta(minutes=1))

        assert report["links"][0]["clicks"] == 0
        assert report["totals"]["conversion_rate"] == 0.0

    def test_only_the_vendors_links(self, product_id, list_product):
        _create(product_id)
        other = list_product(vendor_id="vendor-002")
        _create(other, vendor_id="vendor-002")

        report = ReferralTracker().performance("vendor-001")

        assert [link["product_id"] for link in report["links"]] == [product_id]
