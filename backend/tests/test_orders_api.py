"""
Tests for the staff order API.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from fakes import intent, make_order
from orderdesk.models.order import OrderStatus
from orderdesk.services.easypost_client import LabelResult, ShippingAddress


@pytest.fixture
def orders(order_repo):
    order_repo.add(
        make_order("rec_old", total=Decimal("50"), created=datetime(2026, 9, 1, tzinfo=timezone.utc)),
        make_order("rec_new", total=Decimal("50"), created=datetime(2026, 10, 1, tzinfo=timezone.utc)),
        make_order("rec_done", completed=True, created=datetime(2026, 10, 5, tzinfo=timezone.utc)),
        make_order("rec_cart", status=OrderStatus.SHIPPING_INFO),
    )
    return order_repo


class TestListOrders:
    def test_requires_token(self, client: TestClient, orders):
        response = client.get("/api/orders")

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    def test_ranked_page(self, client: TestClient, auth_headers, orders):
        response = client.get(
            "/api/orders",
            params={"verifyPayments": "false", "limit": 2},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [o["id"] for o in body["data"]["orders"]] == ["rec_new", "rec_old"]
        assert body["data"]["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}
        first = body["data"]["orders"][0]
        assert first["customerName"] == "Ada Lovelace"
        assert first["total"] == 50.0
        assert first["cartItems"][0]["selectedWeight"] == "5mg"

    def test_all_statuses(self, client: TestClient, auth_headers, orders):
        response = client.get(
            "/api/orders",
            params={"status": "all", "verifyPayments": "false"},
            headers=auth_headers,
        )

        assert response.json()["data"]["pagination"]["total"] == 4

    def test_limit_is_bounded(self, client: TestClient, auth_headers, orders):
        response = client.get("/api/orders", params={"limit": 500}, headers=auth_headers)

        assert response.status_code == 422

    def test_verifies_page_payments(self, client: TestClient, auth_headers, orders, stripe):
        orders.add(make_order("rec_new", total=Decimal("50"), stripe_payment_id="pi_9",
                              created=datetime(2026, 10, 1, tzinfo=timezone.utc)))
        stripe.intents["pi_9"] = intent("pi_9", 5999, receipt_email="ada@example.com")

        response = client.get("/api/orders", params={"limit": 1}, headers=auth_headers)

        order = response.json()["data"]["orders"][0]
        assert order["id"] == "rec_new"
        assert order["paymentVerified"] is True
        assert order["paymentStatus"] == "succeeded"


class TestSingleOrder:
    def test_get(self, client: TestClient, auth_headers, orders):
        response = client.get("/api/orders/rec_old", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["checkoutId"] == "chk_rec_old"

    def test_missing(self, client: TestClient, auth_headers, orders):
        response = client.get("/api/orders/nope", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "not_found",
            "message": "Order not found: nope",
        }

    def test_update(self, client: TestClient, auth_headers, orders):
        response = client.patch(
            "/api/orders/rec_old",
            json={"notes": "Leave at door", "affiliateCode": "ACE", "expectedVersion": "v0"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["notes"] == "Leave at door"
        assert data["affiliateCode"] == "ACE"
        assert orders.writes == [("rec_old", {"notes": "Leave at door", "affiliate_code": "ACE"})]

    def test_stale_version_conflicts(self, client: TestClient, auth_headers, orders):
        response = client.patch(
            "/api/orders/rec_old",
            json={"notes": "x", "expectedVersion": "v-stale"},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert response.json()["error"] == "write_conflict"
        assert orders.writes == []

    def test_illegal_transition(self, client: TestClient, auth_headers, orders):
        orders.add(make_order("rec_x", status=OrderStatus.CANCELLED))

        response = client.patch(
            "/api/orders/rec_x",
            json={"status": "payment_selection"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["error"] == "validation"

    def test_empty_patch(self, client: TestClient, auth_headers, orders):
        response = client.patch("/api/orders/rec_old", json={}, headers=auth_headers)

        assert response.status_code == 422


class TestFulfillment:
    @pytest.fixture
    def mixed(self, order_repo):
        order_repo.add(make_order("rec_mix", items=((1, "5mg", 2, "50.00"), (2, "10mg", 1, "90.00"))))
        return order_repo

    def test_partial_save(self, client: TestClient, auth_headers, mixed):
        response = client.put(
            "/api/orders/rec_mix/partial-fulfillment",
            json={"partialDetails": {"1-5mg": {"fulfilled": 1}}, "tracking": " 9400 "},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["partial"] is True
        assert data["completed"] is False
        assert data["tracking"] == "9400"
        assert data["partialDetails"] == {
            "1-5mg": {"fulfilled": 1, "total": 2},
            "2-10mg": {"fulfilled": 0, "total": 1},
        }
        assert len(mixed.writes) == 1

    def test_full_save_completes(self, client: TestClient, auth_headers, mixed):
        response = client.put(
            "/api/orders/rec_mix/partial-fulfillment",
            json={"partialDetails": {"1-5mg": {"fulfilled": 9}, "2-10mg": {"fulfilled": 1}}},
            headers=auth_headers,
        )

        data = response.json()["data"]
        assert data["completed"] is True
        assert data["partial"] is False
        assert data["partialDetails"]["1-5mg"] == {"fulfilled": 2, "total": 2}

    def test_bad_key(self, client: TestClient, auth_headers, mixed):
        response = client.put(
            "/api/orders/rec_mix/partial-fulfillment",
            json={"partialDetails": {"abc": {"fulfilled": 1}}},
            headers=auth_headers,
        )

        assert response.status_code == 422

    def test_flags_are_exclusive(self, client: TestClient, auth_headers, mixed):
        response = client.patch(
            "/api/orders/rec_mix/fulfillment",
            json={"completed": True, "partial": True},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert mixed.writes == []

    def test_set_flag(self, client: TestClient, auth_headers, mixed):
        response = client.patch(
            "/api/orders/rec_mix/fulfillment",
            json={"completed": True},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["completed"] is True


class TestPaymentsAndEmail:
    def test_payment_status(self, client: TestClient, auth_headers, order_repo, stripe):
        order_repo.add(make_order("rec1", total=Decimal("50"), stripe_payment_id="pi_1"))
        stripe.intents["pi_1"] = intent("pi_1", 5999, receipt_email="ada@example.com")

        response = client.get("/api/orders/rec1/payment-status", headers=auth_headers)

        data = response.json()["data"]
        assert data["verified"] is True
        assert data["match"]["expectedAmount"] == 59.99
        assert data["details"]["paymentId"] == "pi_1"

    def test_create_intent(self, client: TestClient, auth_headers, order_repo, stripe):
        order_repo.add(make_order("rec1"))

        response = client.post(
            "/api/payments/intent",
            json={"amount": 59.99, "orderId": "rec1"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"] == {"clientSecret": "pi_1_secret", "paymentIntentId": "pi_1"}
        assert order_repo.orders["rec1"].stripe_payment_id == "pi_1"
        assert stripe.created[0]["receipt_email"] == "ada@example.com"

    def test_intent_amount_must_be_positive(self, client: TestClient, auth_headers):
        response = client.post("/api/payments/intent", json={"amount": 0}, headers=auth_headers)

        assert response.status_code == 422

    def test_send_confirmation(self, client: TestClient, auth_headers, order_repo, notifier):
        order_repo.add(make_order("rec1"))
        notifier.send_order_confirmation.return_value = True

        response = client.post("/api/orders/rec1/send-confirmation", headers=auth_headers)

        body = response.json()
        assert body["data"]["sent"] is True
        assert body["data"]["order"]["confirmationEmailSent"] is True

    def test_failed_confirmation_leaves_flag(self, client: TestClient, auth_headers, order_repo, notifier):
        order_repo.add(make_order("rec1"))
        notifier.send_order_confirmation.return_value = False

        response = client.post("/api/orders/rec1/send-confirmation", headers=auth_headers)

        body = response.json()
        assert body["data"]["sent"] is False
        assert body["message"] == "Confirmation email was not sent"
        assert order_repo.writes == []

    def test_shipping_email_needs_tracking(self, client: TestClient, auth_headers, order_repo, notifier):
        order_repo.add(make_order("rec1"))

        response = client.post("/api/orders/rec1/send-shipping", headers=auth_headers)

        assert response.status_code == 422
        notifier.send_shipping_notification.assert_not_called()


class TestShippingRoutes:
    def test_label(self, client: TestClient, auth_headers, order_repo, carrier):
        order_repo.add(make_order("rec1", address="1 Main St", city="Springfield", state="IL", zip="62701"))
        carrier.validate_address.return_value = True
        carrier.purchase_label.return_value = LabelResult(
            tracking_number="9400111",
            label_url="https://labels.example/1.pdf",
            postage_cost=Decimal("7.85"),
        )

        response = client.post(
            "/api/orders/rec1/shipping-label",
            json={"serviceType": "Ground"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"] == {
            "trackingNumber": "9400111",
            "labelUrl": "https://labels.example/1.pdf",
            "postageCost": 7.85,
            "carrier": "USPS",
        }
        assert order_repo.orders["rec1"].tracking == "9400111"
        assert order_repo.orders["rec1"].shipped is True
        assert carrier.purchase_label.call_args.args[0].service_type == "Ground"

    def test_label_rejects_bad_address(self, client: TestClient, auth_headers, order_repo, carrier):
        order_repo.add(make_order("rec1"))
        carrier.validate_address.return_value = False

        response = client.post("/api/orders/rec1/shipping-label", json={}, headers=auth_headers)

        assert response.status_code == 422
        carrier.purchase_label.assert_not_called()

    def test_tracking(self, client: TestClient, auth_headers, order_repo, carrier):
        order_repo.add(make_order("rec1", tracking="9400111"))
        carrier.get_tracking.return_value = {
            "tracking_code": "9400111",
            "status": "in_transit",
            "carrier": "USPS",
        }

        response = client.get("/api/orders/rec1/tracking", headers=auth_headers)

        data = response.json()["data"]
        assert data["trackingNumber"] == "9400111"
        assert data["status"] == "in_transit"

    def test_scanner_existing(self, client: TestClient, auth_headers, order_repo):
        order_repo.add(make_order("rec1", tracking="9400111"))

        response = client.post(
            "/api/scanner/lookup", json={"trackingNumber": "9400111"}, headers=auth_headers
        )

        data = response.json()["data"]
        assert data["found"] is True
        assert data["hasExistingTracking"] is True
        assert data["order"]["id"] == "rec1"

    def test_scanner_suggests_assignment(self, client: TestClient, auth_headers, order_repo):
        order_repo.add(make_order("rec1"))

        response = client.post(
            "/api/scanner/lookup", json={"trackingNumber": "9400999"}, headers=auth_headers
        )

        data = response.json()["data"]
        assert data["needsTrackingAssignment"] is True
        assert data["order"]["id"] == "rec1"

    def test_scanner_nothing(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/scanner/lookup", json={"trackingNumber": "9400999"}, headers=auth_headers
        )

        body = response.json()
        assert body["data"]["found"] is False
        assert body["message"] == "No order found for this tracking number"

    def test_validate_address(self, client: TestClient, auth_headers, carrier):
        carrier.validate_address.return_value = False

        response = client.post(
            "/api/validate-address",
            json={"address": {"address": "1 Nowhere", "city": "X", "state": "ZZ", "zip": "00000"}},
            headers=auth_headers,
        )

        assert response.json()["data"] == {"valid": False}
        assert carrier.validate_address.call_args.args[0] == ShippingAddress(
            name="", address="1 Nowhere", city="X", state="ZZ", zip="00000"
        )
