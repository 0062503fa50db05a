"""
Tests for payment verification, intent creation and the Stripe client.
"""
from decimal import Decimal
from urllib.parse import parse_qs

import httpx
import pytest

from fakes import FakeAffiliateRepository, FakeOrderRepository, FakeStripe, intent, make_order
from orderdesk.core.errors import StripeAPIError
from orderdesk.models.affiliate import Affiliate
from orderdesk.services.payment_cache import PaymentStatusCache
from orderdesk.services.payments import PaymentService, PaymentVerifier, amounts_match, names_match
from orderdesk.services.stripe_client import StripeClient

EXPECTED_CENTS = 10999  # 100.00 total + 9.99 shipping


@pytest.fixture
def order():
    return make_order("rec1", total=Decimal("100"))


@pytest.fixture
def verifier(stripe: FakeStripe, payment_cache: PaymentStatusCache) -> PaymentVerifier:
    return PaymentVerifier(stripe, payment_cache)


class TestMatching:
    def test_amount_tolerance(self):
        assert amounts_match(Decimal("109.99"), Decimal("109.00"))
        assert amounts_match(Decimal("109.99"), Decimal("110.99"))
        assert not amounts_match(Decimal("109.99"), Decimal("108.98"))

    def test_names_match_ignores_case_and_punctuation(self):
        assert names_match("Ada Lovelace", "ADA LOVELACE")
        assert names_match("Ada Lovelace", "Ada  Lovelace-")
        assert not names_match("Ada Lovelace", "Grace Hopper")
        assert not names_match("", "Ada")


class TestPaymentVerifier:
    async def test_attached_intent_verified(self, verifier, stripe, order, payment_cache):
        stripe.intents["pi_1"] = intent("pi_1", EXPECTED_CENTS, receipt_email="ada@example.com")
        order = order.model_copy(update={"stripe_payment_id": "pi_1"})

        result = await verifier.verify(order)

        assert result.verified is True
        assert result.status == "succeeded"
        assert result.details.payment_id == "pi_1"
        assert result.match.email_match is True
        assert result.match.expected_amount == Decimal("109.99")
        assert payment_cache.get("rec1") is True
        assert stripe.calls == ["retrieve_payment_intent"]

    async def test_attached_intent_amount_mismatch(self, verifier, stripe, order, payment_cache):
        stripe.intents["pi_1"] = intent("pi_1", 5000)
        order = order.model_copy(update={"stripe_payment_id": "pi_1"})

        result = await verifier.verify(order)

        assert result.verified is False
        assert "amount differs" in result.message
        assert result.match.amount_difference == Decimal("59.99")
        assert payment_cache.get("rec1") is False

    async def test_attached_intent_not_succeeded(self, verifier, stripe, order):
        stripe.intents["pi_1"] = intent("pi_1", EXPECTED_CENTS, status="requires_payment_method")
        order = order.model_copy(update={"stripe_payment_id": "pi_1"})

        result = await verifier.verify(order)

        assert result.verified is False
        assert result.status == "requires_payment_method"

    async def test_missing_attached_intent_falls_back_to_customer(self, verifier, stripe, order):
        stripe.customers["ada@example.com"] = [{"id": "cus_1", "name": "Ada Lovelace"}]
        stripe.customer_intents["cus_1"] = [intent("pi_2", EXPECTED_CENTS)]
        order = order.model_copy(update={"stripe_payment_id": "pi_gone"})

        result = await verifier.verify(order)

        assert result.verified is True
        assert result.details.payment_id == "pi_2"
        assert result.match.name_match is True

    async def test_missing_email(self, verifier, stripe, payment_cache):
        order = make_order("rec1", email="")

        result = await verifier.verify(order)

        assert result.verified is False
        assert result.status == "missing_email"
        assert stripe.calls == []

    async def test_receipt_email_scan(self, verifier, stripe, order):
        stripe.recent = [
            intent("pi_other", EXPECTED_CENTS, receipt_email="someone@example.com"),
            intent("pi_mine", EXPECTED_CENTS, receipt_email="ADA@example.com"),
        ]

        result = await verifier.verify(order)

        assert result.verified is True
        assert result.details.payment_id == "pi_mine"
        assert stripe.calls == ["list_customers", "list_payment_intents"]

    async def test_nothing_found(self, verifier, order, payment_cache):
        result = await verifier.verify(order)

        assert result.verified is False
        assert result.status == "not_found"
        assert payment_cache.get("rec1") is False

    async def test_prefers_succeeded_and_discloses_count(self, verifier, stripe, order):
        stripe.customers["ada@example.com"] = [{"id": "cus_1"}]
        stripe.customer_intents["cus_1"] = [
            intent("pi_new_failed", EXPECTED_CENTS, status="canceled", created=300),
            intent("pi_old_ok", EXPECTED_CENTS, created=100),
            intent("pi_wrong_amount", 100, created=200),
        ]

        result = await verifier.verify(order)

        assert result.details.payment_id == "pi_old_ok"
        assert result.verified is True
        assert result.match.total_matches == 3
        assert "[3 payments found" in result.message

    async def test_duplicate_intents_counted_once(self, verifier, stripe, order):
        stripe.customers["ada@example.com"] = [{"id": "cus_1"}, {"id": "cus_2"}]
        stripe.customer_intents["cus_1"] = [intent("pi_1", EXPECTED_CENTS)]
        stripe.customer_intents["cus_2"] = [intent("pi_1", EXPECTED_CENTS)]

        result = await verifier.verify(order)

        assert result.match.total_matches == 1

    async def test_stripe_failure_never_raises(self, verifier, stripe, order, payment_cache):
        stripe.fail = "Stripe is down"

        result = await verifier.verify(order)

        assert result.verified is False
        assert result.status == "error"
        assert "Stripe is down" in result.message
        assert payment_cache.get("rec1") is None

    async def test_affiliate_discount_lowers_expected_amount(self, stripe, payment_cache):
        affiliates = FakeAffiliateRepository(Affiliate(code="SAVE10", discount=Decimal("10")))
        verifier = PaymentVerifier(stripe, payment_cache, affiliates)
        stripe.intents["pi_1"] = intent("pi_1", 9999)
        order = make_order(
            "rec1", total=Decimal("100"), affiliate_code="SAVE10", stripe_payment_id="pi_1"
        )

        result = await verifier.verify(order)

        assert result.match.expected_amount == Decimal("99.99")
        assert result.verified is True

    async def test_unknown_affiliate_applies_no_discount(self, stripe, payment_cache):
        verifier = PaymentVerifier(stripe, payment_cache, FakeAffiliateRepository())
        stripe.intents["pi_1"] = intent("pi_1", EXPECTED_CENTS)
        order = make_order(
            "rec1", total=Decimal("100"), affiliate_code="NOPE", stripe_payment_id="pi_1"
        )

        result = await verifier.verify(order)

        assert result.verified is True


class TestPaymentService:
    async def test_records_intent_on_order(self, stripe, payment_cache):
        repo = FakeOrderRepository(make_order("rec1"))
        payment_cache.set("rec1", False)
        service = PaymentService(stripe, repo, payment_cache)

        result = await service.create_intent(Decimal("59.99"), order_id="rec1")

        assert result == {"client_secret": "pi_1_secret", "payment_intent_id": "pi_1"}
        assert repo.orders["rec1"].stripe_payment_id == "pi_1"
        assert payment_cache.get("rec1") is None
        created = stripe.created[0]
        assert created["amount"] == 5999
        assert created["receipt_email"] == "ada@example.com"
        assert created["metadata"]["orderId"] == "rec1"

    async def test_without_order(self, stripe, payment_cache):
        service = PaymentService(stripe, FakeOrderRepository(), payment_cache)

        result = await service.create_intent(Decimal("10"), customer_email="x@example.com")

        assert result["payment_intent_id"] == "pi_1"
        assert stripe.created[0]["receipt_email"] == "x@example.com"

    async def test_stripe_error_propagates(self, stripe, payment_cache):
        stripe.fail = "card declined"
        service = PaymentService(stripe, FakeOrderRepository(), payment_cache)

        with pytest.raises(StripeAPIError):
            await service.create_intent(Decimal("10"))


class TestStripeClient:
    async def test_create_payment_intent_form(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["authorization"]
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={"id": "pi_1", "client_secret": "s"})

        client = StripeClient("sk_test_1", transport=httpx.MockTransport(handler))
        await client.create_payment_intent(
            Decimal("12.34"), receipt_email="a@b.com", metadata={"orderId": "rec1"}
        )

        assert seen["path"] == "/v1/payment_intents"
        assert seen["auth"].startswith("Basic ")
        assert seen["form"]["amount"] == ["1234"]
        assert seen["form"]["currency"] == ["usd"]
        assert seen["form"]["payment_method_types[]"] == ["card"]
        assert seen["form"]["metadata[orderId]"] == ["rec1"]

    async def test_list_limit_is_capped(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"data": []})

        client = StripeClient("sk_test_1", transport=httpx.MockTransport(handler))
        await client.list_payment_intents(limit=500, expand_charge=True)

        assert seen["params"]["limit"] == "100"
        assert seen["params"]["expand[]"] == "data.latest_charge"

    async def test_error_message_from_stripe(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": {"message": "No such payment_intent"}})

        client = StripeClient("sk_test_1", transport=httpx.MockTransport(handler))

        with pytest.raises(StripeAPIError, match="No such payment_intent") as exc:
            await client.retrieve_payment_intent("pi_x")
        assert exc.value.status == 404

    async def test_unconfigured(self, monkeypatch):
        monkeypatch.setattr("orderdesk.services.stripe_client.settings.stripe_secret_key", None)

        with pytest.raises(StripeAPIError):
            await StripeClient().list_customers("a@b.com")
