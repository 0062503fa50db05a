"""
Payment verification oracle.

Answers "was this order actually paid?" by looking the payment up in
Stripe. Lookup order:

1. the payment intent attached to the order, if any
2. Stripe customers with the order's email and their payment intents
3. a scan of recent payment intents whose receipt email matches

When several payments match, the best-scoring succeeded one is reported
together with the number of matches. Lookups never raise: failures come
back as ``verified=False`` with a diagnostic message.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from orderdesk.core.config import BUSINESS_RULES, BusinessRules
from orderdesk.core.errors import ExternalServiceError
from orderdesk.core.logging import get_logger
from orderdesk.models.order import Order, OrderPatch
from orderdesk.models.payment import PaymentDetails, PaymentMatch, PaymentVerification
from orderdesk.repositories.affiliate import AffiliateRepository
from orderdesk.repositories.order import OrderRepository
from orderdesk.services.commission import expected_payment
from orderdesk.services.payment_cache import PaymentStatusCache
from orderdesk.services.stripe_client import StripeClient

logger = get_logger(__name__)

SUCCEEDED = "succeeded"

# Match score weights
EMAIL_SCORE = 10
AMOUNT_SCORE = 5
NAME_SCORE = 2


def amounts_match(expected: Decimal, actual: Decimal, rules: BusinessRules = BUSINESS_RULES) -> bool:
    return abs(expected - actual) <= rules.payment_amount_tolerance


def names_match(order_name: str, payment_name: str) -> bool:
    a = re.sub(r"[^a-z]", "", (order_name or "").lower())
    b = re.sub(r"[^a-z]", "", (payment_name or "").lower())
    if not a or not b:
        return False
    return a in b or b in a


def _intent_amount(intent: dict[str, Any]) -> Decimal:
    return Decimal(intent.get("amount", 0)) / 100


def _billing_name(intent: dict[str, Any]) -> str:
    charge = intent.get("latest_charge")
    if isinstance(charge, dict):
        return (charge.get("billing_details") or {}).get("name") or ""
    return ""


@dataclass
class Candidate:
    intent: dict[str, Any]
    amount: Decimal
    email_match: bool
    amount_match: bool
    name_match: bool
    payment_name: str = ""

    @property
    def succeeded(self) -> bool:
        return self.intent.get("status") == SUCCEEDED

    @property
    def score(self) -> int:
        return (
            (EMAIL_SCORE if self.email_match else 0)
            + (AMOUNT_SCORE if self.amount_match else 0)
            + (NAME_SCORE if self.name_match else 0)
        )

    @property
    def sort_key(self) -> tuple:
        return (self.succeeded, self.score, self.intent.get("created", 0))


class PaymentVerifier:
    """Looks up Stripe payments for orders and caches the verdict."""

    def __init__(
        self,
        stripe: StripeClient,
        cache: PaymentStatusCache,
        affiliates: Optional[AffiliateRepository] = None,
        rules: BusinessRules = BUSINESS_RULES,
    ) -> None:
        self.stripe = stripe
        self.cache = cache
        self.affiliates = affiliates
        self.rules = rules

    async def verify(self, order: Order) -> PaymentVerification:
        """Verify one order's payment; never raises."""
        try:
            result = await self._verify(order)
        except ExternalServiceError as e:
            logger.warning("Payment verification failed", order_id=order.id, error=str(e))
            return PaymentVerification(
                verified=False,
                status="error",
                message=f"Error searching Stripe: {e}",
            )
        except Exception as e:
            logger.exception("Unexpected payment verification error", order_id=order.id)
            return PaymentVerification(
                verified=False,
                status="error",
                message=f"Payment lookup failed: {e}",
            )

        self.cache.set(order.id, result.verified)
        logger.info(
            "Payment verified" if result.verified else "Payment not verified",
            order_id=order.id,
            status=result.status,
        )
        return result

    async def _discount_percent(self, order: Order) -> Optional[Decimal]:
        if not order.affiliate_code or self.affiliates is None:
            return None
        try:
            affiliate = await self.affiliates.get_by_code(order.affiliate_code)
        except ExternalServiceError as e:
            logger.warning("Affiliate lookup failed", code=order.affiliate_code, error=str(e))
            return None
        return affiliate.discount if affiliate else None

    async def _verify(self, order: Order) -> PaymentVerification:
        expected = expected_payment(order, await self._discount_percent(order), self.rules)
        email = order.email.strip().lower()

        if order.stripe_payment_id:
            try:
                intent = await self.stripe.retrieve_payment_intent(order.stripe_payment_id)
            except ExternalServiceError as e:
                logger.warning(
                    "Attached payment intent lookup failed",
                    order_id=order.id,
                    intent_id=order.stripe_payment_id,
                    error=str(e),
                )
            else:
                receipt = (intent.get("receipt_email") or "").lower()
                candidate = self._candidate(
                    intent, expected, order, email_match=bool(email) and receipt == email
                )
                return self._result([candidate], expected)

        if not email:
            return PaymentVerification(
                verified=False,
                status="missing_email",
                message="No customer email found - cannot verify payment",
            )

        candidates = await self._customer_candidates(email, expected, order)
        if not candidates:
            candidates = await self._receipt_candidates(email, expected, order)

        if not candidates:
            return PaymentVerification(
                verified=False,
                status="not_found",
                message=f"No Stripe payments found for email: {email}",
            )
        return self._result(candidates, expected)

    async def _customer_candidates(
        self, email: str, expected: Decimal, order: Order
    ) -> list[Candidate]:
        candidates: list[Candidate] = []
        try:
            customers = await self.stripe.list_customers(email)
            for customer in customers:
                intents = await self.stripe.list_payment_intents(customer=customer["id"])
                for intent in intents:
                    candidates.append(
                        self._candidate(
                            intent,
                            expected,
                            order,
                            email_match=True,
                            payment_name=customer.get("name") or "",
                        )
                    )
        except ExternalServiceError as e:
            logger.warning("Stripe customer search failed", email=email, error=str(e))
        return candidates

    async def _receipt_candidates(
        self, email: str, expected: Decimal, order: Order
    ) -> list[Candidate]:
        intents = await self.stripe.list_payment_intents(
            limit=StripeClient.MAX_PAGE, expand_charge=True
        )
        return [
            self._candidate(intent, expected, order, email_match=True)
            for intent in intents
            if (intent.get("receipt_email") or "").lower() == email
        ]

    def _candidate(
        self,
        intent: dict[str, Any],
        expected: Decimal,
        order: Order,
        *,
        email_match: bool,
        payment_name: str = "",
    ) -> Candidate:
        amount = _intent_amount(intent)
        payment_name = payment_name or _billing_name(intent)
        return Candidate(
            intent=intent,
            amount=amount,
            email_match=email_match,
            amount_match=amounts_match(expected, amount, self.rules),
            name_match=names_match(order.customer_name, payment_name),
            payment_name=payment_name,
        )

    def _result(self, candidates: list[Candidate], expected: Decimal) -> PaymentVerification:
        unique = list({c.intent["id"]: c for c in candidates}.values())
        best = max(unique, key=lambda c: c.sort_key)
        intent = best.intent
        verified = best.succeeded and best.amount_match

        if verified:
            message = "Payment verified: amount matches"
        elif best.succeeded:
            message = (
                f"Payment found but amount differs: expected ${expected:.2f}, "
                f"found ${best.amount:.2f}"
            )
        else:
            message = f"Latest payment status is {intent.get('status', 'unknown')}"
        if len(unique) > 1:
            message += f" [{len(unique)} payments found for this customer]"

        return PaymentVerification(
            verified=verified,
            status=intent.get("status", "unknown"),
            message=message,
            details=PaymentDetails(
                payment_id=intent["id"],
                amount=best.amount,
                currency=intent.get("currency", "usd"),
                method=(intent.get("payment_method_types") or ["unknown"])[0],
                created_at=datetime.fromtimestamp(intent.get("created", 0), tz=timezone.utc),
            ),
            match=PaymentMatch(
                email_match=best.email_match,
                amount_match=best.amount_match,
                name_match=best.name_match,
                expected_amount=expected,
                actual_amount=best.amount,
                payment_name=best.payment_name or None,
                total_matches=len(unique),
            ),
        )


class PaymentService:
    """Creates payment intents for orders taken over the phone."""

    def __init__(
        self,
        stripe: StripeClient,
        orders: OrderRepository,
        cache: PaymentStatusCache,
    ) -> None:
        self.stripe = stripe
        self.orders = orders
        self.cache = cache

    async def create_intent(
        self,
        amount: Decimal,
        *,
        order_id: Optional[str] = None,
        customer_email: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        order = None
        if order_id:
            order = await self.orders.find(order_id)
            if order is None:
                logger.warning("Payment intent for unknown order", order_id=order_id)

        intent = await self.stripe.create_payment_intent(
            amount,
            receipt_email=customer_email or (order.email if order else None),
            description=(
                f"Payment for order {order.checkout_id}" if order else f"Payment of ${amount}"
            ),
            metadata={"orderId": order_id or "", **(metadata or {})},
        )

        if order is not None:
            try:
                await self.orders.update(order.id, OrderPatch(stripe_payment_id=intent["id"]))
                self.cache.invalidate(order.id)
            except ExternalServiceError as e:
                logger.warning(
                    "Could not record payment intent on order",
                    order_id=order.id,
                    error=str(e),
                )

        return {
            "client_secret": intent.get("client_secret"),
            "payment_intent_id": intent["id"],
        }
