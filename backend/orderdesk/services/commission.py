"""
Commission and expected-payment arithmetic.

All money math uses Decimal and rounds half-up to the cent only at the
end of each figure.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from orderdesk.core.config import BUSINESS_RULES, BusinessRules
from orderdesk.models.order import CartItem, Order

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CommissionBreakdown:
    items_total: Decimal
    discount_amount: Decimal
    subtotal: Decimal
    commission_base: Decimal
    commission: Decimal


def order_items_total(cart_items: Iterable[CartItem]) -> Decimal:
    """Sum of unit price times quantity over the cart snapshot."""
    return sum((item.line_total for item in cart_items), Decimal("0"))


def compute_commission(
    items_total: Decimal,
    discount_percent: Decimal,
    share_percent: Decimal,
    rules: BusinessRules = BUSINESS_RULES,
) -> CommissionBreakdown:
    """
    Affiliate commission on one order.

    The affiliate discount comes off the items total first; the affiliate
    then earns ``share_percent`` of the margin left after cost of goods.
    """
    items_total = Decimal(items_total)
    discount_amount = items_total * Decimal(discount_percent) / HUNDRED
    subtotal = items_total - discount_amount
    commission_base = subtotal * rules.commission_margin
    commission = commission_base * Decimal(share_percent) / HUNDRED
    return CommissionBreakdown(
        items_total=to_cents(items_total),
        discount_amount=to_cents(discount_amount),
        subtotal=to_cents(subtotal),
        commission_base=to_cents(commission_base),
        commission=to_cents(commission),
    )


def expected_payment(
    order: Order,
    discount_percent: Optional[Decimal] = None,
    rules: BusinessRules = BUSINESS_RULES,
) -> Decimal:
    """
    Amount the customer should have been charged for an order.

    Flat shipping is added to the order total; an affiliate discount, when
    the order carries a code, applies to the goods only.
    """
    expected = order.total + rules.flat_shipping
    if order.affiliate_code and discount_percent:
        expected -= order.total * Decimal(discount_percent) / HUNDRED
    return to_cents(expected)
