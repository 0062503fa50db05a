"""
Order ranking policy.

Orders are sorted so staff see the ones that need action first:

1. completed orders sink to the bottom
2. partially fulfilled orders come first
3. then orders with verified payment
4. newest first within equal groups
"""
from functools import cmp_to_key
from typing import Callable, Iterable

from orderdesk.models._fields import EPOCH
from orderdesk.models.order import Order
from orderdesk.services.payment_cache import PaymentStatusCache

PaidLookup = Callable[[Order], bool]


def paid_lookup(cache: PaymentStatusCache) -> PaidLookup:
    """
    Build a memoized "payment verified" predicate for one ranking pass.

    A cached verification wins; without one, an attached payment-intent
    id is taken as a cheap (approximate) stand-in.
    """
    memo: dict[str, bool] = {}

    def is_paid(order: Order) -> bool:
        if order.id not in memo:
            cached = cache.get(order.id)
            memo[order.id] = cached if cached is not None else order.has_payment_intent
        return memo[order.id]

    return is_paid


def compare_orders(a: Order, b: Order, is_paid: PaidLookup) -> int:
    """Negative if ``a`` should be shown before ``b``."""
    if a.completed != b.completed:
        return 1 if a.completed else -1

    if not a.completed:
        if a.partial != b.partial:
            return -1 if a.partial else 1

        a_paid, b_paid = is_paid(a), is_paid(b)
        if a_paid != b_paid:
            return -1 if a_paid else 1

    a_created = a.created_at or EPOCH
    b_created = b.created_at or EPOCH
    if a_created != b_created:
        return -1 if a_created > b_created else 1
    return 0


def rank_orders(orders: Iterable[Order], cache: PaymentStatusCache) -> list[Order]:
    """Return orders in display priority order (stable for full ties)."""
    is_paid = paid_lookup(cache)
    return sorted(orders, key=cmp_to_key(lambda a, b: compare_orders(a, b, is_paid)))
