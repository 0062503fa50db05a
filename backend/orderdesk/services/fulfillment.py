"""
Fulfillment state derivation.

Staff record how many units of each product+weight have shipped; the
order-level ``completed`` / ``partial`` flags are always recomputed from
those per-line counts and written back together with them.
"""
from dataclasses import dataclass
from fractions import Fraction
from typing import Mapping, Optional

from orderdesk.core.config import BUSINESS_RULES, FulfillmentPolicy
from orderdesk.core.errors import PatchValidationError, WriteConflictError
from orderdesk.core.logging import get_logger
from orderdesk.models.order import (
    CartItem,
    FulfillmentKey,
    FulfillmentProgress,
    Order,
    OrderPatch,
)
from orderdesk.repositories.order import OrderRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class FulfillmentState:
    details: dict[FulfillmentKey, FulfillmentProgress]
    progress: Fraction
    completed: bool
    partial: bool

    @property
    def percent(self) -> int:
        return round(self.progress * 100)

    def storage_details(self) -> dict[str, FulfillmentProgress]:
        return {str(key): value for key, value in self.details.items()}


def line_totals(cart_items: list[CartItem]) -> dict[FulfillmentKey, int]:
    """
    Units ordered per fulfillment key.

    Repeated lines with the same product and weight share one entry.
    """
    totals: dict[FulfillmentKey, int] = {}
    for item in cart_items:
        totals[item.key] = totals.get(item.key, 0) + item.quantity
    return totals


def _bounded(key: FulfillmentKey, fulfilled: int, total: int, policy: FulfillmentPolicy) -> int:
    if 0 <= fulfilled <= total:
        return fulfilled
    if policy == FulfillmentPolicy.REJECT:
        raise PatchValidationError(
            f"Fulfilled quantity {fulfilled} for {key} must be between 0 and {total}"
        )
    return max(0, min(fulfilled, total))


def derive_fulfillment(
    cart_items: list[CartItem],
    fulfilled: Mapping[FulfillmentKey, int],
    policy: FulfillmentPolicy = BUSINESS_RULES.fulfillment_policy,
) -> FulfillmentState:
    """
    Compute per-line progress and aggregate flags for an order.

    Every cart line gets an entry (zero if staff left it out); keys that
    are not in the cart are ignored.
    """
    details: dict[FulfillmentKey, FulfillmentProgress] = {}
    for key, total in line_totals(cart_items).items():
        count = _bounded(key, int(fulfilled.get(key, 0)), total, policy)
        details[key] = FulfillmentProgress(fulfilled=count, total=total)

    unknown = set(fulfilled) - set(details)
    if unknown:
        logger.warning("Ignoring fulfillment for items not in cart", keys=sorted(map(str, unknown)))

    shipped = sum(p.fulfilled for p in details.values())
    ordered = sum(p.total for p in details.values())
    progress = Fraction(shipped, ordered) if ordered else Fraction(0)

    return FulfillmentState(
        details=details,
        progress=progress,
        completed=progress == 1,
        partial=0 < progress < 1,
    )


def parse_fulfilled_counts(entries: Mapping[str, int]) -> dict[FulfillmentKey, int]:
    return {FulfillmentKey.parse(raw): int(count) for raw, count in entries.items()}


class FulfillmentService:
    """Persists fulfillment edits for one order at a time."""

    def __init__(
        self,
        orders: OrderRepository,
        policy: FulfillmentPolicy = BUSINESS_RULES.fulfillment_policy,
    ) -> None:
        self.orders = orders
        self.policy = policy

    async def save(
        self,
        order_id: str,
        fulfilled: Mapping[FulfillmentKey, int],
        *,
        tracking: Optional[str] = None,
        expected_version: Optional[str] = None,
    ) -> Order:
        """
        Record shipped quantities and return the order as re-read from the store.

        Derived flags, per-line details and the tracking code (when given)
        go out in one write. With ``expected_version`` the write is refused
        if the order changed since the editor loaded it; without it the
        last writer wins.
        """
        order = await self.orders.get(order_id)
        if expected_version is not None and order.version != expected_version:
            raise WriteConflictError(order_id, expected_version, order.version)

        state = derive_fulfillment(order.cart_items, fulfilled, self.policy)

        patch = OrderPatch(
            partial_details=state.storage_details(),
            completed=state.completed,
            partial=state.partial,
        )
        if tracking:
            patch.tracking = tracking.strip()

        updated = await self.orders.update(order_id, patch)
        logger.info(
            "Fulfillment saved",
            order_id=order_id,
            progress=state.percent,
            completed=state.completed,
            partial=state.partial,
        )
        return updated

    async def set_flags(
        self,
        order_id: str,
        *,
        completed: Optional[bool] = None,
        partial: Optional[bool] = None,
    ) -> Order:
        """
        Directly toggle the order-level flags without per-line detail.

        Marking an order completed clears ``partial`` unless the caller sends
        it too. ``partial_details`` is left as stored and is not reconciled
        with the new flags.
        """
        order = await self.orders.get(order_id)
        patch = OrderPatch()
        if completed is not None:
            patch.completed = completed
            if completed and partial is None:
                patch.partial = False
        if partial is not None:
            patch.partial = partial
        patch.validate_for(order)
        return await self.orders.update(order_id, patch)
