"""
Order triage: fetch, rank, paginate and check payments for one page.
"""
import asyncio
from dataclasses import dataclass
from typing import Optional

from orderdesk.core.config import settings
from orderdesk.core.logging import get_logger
from orderdesk.models.order import Order, OrderStatus
from orderdesk.models.payment import PaymentVerification
from orderdesk.repositories.order import OrderRepository
from orderdesk.services.payment_cache import PaymentStatusCache
from orderdesk.services.payments import PaymentVerifier
from orderdesk.services.ranking import rank_orders

logger = get_logger(__name__)


@dataclass
class TriagedOrder:
    order: Order
    payment_verified: bool
    payment_status: Optional[str] = None


@dataclass
class TriagePage:
    orders: list[TriagedOrder]
    total: int
    page: int
    limit: int


class OrderTriageService:
    """
    Produces the staff order list.

    Ranking needs the whole matching set, so every call fetches all
    matching orders and slices the page afterwards. Payment checks are
    only made for the orders on the page, at most
    ``concurrency`` at a time, and their verdicts feed later rankings
    through the shared cache.
    """

    def __init__(
        self,
        orders: OrderRepository,
        verifier: PaymentVerifier,
        cache: PaymentStatusCache,
        concurrency: Optional[int] = None,
    ) -> None:
        self.orders = orders
        self.verifier = verifier
        self.cache = cache
        self.concurrency = max(1, concurrency or settings.payment_check_concurrency)

    async def list_orders(
        self,
        *,
        status: Optional[OrderStatus] = OrderStatus.PLACED,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        verify_payments: bool = True,
    ) -> TriagePage:
        page = max(1, page)
        limit = max(1, limit)

        matching = await self.orders.find_matching(status=status, search=search)
        ranked = rank_orders(matching, self.cache)

        start = (page - 1) * limit
        window = ranked[start:start + limit]

        if verify_payments and window:
            verdicts = await self._verify_page(window)
        else:
            verdicts = {}

        items = []
        for order in window:
            verdict = verdicts.get(order.id)
            if verdict is not None:
                items.append(TriagedOrder(order, verdict.verified, verdict.status))
            else:
                cached = self.cache.get(order.id)
                paid = cached if cached is not None else order.has_payment_intent
                items.append(TriagedOrder(order, paid))

        logger.info(
            "Listed orders",
            status=status.value if status else None,
            matching=len(matching),
            page=page,
            verified=len(verdicts),
        )
        return TriagePage(orders=items, total=len(matching), page=page, limit=limit)

    async def _verify_page(self, orders: list[Order]) -> dict[str, PaymentVerification]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def check(order: Order) -> tuple[str, PaymentVerification]:
            async with semaphore:
                return order.id, await self.verifier.verify(order)

        results = await asyncio.gather(*(check(order) for order in orders))
        return dict(results)
