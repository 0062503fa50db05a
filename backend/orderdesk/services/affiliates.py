"""
Affiliate reporting: commission per order and per affiliate.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from orderdesk.core.config import BUSINESS_RULES, BusinessRules
from orderdesk.core.errors import NotFoundError, PatchValidationError
from orderdesk.core.logging import get_logger
from orderdesk.models._fields import EPOCH
from orderdesk.models.affiliate import Affiliate
from orderdesk.models.order import Order
from orderdesk.repositories.affiliate import AffiliateRepository
from orderdesk.repositories.order import OrderRepository
from orderdesk.services.commission import (
    CommissionBreakdown,
    compute_commission,
    order_items_total,
    to_cents,
)

logger = get_logger(__name__)

ACTIVE_WINDOW = timedelta(days=30)


@dataclass
class AffiliateSummary:
    affiliate: Affiliate
    active: bool


@dataclass
class AffiliateOrder:
    order: Order
    commission: CommissionBreakdown


@dataclass
class AffiliateStats:
    total_orders: int
    total_sales: Decimal
    total_commission: Decimal


class AffiliateService:
    def __init__(
        self,
        affiliates: AffiliateRepository,
        orders: OrderRepository,
        rules: BusinessRules = BUSINESS_RULES,
    ) -> None:
        self.affiliates = affiliates
        self.orders = orders
        self.rules = rules

    def share_of(self, affiliate: Affiliate) -> Decimal:
        return affiliate.share if affiliate.share is not None else self.rules.default_affiliate_share

    def commission_for(self, order: Order, affiliate: Affiliate) -> CommissionBreakdown:
        return compute_commission(
            order_items_total(order.cart_items),
            affiliate.discount,
            self.share_of(affiliate),
            self.rules,
        )

    async def _require(self, code: str) -> Affiliate:
        affiliate = await self.affiliates.get_by_code(code)
        if affiliate is None:
            raise NotFoundError("Affiliate", code)
        return affiliate

    async def list_affiliates(
        self,
        *,
        search: Optional[str] = None,
        status: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[AffiliateSummary]:
        """Affiliates flagged active when they referred an order in the last 30 days."""
        now = now or datetime.now(timezone.utc)
        affiliates = await self.affiliates.list_affiliates()
        orders = await self.orders.find_matching()

        recent_codes = {
            order.affiliate_code.lower()
            for order in orders
            if order.affiliate_code and order.created_at and now - order.created_at <= ACTIVE_WINDOW
        }

        summaries = [
            AffiliateSummary(affiliate, affiliate.code.lower() in recent_codes)
            for affiliate in affiliates
        ]
        if search:
            needle = search.lower()
            summaries = [
                s for s in summaries
                if needle in s.affiliate.code.lower()
                or needle in s.affiliate.name.lower()
                or needle in s.affiliate.email.lower()
            ]
        if status:
            want_active = status.lower() == "active"
            summaries = [s for s in summaries if s.active == want_active]
        return summaries

    async def create(self, affiliate: Affiliate) -> Affiliate:
        if not affiliate.code.strip():
            raise PatchValidationError("Affiliate code is required")
        if await self.affiliates.get_by_code(affiliate.code) is not None:
            raise PatchValidationError(f"Affiliate code already exists: {affiliate.code}")
        created = await self.affiliates.create(affiliate)
        logger.info("Affiliate created", code=created.code)
        return created

    async def orders_for(
        self,
        code: str,
        *,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[AffiliateOrder], int]:
        """Returns (orders with commission, total_count), newest first."""
        affiliate = await self._require(code)
        orders = sorted(
            await self.orders.find_by_affiliate(code),
            key=lambda o: o.created_at or EPOCH,
            reverse=True,
        )
        start = (max(page, 1) - 1) * limit
        return [
            AffiliateOrder(order, self.commission_for(order, affiliate))
            for order in orders[start:start + limit]
        ], len(orders)

    async def stats(self, code: str) -> AffiliateStats:
        affiliate = await self._require(code)
        orders = await self.orders.find_by_affiliate(code)
        total_commission = sum(
            (self.commission_for(order, affiliate).commission for order in orders),
            Decimal("0"),
        )
        return AffiliateStats(
            total_orders=len(orders),
            total_sales=to_cents(sum((order.total for order in orders), Decimal("0"))),
            total_commission=to_cents(total_commission),
        )
