"""
Affiliate schemas.
"""
from decimal import Decimal
from typing import Optional

from pydantic import Field

from orderdesk.models._fields import Money
from orderdesk.models.affiliate import Affiliate
from orderdesk.schemas.common import CamelModel, Pagination
from orderdesk.schemas.order import OrderResponse


class AffiliateResponse(CamelModel):
    code: str
    name: str
    first_name: str
    last_name: str
    email: str
    phone: str
    share: Optional[Money] = None
    discount: Money
    payout_method: str
    active: bool = False

    @classmethod
    def from_affiliate(cls, affiliate: Affiliate, active: bool = False) -> "AffiliateResponse":
        return cls(
            **affiliate.model_dump(exclude={"record_id"}),
            name=affiliate.name,
            active=active,
        )


class AffiliateCreate(CamelModel):
    code: str = Field(..., min_length=1, max_length=64)
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    share: Optional[Decimal] = Field(None, ge=0, le=100)
    discount: Decimal = Field(Decimal("0"), ge=0, le=100)
    payout_method: str = ""

    def to_affiliate(self) -> Affiliate:
        return Affiliate(**self.model_dump())


class CommissionResponse(CamelModel):
    items_total: Money
    discount_amount: Money
    subtotal: Money
    commission_base: Money
    commission: Money


class AffiliateOrderResponse(CamelModel):
    order: OrderResponse
    commission: CommissionResponse


class AffiliateOrderListResponse(CamelModel):
    orders: list[AffiliateOrderResponse]
    pagination: Pagination


class AffiliateStatsResponse(CamelModel):
    total_orders: int
    total_sales: Money
    total_commission: Money
