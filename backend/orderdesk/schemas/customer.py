"""
Customer rollup schemas.
"""
from datetime import datetime
from typing import Optional

from orderdesk.models._fields import Money
from orderdesk.schemas.common import CamelModel, Pagination


class CustomerOrderResponse(CamelModel):
    id: str
    status: str
    total: Money
    items: int
    created_at: Optional[datetime] = None
    affiliate_code: Optional[str] = None


class CustomerResponse(CamelModel):
    id: str
    firstname: str
    lastname: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip: str
    total_orders: int
    total_spent: Money
    last_order_date: Optional[datetime] = None
    affiliate_codes: list[str]
    orders: list[CustomerOrderResponse]


class CustomerListResponse(CamelModel):
    customers: list[CustomerResponse]
    pagination: Pagination
