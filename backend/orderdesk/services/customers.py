"""
Customer rollups derived from orders.

There is no customer table; a customer is every order sharing an email.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from orderdesk.models._fields import EPOCH
from orderdesk.models.order import Order
from orderdesk.repositories.order import OrderRepository

CONTACT_FIELDS = ("phone", "address", "city", "state", "zip")
SEARCH_FIELDS = ("firstname", "lastname", "email", "phone", "address", "city", "state")


@dataclass
class CustomerOrder:
    id: str
    status: str
    total: Decimal
    items: int
    created_at: Optional[datetime]
    affiliate_code: Optional[str]


@dataclass
class Customer:
    id: str
    firstname: str
    lastname: str
    email: str
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    total_orders: int = 0
    total_spent: Decimal = Decimal("0")
    last_order_date: Optional[datetime] = None
    affiliate_codes: list[str] = field(default_factory=list)
    orders: list[CustomerOrder] = field(default_factory=list)

    def add(self, order: Order) -> None:
        self.total_orders += 1
        self.total_spent += order.total
        self.orders.append(
            CustomerOrder(
                id=order.id,
                status=order.status.value,
                total=order.total,
                items=order.item_count,
                created_at=order.created_at,
                affiliate_code=order.affiliate_code,
            )
        )
        for name in CONTACT_FIELDS:
            if not getattr(self, name) and getattr(order, name):
                setattr(self, name, getattr(order, name))
        if order.affiliate_code and order.affiliate_code not in self.affiliate_codes:
            self.affiliate_codes.append(order.affiliate_code)
        if order.created_at and (
            self.last_order_date is None or order.created_at > self.last_order_date
        ):
            self.last_order_date = order.created_at

    def matches(self, needle: str) -> bool:
        return any(needle in str(getattr(self, name)).lower() for name in SEARCH_FIELDS)


def rollup_customers(orders: list[Order]) -> list[Customer]:
    """Group orders by lower-cased email, most recent customer first."""
    customers: dict[str, Customer] = {}
    for order in orders:
        if not order.email:
            continue
        key = order.email.strip().lower()
        customer = customers.get(key)
        if customer is None:
            customer = customers[key] = Customer(
                id=key,
                firstname=order.firstname,
                lastname=order.lastname,
                email=order.email,
            )
        customer.add(order)

    return sorted(
        customers.values(),
        key=lambda c: c.last_order_date or EPOCH,
        reverse=True,
    )


class CustomerService:
    def __init__(self, orders: OrderRepository) -> None:
        self.orders = orders

    async def list_customers(
        self,
        *,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Customer], int]:
        """Returns (customers, total_count) tuple."""
        customers = rollup_customers(await self.orders.find_all())
        if search:
            needle = search.lower()
            customers = [c for c in customers if c.matches(needle)]
        start = (max(page, 1) - 1) * limit
        return customers[start:start + limit], len(customers)
