"""
Dashboard figures computed from placed orders and the catalog.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from orderdesk.models.order import OrderStatus
from orderdesk.models.product import Product
from orderdesk.repositories.order import OrderRepository
from orderdesk.repositories.product import ProductRepository
from orderdesk.services.commission import to_cents

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Stages in which the cart counts as sold
SOLD_STATUSES = frozenset({OrderStatus.PLACED, OrderStatus.COMPLETED})


@dataclass
class DashboardStats:
    total_orders: int
    total_revenue: Decimal
    active_customers: int
    total_products: int
    low_stock_products: int


@dataclass
class DailySales:
    day: str
    amount: Decimal


@dataclass
class SalesData:
    weekly_sales: Decimal
    avg_order_value: Decimal
    daily_sales: list[DailySales]


@dataclass
class ProductSales:
    product: Product
    units_sold: int = 0
    units_by_weight: dict[str, int] = field(default_factory=dict)


class DashboardService:
    def __init__(self, orders: OrderRepository, products: ProductRepository) -> None:
        self.orders = orders
        self.products = products

    async def stats(self) -> DashboardStats:
        orders = await self.orders.find_matching()
        products = await self.products.list_products()
        return DashboardStats(
            total_orders=len(orders),
            total_revenue=to_cents(sum((o.total for o in orders), Decimal("0"))),
            active_customers=len({o.email.lower() for o in orders if o.email}),
            total_products=len(products),
            low_stock_products=sum(1 for p in products if p.is_low_stock),
        )

    async def sales(self, now: Optional[datetime] = None) -> SalesData:
        """Last seven days of sales, one entry per day ending today."""
        now = now or datetime.now(timezone.utc)
        today = now.date()
        week_ago = now - timedelta(days=7)
        orders = await self.orders.find_matching()

        by_date: dict = {today - timedelta(days=offset): Decimal("0") for offset in range(7)}
        weekly = Decimal("0")
        for order in orders:
            if order.created_at is None or not week_ago <= order.created_at <= now:
                continue
            weekly += order.total
            day = order.created_at.astimezone(now.tzinfo or timezone.utc).date()
            if day in by_date:
                by_date[day] += order.total

        revenue = sum((o.total for o in orders), Decimal("0"))
        average = revenue / len(orders) if orders else Decimal("0")

        return SalesData(
            weekly_sales=to_cents(weekly),
            avg_order_value=to_cents(average),
            daily_sales=[
                DailySales(day=WEEKDAYS[day.weekday()], amount=to_cents(by_date[day]))
                for day in sorted(by_date)
            ],
        )

    async def popular_products(self, limit: Optional[int] = None) -> list[ProductSales]:
        """
        Catalog products ranked by units sold, best sellers first.

        Units come from the cart snapshots of placed and completed orders.
        Products that never sold are left out.
        """
        products = await self.products.list_products()
        orders = await self.orders.find_all()

        sales = {product.id: ProductSales(product) for product in products}
        for order in orders:
            if order.status not in SOLD_STATUSES:
                continue
            for item in order.cart_items:
                entry = sales.get(item.product_id)
                if entry is None:
                    continue
                weight = item.selected_weight or "default"
                entry.units_sold += item.quantity
                entry.units_by_weight[weight] = entry.units_by_weight.get(weight, 0) + item.quantity

        ranked = sorted(
            (entry for entry in sales.values() if entry.units_sold > 0),
            key=lambda entry: entry.units_sold,
            reverse=True,
        )
        return ranked[:limit] if limit else ranked
