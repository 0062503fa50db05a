"""
Dashboard Pydantic schemas.
"""
from orderdesk.models._fields import Money
from orderdesk.models.product import Product
from orderdesk.schemas.common import CamelModel
from orderdesk.schemas.product import ProductResponse


class DashboardStatsResponse(CamelModel):
    total_orders: int
    total_revenue: Money
    active_customers: int
    total_products: int
    low_stock_products: int


class DailySalesResponse(CamelModel):
    day: str
    amount: Money


class SalesDataResponse(CamelModel):
    weekly_sales: Money
    avg_order_value: Money
    daily_sales: list[DailySalesResponse]


class PopularProductResponse(ProductResponse):
    units_sold: int
    units_by_weight: dict[str, int]

    @classmethod
    def from_sales(
        cls,
        product: Product,
        units_sold: int,
        units_by_weight: dict[str, int],
    ) -> "PopularProductResponse":
        listing = ProductResponse.from_product(product)
        return cls(**listing.model_dump(), units_sold=units_sold, units_by_weight=units_by_weight)
