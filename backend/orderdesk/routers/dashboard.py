"""
Dashboard API routes.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from orderdesk.routers.deps import get_dashboard_service
from orderdesk.schemas import (
    DashboardStatsResponse,
    Envelope,
    PopularProductResponse,
    SalesDataResponse,
)
from orderdesk.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=Envelope[DashboardStatsResponse])
async def get_dashboard_stats(
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> Envelope[DashboardStatsResponse]:
    """Order, revenue, customer and stock counts."""
    stats = await service.stats()
    return Envelope(data=DashboardStatsResponse.model_validate(stats))


@router.get("/sales", response_model=Envelope[SalesDataResponse])
async def get_sales_data(
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> Envelope[SalesDataResponse]:
    """Sales for the last seven days."""
    sales = await service.sales()
    return Envelope(data=SalesDataResponse.model_validate(sales))


@router.get("/popular-products", response_model=Envelope[list[PopularProductResponse]])
async def get_popular_products(
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
    limit: Annotated[Optional[int], Query(ge=1, le=50)] = None,
) -> Envelope[list[PopularProductResponse]]:
    """Products ranked by units sold, with a per-weight breakdown."""
    ranked = await service.popular_products(limit)
    return Envelope(data=[
        PopularProductResponse.from_sales(entry.product, entry.units_sold, entry.units_by_weight)
        for entry in ranked
    ])
