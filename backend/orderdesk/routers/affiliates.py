"""
Affiliate management and commission reporting routes.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from orderdesk.routers.deps import get_affiliate_service
from orderdesk.schemas import (
    AffiliateCreate,
    AffiliateOrderListResponse,
    AffiliateOrderResponse,
    AffiliateResponse,
    AffiliateStatsResponse,
    CommissionResponse,
    Envelope,
    OrderResponse,
    Pagination,
)
from orderdesk.services.affiliates import AffiliateService

router = APIRouter(prefix="/affiliates", tags=["affiliates"])


@router.get("", response_model=Envelope[list[AffiliateResponse]])
async def list_affiliates(
    service: Annotated[AffiliateService, Depends(get_affiliate_service)],
    search: Optional[str] = None,
    status_filter: Annotated[Optional[str], Query(alias="status", pattern="^(active|inactive)$")] = None,
) -> Envelope[list[AffiliateResponse]]:
    summaries = await service.list_affiliates(search=search, status=status_filter)
    return Envelope(
        data=[AffiliateResponse.from_affiliate(s.affiliate, s.active) for s in summaries]
    )


@router.post("", response_model=Envelope[AffiliateResponse], status_code=status.HTTP_201_CREATED)
async def create_affiliate(
    request: AffiliateCreate,
    service: Annotated[AffiliateService, Depends(get_affiliate_service)],
) -> Envelope[AffiliateResponse]:
    affiliate = await service.create(request.to_affiliate())
    return Envelope(data=AffiliateResponse.from_affiliate(affiliate), message="Affiliate created")


@router.get("/{code}/orders", response_model=Envelope[AffiliateOrderListResponse])
async def affiliate_orders(
    code: str,
    service: Annotated[AffiliateService, Depends(get_affiliate_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> Envelope[AffiliateOrderListResponse]:
    rows, total = await service.orders_for(code, page=page, limit=limit)
    return Envelope(
        data=AffiliateOrderListResponse(
            orders=[
                AffiliateOrderResponse(
                    order=OrderResponse.from_order(row.order),
                    commission=CommissionResponse.model_validate(row.commission),
                )
                for row in rows
            ],
            pagination=Pagination.of(page, limit, total),
        )
    )


@router.get("/{code}/stats", response_model=Envelope[AffiliateStatsResponse])
async def affiliate_stats(
    code: str,
    service: Annotated[AffiliateService, Depends(get_affiliate_service)],
) -> Envelope[AffiliateStatsResponse]:
    stats = await service.stats(code)
    return Envelope(data=AffiliateStatsResponse.model_validate(stats))
