"""
Customer list derived from orders.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from orderdesk.routers.deps import get_customer_service
from orderdesk.schemas import CustomerListResponse, CustomerResponse, Envelope, Pagination
from orderdesk.services.customers import CustomerService

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=Envelope[CustomerListResponse])
async def list_customers(
    service: Annotated[CustomerService, Depends(get_customer_service)],
    search: Optional[str] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> Envelope[CustomerListResponse]:
    customers, total = await service.list_customers(search=search, page=page, limit=limit)
    return Envelope(
        data=CustomerListResponse(
            customers=[CustomerResponse.model_validate(c) for c in customers],
            pagination=Pagination.of(page, limit, total),
        )
    )
