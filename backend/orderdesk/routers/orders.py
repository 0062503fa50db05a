"""
Order management API routes.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from orderdesk.core.logging import get_logger
from orderdesk.models.order import OrderStatus
from orderdesk.models.payment import PaymentVerification
from orderdesk.routers.deps import (
    get_fulfillment_service,
    get_order_service,
    get_payment_cache,
    get_payment_verifier,
    get_shipping_service,
    get_triage_service,
)
from orderdesk.schemas import (
    Envelope,
    FlagUpdate,
    LabelCreate,
    LabelResponse,
    NotificationResult,
    OrderListResponse,
    OrderResponse,
    OrderUpdate,
    Pagination,
    PartialFulfillmentRequest,
    TrackingResponse,
)
from orderdesk.services.fulfillment import FulfillmentService, parse_fulfilled_counts
from orderdesk.services.orders import OrderService
from orderdesk.services.payment_cache import PaymentStatusCache
from orderdesk.services.payments import PaymentVerifier
from orderdesk.services.shipping import ShippingService
from orderdesk.services.triage import OrderTriageService

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

ALL_STATUSES = "all"


@router.get("", response_model=Envelope[OrderListResponse])
async def list_orders(
    triage: Annotated[OrderTriageService, Depends(get_triage_service)],
    status: Annotated[str, Query(description="Checkout stage, or 'all'")] = OrderStatus.PLACED.value,
    search: Optional[str] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    verify_payments: Annotated[bool, Query(alias="verifyPayments")] = True,
) -> Envelope[OrderListResponse]:
    """
    Ranked order list for the triage screen.

    Incomplete orders come first, partial before untouched, paid before
    unpaid and newest first. Payment is verified for the returned page only.
    """
    result = await triage.list_orders(
        status=None if status == ALL_STATUSES else OrderStatus(status),
        search=search,
        page=page,
        limit=limit,
        verify_payments=verify_payments,
    )
    return Envelope(
        data=OrderListResponse(
            orders=[
                OrderResponse.from_order(item.order, item.payment_verified, item.payment_status)
                for item in result.orders
            ],
            pagination=Pagination.of(result.page, result.limit, result.total),
        )
    )


@router.get("/{order_id}", response_model=Envelope[OrderResponse])
async def get_order(
    order_id: str,
    service: Annotated[OrderService, Depends(get_order_service)],
    cache: Annotated[PaymentStatusCache, Depends(get_payment_cache)],
) -> Envelope[OrderResponse]:
    order = await service.get(order_id)
    return Envelope(data=OrderResponse.from_order(order, cache.get(order.id)))


@router.patch("/{order_id}", response_model=Envelope[OrderResponse])
async def update_order(
    order_id: str,
    update: OrderUpdate,
    service: Annotated[OrderService, Depends(get_order_service)],
) -> Envelope[OrderResponse]:
    order = await service.update(
        order_id,
        update.to_patch(),
        expected_version=update.expected_version,
    )
    return Envelope(data=OrderResponse.from_order(order), message="Order updated successfully")


@router.patch("/{order_id}/fulfillment", response_model=Envelope[OrderResponse])
async def update_fulfillment_flags(
    order_id: str,
    flags: FlagUpdate,
    fulfillment: Annotated[FulfillmentService, Depends(get_fulfillment_service)],
) -> Envelope[OrderResponse]:
    order = await fulfillment.set_flags(
        order_id,
        completed=flags.completed,
        partial=flags.partial,
    )
    return Envelope(
        data=OrderResponse.from_order(order),
        message="Order fulfillment updated successfully",
    )


@router.put("/{order_id}/partial-fulfillment", response_model=Envelope[OrderResponse])
async def save_partial_fulfillment(
    order_id: str,
    edit: PartialFulfillmentRequest,
    fulfillment: Annotated[FulfillmentService, Depends(get_fulfillment_service)],
) -> Envelope[OrderResponse]:
    """
    Record shipped quantities per line item.

    Completed and partial flags are derived from the quantities and
    saved in the same write, along with the tracking number if given.
    """
    order = await fulfillment.save(
        order_id,
        parse_fulfilled_counts(edit.fulfilled_counts()),
        tracking=edit.tracking,
        expected_version=edit.expected_version,
    )
    return Envelope(
        data=OrderResponse.from_order(order),
        message="Fulfillment saved",
    )


@router.get("/{order_id}/payment-status", response_model=Envelope[PaymentVerification])
async def payment_status(
    order_id: str,
    service: Annotated[OrderService, Depends(get_order_service)],
    verifier: Annotated[PaymentVerifier, Depends(get_payment_verifier)],
) -> Envelope[PaymentVerification]:
    order = await service.get(order_id)
    return Envelope(data=await verifier.verify(order))


@router.post("/{order_id}/send-confirmation", response_model=Envelope[NotificationResult])
async def send_confirmation(
    order_id: str,
    service: Annotated[OrderService, Depends(get_order_service)],
) -> Envelope[NotificationResult]:
    sent, order = await service.send_confirmation(order_id)
    return Envelope(
        data=NotificationResult(sent=sent, order=OrderResponse.from_order(order)),
        message="Confirmation email sent" if sent else "Confirmation email was not sent",
    )


@router.post("/{order_id}/send-shipping", response_model=Envelope[NotificationResult])
async def send_shipping(
    order_id: str,
    service: Annotated[OrderService, Depends(get_order_service)],
) -> Envelope[NotificationResult]:
    sent, order = await service.send_shipping_notice(order_id)
    return Envelope(
        data=NotificationResult(sent=sent, order=OrderResponse.from_order(order)),
        message="Shipping email sent" if sent else "Shipping email was not sent",
    )


@router.post("/{order_id}/shipping-label", response_model=Envelope[LabelResponse])
async def create_shipping_label(
    order_id: str,
    request: LabelCreate,
    shipping: Annotated[ShippingService, Depends(get_shipping_service)],
) -> Envelope[LabelResponse]:
    label = await shipping.create_label(order_id, request.service_type)
    return Envelope(
        data=LabelResponse.model_validate(label),
        message="Shipping label created",
    )


@router.get("/{order_id}/tracking", response_model=Envelope[TrackingResponse])
async def get_tracking(
    order_id: str,
    shipping: Annotated[ShippingService, Depends(get_shipping_service)],
) -> Envelope[TrackingResponse]:
    tracker = await shipping.tracking(order_id)
    return Envelope(data=TrackingResponse.from_tracker(tracker))
