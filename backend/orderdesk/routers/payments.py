"""
Stripe payment intent creation.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status

from orderdesk.routers.deps import get_payment_service
from orderdesk.schemas import Envelope, PaymentIntentCreate, PaymentIntentResponse
from orderdesk.services.payments import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/intent",
    response_model=Envelope[PaymentIntentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_payment_intent(
    request: PaymentIntentCreate,
    payments: Annotated[PaymentService, Depends(get_payment_service)],
) -> Envelope[PaymentIntentResponse]:
    """
    Create a card payment intent, optionally tied to an order.

    The intent id is recorded on the order so later payment checks can
    retrieve it directly.
    """
    intent = await payments.create_intent(
        request.amount,
        order_id=request.order_id,
        customer_email=request.customer_email,
        metadata=request.metadata,
    )
    return Envelope(data=PaymentIntentResponse(**intent))
