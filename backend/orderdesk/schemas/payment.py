"""
Payment intent schemas.
"""
from decimal import Decimal
from typing import Optional

from pydantic import Field

from orderdesk.schemas.common import CamelModel


class PaymentIntentCreate(CamelModel):
    amount: Decimal = Field(..., gt=0)
    order_id: Optional[str] = None
    customer_email: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)


class PaymentIntentResponse(CamelModel):
    client_secret: Optional[str] = None
    payment_intent_id: str
