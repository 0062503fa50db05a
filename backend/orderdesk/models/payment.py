"""
Payment verification result returned by the payment oracle.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from orderdesk.models._fields import Money


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaymentDetails(_CamelModel):
    payment_id: str
    amount: Money
    currency: str
    method: str
    created_at: datetime


class PaymentMatch(_CamelModel):
    email_match: bool
    amount_match: bool
    name_match: bool = False
    expected_amount: Money
    actual_amount: Money
    payment_name: Optional[str] = None
    total_matches: int = 1

    @property
    def amount_difference(self) -> Decimal:
        return abs(self.expected_amount - self.actual_amount)


class PaymentVerification(_CamelModel):
    verified: bool
    status: str
    message: str = ""
    details: Optional[PaymentDetails] = None
    match: Optional[PaymentMatch] = None
