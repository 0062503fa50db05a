"""
Shipping, scanner and address validation schemas.
"""
from typing import Any, Literal, Optional

from pydantic import Field

from orderdesk.models._fields import Money
from orderdesk.schemas.common import CamelModel
from orderdesk.schemas.order import OrderResponse


class LabelCreate(CamelModel):
    service_type: Literal["Ground", "Priority", "Express"] = "Priority"


class LabelResponse(CamelModel):
    tracking_number: str
    label_url: str
    postage_cost: Money
    carrier: str


class TrackingResponse(CamelModel):
    tracking_number: str
    status: Optional[str] = None
    carrier: Optional[str] = None
    est_delivery_date: Optional[str] = None
    tracking_details: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_tracker(cls, tracker: dict[str, Any]) -> "TrackingResponse":
        return cls(
            tracking_number=tracker.get("tracking_code", ""),
            status=tracker.get("status"),
            carrier=tracker.get("carrier"),
            est_delivery_date=tracker.get("est_delivery_date"),
            tracking_details=tracker.get("tracking_details") or [],
        )


class ScanRequest(CamelModel):
    tracking_number: str = Field(..., min_length=1)


class ScanResponse(CamelModel):
    found: bool
    has_existing_tracking: bool = False
    needs_tracking_assignment: bool = False
    order: Optional[OrderResponse] = None


class AddressIn(CamelModel):
    name: str = ""
    address: str
    city: str
    state: str
    zip: str
    phone: str = ""


class AddressValidationRequest(CamelModel):
    address: AddressIn


class AddressValidationResponse(CamelModel):
    valid: bool
