"""
Pydantic schemas for API request/response validation.
"""
from orderdesk.schemas.affiliate import (
    AffiliateCreate,
    AffiliateOrderListResponse,
    AffiliateOrderResponse,
    AffiliateResponse,
    AffiliateStatsResponse,
    CommissionResponse,
)
from orderdesk.schemas.auth import LoginRequest, TokenResponse
from orderdesk.schemas.common import CamelModel, Envelope, Pagination
from orderdesk.schemas.customer import CustomerListResponse, CustomerResponse
from orderdesk.schemas.dashboard import (
    DashboardStatsResponse,
    PopularProductResponse,
    SalesDataResponse,
)
from orderdesk.schemas.order import (
    FlagUpdate,
    NotificationResult,
    OrderListResponse,
    OrderResponse,
    OrderUpdate,
    PartialFulfillmentRequest,
)
from orderdesk.schemas.payment import PaymentIntentCreate, PaymentIntentResponse
from orderdesk.schemas.product import ProductResponse, ProductUpdate
from orderdesk.schemas.shipping import (
    AddressValidationRequest,
    AddressValidationResponse,
    LabelCreate,
    LabelResponse,
    ScanRequest,
    ScanResponse,
    TrackingResponse,
)

__all__ = [
    "CamelModel",
    "Envelope",
    "Pagination",
    "OrderResponse",
    "OrderListResponse",
    "OrderUpdate",
    "FlagUpdate",
    "PartialFulfillmentRequest",
    "NotificationResult",
    "LabelCreate",
    "LabelResponse",
    "TrackingResponse",
    "ScanRequest",
    "ScanResponse",
    "AddressValidationRequest",
    "AddressValidationResponse",
    "PaymentIntentCreate",
    "PaymentIntentResponse",
    "ProductResponse",
    "ProductUpdate",
    "CustomerResponse",
    "CustomerListResponse",
    "AffiliateResponse",
    "AffiliateCreate",
    "AffiliateOrderResponse",
    "AffiliateOrderListResponse",
    "AffiliateStatsResponse",
    "CommissionResponse",
    "DashboardStatsResponse",
    "PopularProductResponse",
    "SalesDataResponse",
    "LoginRequest",
    "TokenResponse",
]
