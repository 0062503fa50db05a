"""
FastAPI dependencies: external clients, repositories, services and auth.

Every dependency here is overridable through ``app.dependency_overrides``.
"""
from typing import Annotated, Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from orderdesk.core.config import BUSINESS_RULES, settings
from orderdesk.core.errors import AuthenticationError
from orderdesk.core.security import decode_access_token
from orderdesk.repositories import AffiliateRepository, OrderRepository, ProductRepository
from orderdesk.services import (
    AirtableClient,
    EasyPostClient,
    NotificationService,
    PaymentStatusCache,
    StripeClient,
)
from orderdesk.services.affiliates import AffiliateService
from orderdesk.services.customers import CustomerService
from orderdesk.services.dashboard import DashboardService
from orderdesk.services.fulfillment import FulfillmentService
from orderdesk.services.orders import OrderService
from orderdesk.services.payments import PaymentService, PaymentVerifier
from orderdesk.services.shipping import ShippingService
from orderdesk.services.triage import OrderTriageService

bearer_scheme = HTTPBearer(auto_error=False)


async def require_staff(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> dict[str, Any]:
    """Reject requests without a valid staff session token."""
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    payload = decode_access_token(credentials.credentials)
    if payload is None or payload.get("role") != "staff":
        raise AuthenticationError("Invalid or expired token")
    return payload


# External clients

def get_airtable_client() -> AirtableClient:
    return AirtableClient()


def get_stripe_client() -> StripeClient:
    return StripeClient()


def get_easypost_client() -> EasyPostClient:
    return EasyPostClient()


def get_notification_service() -> NotificationService:
    return NotificationService()


def get_payment_cache(request: Request) -> PaymentStatusCache:
    """The single process-wide cache created with the app."""
    return request.app.state.payment_cache


# Repositories

def get_order_repository(
    client: Annotated[AirtableClient, Depends(get_airtable_client)],
) -> OrderRepository:
    return OrderRepository(client)


def get_product_repository(
    client: Annotated[AirtableClient, Depends(get_airtable_client)],
) -> ProductRepository:
    return ProductRepository(client)


def get_affiliate_repository(
    client: Annotated[AirtableClient, Depends(get_airtable_client)],
) -> AffiliateRepository:
    return AffiliateRepository(client)


# Services

def get_payment_verifier(
    stripe: Annotated[StripeClient, Depends(get_stripe_client)],
    cache: Annotated[PaymentStatusCache, Depends(get_payment_cache)],
    affiliates: Annotated[AffiliateRepository, Depends(get_affiliate_repository)],
) -> PaymentVerifier:
    return PaymentVerifier(stripe, cache, affiliates)


def get_triage_service(
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
    verifier: Annotated[PaymentVerifier, Depends(get_payment_verifier)],
    cache: Annotated[PaymentStatusCache, Depends(get_payment_cache)],
) -> OrderTriageService:
    return OrderTriageService(orders, verifier, cache, settings.payment_check_concurrency)


def get_fulfillment_service(
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
) -> FulfillmentService:
    return FulfillmentService(orders, BUSINESS_RULES.fulfillment_policy)


def get_order_service(
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
) -> OrderService:
    return OrderService(orders, notifier)


def get_payment_service(
    stripe: Annotated[StripeClient, Depends(get_stripe_client)],
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
    cache: Annotated[PaymentStatusCache, Depends(get_payment_cache)],
) -> PaymentService:
    return PaymentService(stripe, orders, cache)


def get_shipping_service(
    carrier: Annotated[EasyPostClient, Depends(get_easypost_client)],
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
) -> ShippingService:
    return ShippingService(carrier, orders)


def get_customer_service(
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
) -> CustomerService:
    return CustomerService(orders)


def get_affiliate_service(
    affiliates: Annotated[AffiliateRepository, Depends(get_affiliate_repository)],
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
) -> AffiliateService:
    return AffiliateService(affiliates, orders)


def get_dashboard_service(
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
    products: Annotated[ProductRepository, Depends(get_product_repository)],
) -> DashboardService:
    return DashboardService(orders, products)


StaffUser = Annotated[dict[str, Any], Depends(require_staff)]
