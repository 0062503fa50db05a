"""
Shared pytest fixtures.

Settings are read at import time, so the environment is prepared before
any ``orderdesk`` module is imported.
"""
import os

from passlib.hash import pbkdf2_sha256

STAFF_EMAIL = "staff@orderdesk.test"
STAFF_PASSWORD = "correct horse battery staple"

os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-jwt")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ["STAFF_EMAIL"] = STAFF_EMAIL
os.environ["STAFF_PASSWORD_HASH"] = pbkdf2_sha256.hash(STAFF_PASSWORD)
os.environ["AIRTABLE_API_KEY"] = "key-test"
os.environ["AIRTABLE_BASE_ID"] = "appTest"

from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from fakes import (  # noqa: E402
    FakeAffiliateRepository,
    FakeOrderRepository,
    FakeProductRepository,
    FakeStripe,
)
from orderdesk.core.security import create_access_token  # noqa: E402
from orderdesk.main import create_app  # noqa: E402
from orderdesk.routers import deps  # noqa: E402
from orderdesk.services.easypost_client import EasyPostClient  # noqa: E402
from orderdesk.services.notification_service import NotificationService  # noqa: E402
from orderdesk.services.payment_cache import PaymentStatusCache  # noqa: E402


@pytest.fixture
def order_repo() -> FakeOrderRepository:
    return FakeOrderRepository()


@pytest.fixture
def product_repo() -> FakeProductRepository:
    return FakeProductRepository()


@pytest.fixture
def affiliate_repo() -> FakeAffiliateRepository:
    return FakeAffiliateRepository()


@pytest.fixture
def stripe() -> FakeStripe:
    return FakeStripe()


@pytest.fixture
def payment_cache() -> PaymentStatusCache:
    return PaymentStatusCache(max_entries=100, ttl_seconds=60)


@pytest.fixture
def carrier() -> AsyncMock:
    return AsyncMock(spec=EasyPostClient)


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock(spec=NotificationService)


@pytest.fixture
def app(
    order_repo,
    product_repo,
    affiliate_repo,
    stripe,
    carrier,
    notifier,
) -> FastAPI:
    """Application with every external system replaced by an in-memory fake."""
    application = create_app()
    application.dependency_overrides.update({
        deps.get_order_repository: lambda: order_repo,
        deps.get_product_repository: lambda: product_repo,
        deps.get_affiliate_repository: lambda: affiliate_repo,
        deps.get_stripe_client: lambda: stripe,
        deps.get_easypost_client: lambda: carrier,
        deps.get_notification_service: lambda: notifier,
    })
    return application


@pytest.fixture
def client(app: FastAPI):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    token = create_access_token({"sub": STAFF_EMAIL, "role": "staff"})
    return {"Authorization": f"Bearer {token}"}
