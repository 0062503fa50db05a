"""
OrderDesk API - Main Application Entry Point.

Staff back office for fulfilling Airtable-backed storefront orders.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orderdesk.core.config import settings
from orderdesk.core.errors import OrderDeskError
from orderdesk.core.logging import configure_logging, get_logger
from orderdesk.middleware import (
    ErrorHandlerMiddleware,
    RequestIdMiddleware,
    order_desk_error_handler,
)
from orderdesk.routers import (
    affiliates_router,
    auth_router,
    customers_router,
    dashboard_router,
    health_router,
    orders_router,
    payments_router,
    products_router,
    shipping_router,
)
from orderdesk.routers.deps import require_staff
from orderdesk.services.payment_cache import PaymentStatusCache

# Configure logging before anything else
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(
        "Starting application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    if not (settings.airtable_api_key and settings.airtable_base_id):
        logger.warning("Airtable is not configured; order routes will fail")

    # Initialize Sentry if configured
    if settings.sentry_dsn:
        import sentry_sdk

        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )
        logger.info("Sentry initialized")

    yield

    logger.info("Shutting down application", cached_payments=len(app.state.payment_cache))


def create_app() -> FastAPI:
    """
    Application factory function.
    Creates and configures the FastAPI application.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Order triage, fulfillment and affiliate reporting API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.payment_cache = PaymentStatusCache(
        max_entries=settings.payment_cache_max_entries,
        ttl_seconds=settings.payment_cache_ttl_seconds,
    )

    app.add_exception_handler(OrderDeskError, order_desk_error_handler)

    # Add middleware (order matters - first added = innermost)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "X-Request-ID",
        ],
    )

    staff_only = [Depends(require_staff)]

    app.include_router(health_router)
    app.include_router(auth_router, prefix="/api")
    app.include_router(orders_router, prefix="/api", dependencies=staff_only)
    app.include_router(shipping_router, prefix="/api", dependencies=staff_only)
    app.include_router(payments_router, prefix="/api", dependencies=staff_only)
    app.include_router(products_router, prefix="/api", dependencies=staff_only)
    app.include_router(customers_router, prefix="/api", dependencies=staff_only)
    app.include_router(affiliates_router, prefix="/api", dependencies=staff_only)
    app.include_router(dashboard_router, prefix="/api", dependencies=staff_only)

    logger.info(
        "Application created",
        routes=len(app.routes),
        cors_origins=len(settings.allowed_origins),
    )

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "orderdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
