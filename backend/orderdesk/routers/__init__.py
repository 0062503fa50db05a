"""
API routers package.
"""
from orderdesk.routers.affiliates import router as affiliates_router
from orderdesk.routers.auth import router as auth_router
from orderdesk.routers.customers import router as customers_router
from orderdesk.routers.dashboard import router as dashboard_router
from orderdesk.routers.health import router as health_router
from orderdesk.routers.orders import router as orders_router
from orderdesk.routers.payments import router as payments_router
from orderdesk.routers.products import router as products_router
from orderdesk.routers.shipping import router as shipping_router

__all__ = [
    "health_router",
    "auth_router",
    "orders_router",
    "shipping_router",
    "payments_router",
    "products_router",
    "customers_router",
    "affiliates_router",
    "dashboard_router",
]
