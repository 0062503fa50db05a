"""
Middleware package.
"""
from orderdesk.middleware.error_handler import ErrorHandlerMiddleware, order_desk_error_handler
from orderdesk.middleware.request_id import RequestIdMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestIdMiddleware",
    "order_desk_error_handler",
]
