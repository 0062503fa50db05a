"""
Core package containing configuration, errors, security, and logging.
"""
from orderdesk.core.config import BUSINESS_RULES, BusinessRules, FulfillmentPolicy, settings
from orderdesk.core.errors import (
    ErrorKind,
    NotFoundError,
    OrderDeskError,
    PatchValidationError,
    WriteConflictError,
)
from orderdesk.core.logging import configure_logging, get_logger

__all__ = [
    "settings",
    "BUSINESS_RULES",
    "BusinessRules",
    "FulfillmentPolicy",
    "ErrorKind",
    "OrderDeskError",
    "NotFoundError",
    "PatchValidationError",
    "WriteConflictError",
    "configure_logging",
    "get_logger",
]
