"""
Error taxonomy for the order desk.

Every failure the API reports maps to one ErrorKind, which in turn
decides the HTTP status returned to the dashboard.
"""
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Closed set of failure categories surfaced to callers."""

    NOT_FOUND = "not_found"
    EXTERNAL_SERVICE = "external_service"
    VALIDATION = "validation"
    WRITE_CONFLICT = "write_conflict"
    UNAUTHORIZED = "unauthorized"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.EXTERNAL_SERVICE: 502,
    ErrorKind.VALIDATION: 422,
    ErrorKind.WRITE_CONFLICT: 409,
    ErrorKind.UNAUTHORIZED: 401,
}


class OrderDeskError(Exception):
    """Base exception for all order desk errors."""

    kind: ErrorKind = ErrorKind.EXTERNAL_SERVICE

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "error": self.kind.value,
            "message": self.message,
        }


class NotFoundError(OrderDeskError):
    """Raised when a requested order, product or affiliate does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, entity_id: Any) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ExternalServiceError(OrderDeskError):
    """Raised when a third-party API is unreachable or returns an error."""

    kind = ErrorKind.EXTERNAL_SERVICE
    service: str = "external"

    def __init__(self, message: str | list, status: Optional[int] = None) -> None:
        if isinstance(message, list):
            message = "; ".join(str(e.get("message", e)) for e in message)
        self.status = status
        super().__init__(message)


class AirtableAPIError(ExternalServiceError):
    service = "airtable"


class StripeAPIError(ExternalServiceError):
    service = "stripe"


class LabelPurchaseError(ExternalServiceError):
    service = "easypost"


class CarrierAccountError(LabelPurchaseError):
    """The carrier account attached to the EasyPost key is missing or invalid."""


class EmailDeliveryError(ExternalServiceError):
    service = "resend"


class PatchValidationError(OrderDeskError):
    """Raised when an order or product patch is malformed."""

    kind = ErrorKind.VALIDATION


class WriteConflictError(OrderDeskError):
    """Raised when the record changed since the editor last read it."""

    kind = ErrorKind.WRITE_CONFLICT

    def __init__(self, order_id: str, expected: str, actual: Optional[str]) -> None:
        self.order_id = order_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Order {order_id} was modified by someone else "
            f"(expected version {expected}, found {actual})"
        )


class AuthenticationError(OrderDeskError):
    kind = ErrorKind.UNAUTHORIZED
