"""
Order model - one checkout session from the carts table.
"""
import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderdesk.core.errors import PatchValidationError
from orderdesk.models._fields import (
    as_bool,
    as_datetime,
    as_decimal,
    as_text,
    first_of,
    load_json,
)


class OrderStatus(str, Enum):
    """Checkout workflow stages."""

    PERSONAL_INFO = "personal_info"
    SHIPPING_INFO = "shipping_info"
    # Stored as "payment_selection": the customer finished checkout and
    # the order is placed, paid or awaiting payment.
    PLACED = "payment_selection"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "OrderStatus":
        return cls.UNKNOWN


STATUS_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PERSONAL_INFO: {OrderStatus.SHIPPING_INFO, OrderStatus.CANCELLED},
    OrderStatus.SHIPPING_INFO: {
        OrderStatus.PERSONAL_INFO,
        OrderStatus.PLACED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PLACED: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
    # Records with an unrecognised stage may be repaired to any real stage.
    OrderStatus.UNKNOWN: {
        OrderStatus.PERSONAL_INFO,
        OrderStatus.SHIPPING_INFO,
        OrderStatus.PLACED,
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
    },
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if current == target:
        return True
    return target in STATUS_TRANSITIONS[current]


class FulfillmentKey(NamedTuple):
    """Granularity at which shipped quantities are tracked: product + weight."""

    product_id: int
    weight: str

    def __str__(self) -> str:
        return f"{self.product_id}-{self.weight}"

    @classmethod
    def parse(cls, raw: str) -> "FulfillmentKey":
        product_id, _, weight = str(raw).partition("-")
        try:
            return cls(int(product_id), weight)
        except ValueError:
            raise PatchValidationError(f"Invalid fulfillment key: {raw!r}")


class FulfillmentProgress(BaseModel):
    fulfilled: int = 0
    total: int = 0


class CartProduct(BaseModel):
    """Denormalized product snapshot taken at checkout; may be stale."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: str = "Unknown Product"
    price: Decimal = Decimal("0")
    type: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> Decimal:
        return as_decimal(value)


class CartItem(BaseModel):
    """One product + weight + quantity line inside an order."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    product_id: int = Field(alias="productId")
    selected_weight: str = Field("", alias="selectedWeight")
    quantity: int = 1
    product: Optional[CartProduct] = None

    @field_validator("selected_weight", mode="before")
    @classmethod
    def _weight_text(cls, value: Any) -> str:
        return as_text(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def _positive_quantity(cls, value: Any) -> int:
        try:
            return max(1, int(value))
        except (TypeError, ValueError):
            return 1

    @property
    def key(self) -> FulfillmentKey:
        return FulfillmentKey(self.product_id, self.selected_weight)

    @property
    def unit_price(self) -> Decimal:
        return self.product.price if self.product else Decimal("0")

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Order(BaseModel):
    """Checkout session as stored in the record store."""

    id: str
    checkout_id: str = ""
    session_id: str = ""
    firstname: str = ""
    lastname: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    shipping_method: str = ""
    status: OrderStatus = OrderStatus.UNKNOWN
    total: Decimal = Decimal("0")
    cart_items: list[CartItem] = Field(default_factory=list)
    completed: bool = False
    partial: bool = False
    partial_details: dict[str, FulfillmentProgress] = Field(default_factory=dict)
    tracking: Optional[str] = None
    shipped: bool = False
    stripe_payment_id: Optional[str] = None
    notes: Optional[str] = None
    affiliate_code: Optional[str] = None
    confirmation_email_sent: bool = False
    shipping_email_sent: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Raw last-modified stamp, compared on write for optimistic concurrency
    version: Optional[str] = None

    @property
    def customer_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()

    @property
    def has_payment_intent(self) -> bool:
        return bool(self.stripe_payment_id)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.cart_items)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Order":
        """Build an order from an Airtable record ``{"id", "fields"}``."""
        fields = record.get("fields", {})

        raw_items = load_json(fields.get("cartitems"), [], field="cartitems")
        cart_items = []
        for raw in raw_items if isinstance(raw_items, list) else []:
            if isinstance(raw, dict) and raw.get("productId") is not None:
                cart_items.append(CartItem.model_validate(raw))

        raw_details = load_json(fields.get("partialdetails"), {}, field="partialdetails")
        partial_details = {
            key: FulfillmentProgress.model_validate(value)
            for key, value in (raw_details.items() if isinstance(raw_details, dict) else [])
            if isinstance(value, dict)
        }

        updated_raw = first_of(fields, "updatedat", "updated at")

        return cls(
            id=record["id"],
            checkout_id=as_text(fields.get("checkoutid")),
            session_id=as_text(fields.get("sessionid")),
            firstname=as_text(fields.get("firstname")),
            lastname=as_text(fields.get("lastname")),
            email=as_text(fields.get("email")),
            phone=as_text(fields.get("phone")),
            address=as_text(fields.get("address")),
            city=as_text(fields.get("city")),
            state=as_text(fields.get("state")),
            zip=as_text(fields.get("zip")),
            shipping_method=as_text(fields.get("shippingmethod")),
            status=OrderStatus(as_text(fields.get("status"))),
            total=as_decimal(first_of(fields, "totalammount", "total")),
            cart_items=cart_items,
            completed=as_bool(fields.get("completed")),
            partial=as_bool(fields.get("partial")),
            partial_details=partial_details,
            tracking=first_of(fields, "tracking", "Tracking"),
            shipped=as_bool(fields.get("shipped")),
            stripe_payment_id=first_of(fields, "stripepaymentid"),
            notes=first_of(fields, "notes"),
            affiliate_code=first_of(fields, "affiliatecode", "affiliate_code"),
            confirmation_email_sent=as_bool(
                first_of(fields, "orderconfirmsent", "confirmationEmailSent")
            ),
            shipping_email_sent=as_bool(
                first_of(fields, "ordershippedsent", "shippingEmailSent")
            ),
            created_at=as_datetime(first_of(fields, "createdat", "created at")),
            updated_at=as_datetime(updated_raw),
            version=as_text(updated_raw) or None,
        )


# Patch attribute -> Airtable column
ORDER_PATCH_COLUMNS: dict[str, str] = {
    "status": "status",
    "completed": "completed",
    "partial": "partial",
    "partial_details": "partialdetails",
    "tracking": "tracking",
    "notes": "notes",
    "affiliate_code": "affiliatecode",
    "confirmation_email_sent": "orderconfirmsent",
    "shipping_email_sent": "ordershippedsent",
    "shipped": "shipped",
    "stripe_payment_id": "stripepaymentid",
}


class OrderPatch(BaseModel):
    """Sparse set of order field updates; unset fields are left untouched."""

    status: Optional[OrderStatus] = None
    completed: Optional[bool] = None
    partial: Optional[bool] = None
    partial_details: Optional[dict[str, FulfillmentProgress]] = None
    tracking: Optional[str] = None
    notes: Optional[str] = None
    affiliate_code: Optional[str] = None
    confirmation_email_sent: Optional[bool] = None
    shipping_email_sent: Optional[bool] = None
    shipped: Optional[bool] = None
    stripe_payment_id: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.model_fields_set

    def validate_for(self, order: Order) -> None:
        """Reject patches that would leave the order in an impossible state."""
        completed = self.completed if "completed" in self.model_fields_set else order.completed
        partial = self.partial if "partial" in self.model_fields_set else order.partial
        if completed and partial:
            raise PatchValidationError("An order cannot be both completed and partial")

        if "status" in self.model_fields_set and self.status is not None:
            if self.status == OrderStatus.UNKNOWN:
                raise PatchValidationError("Unknown order status")
            if not can_transition(order.status, self.status):
                raise PatchValidationError(
                    f"Cannot move order from {order.status.value} to {self.status.value}"
                )

        if self.partial_details:
            for key, progress in self.partial_details.items():
                FulfillmentKey.parse(key)
                if not 0 <= progress.fulfilled <= progress.total:
                    raise PatchValidationError(
                        f"Fulfilled quantity out of range for {key}"
                    )

    def to_fields(self) -> dict[str, Any]:
        """Airtable column values for every field explicitly set."""
        fields: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if name == "status" and value is not None:
                value = value.value
            elif name == "partial_details" and value is not None:
                value = json.dumps(
                    {key: progress.model_dump() for key, progress in value.items()}
                )
            fields[ORDER_PATCH_COLUMNS[name]] = value
        return fields
