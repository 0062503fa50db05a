"""
Order Pydantic schemas for request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from orderdesk.models._fields import Money
from orderdesk.models.order import CartItem, Order, OrderPatch, OrderStatus
from orderdesk.schemas.common import CamelModel, Pagination


class CartProductResponse(CamelModel):
    id: Optional[int] = None
    name: str
    price: Money
    type: Optional[str] = None


class CartItemResponse(CamelModel):
    product_id: int
    selected_weight: str
    quantity: int
    product: Optional[CartProductResponse] = None
    line_total: Money

    @classmethod
    def from_item(cls, item: CartItem) -> "CartItemResponse":
        return cls(
            product_id=item.product_id,
            selected_weight=item.selected_weight,
            quantity=item.quantity,
            product=CartProductResponse.model_validate(item.product) if item.product else None,
            line_total=item.line_total,
        )


class FulfillmentEntry(CamelModel):
    fulfilled: int
    total: Optional[int] = None


class OrderResponse(CamelModel):
    """Schema for order API responses."""

    id: str
    checkout_id: str
    session_id: str
    firstname: str
    lastname: str
    customer_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip: str
    shipping_method: str
    status: str
    total: Money
    cart_items: list[CartItemResponse]
    completed: bool
    partial: bool
    partial_details: dict[str, FulfillmentEntry]
    tracking: Optional[str] = None
    shipped: bool
    stripe_payment_id: Optional[str] = None
    notes: Optional[str] = None
    affiliate_code: Optional[str] = None
    confirmation_email_sent: bool
    shipping_email_sent: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: Optional[str] = None
    payment_verified: Optional[bool] = None
    payment_status: Optional[str] = None

    @classmethod
    def from_order(
        cls,
        order: Order,
        payment_verified: Optional[bool] = None,
        payment_status: Optional[str] = None,
    ) -> "OrderResponse":
        data = order.model_dump(exclude={"cart_items", "partial_details", "status"})
        return cls(
            **data,
            customer_name=order.customer_name,
            status=order.status.value,
            cart_items=[CartItemResponse.from_item(item) for item in order.cart_items],
            partial_details={
                key: FulfillmentEntry(fulfilled=p.fulfilled, total=p.total)
                for key, p in order.partial_details.items()
            },
            payment_verified=payment_verified,
            payment_status=payment_status,
        )


class OrderListResponse(CamelModel):
    orders: list[OrderResponse]
    pagination: Pagination


class OrderUpdate(CamelModel):
    """Staff edit of order-level fields."""

    status: Optional[OrderStatus] = None
    completed: Optional[bool] = None
    partial: Optional[bool] = None
    tracking: Optional[str] = None
    notes: Optional[str] = None
    affiliate_code: Optional[str] = None
    expected_version: Optional[str] = None

    def to_patch(self) -> OrderPatch:
        values = self.model_dump(exclude_unset=True, exclude={"expected_version"})
        return OrderPatch(**values)


class FlagUpdate(CamelModel):
    completed: Optional[bool] = None
    partial: Optional[bool] = None


class PartialFulfillmentRequest(CamelModel):
    """Per-line fulfilled quantities keyed by ``productId-selectedWeight``."""

    partial_details: dict[str, FulfillmentEntry] = Field(default_factory=dict)
    tracking: Optional[str] = None
    expected_version: Optional[str] = None

    def fulfilled_counts(self) -> dict[str, int]:
        return {key: entry.fulfilled for key, entry in self.partial_details.items()}


class NotificationResult(CamelModel):
    sent: bool
    order: OrderResponse
