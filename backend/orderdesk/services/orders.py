"""
Order-level edits outside the fulfillment workflow.
"""
from typing import Optional

from orderdesk.core.errors import PatchValidationError, WriteConflictError
from orderdesk.core.logging import get_logger
from orderdesk.models.order import Order, OrderPatch
from orderdesk.repositories.order import OrderRepository
from orderdesk.services.notification_service import NotificationService

logger = get_logger(__name__)


class OrderService:
    def __init__(self, orders: OrderRepository, notifier: NotificationService) -> None:
        self.orders = orders
        self.notifier = notifier

    async def get(self, order_id: str) -> Order:
        return await self.orders.get(order_id)

    async def update(
        self,
        order_id: str,
        patch: OrderPatch,
        *,
        expected_version: Optional[str] = None,
    ) -> Order:
        """Validate a patch against the current order and write it."""
        if patch.is_empty():
            raise PatchValidationError("No fields to update")

        order = await self.orders.get(order_id)
        if expected_version is not None and order.version != expected_version:
            raise WriteConflictError(order_id, expected_version, order.version)

        patch.validate_for(order)
        return await self.orders.update(order_id, patch)

    async def send_confirmation(self, order_id: str) -> tuple[bool, Order]:
        """Email the order confirmation; the sent flag is only set on success."""
        order = await self.orders.get(order_id)
        sent = await self.notifier.send_order_confirmation(order)
        if sent:
            order = await self.orders.update(order_id, OrderPatch(confirmation_email_sent=True))
        logger.info("Confirmation email", order_id=order_id, sent=sent)
        return sent, order

    async def send_shipping_notice(self, order_id: str) -> tuple[bool, Order]:
        order = await self.orders.get(order_id)
        if not order.tracking:
            raise PatchValidationError("Order has no tracking number to send")
        sent = await self.notifier.send_shipping_notification(order)
        if sent:
            order = await self.orders.update(order_id, OrderPatch(shipping_email_sent=True))
        logger.info("Shipping email", order_id=order_id, sent=sent)
        return sent, order
