"""
Shipping label workflow for orders.
"""
from dataclasses import dataclass
from typing import Optional

from orderdesk.core.errors import NotFoundError, PatchValidationError
from orderdesk.core.logging import get_logger
from orderdesk.models._fields import EPOCH
from orderdesk.models.order import Order, OrderPatch
from orderdesk.repositories.order import OrderRepository
from orderdesk.services.easypost_client import (
    EasyPostClient,
    LabelRequest,
    LabelResult,
    ServiceType,
    ShippingAddress,
    default_from_address,
    package_specs,
)

logger = get_logger(__name__)


def order_address(order: Order) -> ShippingAddress:
    return ShippingAddress(
        name=order.customer_name,
        address=order.address,
        city=order.city,
        state=order.state,
        zip=order.zip,
        phone=order.phone,
    )


class ShippingService:
    """Buys labels and records the resulting tracking code on the order."""

    def __init__(self, carrier: EasyPostClient, orders: OrderRepository) -> None:
        self.carrier = carrier
        self.orders = orders

    async def create_label(
        self,
        order_id: str,
        service_type: ServiceType = "Priority",
    ) -> LabelResult:
        order = await self.orders.get(order_id)
        to_address = order_address(order)

        if not await self.carrier.validate_address(to_address):
            raise PatchValidationError(
                "Customer address could not be validated. Please verify the address details."
            )

        label = await self.carrier.purchase_label(
            LabelRequest(
                to_address=to_address,
                from_address=default_from_address(),
                service_type=service_type,
                parcel=package_specs(order.item_count),
            )
        )

        await self.orders.update(
            order_id,
            OrderPatch(tracking=label.tracking_number, shipped=True),
        )
        logger.info(
            "Shipping label purchased",
            order_id=order_id,
            tracking=label.tracking_number,
            postage=str(label.postage_cost),
        )
        return label

    async def tracking(self, order_id: str) -> dict:
        order = await self.orders.get(order_id)
        if not order.tracking:
            raise NotFoundError("Tracking number for order", order_id)
        return await self.carrier.get_tracking(order.tracking)

    async def scan(self, tracking: str) -> "ScanResult":
        """
        Resolve a scanned tracking barcode to an order.

        An exact tracking match wins. Otherwise the newest placed order
        still waiting for a tracking code is suggested for assignment.
        """
        tracking = tracking.strip()
        if not tracking:
            raise PatchValidationError("Tracking number is required")

        order = await self.orders.find_by_tracking(tracking)
        if order is not None:
            logger.info("Scanned tracking matched order", order_id=order.id)
            return ScanResult(order=order, has_existing_tracking=True)

        waiting = await self.orders.find_awaiting_tracking()
        if waiting:
            suggestion = max(waiting, key=lambda o: o.created_at or EPOCH)
            logger.info("Scanned tracking suggests order", order_id=suggestion.id)
            return ScanResult(order=suggestion, needs_tracking_assignment=True)

        logger.info("Scanned tracking matched nothing", tracking=tracking)
        return ScanResult(order=None)


@dataclass
class ScanResult:
    order: Optional[Order]
    has_existing_tracking: bool = False
    needs_tracking_assignment: bool = False

    @property
    def found(self) -> bool:
        return self.order is not None
