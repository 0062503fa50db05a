"""
Barcode scanner and address validation routes.
"""
from typing import Annotated

from fastapi import APIRouter, Depends

from orderdesk.routers.deps import get_easypost_client, get_shipping_service
from orderdesk.schemas import (
    AddressValidationRequest,
    AddressValidationResponse,
    Envelope,
    OrderResponse,
    ScanRequest,
    ScanResponse,
)
from orderdesk.services.easypost_client import EasyPostClient, ShippingAddress
from orderdesk.services.shipping import ShippingService

router = APIRouter(tags=["shipping"])


@router.post("/scanner/lookup", response_model=Envelope[ScanResponse])
async def scanner_lookup(
    request: ScanRequest,
    shipping: Annotated[ShippingService, Depends(get_shipping_service)],
) -> Envelope[ScanResponse]:
    """
    Find the order for a scanned tracking barcode.

    When no order carries the code yet, the newest placed order without
    tracking is suggested so staff can assign it.
    """
    result = await shipping.scan(request.tracking_number)
    return Envelope(
        data=ScanResponse(
            found=result.found,
            has_existing_tracking=result.has_existing_tracking,
            needs_tracking_assignment=result.needs_tracking_assignment,
            order=OrderResponse.from_order(result.order) if result.order else None,
        ),
        message=None if result.found else "No order found for this tracking number",
    )


@router.post("/validate-address", response_model=Envelope[AddressValidationResponse])
async def validate_address(
    request: AddressValidationRequest,
    carrier: Annotated[EasyPostClient, Depends(get_easypost_client)],
) -> Envelope[AddressValidationResponse]:
    address = ShippingAddress(**request.address.model_dump())
    return Envelope(data=AddressValidationResponse(valid=await carrier.validate_address(address)))
