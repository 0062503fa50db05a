"""
EasyPost client for USPS label purchase, address checks and tracking.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Literal, Optional

import httpx

from orderdesk.core.config import settings
from orderdesk.core.errors import CarrierAccountError, LabelPurchaseError
from orderdesk.core.logging import get_logger

logger = get_logger(__name__)

ServiceType = Literal["Ground", "Priority", "Express"]

CARRIER = "USPS"
CARRIER_ACCOUNT_ERRORS = {"SHIPMENT.CARRIER_ACCOUNTS.INVALID", "CARRIER_ACCOUNT.INVALID"}


@dataclass(frozen=True)
class ShippingAddress:
    name: str
    address: str
    city: str
    state: str
    zip: str
    phone: str = ""

    def to_easypost(self) -> dict[str, str]:
        return {
            "name": self.name,
            "street1": self.address,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "country": "US",
            "phone": self.phone,
        }


@dataclass(frozen=True)
class Parcel:
    weight_oz: float
    length: float = 6
    width: float = 4
    height: float = 2


@dataclass(frozen=True)
class LabelRequest:
    to_address: ShippingAddress
    from_address: ShippingAddress
    service_type: ServiceType
    parcel: Parcel


@dataclass(frozen=True)
class LabelResult:
    tracking_number: str
    label_url: str
    postage_cost: Decimal
    carrier: str = CARRIER


def package_specs(item_count: int = 1) -> Parcel:
    """Parcel size for a shipment of small vials: 2 oz packing + 0.5 oz each."""
    weight = 2 + max(item_count, 1) * 0.5
    if weight <= 3 and item_count <= 2:
        return Parcel(weight_oz=weight, length=6, width=4, height=1)
    if weight <= 16:
        return Parcel(weight_oz=weight, length=6, width=4, height=2)
    return Parcel(weight_oz=weight, length=8, width=6, height=4)


def default_from_address() -> ShippingAddress:
    return ShippingAddress(
        name=settings.business_name,
        address=settings.business_address,
        city=settings.business_city,
        state=settings.business_state,
        zip=settings.business_zip,
        phone=settings.business_phone,
    )


class EasyPostClient:
    """Async EasyPost v2 API client."""

    API_URL = "https://api.easypost.com/v2"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key or settings.easypost_api_key
        self._transport = transport

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.api_key:
            raise CarrierAccountError("EasyPost is not configured")

        async with httpx.AsyncClient(
            base_url=self.API_URL,
            auth=(self.api_key, ""),
            timeout=30.0,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(path, json=payload)
            except httpx.RequestError as e:
                raise LabelPurchaseError(f"Request failed: {str(e)}")

        if response.status_code >= 400:
            try:
                error = response.json().get("error", {})
            except ValueError:
                error = {}
            code = error.get("code", "")
            message = error.get("message") or f"HTTP error: {response.status_code}"
            logger.error("EasyPost error", path=path, code=code, message=message)
            if code in CARRIER_ACCOUNT_ERRORS:
                raise CarrierAccountError(message, status=response.status_code)
            raise LabelPurchaseError(message, status=response.status_code)
        return response.json()

    async def purchase_label(self, request: LabelRequest) -> LabelResult:
        """Create a USPS shipment and buy its lowest matching rate."""
        shipment = await self._post(
            "/shipments",
            {
                "shipment": {
                    "to_address": request.to_address.to_easypost(),
                    "from_address": request.from_address.to_easypost(),
                    "parcel": {
                        "weight": request.parcel.weight_oz,
                        "length": request.parcel.length,
                        "width": request.parcel.width,
                        "height": request.parcel.height,
                    },
                    "options": {"label_format": "PDF"},
                }
            },
        )

        rate = self._lowest_rate(shipment.get("rates", []), request.service_type)
        if rate is None:
            messages = [m.get("message", "") for m in shipment.get("messages", [])]
            if any("carrier" in m.lower() for m in messages):
                raise CarrierAccountError("; ".join(messages))
            raise LabelPurchaseError("No USPS rates available for this shipment")

        bought = await self._post(f"/shipments/{shipment['id']}/buy", {"rate": {"id": rate["id"]}})
        return LabelResult(
            tracking_number=bought["tracking_code"],
            label_url=bought["postage_label"]["label_url"],
            postage_cost=Decimal(str(bought["selected_rate"]["rate"])),
        )

    @staticmethod
    def _lowest_rate(rates: list[dict[str, Any]], service: str) -> Optional[dict[str, Any]]:
        usps = [r for r in rates if r.get("carrier") == CARRIER]
        preferred = [r for r in usps if service.lower() in str(r.get("service", "")).lower()]
        pool = preferred or usps
        if not pool:
            return None
        return min(pool, key=lambda r: Decimal(str(r.get("rate", "0"))))

    async def validate_address(self, address: ShippingAddress) -> bool:
        try:
            result = await self._post(
                "/addresses",
                {"address": address.to_easypost(), "verify": ["delivery"]},
            )
        except LabelPurchaseError as e:
            logger.warning("Address validation error", error=str(e))
            return False
        delivery = (result.get("verifications") or {}).get("delivery")
        if delivery is None:
            return True
        return bool(delivery.get("success"))

    async def get_tracking(self, tracking_number: str) -> dict[str, Any]:
        return await self._post(
            "/trackers",
            {"tracker": {"tracking_code": tracking_number, "carrier": CARRIER}},
        )
