"""
Stripe REST client for payment lookups and payment intent creation.
"""
from decimal import Decimal
from typing import Any, Optional

import httpx

from orderdesk.core.config import settings
from orderdesk.core.errors import StripeAPIError
from orderdesk.core.logging import get_logger

logger = get_logger(__name__)


class StripeClient:
    """
    Thin async wrapper over the Stripe v1 API.

    Every call is a single attempt; failures raise StripeAPIError and are
    handled by the caller.
    """

    API_URL = "https://api.stripe.com/v1"
    MAX_PAGE = 100  # Stripe's list limit

    def __init__(
        self,
        secret_key: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.secret_key = secret_key or settings.stripe_secret_key
        self._transport = transport

    async def _call(
        self,
        method: str,
        path: str,
        *,
        params: Optional[list[tuple[str, Any]]] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        if not self.secret_key:
            raise StripeAPIError("Stripe is not configured")

        async with httpx.AsyncClient(
            base_url=self.API_URL,
            auth=(self.secret_key, ""),
            timeout=20.0,
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, params=params, data=data)
            except httpx.RequestError as e:
                raise StripeAPIError(f"Request failed: {str(e)}")

        if response.status_code >= 400:
            try:
                message = response.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                message = f"HTTP error: {response.status_code}"
            raise StripeAPIError(message, status=response.status_code)
        return response.json()

    async def retrieve_payment_intent(self, intent_id: str) -> dict[str, Any]:
        return await self._call("GET", f"/payment_intents/{intent_id}")

    async def list_customers(self, email: str, limit: int = 10) -> list[dict[str, Any]]:
        data = await self._call(
            "GET", "/customers", params=[("email", email), ("limit", limit)]
        )
        return data.get("data", [])

    async def list_payment_intents(
        self,
        *,
        customer: Optional[str] = None,
        limit: int = 20,
        expand_charge: bool = False,
    ) -> list[dict[str, Any]]:
        params: list[tuple[str, Any]] = [("limit", min(limit, self.MAX_PAGE))]
        if customer:
            params.append(("customer", customer))
        if expand_charge:
            params.append(("expand[]", "data.latest_charge"))
        data = await self._call("GET", "/payment_intents", params=params)
        return data.get("data", [])

    async def create_payment_intent(
        self,
        amount: Decimal,
        *,
        receipt_email: Optional[str] = None,
        description: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        form: dict[str, Any] = {
            "amount": int((amount * 100).to_integral_value()),
            "currency": "usd",
            "payment_method_types[]": "card",
        }
        if receipt_email:
            form["receipt_email"] = receipt_email
        if description:
            form["description"] = description
        for key, value in (metadata or {}).items():
            form[f"metadata[{key}]"] = value
        return await self._call("POST", "/payment_intents", data=form)
