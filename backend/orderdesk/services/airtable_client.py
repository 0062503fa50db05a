"""
Airtable REST client for the record store.
Handles pagination, rate limiting and error translation.
"""
import asyncio
from typing import Any, Optional

import httpx

from orderdesk.core.config import settings
from orderdesk.core.errors import AirtableAPIError
from orderdesk.core.logging import get_logger

logger = get_logger(__name__)


def quote_formula_text(value: str) -> str:
    """Quote user text for use inside an Airtable formula string literal."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class AirtableClient:
    """
    Async Airtable API client.

    Features:
    - Offset pagination until the result set is exhausted
    - Backoff on HTTP 429 for reads (Airtable allows 5 requests/second)
    - Writes are attempted once; failures surface to the caller
    """

    MAX_RETRIES = 3
    PAGE_SIZE = 100

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_id: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key or settings.airtable_api_key
        self.base_id = base_id or settings.airtable_base_id
        self.base_url = (base_url or settings.airtable_api_url).rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.api_key or not self.base_id:
            raise AirtableAPIError("Airtable is not configured")
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/{self.base_id}",
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=30.0,
            transport=self._transport,
        )

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        retry: bool,
        **kwargs: Any,
    ) -> httpx.Response:
        attempts = self.MAX_RETRIES if retry else 1
        for attempt in range(attempts):
            try:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response

            except httpx.HTTPStatusError as e:
                code = e.response.status_code
                if code == 429 and attempt < attempts - 1:
                    await asyncio.sleep(2 ** attempt)
                    continue
                if code == 404:
                    raise
                logger.error(
                    "Airtable request failed",
                    method=method,
                    url=url,
                    status=code,
                    body=e.response.text[:300],
                )
                raise AirtableAPIError(f"HTTP error: {code}", status=code)

            except httpx.RequestError as e:
                if attempt < attempts - 1:
                    continue
                raise AirtableAPIError(f"Request failed: {str(e)}")

        raise AirtableAPIError("Max retries exceeded")

    async def list_records(
        self,
        table: str,
        *,
        filter_formula: Optional[str] = None,
        max_records: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Fetch every record matching the formula, following offsets."""
        params: dict[str, Any] = {"pageSize": self.PAGE_SIZE}
        if filter_formula:
            params["filterByFormula"] = filter_formula
        if max_records:
            params["maxRecords"] = max_records

        records: list[dict[str, Any]] = []
        async with self._client() as client:
            while True:
                response = await self._request(
                    client, "GET", f"/{table}", params=params, retry=True
                )
                data = response.json()
                records.extend(data.get("records", []))
                offset = data.get("offset")
                if not offset or (max_records and len(records) >= max_records):
                    break
                params["offset"] = offset

        logger.debug("Fetched records", table=table, count=len(records))
        return records

    async def get_record(self, table: str, record_id: str) -> Optional[dict[str, Any]]:
        """Fetch a single record, or None if it does not exist."""
        async with self._client() as client:
            try:
                response = await self._request(
                    client, "GET", f"/{table}/{record_id}", retry=True
                )
            except httpx.HTTPStatusError:
                return None
        return response.json()

    async def update_record(
        self,
        table: str,
        record_id: str,
        fields: dict[str, Any],
    ) -> dict[str, Any]:
        """Patch the given fields on one record."""
        async with self._client() as client:
            try:
                response = await self._request(
                    client,
                    "PATCH",
                    f"/{table}/{record_id}",
                    json={"fields": fields, "typecast": True},
                    retry=False,
                )
            except httpx.HTTPStatusError:
                raise AirtableAPIError(f"Record not found: {record_id}", status=404)
        return response.json()

    async def create_record(self, table: str, fields: dict[str, Any]) -> dict[str, Any]:
        async with self._client() as client:
            response = await self._request(
                client,
                "POST",
                f"/{table}",
                json={"fields": fields, "typecast": True},
                retry=False,
            )
        return response.json()
