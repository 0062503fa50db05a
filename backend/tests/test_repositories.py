"""
Tests for the Airtable client and repositories.
"""
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from orderdesk.core.errors import AirtableAPIError, NotFoundError
from orderdesk.models.affiliate import Affiliate
from orderdesk.models.order import OrderPatch, OrderStatus
from orderdesk.repositories import AffiliateRepository, OrderRepository, ProductRepository
from orderdesk.services.airtable_client import AirtableClient, quote_formula_text

ORDER_FIELDS = {"firstname": "Ada", "status": "payment_selection", "updatedat": "2026-10-02T08:30:00Z"}


def airtable(handler) -> AirtableClient:
    return AirtableClient("key", "appX", transport=httpx.MockTransport(handler))


def test_quote_formula_text():
    assert quote_formula_text('say "hi"') == '"say \\"hi\\""'
    assert quote_formula_text("a\\b") == '"a\\\\b"'


class TestAirtableClient:
    async def test_follows_offsets(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            params = dict(request.url.params)
            seen.append(params.get("offset"))
            if "offset" not in params:
                return httpx.Response(200, json={"records": [{"id": "r1"}], "offset": "next"})
            return httpx.Response(200, json={"records": [{"id": "r2"}]})

        records = await airtable(handler).list_records("carts", filter_formula="{x} = 1")

        assert [r["id"] for r in records] == ["r1", "r2"]
        assert seen == [None, "next"]

    async def test_sends_formula_and_auth(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["auth"] = request.headers["authorization"]
            return httpx.Response(200, json={"records": []})

        await airtable(handler).list_records("carts", filter_formula="{x} = 1", max_records=5)

        assert seen["path"] == "/v0/appX/carts"
        assert seen["params"]["filterByFormula"] == "{x} = 1"
        assert seen["params"]["maxRecords"] == "5"
        assert seen["auth"] == "Bearer key"

    async def test_retries_rate_limit(self, monkeypatch):
        sleep = AsyncMock()
        monkeypatch.setattr("orderdesk.services.airtable_client.asyncio.sleep", sleep)
        responses = iter([httpx.Response(429), httpx.Response(200, json={"records": []})])

        records = await airtable(lambda request: next(responses)).list_records("carts")

        assert records == []
        sleep.assert_awaited_once_with(1)

    async def test_missing_record_is_none(self):
        client = airtable(lambda request: httpx.Response(404, json={"error": "NOT_FOUND"}))

        assert await client.get_record("carts", "recX") is None

    async def test_server_error_raises(self):
        client = airtable(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(AirtableAPIError) as exc:
            await client.list_records("carts")
        assert exc.value.status == 500

    async def test_writes_are_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.method)
            return httpx.Response(429)

        with pytest.raises(AirtableAPIError):
            await airtable(handler).update_record("carts", "rec1", {"notes": "x"})
        assert calls == ["PATCH"]

    async def test_unconfigured(self, monkeypatch):
        monkeypatch.setattr("orderdesk.services.airtable_client.settings.airtable_api_key", None)

        with pytest.raises(AirtableAPIError):
            await AirtableClient().list_records("carts")


class TestOrderRepository:
    async def test_find_matching_formula(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["formula"] = request.url.params["filterByFormula"]
            return httpx.Response(200, json={"records": [{"id": "rec1", "fields": ORDER_FIELDS}]})

        orders = await OrderRepository(airtable(handler)).find_matching(search='Ada "L"')

        assert orders[0].id == "rec1"
        assert seen["formula"].startswith('AND({status} = "payment_selection",OR(')
        assert 'SEARCH("ada \\"l\\"", LOWER({firstname}))' in seen["formula"]

    async def test_find_matching_all_statuses(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"records": []})

        await OrderRepository(airtable(handler)).find_matching(status=None)

        assert "filterByFormula" not in seen["params"]

    async def test_update_writes_then_rereads(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.content and json.loads(request.content)))
            fields = {**ORDER_FIELDS, "completed": True}
            return httpx.Response(200, json={"id": "rec1", "fields": fields})

        order = await OrderRepository(airtable(handler)).update(
            "rec1", OrderPatch(completed=True, status=OrderStatus.COMPLETED)
        )

        assert calls[0] == (
            "PATCH",
            {"fields": {"completed": True, "status": "completed"}, "typecast": True},
        )
        assert calls[1][0] == "GET"
        assert order.completed is True

    async def test_get_missing_raises(self):
        repo = OrderRepository(airtable(lambda request: httpx.Response(404)))

        with pytest.raises(NotFoundError):
            await repo.get("recX")


class TestProductRepository:
    async def test_get_by_product_id(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["formula"] = request.url.params["filterByFormula"]
            return httpx.Response(200, json={
                "records": [{"id": "recP7", "fields": {"id": 7, "name": "X", "weights": "5mg"}}]
            })

        product = await ProductRepository(airtable(handler)).get_by_product_id(7)

        assert seen["formula"] == "{id} = 7"
        assert product.record_id == "recP7"

    async def test_missing_product(self):
        repo = ProductRepository(airtable(lambda request: httpx.Response(200, json={"records": []})))

        with pytest.raises(NotFoundError):
            await repo.get_by_product_id(99)


class TestAffiliateRepository:
    async def test_create(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "recA1", "fields": seen["body"]["fields"]})

        created = await AffiliateRepository(airtable(handler)).create(Affiliate(code="NEW1"))

        assert seen["body"]["fields"]["Code"] == "NEW1"
        assert created.record_id == "recA1"
        assert created.code == "NEW1"
