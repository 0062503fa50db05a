"""
Affiliate repository for data access operations.
"""
from typing import Optional

from orderdesk.core.config import settings
from orderdesk.models.affiliate import Affiliate
from orderdesk.repositories.base import BaseRepository
from orderdesk.services.airtable_client import quote_formula_text


class AffiliateRepository(BaseRepository[Affiliate]):
    """Repository for referral partners."""

    model = Affiliate
    entity = "Affiliate"

    @property
    def table(self) -> str:
        return settings.airtable_affiliates_table

    async def list_affiliates(self) -> list[Affiliate]:
        return await self.select()

    async def get_by_code(self, code: str) -> Optional[Affiliate]:
        affiliates = await self.select(
            f"{{Code}} = {quote_formula_text(code)}",
            max_records=1,
        )
        return affiliates[0] if affiliates else None

    async def create(self, affiliate: Affiliate) -> Affiliate:
        record = await self.client.create_record(self.table, affiliate.to_fields())
        return self._parse(record)
