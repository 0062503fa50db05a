"""
Product repository for data access operations.
"""
from typing import Optional

from orderdesk.core.config import settings
from orderdesk.core.errors import NotFoundError
from orderdesk.models.product import Product, ProductPatch
from orderdesk.repositories.base import BaseRepository
from orderdesk.services.airtable_client import quote_formula_text


class ProductRepository(BaseRepository[Product]):
    """Repository for catalog products."""

    model = Product
    entity = "Product"

    @property
    def table(self) -> str:
        return settings.airtable_products_table

    async def list_products(self, category: Optional[str] = None) -> list[Product]:
        formula = None
        if category:
            formula = f"FIND({quote_formula_text(category)}, {{categoryId}}) > 0"
        return await self.select(formula)

    async def get_by_product_id(self, product_id: int) -> Product:
        """Look up by the catalog's numeric id rather than the record id."""
        products = await self.select(f"{{id}} = {int(product_id)}", max_records=1)
        if not products:
            raise NotFoundError(self.entity, product_id)
        return products[0]

    async def update(self, product_id: int, patch: ProductPatch) -> Product:
        product = await self.get_by_product_id(product_id)
        return await self.update_fields(product.record_id, patch.to_fields())
