"""
Order repository for data access operations.
"""
from typing import Optional

from orderdesk.core.config import settings
from orderdesk.core.logging import get_logger
from orderdesk.models.order import Order, OrderPatch, OrderStatus
from orderdesk.repositories.base import BaseRepository
from orderdesk.services.airtable_client import quote_formula_text

logger = get_logger(__name__)


def _and(formulas: list[str]) -> str:
    if len(formulas) == 1:
        return formulas[0]
    return f"AND({','.join(formulas)})"


class OrderRepository(BaseRepository[Order]):
    """Repository for orders stored in the carts table."""

    model = Order
    entity = "Order"

    @property
    def table(self) -> str:
        return settings.airtable_orders_table

    async def find_matching(
        self,
        status: Optional[OrderStatus] = OrderStatus.PLACED,
        search: Optional[str] = None,
    ) -> list[Order]:
        """
        Get every order in a stage, optionally narrowed by customer text.

        Returns the full matching set; callers rank and paginate.
        """
        formulas = []
        if status is not None:
            formulas.append(f"{{status}} = {quote_formula_text(status.value)}")
        if search:
            needle = quote_formula_text(search.lower())
            formulas.append(
                "OR("
                f"SEARCH({needle}, LOWER({{firstname}})), "
                f"SEARCH({needle}, LOWER({{lastname}})), "
                f"SEARCH({needle}, LOWER({{email}})), "
                f"SEARCH({quote_formula_text(search)}, {{phone}})"
                ")"
            )
        return await self.select(_and(formulas) if formulas else None)

    async def find_all(self) -> list[Order]:
        """Get every order regardless of stage."""
        return await self.select()

    async def find_by_tracking(self, tracking: str) -> Optional[Order]:
        """Get the first order carrying a tracking code."""
        orders = await self.select(
            f"{{tracking}} = {quote_formula_text(tracking.strip())}",
            max_records=1,
        )
        return orders[0] if orders else None

    async def find_awaiting_tracking(self) -> list[Order]:
        """Placed orders that have not been given a tracking code yet."""
        placed = quote_formula_text(OrderStatus.PLACED.value)
        return await self.select(
            f'AND({{status}} = {placed}, OR({{tracking}} = "", BLANK({{tracking}})))'
        )

    async def find_by_affiliate(self, code: str) -> list[Order]:
        """Placed orders attributed to an affiliate code."""
        placed = quote_formula_text(OrderStatus.PLACED.value)
        return await self.select(
            f"AND({{affiliatecode}} = {quote_formula_text(code)}, {{status}} = {placed})"
        )

    async def update(self, order_id: str, patch: OrderPatch) -> Order:
        """
        Apply a sparse patch in a single write and return the re-read order.

        The store may coerce fields silently, so the returned order is
        always fetched fresh rather than built from the patch.
        """
        fields = patch.to_fields()
        logger.info("Updating order", order_id=order_id, fields=sorted(fields))
        return await self.update_fields(order_id, fields)
