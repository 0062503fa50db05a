"""
Product schemas.
"""
from decimal import Decimal
from typing import Optional

from pydantic import Field

from orderdesk.models._fields import Money
from orderdesk.models.product import InventoryItem, Product, ProductPatch, SupplierCostItem
from orderdesk.schemas.common import CamelModel


class WeightPriceResponse(CamelModel):
    weight: str
    price: Money


class InventoryResponse(CamelModel):
    weight: str
    quantity: int


class SupplierCostResponse(CamelModel):
    weight: str
    cost: Money


class ProductResponse(CamelModel):
    id: int
    record_id: str
    name: str
    description: str
    sku: str
    category: str
    image: str
    status: str
    price: Money
    stock: int
    low_stock_threshold: int
    is_low_stock: bool
    weights: list[str]
    weight_options: list[WeightPriceResponse]
    inventory: list[InventoryResponse]
    supplier_cost: list[SupplierCostResponse]

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            **product.model_dump(exclude={"weight_options", "inventory", "supplier_cost"}),
            price=product.price,
            is_low_stock=product.is_low_stock,
            weights=product.weights,
            weight_options=[WeightPriceResponse.model_validate(o) for o in product.weight_options],
            inventory=[InventoryResponse.model_validate(i) for i in product.inventory],
            supplier_cost=[SupplierCostResponse.model_validate(c) for c in product.supplier_cost],
        )


class ProductUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    prices: Optional[dict[str, Decimal]] = None
    inventory: Optional[list[InventoryItem]] = None
    supplier_cost: Optional[list[SupplierCostItem]] = None

    def to_patch(self) -> ProductPatch:
        return ProductPatch(**self.model_dump(exclude_unset=True))
