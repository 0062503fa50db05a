"""
Product model - catalog entry with per-weight pricing, stock and costs.
"""
import json
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from orderdesk.models._fields import as_bool, as_decimal, as_text, load_json


class WeightPrice(BaseModel):
    weight: str
    price: Decimal


class InventoryItem(BaseModel):
    weight: str
    quantity: int = 0


class SupplierCostItem(BaseModel):
    weight: str
    cost: Decimal = Decimal("0")


class Product(BaseModel):
    """Catalog product as stored in the products table."""

    id: int
    record_id: str
    name: str = ""
    description: str = ""
    sku: str = ""
    category: str = ""
    image: str = ""
    status: str = "active"
    stock: int = 0
    low_stock_threshold: int = 5
    weight_options: list[WeightPrice] = Field(default_factory=list)
    inventory: list[InventoryItem] = Field(default_factory=list)
    supplier_cost: list[SupplierCostItem] = Field(default_factory=list)

    @property
    def price(self) -> Decimal:
        """Lowest listed price, shown as the headline price."""
        if not self.weight_options:
            return Decimal("0")
        return self.weight_options[0].price

    @property
    def weights(self) -> list[str]:
        return [option.weight for option in self.weight_options]

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.low_stock_threshold

    def price_for(self, weight: str) -> Optional[Decimal]:
        for option in self.weight_options:
            if option.weight == weight:
                return option.price
        return None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Product":
        fields = record.get("fields", {})
        raw_weights = as_text(fields.get("weights")) or "5mg"
        weights = [w.strip() for w in raw_weights.split(",") if w.strip()]

        # Each weight has its own price column, e.g. "price5mg"
        options = [
            WeightPrice(weight=w, price=as_decimal(fields.get(f"price{w}")))
            for w in weights
        ]
        options.sort(key=lambda option: option.price)

        inventory = load_json(fields.get("inventory"), None, field="inventory")
        if not isinstance(inventory, list):
            inventory = [{"weight": w, "quantity": 0} for w in weights]

        supplier_cost = load_json(fields.get("supplierCost"), None, field="supplierCost")
        if not isinstance(supplier_cost, list):
            supplier_cost = [{"weight": w, "cost": 0} for w in weights]

        name = as_text(fields.get("name"))
        images = fields.get("image")
        image = images[0].get("url", "") if isinstance(images, list) and images else ""
        in_stock = as_bool(fields.get("inStock"))

        return cls(
            id=int(fields.get("id") or 0),
            record_id=record["id"],
            name=name,
            description=as_text(fields.get("description")),
            sku=f"{name[:6]}-{weights[0]}" if name else "",
            category=as_text(fields.get("categoryId")),
            image=image,
            status="archived" if as_bool(fields.get("outofstock")) else "active",
            stock=int(fields.get("stock") or (25 if in_stock else 0)),
            weight_options=options,
            inventory=[InventoryItem.model_validate(item) for item in inventory],
            supplier_cost=[SupplierCostItem.model_validate(item) for item in supplier_cost],
        )


class ProductPatch(BaseModel):
    """Staff-editable product fields."""

    name: Optional[str] = None
    description: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    prices: Optional[dict[str, Decimal]] = None
    inventory: Optional[list[InventoryItem]] = None
    supplier_cost: Optional[list[SupplierCostItem]] = None

    def to_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        if self.name is not None:
            fields["name"] = self.name
        if self.description is not None:
            fields["description"] = self.description
        if self.stock is not None:
            fields["stock"] = self.stock
            fields["inStock"] = self.stock > 0
        for weight, price in (self.prices or {}).items():
            # Airtable number columns reject strings
            fields[f"price{weight}"] = float(price)
        if self.inventory is not None:
            fields["inventory"] = json.dumps(
                [item.model_dump() for item in self.inventory]
            )
        if self.supplier_cost is not None:
            fields["supplierCost"] = json.dumps(
                [{"weight": item.weight, "cost": float(item.cost)} for item in self.supplier_cost]
            )
        return fields
