"""
Domain models package.
Records live in Airtable; these models parse and serialize its field bags.
"""
from orderdesk.models.affiliate import Affiliate
from orderdesk.models.order import (
    CartItem,
    CartProduct,
    FulfillmentKey,
    FulfillmentProgress,
    Order,
    OrderPatch,
    OrderStatus,
    can_transition,
)
from orderdesk.models.payment import PaymentDetails, PaymentMatch, PaymentVerification
from orderdesk.models.product import (
    InventoryItem,
    Product,
    ProductPatch,
    SupplierCostItem,
    WeightPrice,
)

__all__ = [
    "Affiliate",
    "CartItem",
    "CartProduct",
    "FulfillmentKey",
    "FulfillmentProgress",
    "Order",
    "OrderPatch",
    "OrderStatus",
    "can_transition",
    "PaymentDetails",
    "PaymentMatch",
    "PaymentVerification",
    "InventoryItem",
    "Product",
    "ProductPatch",
    "SupplierCostItem",
    "WeightPrice",
]
