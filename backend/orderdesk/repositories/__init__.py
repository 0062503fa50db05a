"""
Repository package for data access layer.
"""
from orderdesk.repositories.affiliate import AffiliateRepository
from orderdesk.repositories.base import BaseRepository
from orderdesk.repositories.order import OrderRepository
from orderdesk.repositories.product import ProductRepository

__all__ = [
    "BaseRepository",
    "OrderRepository",
    "ProductRepository",
    "AffiliateRepository",
]
