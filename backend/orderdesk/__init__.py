"""
OrderDesk - staff back office for storefront orders.
"""

__version__ = "1.0.0"
