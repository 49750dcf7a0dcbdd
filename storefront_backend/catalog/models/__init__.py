# catalog/models/__init__.py

"""
CATALOG MODELS PACKAGE EXPORTS
"""

from .product import Product
from .variant import ProductVariant

__all__ = ["Product", "ProductVariant"]
