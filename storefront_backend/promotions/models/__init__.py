# promotions/models/__init__.py

from .discount import Discount

__all__ = ["Discount"]
