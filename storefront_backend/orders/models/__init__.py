# orders/models/__init__.py

"""
ORDERS MODELS PACKAGE EXPORTS
"""

from .order import Order
from .order_line_item import OrderLineItem

__all__ = ["Order", "OrderLineItem"]
