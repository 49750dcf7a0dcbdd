from .order_list import StoreOrderListView

__all__ = ["StoreOrderListView"]
