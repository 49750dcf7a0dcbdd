# orders/urls.py

from django.urls import path

from orders.views import StoreOrderListView

urlpatterns = [
    path("orders/", StoreOrderListView.as_view(), name="store-orders"),
]
