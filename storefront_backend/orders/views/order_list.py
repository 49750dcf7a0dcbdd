# orders/views/order_list.py

"""
OWNER ORDER LISTING

GET /api/stores/<subdomain>/orders/?status=&payment_status=&payment_method=

- Authenticated owner only; ownership resolved once per request
- Paginated (REST_FRAMEWORK PAGE_SIZE), newest first
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework.generics import ListAPIView
from rest_framework.permissions import IsAuthenticated

from orders.models import Order
from orders.serializers import OrderSerializer
from stores.services.ownership import resolve_owned_store


@extend_schema(tags=["Orders"])
class StoreOrderListView(ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "payment_status", "payment_method"]

    def get_queryset(self):
        store = resolve_owned_store(self.kwargs["subdomain"], self.request.user)
        return (
            Order.objects.filter(store=store)
            .prefetch_related("line_items")
            .order_by("-created_at")
        )
