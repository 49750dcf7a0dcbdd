# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderLineItem


class OrderLineItemInline(admin.TabularInline):
    model = OrderLineItem
    extra = 0
    readonly_fields = ("title", "variant_title", "price", "quantity", "total_price", "position")
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "store",
        "status",
        "payment_status",
        "payment_method",
        "total_price",
        "currency",
        "created_at",
    )
    list_filter = ("status", "payment_status", "payment_method")
    search_fields = ("order_number", "customer_email", "customer_name")
    readonly_fields = (
        "id",
        "order_number",
        "subtotal_price",
        "total_discount",
        "total_tax",
        "total_shipping",
        "total_price",
        "provider_session_id",
        "created_at",
        "updated_at",
    )
    inlines = [OrderLineItemInline]
