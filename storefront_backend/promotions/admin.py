# promotions/admin.py

from django.contrib import admin

from promotions.models import Discount


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "store",
        "discount_type",
        "value",
        "is_active",
        "usage_count",
        "usage_limit",
    )
    list_filter = ("discount_type", "is_active")
    search_fields = ("code", "store__subdomain")
    readonly_fields = ("usage_count", "created_at", "updated_at")
