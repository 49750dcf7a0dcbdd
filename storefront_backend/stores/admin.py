# stores/admin.py

from django.contrib import admin

from stores.models import Store


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "subdomain", "currency", "owner", "is_active", "created_at")
    list_filter = ("is_active", "currency")
    search_fields = ("name", "subdomain")
    readonly_fields = ("id", "created_at", "updated_at")
    # Secrets live in payment_methods; edit them through the API, not the admin.
    exclude = ("payment_methods",)
