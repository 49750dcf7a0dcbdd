# stores/apps.py

"""
STORES APP CONFIG

Tenant module:
- Store (one per subdomain)
- Per-store payment settings (typed, validated on write)
- Ownership resolution for owner-facing endpoints
"""

from django.apps import AppConfig


class StoresConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "stores"
    verbose_name = "Stores"
