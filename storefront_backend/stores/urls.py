# stores/urls.py

from django.urls import path

from stores.views import StorePaymentSettingsView

urlpatterns = [
    path(
        "payment-settings/",
        StorePaymentSettingsView.as_view(),
        name="store-payment-settings",
    ),
]
