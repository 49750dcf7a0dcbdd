# promotions/urls.py

from django.urls import path

from promotions.views import DiscountValidateView

urlpatterns = [
    path(
        "discounts/validate/",
        DiscountValidateView.as_view(),
        name="discount-validate",
    ),
]
