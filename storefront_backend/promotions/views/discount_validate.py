# promotions/views/discount_validate.py

"""
PUBLIC DISCOUNT VALIDATION

POST /api/stores/<subdomain>/discounts/validate/

Lets the storefront show the discount before checkout. Uses exactly the
same rules as checkout pricing, so a code accepted here is accepted there
(unless its window/usage changes in between).
"""

from __future__ import annotations

from decimal import Decimal

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import serializers, status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.money import money
from backend.throttles import PublicPollThrottle
from promotions.services.discounts import (
    DiscountNotApplicable,
    calculate_discount_amount,
    resolve_discount,
)
from stores.services.ownership import StoreNotFound, get_active_store


class DiscountValidateInputSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=64)
    subtotal = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )


class DiscountValidateView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [JSONParser]
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        tags=["Public"],
        request=DiscountValidateInputSerializer,
        responses={
            200: OpenApiResponse(description="Discount is applicable"),
            400: OpenApiResponse(description="Invalid input or discount not applicable"),
            404: OpenApiResponse(description="Store not found"),
        },
    )
    def post(self, request, subdomain):
        s = DiscountValidateInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        store = get_active_store(subdomain)
        if store is None:
            raise StoreNotFound()

        try:
            discount = resolve_discount(
                store=store, code=data["code"], subtotal=data["subtotal"]
            )
        except DiscountNotApplicable as exc:
            return Response(
                {"valid": False, "detail": exc.reason},
                status=status.HTTP_400_BAD_REQUEST,
            )

        amount = calculate_discount_amount(discount, data["subtotal"])
        return Response(
            {
                "valid": True,
                "discount": {
                    "id": str(discount.id),
                    "code": discount.code,
                    "type": discount.discount_type,
                    "value": str(money(discount.value)),
                    "discountAmount": str(money(amount)),
                },
            },
            status=status.HTTP_200_OK,
        )
