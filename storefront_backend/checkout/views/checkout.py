# checkout/views/checkout.py

"""
STOREFRONT CHECKOUT

POST /api/stores/<subdomain>/checkout/
    Validate cart -> resolve catalog -> price -> create provider session
    (or a pending manual order). Response shape depends on paymentMethod.

GET  /api/stores/<subdomain>/checkout/?session_id=...&payment=...
    Normalized status of a hosted session after the customer returns.

Security hardening:
- AllowAny, no auth (public storefront)
- POST throttled as public_write, GET as public_poll
- Errors carry a public detail only; provider internals stay in the logs
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.throttles import PublicPollThrottle, PublicWriteThrottle
from checkout.serializers import CheckoutInputSerializer, SessionStatusQuerySerializer
from checkout.services.checkout_service import CheckoutService
from checkout.services.exceptions import CheckoutError


def get_checkout_service() -> CheckoutService:
    return CheckoutService.from_settings()


def _error_response(exc: CheckoutError) -> Response:
    return Response(exc.as_payload(), status=exc.status_code)


class StoreCheckoutView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [JSONParser]

    def get_throttles(self):
        if self.request.method == "GET":
            return [PublicPollThrottle()]
        return [PublicWriteThrottle()]

    @extend_schema(
        tags=["Checkout"],
        request=CheckoutInputSerializer,
        responses={
            200: OpenApiResponse(description="Hosted session redirect or pending manual order"),
            400: OpenApiResponse(description="Validation / business rule rejection"),
            404: OpenApiResponse(description="Store not found"),
            429: OpenApiResponse(description="Rate limited"),
            500: OpenApiResponse(description="Payment processor misconfigured or provider error"),
            501: OpenApiResponse(description="Payment method not implemented"),
        },
    )
    def post(self, request, subdomain):
        s = CheckoutInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = get_checkout_service().checkout(subdomain, s.to_checkout_request())
        except CheckoutError as exc:
            return _error_response(exc)

        return Response(result.body, status=result.status_code)

    @extend_schema(
        tags=["Checkout"],
        parameters=[
            OpenApiParameter("session_id", str, required=True),
            OpenApiParameter("payment", str, required=False, description="nuvi | stripe"),
        ],
        responses={
            200: OpenApiResponse(description="{status, customerEmail, amountTotal, currency}"),
            400: OpenApiResponse(description="Missing session_id or provider not configured"),
            404: OpenApiResponse(description="Store not found"),
        },
    )
    def get(self, request, subdomain):
        if not (request.query_params.get("session_id") or "").strip():
            return Response(
                {"detail": "session_id is required"}, status=status.HTTP_400_BAD_REQUEST
            )

        q = SessionStatusQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        try:
            payload = get_checkout_service().session_status(
                subdomain,
                q.validated_data["session_id"],
                q.validated_data.get("payment") or None,
            )
        except CheckoutError as exc:
            return _error_response(exc)

        return Response(payload, status=status.HTTP_200_OK)
