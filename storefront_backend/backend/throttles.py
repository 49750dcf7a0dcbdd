# backend/throttles.py

from rest_framework.throttling import AnonRateThrottle


class PublicWriteThrottle(AnonRateThrottle):
    scope = "public_write"


class PublicPollThrottle(AnonRateThrottle):
    scope = "public_poll"


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"
