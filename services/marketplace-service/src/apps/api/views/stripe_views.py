# services/marketplace-service/src/apps/api/views/stripe_views.py
"""
Stripe API Views

Connected-account onboarding, the Express dashboard link and the
webhook receiver.
"""

import logging

from django.http import HttpResponseRedirect
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.core.services import PaymentService
from .base import MarketplaceAPIView
from .business_views import OwnerAPIView

logger = logging.getLogger(__name__)


class StripeWebhookView(MarketplaceAPIView):
    """
    Stripe event receiver.

    Authenticated by the Stripe-Signature header over the raw body, not
    by a bearer token.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.payment_service = PaymentService()

    def post(self, request):
        result = self.payment_service.handle_webhook(
            request.body,
            request.META.get('HTTP_STRIPE_SIGNATURE'),
        )
        return Response(result)


class ConnectAccountView(OwnerAPIView):
    """Start or resume Stripe Express onboarding."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.payment_service = PaymentService()

    def post(self, request):
        result = self.payment_service.create_connect_account_link(
            request.user,
            request.data.get('businessId'),
        )
        return Response(result)


class ConnectCallbackView(MarketplaceAPIView):
    """Return target of onboarding. Always redirects to the settings page."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.payment_service = PaymentService()

    def get(self, request):
        target = self.payment_service.handle_connect_callback(request.query_params.get('businessId'))
        return HttpResponseRedirect(target)


class ConnectPortalView(OwnerAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.payment_service = PaymentService()

    def post(self, request):
        result = self.payment_service.create_portal_link(
            request.user,
            request.data.get('businessId'),
        )
        return Response(result)
