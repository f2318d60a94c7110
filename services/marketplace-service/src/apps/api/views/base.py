# services/marketplace-service/src/apps/api/views/base.py
"""
Base API View

Domain errors raised by the core services are rendered as
``{"error": message}`` with the status carried by the exception class.
"""

from rest_framework.views import APIView

from shared.common.api_mixins import ErrorResponseMixin

from apps.core.services import MarketplaceError


class MarketplaceAPIView(ErrorResponseMixin, APIView):
    handled_exceptions = (MarketplaceError,)
