# services/marketplace-service/src/apps/api/views/public_views.py
"""
Public API Views

Unauthenticated endpoints behind listing search and the public booking
page: business profile, slot lookups and image delivery.
"""

import logging

from django.conf import settings
from django.http import HttpResponseRedirect
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from shared.common.cache import cached

from apps.core.services import AvailabilityService, BusinessService, StorageService
from apps.api.serializers import BusinessSearchResultSerializer, PublicBusinessSerializer, ServiceSerializer
from .base import MarketplaceAPIView
from .filters import BusinessSearchFilter

logger = logging.getLogger(__name__)


@cached('business:slug', timeout=settings.BUSINESS_CACHE_TIMEOUT, key_func=lambda slug: slug)
def get_public_profile(slug: str) -> dict:
    """Serialized public profile. Cached until the business changes."""
    business, services = BusinessService().get_public_business(slug)
    return {
        'business': PublicBusinessSerializer(business).data,
        'services': ServiceSerializer(services, many=True).data,
    }


class SlotQueryMixin:
    """Reads the businessId/date/serviceId triple used by the slot lookups."""

    def slot_query(self, request):
        return (
            request.query_params.get('businessId'),
            request.query_params.get('date'),
            request.query_params.get('serviceId'),
        )


# =============================================================================
# Business profile
# =============================================================================

class PublicBusinessView(MarketplaceAPIView):
    """GET /booking/<slug>/"""

    permission_classes = [AllowAny]

    def get(self, request, slug):
        return Response(get_public_profile(slug))


class BusinessSearchView(MarketplaceAPIView):
    """Listing discovery: ?q&category&city&minRating"""

    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.business_service = BusinessService()

    def get(self, request):
        filterset = BusinessSearchFilter(request.query_params, queryset=self.business_service.search())
        if not filterset.is_valid():
            return self.invalid_input_response(filterset)

        return Response({
            'businesses': BusinessSearchResultSerializer(filterset.qs, many=True).data,
        })


# =============================================================================
# Availability
# =============================================================================

class BookedSlotsView(SlotQueryMixin, MarketplaceAPIView):
    """Start times already taken on a date."""

    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()

    def get(self, request):
        booked = self.availability_service.get_booked_slots(*self.slot_query(request))
        return Response({'bookedSlots': booked})


class DayAvailabilityView(SlotQueryMixin, MarketplaceAPIView):
    """Booked slots merged with opening hours and time off for one day."""

    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()

    def get(self, request):
        return Response(self.availability_service.get_day_availability(*self.slot_query(request)))


class AvailableSlotsView(SlotQueryMixin, MarketplaceAPIView):
    """Bookable start times for a service on a date."""

    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()

    def get(self, request):
        slots = self.availability_service.get_available_slots(*self.slot_query(request))
        return Response({'slots': slots})


class TimeOffDatesView(MarketplaceAPIView):
    """Upcoming full-day closures, for greying out calendar days."""

    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()

    def get(self, request):
        dates = self.availability_service.get_time_off_dates(request.query_params.get('businessId'))
        return Response({'dates': dates})


# =============================================================================
# Images
# =============================================================================

class ImageView(MarketplaceAPIView):
    """Redirect to a short-lived signed URL for a stored key."""

    permission_classes = [AllowAny]

    def get(self, request, key):
        signed_url = StorageService().resolve_image(key=key)
        return HttpResponseRedirect(signed_url)


class ImageProxyView(MarketplaceAPIView):
    """Same as ImageView, for a full storage URL in ?url="""

    permission_classes = [AllowAny]

    def get(self, request):
        signed_url = StorageService().resolve_image(url=request.query_params.get('url'))
        return HttpResponseRedirect(signed_url)
