# services/marketplace-service/src/apps/api/serializers/__init__.py
"""
Marketplace API Serializers
"""

from .business_serializers import (
    ServiceSerializer,
    ServiceWriteSerializer,
    AvailabilitySerializer,
    WeeklyScheduleSerializer,
    BusinessSerializer,
    PublicBusinessSerializer,
    PublicReviewSerializer,
    BusinessSearchResultSerializer,
    BusinessProfileSerializer,
    BusinessPhotoSerializer,
    PhotoCreateSerializer,
    PhotoUpdateSerializer,
    PresignedUploadSerializer,
)

from .booking_serializers import (
    BookingSerializer,
    BookingCreateSerializer,
    BookingStatusSerializer,
    BookingActionSerializer,
    TimeOffSerializer,
    TimeOffCreateSerializer,
    ReviewSerializer,
    ReviewCreateSerializer,
)

from .customer_serializers import (
    CustomerProfileSerializer,
    CommunicationSerializer,
    MessageCreateSerializer,
)


__all__ = [
    # Business
    'ServiceSerializer',
    'ServiceWriteSerializer',
    'AvailabilitySerializer',
    'WeeklyScheduleSerializer',
    'BusinessSerializer',
    'PublicBusinessSerializer',
    'PublicReviewSerializer',
    'BusinessSearchResultSerializer',
    'BusinessProfileSerializer',
    'BusinessPhotoSerializer',
    'PhotoCreateSerializer',
    'PhotoUpdateSerializer',
    'PresignedUploadSerializer',

    # Bookings
    'BookingSerializer',
    'BookingCreateSerializer',
    'BookingStatusSerializer',
    'BookingActionSerializer',
    'TimeOffSerializer',
    'TimeOffCreateSerializer',
    'ReviewSerializer',
    'ReviewCreateSerializer',

    # Customers
    'CustomerProfileSerializer',
    'CommunicationSerializer',
    'MessageCreateSerializer',
]
