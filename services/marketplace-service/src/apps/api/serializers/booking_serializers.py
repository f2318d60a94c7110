# services/marketplace-service/src/apps/api/serializers/booking_serializers.py
"""
Booking Serializers

Serializers for bookings, time off and reviews.
"""

from rest_framework import serializers

from apps.core.models import Booking, Review, TimeOff

from .business_serializers import CLOCK_FORMAT


# =============================================================================
# Bookings
# =============================================================================

class BookingSerializer(serializers.ModelSerializer):
    """Booking with the service and business names denormalized for lists."""

    businessId = serializers.UUIDField(source='business_id', read_only=True)
    businessName = serializers.CharField(source='business.business_name', read_only=True)
    businessSlug = serializers.CharField(source='business.slug', read_only=True)
    serviceId = serializers.UUIDField(source='service_id', read_only=True)
    serviceName = serializers.CharField(source='service.name', read_only=True)
    serviceDuration = serializers.IntegerField(source='service.duration', read_only=True)
    customerId = serializers.UUIDField(source='customer_id', read_only=True)
    customerName = serializers.CharField(source='customer_name', read_only=True)
    customerEmail = serializers.CharField(source='customer_email', read_only=True)
    startTime = serializers.DateTimeField(source='start_time', read_only=True)
    endTime = serializers.DateTimeField(source='end_time', read_only=True)
    localTime = serializers.CharField(source='local_start', read_only=True)
    totalPrice = serializers.DecimalField(source='total_price', max_digits=10, decimal_places=2, read_only=True)
    paymentStatus = serializers.CharField(source='payment_status', read_only=True)
    hasReview = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id',
            'businessId', 'businessName', 'businessSlug',
            'serviceId', 'serviceName', 'serviceDuration',
            'customerId', 'customerName', 'customerEmail',
            'date', 'startTime', 'endTime', 'localTime',
            'status', 'totalPrice', 'paymentStatus',
            'notes', 'hasReview', 'createdAt',
        ]
        read_only_fields = fields

    def get_hasReview(self, obj) -> bool:
        return hasattr(obj, 'review')


class BookingCreateSerializer(serializers.Serializer):
    """
    Booking and payment-intent request body.

    Formats are validated by the booking service, which reports any
    problem as invalid input.
    """

    businessId = serializers.CharField()
    serviceId = serializers.CharField()
    date = serializers.CharField()
    time = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class BookingActionSerializer(serializers.Serializer):
    """Cancel and refund requests."""

    bookingId = serializers.CharField(required=False, allow_blank=True)
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)


# =============================================================================
# Time off
# =============================================================================

class TimeOffSerializer(serializers.ModelSerializer):
    businessId = serializers.UUIDField(source='business_id', read_only=True)
    startTime = serializers.TimeField(source='start_time', format=CLOCK_FORMAT, read_only=True)
    endTime = serializers.TimeField(source='end_time', format=CLOCK_FORMAT, read_only=True)
    isFullDay = serializers.BooleanField(source='is_full_day', read_only=True)

    class Meta:
        model = TimeOff
        fields = ['id', 'businessId', 'date', 'startTime', 'endTime', 'reason', 'isFullDay']
        read_only_fields = fields


class TimeOffCreateSerializer(serializers.Serializer):
    businessId = serializers.CharField()
    date = serializers.DateField(input_formats=['%Y-%m-%d'])
    startTime = serializers.TimeField(
        source='start_time', input_formats=[CLOCK_FORMAT], required=False, allow_null=True
    )
    endTime = serializers.TimeField(
        source='end_time', input_formats=[CLOCK_FORMAT], required=False, allow_null=True
    )
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)


# =============================================================================
# Reviews
# =============================================================================

class ReviewSerializer(serializers.ModelSerializer):
    bookingId = serializers.UUIDField(source='booking_id', read_only=True)
    businessId = serializers.UUIDField(source='business_id', read_only=True)
    customerId = serializers.UUIDField(source='customer_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Review
        fields = ['id', 'bookingId', 'businessId', 'customerId', 'rating', 'comment', 'createdAt']
        read_only_fields = fields


class ReviewCreateSerializer(serializers.Serializer):
    bookingId = serializers.CharField()
    businessId = serializers.CharField(required=False)
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
