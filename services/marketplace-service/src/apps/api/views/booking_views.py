# services/marketplace-service/src/apps/api/views/booking_views.py
"""
Booking API Views

Customer-side booking, payment, cancellation and review endpoints.
"""

import logging

from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.core.services import (
    BookingService,
    PaymentService,
    ReviewNotAllowedError,
    ReviewService,
)
from apps.api.serializers import (
    BookingSerializer,
    BookingCreateSerializer,
    BookingActionSerializer,
    ReviewSerializer,
    ReviewCreateSerializer,
)
from .base import MarketplaceAPIView

logger = logging.getLogger(__name__)

BOOKINGS_PAGE = '/bookings'
LOGIN_PAGE = '/login'


class BookingListCreateView(MarketplaceAPIView):
    """
    GET  /bookings/  the requester's bookings, newest first
    POST /bookings/  book without online payment
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()

    def get(self, request):
        bookings = self.booking_service.list_customer_bookings(request.user)
        return Response(BookingSerializer(bookings, many=True).data)

    def post(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        data = serializer.validated_data
        booking = self.booking_service.create_booking(
            request.user,
            business_id=data['businessId'],
            service_id=data['serviceId'],
            date_value=data['date'],
            time_value=data['time'],
            notes=data.get('notes'),
        )
        return Response({'bookingId': str(booking.id)}, status=status.HTTP_201_CREATED)


class PaymentIntentView(MarketplaceAPIView):
    """Reserve a slot and open a card payment for it."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.payment_service = PaymentService()

    def post(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        data = serializer.validated_data
        result = self.payment_service.create_payment_intent(
            request.user,
            business_id=data['businessId'],
            service_id=data['serviceId'],
            date_value=data['date'],
            time_value=data['time'],
            notes=data.get('notes'),
        )
        return Response(result)


class BookingCancelView(MarketplaceAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()

    def post(self, request):
        serializer = BookingActionSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        result = self.booking_service.cancel_booking(
            request.user,
            serializer.validated_data.get('bookingId'),
            reason=serializer.validated_data.get('reason'),
        )
        return Response(result)


class BookingRefundView(MarketplaceAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.payment_service = PaymentService()

    def post(self, request):
        serializer = BookingActionSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        result = self.payment_service.request_refund(
            request.user,
            serializer.validated_data.get('bookingId'),
            reason=serializer.validated_data.get('reason'),
        )
        return Response(result)


# =============================================================================
# Reviews
# =============================================================================

class ReviewCreateView(MarketplaceAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.review_service = ReviewService()

    def post(self, request):
        serializer = ReviewCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        data = serializer.validated_data
        review = self.review_service.create_review(
            request.user,
            data['bookingId'],
            rating=data['rating'],
            comment=data.get('comment') or None,
            business_id=data.get('businessId'),
        )
        return Response({'review': ReviewSerializer(review).data}, status=status.HTTP_201_CREATED)


class ReviewPageView(MarketplaceAPIView):
    """
    Guard for the review page.

    Never renders an error: ineligible requests are sent back to the
    bookings list, anonymous ones to the login page.
    """

    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.review_service = ReviewService()

    def get(self, request, booking_id):
        if not request.user or not request.user.is_authenticated:
            return HttpResponseRedirect(LOGIN_PAGE)

        try:
            booking = self.review_service.check_review_eligibility(request.user, booking_id)
        except ReviewNotAllowedError:
            logger.info(f"Review page refused for booking {booking_id}")
            return HttpResponseRedirect(BOOKINGS_PAGE)

        return Response({'booking': BookingSerializer(booking).data})
