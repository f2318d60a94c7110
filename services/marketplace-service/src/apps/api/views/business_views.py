# services/marketplace-service/src/apps/api/views/business_views.py
"""
Business API Views

Owner dashboard endpoints: registration, profile, services, opening
hours, time off, bookings and photos.
"""

import logging

from rest_framework import status
from rest_framework.response import Response

from apps.core.policies import IsBusinessOwner
from apps.core.services import (
    AvailabilityService,
    BookingService,
    BusinessService,
    StorageService,
)
from apps.api.serializers import (
    AvailabilitySerializer,
    BookingSerializer,
    BookingStatusSerializer,
    BusinessPhotoSerializer,
    BusinessProfileSerializer,
    BusinessSerializer,
    PhotoCreateSerializer,
    PhotoUpdateSerializer,
    PresignedUploadSerializer,
    ServiceSerializer,
    ServiceWriteSerializer,
    TimeOffCreateSerializer,
    TimeOffSerializer,
    WeeklyScheduleSerializer,
)
from .base import MarketplaceAPIView
from .filters import BookingFilter

logger = logging.getLogger(__name__)


class OwnerAPIView(MarketplaceAPIView):
    permission_classes = [IsBusinessOwner]


# =============================================================================
# Business profile
# =============================================================================

class BusinessRegisterView(OwnerAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.business_service = BusinessService()

    def post(self, request):
        serializer = BusinessProfileSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        business = self.business_service.register_business(request.user, serializer.validated_data)
        return Response(BusinessSerializer(business).data, status=status.HTTP_201_CREATED)


class BusinessProfileView(OwnerAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.business_service = BusinessService()

    def get(self, request):
        business = self.business_service.get_profile(request.user)
        return Response(BusinessSerializer(business).data)

    def patch(self, request):
        serializer = BusinessProfileSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        business = self.business_service.update_profile(request.user, serializer.validated_data)
        return Response(BusinessSerializer(business).data)


# =============================================================================
# Services
# =============================================================================

class ServiceListCreateView(OwnerAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.business_service = BusinessService()

    def get(self, request):
        services = self.business_service.list_services(request.user)
        return Response(ServiceSerializer(services, many=True).data)

    def post(self, request):
        serializer = ServiceWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        service = self.business_service.create_service(request.user, serializer.validated_data)
        return Response(ServiceSerializer(service).data, status=status.HTTP_201_CREATED)


class ServiceDetailView(OwnerAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.business_service = BusinessService()

    def patch(self, request, service_id):
        serializer = ServiceWriteSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        service = self.business_service.update_service(request.user, service_id, serializer.validated_data)
        return Response(ServiceSerializer(service).data)

    def delete(self, request, service_id):
        self.business_service.deactivate_service(request.user, service_id)
        return Response({'success': True})


# =============================================================================
# Opening hours and time off
# =============================================================================

class WeeklyScheduleView(OwnerAPIView):
    """Replace-all weekly opening rules."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()

    def get(self, request):
        rules = self.availability_service.get_weekly_schedule(request.user)
        return Response(AvailabilitySerializer(rules, many=True).data)

    def put(self, request):
        serializer = WeeklyScheduleSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        data = serializer.validated_data
        result = self.availability_service.replace_weekly_schedule(
            request.user,
            data['businessId'],
            data['availabilities'],
        )
        return Response(result)


class TimeOffView(OwnerAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()

    def get(self, request):
        time_offs = self.availability_service.list_time_off(request.user)
        return Response(TimeOffSerializer(time_offs, many=True).data)

    def post(self, request):
        serializer = TimeOffCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        data = serializer.validated_data
        time_off = self.availability_service.create_time_off(
            request.user,
            data['businessId'],
            data['date'],
            start_time=data.get('start_time'),
            end_time=data.get('end_time'),
            reason=data.get('reason'),
        )
        return Response(TimeOffSerializer(time_off).data, status=status.HTTP_201_CREATED)

    def delete(self, request):
        time_off_id = request.query_params.get('id') or request.data.get('id')
        self.availability_service.delete_time_off(request.user, time_off_id)
        return Response({'success': True})


# =============================================================================
# Bookings
# =============================================================================

class BusinessBookingListView(OwnerAPIView):
    """Owner's bookings, filterable by ?startDate&endDate&status"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()

    def get(self, request):
        queryset = self.booking_service.list_business_bookings(request.user)

        filterset = BookingFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return self.invalid_input_response(filterset)

        return Response(BookingSerializer(filterset.qs, many=True).data)


class BusinessBookingDetailView(OwnerAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()

    def patch(self, request, booking_id):
        serializer = BookingStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        booking = self.booking_service.update_status(
            request.user,
            booking_id,
            serializer.validated_data['status'],
        )
        return Response(BookingSerializer(booking).data)


class BookingCompleteView(OwnerAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()

    def post(self, request, booking_id):
        booking = self.booking_service.complete_booking(request.user, booking_id)
        return Response({'booking': BookingSerializer(booking).data})


# =============================================================================
# Photos and uploads
# =============================================================================

class BusinessPhotoView(OwnerAPIView):
    """
    GET    ?businessId=    list active photos
    POST                   record a photo
    PUT    {photoId, ...}  change type, caption or order
    DELETE ?photoId=       soft delete
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.business_service = BusinessService()

    def get(self, request):
        photos = self.business_service.list_photos(request.user, request.query_params.get('businessId'))
        return Response({'photos': BusinessPhotoSerializer(photos, many=True).data})

    def post(self, request):
        serializer = PhotoCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        data = serializer.validated_data
        photo = self.business_service.add_photo(
            request.user,
            data.get('businessId'),
            data.get('url'),
            photo_type=data['type'],
            caption=data.get('caption'),
            order=data.get('order', 0),
        )
        return Response({'photo': BusinessPhotoSerializer(photo).data}, status=status.HTTP_201_CREATED)

    def put(self, request):
        serializer = PhotoUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        data = dict(serializer.validated_data)
        photo_id = data.pop('photoId', None)
        photo = self.business_service.update_photo(request.user, photo_id, data)
        return Response({'photo': BusinessPhotoSerializer(photo).data})

    def delete(self, request):
        photo_id = request.query_params.get('photoId')
        self.business_service.delete_photo(request.user, photo_id)
        return Response({'success': True})


class PresignedUploadView(OwnerAPIView):
    def post(self, request):
        serializer = PresignedUploadSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        data = serializer.validated_data
        result = StorageService().create_presigned_upload(
            request.user,
            data.get('businessId'),
            data.get('fileName'),
            data.get('fileType'),
            data.get('fileSize'),
            photo_type=data['type'],
        )
        return Response(result)


class UploadCompleteView(BusinessPhotoView):
    """Record a photo after the browser finished its direct upload."""

    http_method_names = ['post', 'options']
