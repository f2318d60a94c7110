# services/marketplace-service/src/apps/api/serializers/business_serializers.py
"""
Business Serializers

Serializers for business profiles, services, opening hours and photos.
Request and response keys are camelCase; ``source`` maps them to model fields.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.core.models import Availability, Business, BusinessPhoto, Review, Service

CLOCK_FORMAT = '%H:%M'


# =============================================================================
# Services
# =============================================================================

class ServiceSerializer(serializers.ModelSerializer):
    """Service as shown to owners and on the public profile."""

    businessId = serializers.UUIDField(source='business_id', read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Service
        fields = [
            'id', 'businessId',
            'name', 'description', 'category',
            'price', 'duration',
            'isActive', 'createdAt',
        ]
        read_only_fields = fields


class ServiceWriteSerializer(serializers.Serializer):
    """Create or partially update a service."""

    name = serializers.CharField(min_length=2, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    category = serializers.CharField(max_length=100)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    duration = serializers.IntegerField(min_value=1)
    isActive = serializers.BooleanField(source='is_active', required=False)


# =============================================================================
# Opening hours
# =============================================================================

class AvailabilitySerializer(serializers.ModelSerializer):
    """Weekly opening rule."""

    dayOfWeek = serializers.IntegerField(source='day_of_week', min_value=0, max_value=6)
    startTime = serializers.TimeField(
        source='start_time', format=CLOCK_FORMAT, input_formats=[CLOCK_FORMAT]
    )
    endTime = serializers.TimeField(
        source='end_time', format=CLOCK_FORMAT, input_formats=[CLOCK_FORMAT]
    )
    isActive = serializers.BooleanField(source='is_active', required=False, default=True)

    class Meta:
        model = Availability
        fields = ['id', 'dayOfWeek', 'startTime', 'endTime', 'isActive']
        read_only_fields = ['id']


class WeeklyScheduleSerializer(serializers.Serializer):
    """Body of the replace-all schedule update."""

    businessId = serializers.CharField()
    availabilities = AvailabilitySerializer(many=True)


# =============================================================================
# Business
# =============================================================================

class BusinessSerializer(serializers.ModelSerializer):
    """Full business profile, as seen by its owner."""

    ownerId = serializers.UUIDField(source='owner_id', read_only=True)
    businessName = serializers.CharField(source='business_name', read_only=True)
    zipCode = serializers.CharField(source='zip_code', read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    stripeAccountId = serializers.CharField(source='stripe_account_id', read_only=True)
    stripeOnboarded = serializers.BooleanField(source='stripe_onboarded', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Business
        fields = [
            'id', 'ownerId',
            'businessName', 'slug', 'description', 'category',
            'address', 'city', 'state', 'zipCode',
            'phone', 'email', 'website', 'instagram',
            'isActive', 'stripeAccountId', 'stripeOnboarded',
            'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class PublicReviewSerializer(serializers.ModelSerializer):
    """Review as shown on the public profile; the reviewer is named, not identified."""

    customerName = serializers.CharField(source='booking.customer_name', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Review
        fields = ['id', 'rating', 'comment', 'customerName', 'createdAt']
        read_only_fields = fields


def rounded_rating(business) -> float:
    return round(getattr(business, 'average_rating', None) or 0, 2)


class PublicBusinessSerializer(serializers.ModelSerializer):
    """Business for the public booking page. No payment or owner details."""

    businessName = serializers.CharField(source='business_name', read_only=True)
    zipCode = serializers.CharField(source='zip_code', read_only=True)
    acceptsPayments = serializers.BooleanField(source='can_accept_payments', read_only=True)
    availabilities = AvailabilitySerializer(source='active_availabilities', many=True, read_only=True)
    averageRating = serializers.SerializerMethodField()
    reviewCount = serializers.IntegerField(source='review_count', read_only=True)
    recentReviews = PublicReviewSerializer(source='recent_reviews', many=True, read_only=True)

    class Meta:
        model = Business
        fields = [
            'id', 'businessName', 'slug', 'description', 'category',
            'address', 'city', 'state', 'zipCode',
            'phone', 'email', 'website', 'instagram',
            'acceptsPayments', 'availabilities',
            'averageRating', 'reviewCount', 'recentReviews',
        ]
        read_only_fields = fields

    def get_averageRating(self, obj) -> float:
        return rounded_rating(obj)


class BusinessSearchResultSerializer(serializers.ModelSerializer):
    """One listing in search results, with a preview of its services."""

    SERVICE_PREVIEW = 3

    businessName = serializers.CharField(source='business_name', read_only=True)
    zipCode = serializers.CharField(source='zip_code', read_only=True)
    averageRating = serializers.SerializerMethodField()
    reviewCount = serializers.IntegerField(source='review_count', read_only=True)
    services = serializers.SerializerMethodField()

    class Meta:
        model = Business
        fields = [
            'id', 'businessName', 'slug', 'description', 'category',
            'address', 'city', 'state', 'zipCode',
            'averageRating', 'reviewCount', 'services',
        ]
        read_only_fields = fields

    def get_averageRating(self, obj) -> float:
        return rounded_rating(obj)

    def get_services(self, obj):
        preview = obj.active_services[:self.SERVICE_PREVIEW]
        return ServiceSerializer(preview, many=True).data


class BusinessProfileSerializer(serializers.Serializer):
    """
    Registration and profile update body.

    Required fields are checked by the business service so that the first
    missing one is reported by name.
    """

    businessName = serializers.CharField(source='business_name', required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    state = serializers.CharField(required=False, allow_blank=True)
    zipCode = serializers.CharField(source='zip_code', required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    website = serializers.URLField(required=False, allow_blank=True, allow_null=True)
    instagram = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_category(self, value):
        if value and value not in Business.Category.values:
            raise serializers.ValidationError('Invalid category')
        return value


# =============================================================================
# Photos
# =============================================================================

class BusinessPhotoSerializer(serializers.ModelSerializer):
    businessId = serializers.UUIDField(source='business_id', read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = BusinessPhoto
        fields = ['id', 'businessId', 'url', 'type', 'caption', 'order', 'isActive', 'createdAt']
        read_only_fields = fields


class PhotoCreateSerializer(serializers.Serializer):
    """Record an uploaded photo (upload completion)."""

    businessId = serializers.CharField(required=False, allow_blank=True)
    url = serializers.URLField(required=False, allow_blank=True, max_length=1024)
    type = serializers.ChoiceField(
        choices=BusinessPhoto.Type.choices,
        required=False,
        default=BusinessPhoto.Type.GALLERY
    )
    caption = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    order = serializers.IntegerField(required=False, default=0)


class PhotoUpdateSerializer(serializers.Serializer):
    photoId = serializers.CharField(required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=BusinessPhoto.Type.choices, required=False)
    caption = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    order = serializers.IntegerField(required=False)


class PresignedUploadSerializer(serializers.Serializer):
    """Presigned upload request. Presence and type checks happen in the storage service."""

    businessId = serializers.CharField(required=False, allow_blank=True)
    fileName = serializers.CharField(required=False, allow_blank=True)
    fileType = serializers.CharField(required=False, allow_blank=True)
    fileSize = serializers.IntegerField(required=False, min_value=0)
    type = serializers.ChoiceField(
        choices=BusinessPhoto.Type.choices,
        required=False,
        default=BusinessPhoto.Type.GALLERY
    )
