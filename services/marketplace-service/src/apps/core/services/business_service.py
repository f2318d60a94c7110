# services/marketplace-service/src/apps/core/services/business_service.py
"""
Business Service

Business registration, public profile, service catalogue and photos.
"""

import logging
from typing import Optional, Dict, Any, List, Tuple

from django.db import transaction
from django.db.models import Avg, Case, Count, FloatField, IntegerField, Prefetch, QuerySet, Value, When
from django.db.models.functions import Coalesce

from shared.common.cache import CacheKeyBuilder, cache_invalidate
from shared.common.constants import UserRole
from shared.common.validators import parse_uuid

from apps.core.models import Availability, Business, BusinessPhoto, Review, Service
from apps.core.policies import get_owned_business, require_role, user_uuid

logger = logging.getLogger(__name__)

cache_keys = CacheKeyBuilder('business')

# Model field -> request key, in the order they are checked
REQUIRED_PROFILE_FIELDS = {
    'business_name': 'businessName',
    'category': 'category',
    'address': 'address',
    'city': 'city',
    'state': 'state',
    'zip_code': 'zipCode',
    'phone': 'phone',
}

OPTIONAL_PROFILE_FIELDS = ['description', 'email', 'website', 'instagram']

SERVICE_FIELDS = ['name', 'description', 'price', 'duration', 'category', 'is_active']

RECENT_REVIEWS = 5


class BusinessService:
    """
    Service for business profile management.

    Handles:
    - Registration and slug generation
    - Public profile lookup
    - Profile updates
    - Service catalogue
    - Photo gallery with a single hero image
    """

    @staticmethod
    def public_profile_cache_key(slug: str) -> str:
        return cache_keys.build('slug', slug)

    @staticmethod
    def invalidate_public_profile(slug: str) -> None:
        cache_invalidate(BusinessService.public_profile_cache_key(slug))

    # ==========================================================================
    # Business
    # ==========================================================================

    @transaction.atomic
    def register_business(self, user, data: Dict[str, Any]) -> Business:
        """Create the owner's business. An owner has at most one."""
        from . import InvalidRequestError

        require_role(user, UserRole.BUSINESS_OWNER)
        owner_id = user_uuid(user)

        if Business.objects.filter(owner_id=owner_id).exists():
            raise InvalidRequestError('Business already exists')

        self._check_required_profile_fields(data)

        business = Business.objects.create(
            owner_id=owner_id,
            slug=Business.generate_unique_slug(data['business_name']),
            **{field: data[field] for field in REQUIRED_PROFILE_FIELDS},
            **{field: data.get(field) or None for field in OPTIONAL_PROFILE_FIELDS},
        )

        logger.info(f"Registered business {business.id} ({business.slug}) for owner {owner_id}")
        return business

    def get_public_business(self, slug: str) -> Tuple[Business, List[Service]]:
        """
        Active business by slug with its active opening rules and services.

        The business carries ``average_rating``, ``review_count`` and its
        ``recent_reviews``, newest first.
        """
        from . import NotFoundError

        business = (
            self.with_ratings(Business.objects.filter(slug=slug, is_active=True))
            .prefetch_related(
                Prefetch(
                    'availabilities',
                    queryset=Availability.objects.filter(is_active=True).order_by('day_of_week', 'start_time'),
                    to_attr='active_availabilities',
                )
            )
            .first()
        )
        if business is None:
            raise NotFoundError('Business not found')

        business.recent_reviews = list(
            Review.objects
            .filter(business=business)
            .select_related('booking')
            .order_by('-created_at')[:RECENT_REVIEWS]
        )
        services = list(business.services.filter(is_active=True).order_by('name'))
        return business, services

    def search(self) -> QuerySet:
        """
        Active businesses for listing discovery, best rated first.

        Unreviewed businesses rate 0. Request filters are applied on top
        by the API layer.
        """
        return (
            self.with_ratings(Business.objects.filter(is_active=True))
            .prefetch_related(
                Prefetch(
                    'services',
                    queryset=Service.objects.filter(is_active=True).order_by('name'),
                    to_attr='active_services',
                )
            )
            .order_by('-average_rating', 'business_name')
        )

    @staticmethod
    def with_ratings(queryset: QuerySet) -> QuerySet:
        return queryset.annotate(
            average_rating=Coalesce(Avg('reviews__rating'), Value(0.0), output_field=FloatField()),
            review_count=Count('reviews'),
        )

    def get_profile(self, user) -> Business:
        require_role(user, UserRole.BUSINESS_OWNER)
        return get_owned_business(user)

    def update_profile(self, user, data: Dict[str, Any]) -> Business:
        """Replace the editable profile fields. Blank optional fields are cleared."""
        require_role(user, UserRole.BUSINESS_OWNER)
        self._check_required_profile_fields(data)

        business = get_owned_business(user)

        for field in REQUIRED_PROFILE_FIELDS:
            setattr(business, field, data[field])
        for field in OPTIONAL_PROFILE_FIELDS:
            setattr(business, field, data.get(field) or None)
        business.save()

        self.invalidate_public_profile(business.slug)
        logger.info(f"Updated profile of business {business.id}")
        return business

    # ==========================================================================
    # Services
    # ==========================================================================

    def list_services(self, user) -> List[Service]:
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user)
        return list(business.services.order_by('-created_at'))

    def create_service(self, user, data: Dict[str, Any]) -> Service:
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user)

        service = Service.objects.create(
            business=business,
            **{field: data[field] for field in SERVICE_FIELDS if field in data},
        )

        self.invalidate_public_profile(business.slug)
        logger.info(f"Created service {service.id} for business {business.id}")
        return service

    def update_service(self, user, service_id, data: Dict[str, Any]) -> Service:
        """Partial update of an owned service."""
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user)
        service = self._get_owned_service(business, service_id)

        changed = [field for field in SERVICE_FIELDS if field in data]
        for field in changed:
            setattr(service, field, data[field])
        if changed:
            service.save(update_fields=changed + ['updated_at'])

        self.invalidate_public_profile(business.slug)
        logger.info(f"Updated service {service.id}: {', '.join(changed) or 'no changes'}")
        return service

    def deactivate_service(self, user, service_id) -> Service:
        """Services are never hard-deleted; existing bookings still point at them."""
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user)
        service = self._get_owned_service(business, service_id)

        service.is_active = False
        service.save(update_fields=['is_active', 'updated_at'])

        self.invalidate_public_profile(business.slug)
        logger.info(f"Deactivated service {service.id}")
        return service

    # ==========================================================================
    # Photos
    # ==========================================================================

    def list_photos(self, user, business_id) -> List[BusinessPhoto]:
        """Active photos, hero first, then by display order and newest."""
        from . import InvalidRequestError

        if not business_id:
            raise InvalidRequestError('Business ID required')

        business = get_owned_business(user, business_id)

        return list(
            BusinessPhoto.objects
            .filter(business=business, is_active=True)
            .annotate(
                hero_rank=Case(
                    When(type=BusinessPhoto.Type.HERO, then=Value(0)),
                    default=Value(1),
                    output_field=IntegerField(),
                )
            )
            .order_by('hero_rank', 'order', '-created_at')
        )

    def add_photo(
        self,
        user,
        business_id,
        url: str,
        photo_type: str = BusinessPhoto.Type.GALLERY,
        caption: Optional[str] = None,
        order: int = 0
    ) -> BusinessPhoto:
        """
        Record an uploaded photo.

        A new HERO demotes the current one in the same transaction, with
        the business row locked so concurrent promotions serialize.
        """
        from . import InvalidRequestError

        if not business_id or not url:
            raise InvalidRequestError('Missing required fields')

        business = get_owned_business(user, business_id)

        with transaction.atomic():
            if photo_type == BusinessPhoto.Type.HERO:
                self._claim_hero(business.id)

            photo = BusinessPhoto.objects.create(
                business=business,
                url=url,
                type=photo_type,
                caption=caption,
                order=order or 0,
            )

        self.invalidate_public_profile(business.slug)
        logger.info(f"Added {photo.type} photo {photo.id} to business {business.id}")
        return photo

    def update_photo(self, user, photo_id, data: Dict[str, Any]) -> BusinessPhoto:
        """Change type, caption or order. Promoting to HERO demotes the others."""
        from . import InvalidRequestError

        if not photo_id:
            raise InvalidRequestError('Photo ID required')

        photo = self._get_owned_photo(user, photo_id)

        with transaction.atomic():
            if data.get('type') == BusinessPhoto.Type.HERO:
                self._claim_hero(photo.business_id, exclude_photo_id=photo.id)

            for field in ('type', 'caption', 'order'):
                if field in data:
                    setattr(photo, field, data[field])
            photo.save()

        self.invalidate_public_profile(photo.business.slug)
        logger.info(f"Updated photo {photo.id}")
        return photo

    def delete_photo(self, user, photo_id) -> None:
        """
        Soft-delete a photo.

        The S3 object is removed first; a storage failure is logged and the
        record is still deactivated.
        """
        from . import InvalidRequestError, StorageError, StorageService

        if not photo_id:
            raise InvalidRequestError('Photo ID required')

        photo = self._get_owned_photo(user, photo_id)

        try:
            StorageService().delete_object(photo.url)
        except (StorageError, InvalidRequestError) as e:
            logger.warning(f"Could not delete stored object for photo {photo.id}: {e}")

        photo.is_active = False
        photo.save(update_fields=['is_active', 'updated_at'])

        self.invalidate_public_profile(photo.business.slug)
        logger.info(f"Deleted photo {photo.id}")

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def _claim_hero(business_id, exclude_photo_id=None) -> None:
        """Lock the business and demote its heroes. Call inside a transaction."""
        Business.objects.select_for_update().filter(id=business_id).first()
        BusinessPhoto.demote_heroes(business_id, exclude_photo_id=exclude_photo_id)

    @staticmethod
    def _check_required_profile_fields(data: Dict[str, Any]) -> None:
        from . import InvalidRequestError

        for field, label in REQUIRED_PROFILE_FIELDS.items():
            if not data.get(field):
                raise InvalidRequestError(f'{label} is required')

    @staticmethod
    def _get_owned_service(business: Business, service_id) -> Service:
        from . import NotFoundError

        parsed = parse_uuid(service_id)
        service = Service.objects.filter(id=parsed, business=business).first() if parsed else None
        if service is None:
            raise NotFoundError('Service not found')
        return service

    @staticmethod
    def _get_owned_photo(user, photo_id) -> BusinessPhoto:
        from . import NotFoundError

        owner_id = user_uuid(user)
        parsed = parse_uuid(photo_id)
        photo = None
        if parsed is not None:
            photo = (
                BusinessPhoto.objects
                .select_related('business')
                .filter(id=parsed, business__owner_id=owner_id, is_active=True)
                .first()
            )
        if photo is None:
            raise NotFoundError('Photo not found')
        return photo
