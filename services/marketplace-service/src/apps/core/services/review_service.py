# services/marketplace-service/src/apps/core/services/review_service.py
"""
Review Service

Gatekeeping and creation of customer reviews.
"""

import logging
from typing import Optional

from django.db import IntegrityError, transaction

from shared.common.validators import parse_uuid

from apps.core.models import Booking, Review
from apps.core.policies import is_booking_customer, user_uuid

logger = logging.getLogger(__name__)


class ReviewService:
    """
    A booking can be reviewed once, by its customer, after it is COMPLETED.
    """

    def check_review_eligibility(self, user, booking_id) -> Booking:
        """
        Return the booking if the requester may review it now.

        Raises ReviewNotAllowedError otherwise, without saying why.
        """
        from . import ReviewNotAllowedError

        parsed = parse_uuid(booking_id)
        booking = None
        if parsed is not None:
            booking = Booking.objects.select_related('business', 'service').filter(id=parsed).first()

        if (
            booking is None
            or not is_booking_customer(user, booking)
            or booking.status != Booking.Status.COMPLETED
            or Review.objects.filter(booking=booking).exists()
        ):
            raise ReviewNotAllowedError('Review not available for this booking')

        return booking

    def create_review(
        self,
        user,
        booking_id,
        rating: int,
        comment: Optional[str] = None,
        business_id=None
    ) -> Review:
        from . import NotFoundError, ReviewNotAllowedError

        customer_id = user_uuid(user)

        filters = {'id': parse_uuid(booking_id), 'customer_id': customer_id}
        if business_id is not None:
            filters['business_id'] = parse_uuid(business_id)

        booking = None
        if all(value is not None for value in filters.values()):
            booking = Booking.objects.filter(**filters).first()
        if booking is None:
            raise NotFoundError('Booking not found')

        if booking.status != Booking.Status.COMPLETED:
            raise ReviewNotAllowedError('Can only review completed bookings')

        if Review.objects.filter(booking=booking).exists():
            raise ReviewNotAllowedError('Review already submitted for this booking')

        try:
            with transaction.atomic():
                review = Review.objects.create(
                    booking=booking,
                    business_id=booking.business_id,
                    customer_id=customer_id,
                    rating=rating,
                    comment=comment,
                )
        except IntegrityError:
            raise ReviewNotAllowedError('Review already submitted for this booking')

        logger.info(f"Review {review.id} ({rating}/5) submitted for booking {booking.id}")
        return review
