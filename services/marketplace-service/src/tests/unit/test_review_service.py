# services/marketplace-service/src/tests/unit/test_review_service.py
"""
Unit Tests for ReviewService
"""

import uuid

import pytest

from apps.core.models import Booking, Review
from apps.core.services import NotFoundError, ReviewNotAllowedError, ReviewService


@pytest.fixture
def completed_booking(create_business, create_service, create_booking, booking_day):
    business = create_business()
    service = create_service(business)
    return create_booking(business, service, booking_day, status=Booking.Status.COMPLETED)


@pytest.mark.django_db
class TestReviewEligibility:

    def setup_method(self):
        self.service = ReviewService()

    def test_eligible(self, customer_user, completed_booking):
        assert self.service.check_review_eligibility(customer_user, str(completed_booking.id)) == completed_booking

    def test_not_completed(self, customer_user, create_business, create_service, create_booking, booking_day):
        business = create_business()
        booking = create_booking(business, create_service(business), booking_day)

        with pytest.raises(ReviewNotAllowedError):
            self.service.check_review_eligibility(customer_user, str(booking.id))

    def test_other_customer(self, make_user, completed_booking):
        with pytest.raises(ReviewNotAllowedError):
            self.service.check_review_eligibility(make_user(), str(completed_booking.id))

    def test_already_reviewed(self, customer_user, customer_id, completed_booking):
        Review.objects.create(
            booking=completed_booking,
            business=completed_booking.business,
            customer_id=customer_id,
            rating=4,
        )

        with pytest.raises(ReviewNotAllowedError):
            self.service.check_review_eligibility(customer_user, str(completed_booking.id))

    def test_unknown_booking(self, customer_user):
        with pytest.raises(ReviewNotAllowedError):
            self.service.check_review_eligibility(customer_user, 'not-a-booking')


@pytest.mark.django_db
class TestCreateReview:

    def setup_method(self):
        self.service = ReviewService()

    def test_create_review(self, customer_user, customer_id, completed_booking):
        review = self.service.create_review(
            customer_user, str(completed_booking.id), rating=5, comment='Lovely cut'
        )

        assert review.rating == 5
        assert review.business_id == completed_booking.business_id
        assert review.customer_id == customer_id

    def test_business_id_must_match(self, customer_user, completed_booking):
        with pytest.raises(NotFoundError):
            self.service.create_review(
                customer_user, str(completed_booking.id), rating=5, business_id=str(uuid.uuid4())
            )

    def test_only_own_bookings(self, make_user, completed_booking):
        with pytest.raises(NotFoundError) as exc:
            self.service.create_review(make_user(), str(completed_booking.id), rating=5)
        assert str(exc.value) == 'Booking not found'

    def test_only_completed(self, customer_user, create_business, create_service, create_booking, booking_day):
        business = create_business()
        booking = create_booking(business, create_service(business), booking_day)

        with pytest.raises(ReviewNotAllowedError) as exc:
            self.service.create_review(customer_user, str(booking.id), rating=3)
        assert str(exc.value) == 'Can only review completed bookings'

    def test_one_review_per_booking(self, customer_user, completed_booking):
        self.service.create_review(customer_user, str(completed_booking.id), rating=4)

        with pytest.raises(ReviewNotAllowedError) as exc:
            self.service.create_review(customer_user, str(completed_booking.id), rating=1)
        assert str(exc.value) == 'Review already submitted for this booking'
        assert Review.objects.count() == 1
