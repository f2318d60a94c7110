# services/marketplace-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for marketplace service tests.
"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from shared.common.authentication import TokenUser


@pytest.fixture(autouse=True)
def clear_cache():
    """The locmem cache outlives a test; start each one empty."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Provide API client for testing."""
    return APIClient()


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def customer_id():
    return uuid.uuid4()


@pytest.fixture
def booking_day():
    """A Wednesday two weeks out; far enough for the cancellation window."""
    day = timezone.localdate() + timedelta(days=14)
    return day + timedelta(days=(2 - day.weekday()) % 7)


# =============================================================================
# Sessions
# =============================================================================

@pytest.fixture
def make_user():
    """Factory for token users, as JWTAuthentication would build them."""

    def _make_user(user_id=None, roles=None, **claims):
        payload = {
            'sub': str(user_id or uuid.uuid4()),
            'email': 'user@example.com',
            'name': 'Test User',
            'roles': roles if roles is not None else ['CUSTOMER'],
        }
        payload.update(claims)
        return TokenUser(payload)

    return _make_user


@pytest.fixture
def owner_user(make_user, owner_id):
    return make_user(owner_id, roles=['BUSINESS_OWNER'], email='owner@example.com', name='Olivia Owner')


@pytest.fixture
def customer_user(make_user, customer_id):
    return make_user(customer_id, roles=['CUSTOMER'], email='carla@example.com', name='Carla Customer')


@pytest.fixture
def owner_client(owner_user):
    client = APIClient()
    client.force_authenticate(user=owner_user)
    return client


@pytest.fixture
def customer_client(customer_user):
    client = APIClient()
    client.force_authenticate(user=customer_user)
    return client


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture
def sample_profile_data():
    """Provide sample business profile data (model field names)."""
    return {
        'business_name': 'Glow Studio',
        'category': 'HAIR_SALON',
        'address': '12 Main St',
        'city': 'Springfield',
        'state': 'IL',
        'zip_code': '62701',
        'phone': '555-0100',
        'description': 'Cuts and colour',
        'email': 'hello@glow.example',
    }


@pytest.fixture
def create_business(owner_id):
    """Factory fixture for creating businesses."""
    from apps.core.models import Business

    def _create_business(**kwargs):
        name = kwargs.pop('business_name', 'Glow Studio')
        defaults = {
            'owner_id': owner_id,
            'business_name': name,
            'slug': Business.generate_unique_slug(name),
            'category': Business.Category.HAIR_SALON,
            'address': '12 Main St',
            'city': 'Springfield',
            'state': 'IL',
            'zip_code': '62701',
            'phone': '555-0100',
        }
        defaults.update(kwargs)

        return Business.objects.create(**defaults)

    return _create_business


@pytest.fixture
def create_service():
    """Factory fixture for creating services."""
    from apps.core.models import Service

    def _create_service(business, **kwargs):
        defaults = {
            'business': business,
            'name': 'Haircut',
            'category': 'Hair',
            'price': Decimal('100.00'),
            'duration': 60,
        }
        defaults.update(kwargs)

        return Service.objects.create(**defaults)

    return _create_service


@pytest.fixture
def create_availability():
    """Factory fixture for weekly opening rules."""
    from apps.core.models import Availability

    def _create_availability(business, day_of_week, start='09:00', end='17:00', **kwargs):
        return Availability.objects.create(
            business=business,
            day_of_week=day_of_week,
            start_time=datetime.strptime(start, '%H:%M').time(),
            end_time=datetime.strptime(end, '%H:%M').time(),
            **kwargs
        )

    return _create_availability


@pytest.fixture
def create_time_off():
    from apps.core.models import TimeOff

    def _create_time_off(business, date, start=None, end=None, reason=None):
        return TimeOff.objects.create(
            business=business,
            date=date,
            start_time=datetime.strptime(start, '%H:%M').time() if start else None,
            end_time=datetime.strptime(end, '%H:%M').time() if end else None,
            reason=reason,
        )

    return _create_time_off


@pytest.fixture
def create_booking(customer_id):
    """Factory fixture for creating bookings at a local date and HH:MM."""
    from apps.core.models import Booking

    def _create_booking(business, service, day, at='10:00', **kwargs):
        clock = datetime.strptime(at, '%H:%M').time()
        start = timezone.make_aware(datetime.combine(day, clock))
        defaults = {
            'business': business,
            'service': service,
            'customer_id': customer_id,
            'customer_name': 'Carla Customer',
            'customer_email': 'carla@example.com',
            'date': day,
            'start_time': start,
            'end_time': start + timedelta(minutes=service.duration),
            'status': Booking.Status.CONFIRMED,
            'total_price': service.price,
        }
        defaults.update(kwargs)

        return Booking.objects.create(**defaults)

    return _create_booking


@pytest.fixture
def create_photo():
    from apps.core.models import BusinessPhoto

    def _create_photo(business, **kwargs):
        defaults = {
            'business': business,
            'url': f"https://test-bucket.s3.us-east-1.amazonaws.com/businesses/{business.id}/gallery/{uuid.uuid4().hex}.jpg",
            'type': BusinessPhoto.Type.GALLERY,
        }
        defaults.update(kwargs)

        return BusinessPhoto.objects.create(**defaults)

    return _create_photo


@pytest.fixture
def paid_booking(create_business, create_service, create_booking, booking_day):
    """A confirmed, paid booking at a Stripe-enabled business."""
    from apps.core.models import Booking

    business = create_business(stripe_account_id='acct_test123', stripe_onboarded=True)
    service = create_service(business)
    return create_booking(
        business,
        service,
        booking_day,
        payment_status=Booking.PaymentStatus.SUCCEEDED,
        stripe_payment_intent_id='pi_test123',
    )


@pytest.fixture
def create_review(create_booking, booking_day):
    """Factory for a review on a fresh completed booking."""
    from apps.core.models import Booking, Review

    def _create_review(business, service, rating, at='09:00', day=None, comment=None, **booking_kwargs):
        booking = create_booking(
            business, service, day or booking_day, at=at,
            status=Booking.Status.COMPLETED,
            **booking_kwargs
        )
        return Review.objects.create(
            booking=booking,
            business=business,
            customer_id=booking.customer_id,
            rating=rating,
            comment=comment,
        )

    return _create_review
