# services/marketplace-service/src/tests/unit/test_policies.py
"""
Unit Tests for access policies
"""

import uuid
from unittest.mock import MagicMock

import pytest
from django.contrib.auth.models import AnonymousUser

from shared.common.exceptions import UnauthorizedException
from shared.common.constants import UserRole

from apps.core.policies import (
    IsBusinessOwner,
    can_cancel_booking,
    can_manage_booking,
    get_owned_booking,
    get_owned_business,
    has_role,
    require_role,
    user_uuid,
)
from apps.core.services import AuthorizationError, NotFoundError


class TestSessionHelpers:

    def test_has_role(self, owner_user, customer_user):
        assert has_role(owner_user, UserRole.BUSINESS_OWNER)
        assert not has_role(customer_user, UserRole.BUSINESS_OWNER)
        assert not has_role(AnonymousUser(), UserRole.CUSTOMER)
        assert not has_role(None, UserRole.CUSTOMER)

    def test_require_role(self, customer_user):
        require_role(customer_user, UserRole.CUSTOMER)

        with pytest.raises(AuthorizationError):
            require_role(customer_user, UserRole.BUSINESS_OWNER)

    def test_user_uuid(self, customer_user, customer_id):
        assert user_uuid(customer_user) == customer_id

    def test_user_uuid_rejects_non_uuid_subject(self, make_user):
        user = make_user()
        user.id = 'auth0|12345'

        with pytest.raises(AuthorizationError):
            user_uuid(user)

    def test_user_uuid_rejects_anonymous(self):
        with pytest.raises(AuthorizationError):
            user_uuid(AnonymousUser())


class TestIsBusinessOwner:

    def _request(self, user):
        request = MagicMock()
        request.user = user
        request.path = '/api/v1/business/'
        return request

    def test_owner_allowed(self, owner_user):
        assert IsBusinessOwner().has_permission(self._request(owner_user), None) is True

    def test_customer_gets_unauthorized(self, customer_user):
        with pytest.raises(UnauthorizedException):
            IsBusinessOwner().has_permission(self._request(customer_user), None)

    def test_anonymous_denied(self):
        assert IsBusinessOwner().has_permission(self._request(AnonymousUser()), None) is False


@pytest.mark.django_db
class TestOwnership:

    def test_get_owned_business(self, owner_user, create_business):
        business = create_business()

        assert get_owned_business(owner_user) == business
        assert get_owned_business(owner_user, str(business.id)) == business

    def test_get_owned_business_id_mismatch(self, owner_user, create_business):
        create_business()

        with pytest.raises(NotFoundError) as exc:
            get_owned_business(owner_user, str(uuid.uuid4()))
        assert str(exc.value) == 'Business not found'

        with pytest.raises(NotFoundError):
            get_owned_business(owner_user, 'garbage')

    def test_get_owned_business_active_only(self, owner_user, create_business):
        create_business(is_active=False)

        with pytest.raises(NotFoundError) as exc:
            get_owned_business(owner_user, active_only=True)
        assert str(exc.value) == 'No active business found'

    def test_get_owned_booking(self, owner_user, make_user, create_business, create_service,
                               create_booking, booking_day):
        business = create_business()
        booking = create_booking(business, create_service(business), booking_day)

        assert get_owned_booking(owner_user, str(booking.id)) == booking

        stranger = make_user(roles=['BUSINESS_OWNER'])
        create_business(business_name='Other', owner_id=uuid.UUID(stranger.id))
        with pytest.raises(NotFoundError):
            get_owned_booking(stranger, str(booking.id))

    def test_booking_parties(self, owner_user, customer_user, make_user, create_business,
                             create_service, create_booking, booking_day):
        business = create_business()
        booking = create_booking(business, create_service(business), booking_day)
        stranger = make_user()

        assert can_cancel_booking(owner_user, booking)
        assert can_cancel_booking(customer_user, booking)
        assert not can_cancel_booking(stranger, booking)

        assert can_manage_booking(owner_user, booking)
        assert not can_manage_booking(customer_user, booking)
