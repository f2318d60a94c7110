# services/marketplace-service/src/apps/core/policies.py
"""
Access Policies

Every role and ownership decision goes through this module. Views attach
the permission classes; services call the lookup helpers so that a resource
the requester does not own is reported exactly like one that does not exist.
"""

import uuid
import logging
from typing import Optional

from shared.common.constants import UserRole
from shared.common.permissions import HasRole
from shared.common.validators import parse_uuid

from .models import Business, Booking

logger = logging.getLogger(__name__)


# ==========================================================================
# Permission classes
# ==========================================================================

class IsBusinessOwner(HasRole):
    """Session must carry the BUSINESS_OWNER role."""
    required_roles = [UserRole.BUSINESS_OWNER.value]


# ==========================================================================
# Session helpers
# ==========================================================================

def has_role(user, role: UserRole) -> bool:
    if not user or not getattr(user, 'is_authenticated', False):
        return False
    return role.value in (getattr(user, 'roles', None) or [])


def require_role(user, role: UserRole) -> None:
    from .services import AuthorizationError

    if not has_role(user, role):
        raise AuthorizationError()


def user_uuid(user) -> uuid.UUID:
    """Session subject as a UUID."""
    from .services import AuthorizationError

    if not user or not getattr(user, 'is_authenticated', False):
        raise AuthorizationError()

    value = parse_uuid(getattr(user, 'id', None))
    if value is None:
        logger.warning(f"Session subject is not a UUID: {getattr(user, 'id', None)!r}")
        raise AuthorizationError()
    return value


# ==========================================================================
# Ownership checks
# ==========================================================================

def get_owned_business(
    user,
    business_id=None,
    active_only: bool = False
) -> Business:
    """
    The requester's business.

    With ``business_id`` the business must also match that id. Any mismatch
    raises NotFoundError.
    """
    from .services import NotFoundError

    filters = {'owner_id': user_uuid(user)}
    if business_id is not None:
        parsed = parse_uuid(business_id)
        if parsed is None:
            raise NotFoundError('Business not found')
        filters['id'] = parsed
    if active_only:
        filters['is_active'] = True

    try:
        return Business.objects.get(**filters)
    except Business.DoesNotExist:
        raise NotFoundError('No active business found' if active_only else 'Business not found')


def get_owned_booking(
    user,
    booking_id,
    business: Optional[Business] = None
) -> Booking:
    """A booking belonging to the requester's business."""
    from .services import NotFoundError

    business = business or get_owned_business(user)
    parsed = parse_uuid(booking_id)
    booking = None
    if parsed is not None:
        booking = (
            Booking.objects
            .select_related('business', 'service')
            .filter(id=parsed, business=business)
            .first()
        )
    if booking is None:
        raise NotFoundError('Booking not found')
    return booking


def is_booking_customer(user, booking: Booking) -> bool:
    return str(booking.customer_id) == str(getattr(user, 'id', None))


def is_booking_owner(user, booking: Booking) -> bool:
    return str(booking.business.owner_id) == str(getattr(user, 'id', None))


def can_manage_booking(user, booking: Booking) -> bool:
    """Owner-side mutations: status changes, completion."""
    return has_role(user, UserRole.BUSINESS_OWNER) and is_booking_owner(user, booking)


def can_cancel_booking(user, booking: Booking) -> bool:
    """Either party to the booking may cancel or refund it."""
    return is_booking_customer(user, booking) or is_booking_owner(user, booking)
