# services/marketplace-service/src/apps/core/services/booking_service.py
"""
Booking Service

Core business logic for the booking lifecycle.
"""

import logging
from datetime import datetime, date, timedelta
from typing import Optional, Dict, Any, List, Tuple

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from shared.common.constants import UserRole
from shared.common.validators import parse_uuid, validate_clock_time, validate_iso_date

from apps.core.models import Booking, Business, Service
from apps.core.policies import (
    can_cancel_booking,
    get_owned_booking,
    get_owned_business,
    is_booking_customer,
    is_booking_owner,
    require_role,
    user_uuid,
)

from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class BookingService:
    """
    Service for booking management.

    Handles:
    - Booking creation with conflict detection
    - Status workflow enforcement
    - Completion and cancellation
    - Customer and business booking lists
    """

    # ==========================================================================
    # Scheduling helpers
    # ==========================================================================

    @staticmethod
    def parse_schedule(date_value, time_value) -> Tuple[date, datetime]:
        """
        Calendar date and aware start datetime from ``YYYY-MM-DD`` / ``HH:MM``.
        """
        from . import InvalidRequestError

        try:
            day = validate_iso_date(date_value)
            clock = validate_clock_time(time_value)
        except DjangoValidationError:
            raise InvalidRequestError()

        return day, timezone.make_aware(datetime.combine(day, clock))

    @staticmethod
    def ensure_slot_free(
        business_id,
        start: datetime,
        end: datetime,
        exclude_booking_id=None
    ) -> None:
        """Raise BookingConflictError if [start, end) overlaps a held slot."""
        from . import BookingConflictError

        conflicts = Booking.get_conflicts(business_id, start, end, exclude_booking_id)
        if conflicts.exists():
            logger.info(
                f"Slot conflict for business {business_id} at {start.isoformat()}",
                extra={'conflicting_booking_ids': [str(pk) for pk in conflicts.values_list('id', flat=True)]}
            )
            raise BookingConflictError()

    @staticmethod
    def lock_business(business_id) -> Optional[Business]:
        """
        Row-lock the business so concurrent bookings for it serialize.

        Must be called inside a transaction.
        """
        return Business.objects.select_for_update().filter(id=business_id).first()

    # ==========================================================================
    # Creation
    # ==========================================================================

    def create_booking(
        self,
        user,
        business_id,
        service_id,
        date_value,
        time_value,
        notes: Optional[str] = None
    ) -> Booking:
        """
        Book a service without online payment.

        The booking is CONFIRMED immediately and priced at the service price.
        """
        from . import InvalidRequestError

        customer_id = user_uuid(user)

        if not business_id or not service_id:
            raise InvalidRequestError()
        day, start = self.parse_schedule(date_value, time_value)

        business_uuid = parse_uuid(business_id)
        service_uuid = parse_uuid(service_id)
        service = None
        if business_uuid and service_uuid:
            service = Service.objects.filter(id=service_uuid, business_id=business_uuid).first()
        if service is None:
            raise InvalidRequestError('Invalid service')

        end = start + timedelta(minutes=service.duration)

        with transaction.atomic():
            self.lock_business(service.business_id)
            self.ensure_slot_free(service.business_id, start, end)

            booking = Booking.objects.create(
                business_id=service.business_id,
                service=service,
                customer_id=customer_id,
                customer_name=getattr(user, 'name', None),
                customer_email=getattr(user, 'email', None),
                date=day,
                start_time=start,
                end_time=end,
                status=Booking.Status.CONFIRMED,
                total_price=service.price,
                notes=notes or None,
            )

        logger.info(
            f"Created booking {booking.id} for customer {customer_id}",
            extra={'business_id': str(service.business_id), 'service_id': str(service.id)}
        )
        return booking

    # ==========================================================================
    # Status workflow
    # ==========================================================================

    def update_status(self, user, booking_id, status: str) -> Booking:
        """Owner-driven status change, checked against the transition table."""
        from . import InvalidRequestError

        require_role(user, UserRole.BUSINESS_OWNER)

        if status not in Booking.Status.values:
            raise InvalidRequestError('Invalid status')

        booking = get_owned_booking(user, booking_id)
        return self.transition(booking, status)

    def complete_booking(self, user, booking_id) -> Booking:
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user, active_only=True)
        booking = get_owned_booking(user, booking_id, business=business)
        return self.transition(booking, Booking.Status.COMPLETED)

    def cancel_booking(self, user, booking_id, reason: Optional[str] = None) -> Dict[str, Any]:
        """
        Cancel on behalf of the customer or the business owner.

        Customers must cancel at least CANCELLATION_WINDOW_HOURS ahead;
        owners may cancel at any time.
        """
        from . import InvalidRequestError, NotFoundError

        user_uuid(user)
        if not booking_id:
            raise InvalidRequestError('Booking ID is required')

        with transaction.atomic():
            booking = self._get_booking(booking_id, lock=True)
            if booking is None:
                raise NotFoundError('Booking not found')
            self._cancel_locked(user, booking, reason)

        NotificationService.send_booking_cancellation(booking)

        paid = booking.payment_status == Booking.PaymentStatus.SUCCEEDED
        is_customer = is_booking_customer(user, booking)
        return {
            'success': True,
            'booking': {
                'id': str(booking.id),
                'status': booking.status,
                'message': (
                    'Booking cancelled. Please request a refund if applicable.'
                    if paid and is_customer
                    else 'Booking cancelled successfully.'
                ),
            },
        }

    def _cancel_locked(self, user, booking: Booking, reason: Optional[str]) -> None:
        from . import BookingStateError, PermissionDeniedError

        if not can_cancel_booking(user, booking):
            raise PermissionDeniedError('Not authorized to cancel this booking')

        if booking.status == Booking.Status.CANCELLED:
            raise BookingStateError('Booking is already cancelled')
        if booking.status == Booking.Status.COMPLETED:
            raise BookingStateError('Completed bookings cannot be cancelled')

        is_customer = is_booking_customer(user, booking)
        acting_as_customer = is_customer and not is_booking_owner(user, booking)

        if acting_as_customer and booking.hours_until_start < settings.CANCELLATION_WINDOW_HOURS:
            raise BookingStateError(
                f'Cancellations must be made at least {settings.CANCELLATION_WINDOW_HOURS} hours '
                f'before the appointment. Contact the business directly for assistance.'
            )

        if reason:
            booking.append_note(f"Cancellation reason: {reason}")
        self.transition(booking, Booking.Status.CANCELLED)

    @staticmethod
    def transition(booking: Booking, status: str) -> Booking:
        """
        Move ``booking`` to ``status`` through ALLOWED_TRANSITIONS.

        Every status write goes through here, including the payment paths.
        """
        from . import BookingStateError

        if not booking.can_transition_to(status):
            raise BookingStateError(
                f"Cannot change booking status from {booking.status} to {status}"
            )

        if status == booking.status:
            return booking

        booking.status = status
        booking.save(update_fields=['status', 'notes', 'updated_at'])
        return booking

    # ==========================================================================
    # Queries
    # ==========================================================================

    def list_customer_bookings(self, user) -> List[Booking]:
        customer_id = user_uuid(user)
        return list(
            Booking.objects
            .select_related('business', 'service')
            .filter(customer_id=customer_id)
            .order_by('-start_time')
        )

    def list_business_bookings(self, user) -> QuerySet:
        """Bookings of the owner's active business; the caller applies filters."""
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user, active_only=True)
        return (
            Booking.objects
            .select_related('service')
            .filter(business=business)
            .order_by('start_time')
        )

    @staticmethod
    def _get_booking(booking_id, lock: bool = False) -> Optional[Booking]:
        parsed = parse_uuid(booking_id)
        if parsed is None:
            return None
        bookings = Booking.objects.select_for_update() if lock else Booking.objects
        return bookings.select_related('business', 'service').filter(id=parsed).first()
