# services/marketplace-service/src/apps/core/services/availability_service.py
"""
Availability Service

Resolves booked and bookable slots and manages opening hours and time off.
"""

import logging
from datetime import datetime, date, time, timedelta
from typing import Optional, Dict, Any, List

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from shared.common.constants import UserRole
from shared.common.validators import (
    parse_uuid,
    validate_iso_date,
    validate_time_range,
)

from apps.core.models import Availability, Booking, Service, TimeOff
from apps.core.policies import get_owned_business, require_role

from .business_service import BusinessService

logger = logging.getLogger(__name__)

SLOT_INTERVAL_MINUTES = 30
CLOSED_REASON = 'Business is closed on this day'


class AvailabilityService:
    """
    Service for availability resolution.

    Handles:
    - Booked slot lookup
    - Day view (opening hours, time off, bookings)
    - Bookable slot computation
    - Weekly schedule replacement
    - Time-off CRUD
    """

    # ==========================================================================
    # Slot Resolution
    # ==========================================================================

    def get_booked_slots(self, business_id, date_value, service_id) -> List[str]:
        """
        Start times (local HH:MM) of PENDING/CONFIRMED bookings on a date.

        Read-only. All three arguments are required.
        """
        business_uuid, day = self._parse_slot_query(business_id, date_value, service_id)
        if business_uuid is None:
            return []

        return [
            booking.local_start
            for booking in Booking.get_active_for_date(business_uuid, day)
        ]

    def get_day_availability(self, business_id, date_value, service_id) -> Dict[str, Any]:
        """Booked slots merged with time off and the weekday's opening window."""
        business_uuid, day = self._parse_slot_query(business_id, date_value, service_id)

        time_offs = list(TimeOff.objects.filter(business_id=business_uuid, date=day)) if business_uuid else []

        full_day = next((t for t in time_offs if t.is_full_day), None)
        if full_day:
            return {
                'bookedSlots': [],
                'isClosedDay': True,
                'reason': full_day.reason or CLOSED_REASON,
            }

        rules = list(Availability.get_active_for_date(business_uuid, day)) if business_uuid else []
        if not rules:
            return {
                'bookedSlots': [],
                'isClosedDay': True,
                'reason': CLOSED_REASON,
            }

        booked = [
            booking.local_start
            for booking in Booking.get_active_for_date(business_uuid, day)
        ]
        for time_off in time_offs:
            booked.extend(self._steps(time_off.start_time, time_off.end_time))

        return {
            'bookedSlots': booked,
            'availability': {
                'startTime': min(r.start_time for r in rules).strftime('%H:%M'),
                'endTime': max(r.end_time for r in rules).strftime('%H:%M'),
            },
            'isClosedDay': False,
        }

    def get_available_slots(self, business_id, date_value, service_id) -> List[str]:
        """
        Bookable start times for a service on a date.

        Candidates are 30-minute steps inside each active rule where the
        whole service fits; any candidate overlapping a slot-holding booking
        or a partial time off is dropped.
        """
        from . import NotFoundError

        business_uuid, day = self._parse_slot_query(business_id, date_value, service_id)
        service_uuid = parse_uuid(service_id)
        service = None
        if business_uuid and service_uuid:
            service = Service.objects.filter(
                id=service_uuid,
                business_id=business_uuid,
                is_active=True,
            ).first()
        if service is None:
            raise NotFoundError('Service not found')

        time_offs = list(TimeOff.objects.filter(business_id=business_uuid, date=day))
        if any(t.is_full_day for t in time_offs):
            return []

        blocked = [
            (booking.start_time, booking.end_time)
            for booking in Booking.get_active_for_date(business_uuid, day)
        ]
        blocked.extend(
            (self._aware(day, t.start_time), self._aware(day, t.end_time))
            for t in time_offs
        )

        duration = timedelta(minutes=service.duration)
        step = timedelta(minutes=SLOT_INTERVAL_MINUTES)
        slots = set()

        for rule in Availability.get_active_for_date(business_uuid, day):
            cursor = self._aware(day, rule.start_time)
            rule_end = self._aware(day, rule.end_time)

            while cursor + duration <= rule_end:
                end = cursor + duration
                if not any(start < end and stop > cursor for start, stop in blocked):
                    slots.add(timezone.localtime(cursor).strftime('%H:%M'))
                cursor += step

        return sorted(slots)

    def get_time_off_dates(self, business_id) -> List[str]:
        """ISO dates of upcoming full-day closures."""
        from . import InvalidRequestError

        if not business_id:
            raise InvalidRequestError('Business ID required')

        business_uuid = parse_uuid(business_id)
        if business_uuid is None:
            return []

        dates = TimeOff.objects.filter(
            business_id=business_uuid,
            date__gte=timezone.localdate(),
            start_time__isnull=True,
            end_time__isnull=True,
        ).order_by('date').values_list('date', flat=True)

        return [value.isoformat() for value in dates]

    # ==========================================================================
    # Weekly Schedule
    # ==========================================================================

    def replace_weekly_schedule(
        self,
        user,
        business_id,
        availabilities: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """
        Replace every availability rule of the owner's business.

        Ownership is confirmed before anything is deleted; the delete and
        the bulk insert then run in one transaction.
        """
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user, business_id)

        rules = [
            Availability(
                business=business,
                day_of_week=entry['day_of_week'],
                start_time=entry['start_time'],
                end_time=entry['end_time'],
                is_active=entry.get('is_active', True),
            )
            for entry in availabilities
        ]

        with transaction.atomic():
            Availability.objects.filter(business=business).delete()
            created = Availability.objects.bulk_create(rules)

        logger.info(
            f"Replaced weekly schedule for business {business.id} "
            f"with {len(created)} rules"
        )

        BusinessService.invalidate_public_profile(business.slug)

        return {'success': True, 'count': len(created)}

    def get_weekly_schedule(self, user) -> List[Availability]:
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user)
        return list(
            Availability.objects.filter(business=business).order_by('day_of_week', 'start_time')
        )

    # ==========================================================================
    # Time Off
    # ==========================================================================

    @transaction.atomic
    def create_time_off(
        self,
        user,
        business_id,
        date_value: date,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
        reason: Optional[str] = None
    ) -> TimeOff:
        """Block a whole day, or a range when both ends are given."""
        from . import InvalidRequestError

        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user, business_id)

        if (start_time is None) != (end_time is None):
            raise InvalidRequestError('Both startTime and endTime are required for a partial closure')
        if start_time is not None:
            try:
                validate_time_range(start_time, end_time)
            except DjangoValidationError as e:
                raise InvalidRequestError(e.messages[0])

        time_off = TimeOff.objects.create(
            business=business,
            date=date_value,
            start_time=start_time,
            end_time=end_time,
            reason=reason or None,
        )

        logger.info(f"Created time off {time_off.id} for business {business.id} on {date_value}")
        return time_off

    def list_time_off(self, user) -> List[TimeOff]:
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user)
        return list(TimeOff.objects.filter(business=business).order_by('date', 'start_time'))

    def delete_time_off(self, user, time_off_id) -> None:
        from . import InvalidRequestError, NotFoundError

        require_role(user, UserRole.BUSINESS_OWNER)
        if not time_off_id:
            raise InvalidRequestError('Time off ID is required')

        business = get_owned_business(user)
        parsed = parse_uuid(time_off_id)
        deleted = 0
        if parsed is not None:
            deleted, _ = TimeOff.objects.filter(id=parsed, business=business).delete()

        if not deleted:
            raise NotFoundError('Time off not found')

        logger.info(f"Deleted time off {time_off_id} for business {business.id}")

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _parse_slot_query(self, business_id, date_value, service_id):
        """Validate the (business, date, service) triple shared by slot lookups."""
        from . import InvalidRequestError

        if not business_id or not date_value or not service_id:
            raise InvalidRequestError('Missing required parameters')

        try:
            day = validate_iso_date(date_value)
        except DjangoValidationError as e:
            raise InvalidRequestError(e.messages[0])

        return parse_uuid(business_id), day

    @staticmethod
    def _aware(day: date, clock: time) -> datetime:
        return timezone.make_aware(datetime.combine(day, clock))

    @staticmethod
    def _steps(start: time, end: time) -> List[str]:
        """HH:MM labels every 30 minutes over [start, end)."""
        labels = []
        cursor = datetime.combine(date.min, start)
        stop = datetime.combine(date.min, end)
        while cursor < stop:
            labels.append(cursor.strftime('%H:%M'))
            cursor += timedelta(minutes=SLOT_INTERVAL_MINUTES)
        return labels
