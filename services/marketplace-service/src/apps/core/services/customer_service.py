# services/marketplace-service/src/apps/core/services/customer_service.py
"""
Customer Service

Per-business customer profiles derived from bookings, and the
communications log kept against them.
"""

import logging
from collections import Counter
from decimal import Decimal
from typing import Optional, Dict, Any, List, Tuple

from django.db import transaction

from shared.common.constants import UserRole
from shared.common.validators import parse_uuid

from apps.core.models import Booking, Business, Communication, CustomerProfile
from apps.core.policies import get_owned_business, require_role

from .notification_service import NotificationService

logger = logging.getLogger(__name__)

REGULAR_VISIT_THRESHOLD = 5
VIP_SPEND_THRESHOLD = Decimal('1000')


class CustomerService:
    """
    Service for the business-side customer book.

    Handles:
    - Building profiles from booking history
    - Customer detail with bookings and communications
    - Recording and delivering messages
    """

    def list_customers(self, user) -> List[CustomerProfile]:
        """
        Customer profiles of the owner's active business, most recent first.

        Profiles are built from the booking history the first time the list
        is requested.
        """
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user, active_only=True)

        if not CustomerProfile.objects.filter(business=business).exists():
            created = self.build_profiles(business)
            if created:
                logger.info(f"Built {created} customer profiles for business {business.id}")

        return list(
            CustomerProfile.objects
            .filter(business=business)
            .order_by('-last_visit', 'customer_name')
        )

    @transaction.atomic
    def build_profiles(self, business: Business) -> int:
        """
        Aggregate bookings per customer into CustomerProfile rows.

        Existing profiles are left untouched.
        """
        grouped: Dict[Any, Dict[str, Any]] = {}

        bookings = (
            Booking.objects
            .select_related('service')
            .filter(business=business)
            .order_by('-date')
        )

        for booking in bookings:
            entry = grouped.setdefault(booking.customer_id, {
                'name': booking.customer_name,
                'email': booking.customer_email,
                'first_visit': booking.date,
                'last_visit': booking.date,
                'visits': 0,
                'spent': Decimal('0.00'),
                'services': Counter(),
            })
            entry['visits'] += 1
            entry['spent'] += booking.total_price
            entry['services'][booking.service.name] += 1
            entry['first_visit'] = min(entry['first_visit'], booking.date)
            entry['last_visit'] = max(entry['last_visit'], booking.date)
            entry['name'] = entry['name'] or booking.customer_name
            entry['email'] = entry['email'] or booking.customer_email

        profiles = []
        for customer_id, entry in grouped.items():
            visits = entry['visits']
            spent = entry['spent']
            favorite = entry['services'].most_common(1)

            profiles.append(CustomerProfile(
                business=business,
                customer_id=customer_id,
                customer_name=entry['name'] or 'Unknown',
                customer_email=entry['email'] or '',
                first_visit=entry['first_visit'],
                last_visit=entry['last_visit'],
                total_visits=visits,
                total_spent=spent,
                average_spent=(spent / visits).quantize(Decimal('0.01')),
                favorite_service=favorite[0][0] if favorite else None,
                tags=['regular'] if visits > REGULAR_VISIT_THRESHOLD else ['new'],
                is_vip=spent > VIP_SPEND_THRESHOLD,
            ))

        # A concurrent first build may have inserted the same customers already
        CustomerProfile.objects.bulk_create(profiles, ignore_conflicts=True)
        return len(profiles)

    def get_customer(self, user, customer_id) -> Tuple[CustomerProfile, List[Communication], List[Booking]]:
        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user, active_only=True)
        customer = self._get_profile(business, customer_id)

        communications = list(customer.communications.order_by('-sent_at'))
        bookings = list(
            Booking.objects
            .select_related('service')
            .filter(business=business, customer_id=customer.customer_id)
            .order_by('-date', '-start_time')
        )
        return customer, communications, bookings

    def send_message(
        self,
        user,
        customer_id,
        content: str,
        message_type: str = Communication.Type.NOTE,
        subject: Optional[str] = None
    ) -> Communication:
        """
        Log a note, email or SMS against a customer.

        Emails are also delivered; the record is kept even if delivery fails.
        """
        from . import InvalidRequestError

        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user, active_only=True)
        customer = self._get_profile(business, customer_id)

        if not content:
            raise InvalidRequestError('content is required')

        communication = Communication.objects.create(
            business=business,
            customer=customer,
            type=message_type or Communication.Type.NOTE,
            subject=subject or None,
            content=content,
        )

        if communication.type == Communication.Type.EMAIL:
            NotificationService.send_customer_message(
                customer.customer_email,
                business.business_name,
                subject,
                content,
            )

        logger.info(f"Recorded {communication.type} {communication.id} for customer {customer.id}")
        return communication

    @staticmethod
    def _get_profile(business: Business, customer_id) -> CustomerProfile:
        from . import NotFoundError

        parsed = parse_uuid(customer_id)
        customer = None
        if parsed is not None:
            customer = CustomerProfile.objects.filter(id=parsed, business=business).first()
        if customer is None:
            raise NotFoundError('Customer not found')
        return customer
