# services/marketplace-service/src/apps/core/services/notification_service.py
"""
Notification Service

Transactional customer emails sent through Django's mail backend.
"""

import logging
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from apps.core.models import Booking

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Customer email delivery.

    Delivery never raises: failures are logged and reported as False so a
    booking or payment operation is not rolled back over an email.
    """

    @classmethod
    def send_booking_confirmation(cls, booking: Booking) -> bool:
        business_name = booking.business.business_name
        when = timezone.localtime(booking.start_time)
        body = (
            f"Hi {booking.customer_name or 'there'},\n\n"
            f"Your booking has been confirmed.\n\n"
            f"Business: {business_name}\n"
            f"Service: {booking.service.name}\n"
            f"Date: {when:%Y-%m-%d}\n"
            f"Time: {when:%H:%M}\n"
            f"Total: ${booking.total_price}\n\n"
            f"Booking ID: {booking.id}\n"
            f"You can manage your booking at: {settings.APP_BASE_URL}/bookings\n"
        )
        return cls._deliver(
            booking.customer_email,
            f"Booking Confirmation - {business_name}",
            body,
            booking_id=booking.id,
        )

    @classmethod
    def send_payment_receipt(cls, booking: Booking) -> bool:
        business_name = booking.business.business_name
        body = (
            f"Hi {booking.customer_name or 'there'},\n\n"
            f"This email confirms your payment has been processed.\n\n"
            f"Business: {business_name}\n"
            f"Service: {booking.service.name}\n"
            f"Amount Paid: ${booking.total_price}\n"
            f"Payment Date: {timezone.localdate():%Y-%m-%d}\n"
            f"Payment ID: {booking.stripe_payment_intent_id}\n"
        )
        return cls._deliver(
            booking.customer_email,
            f"Payment Receipt - {business_name}",
            body,
            booking_id=booking.id,
        )

    @classmethod
    def send_booking_cancellation(cls, booking: Booking) -> bool:
        business = booking.business
        when = timezone.localtime(booking.start_time)
        body = (
            f"Hi {booking.customer_name or 'there'},\n\n"
            f"Your booking has been cancelled. Here were the details:\n\n"
            f"Business: {business.business_name}\n"
            f"Service: {booking.service.name}\n"
            f"Date: {when:%Y-%m-%d}\n"
            f"Time: {when:%H:%M}\n\n"
            f"Booking ID: {booking.id}\n"
            f"If you need to book again, visit: {settings.APP_BASE_URL}/book/{business.slug}\n"
        )
        return cls._deliver(
            booking.customer_email,
            f"Booking Cancelled - {business.business_name}",
            body,
            booking_id=booking.id,
        )

    @classmethod
    def send_refund_processed(cls, booking: Booking, amount: Decimal, refund_id: str) -> bool:
        business_name = booking.business.business_name
        body = (
            f"Hi {booking.customer_name or 'there'},\n\n"
            f"Your refund has been processed successfully.\n\n"
            f"Business: {business_name}\n"
            f"Refund Amount: ${amount}\n"
            f"Refund ID: {refund_id}\n\n"
            f"The refund should appear in your account within 5-10 business days.\n"
        )
        return cls._deliver(
            booking.customer_email,
            f"Refund Processed - {business_name}",
            body,
            booking_id=booking.id,
        )

    @classmethod
    def send_customer_message(
        cls,
        recipient: str,
        business_name: str,
        subject: Optional[str],
        content: str
    ) -> bool:
        return cls._deliver(recipient, subject or f"Message from {business_name}", content)

    # ==========================================================================
    # Delivery
    # ==========================================================================

    @classmethod
    def _deliver(cls, recipient: Optional[str], subject: str, body: str, booking_id=None) -> bool:
        if not recipient:
            logger.warning(f"Skipping email '{subject}': no recipient", extra={'booking_id': str(booking_id)})
            return False

        try:
            send_mail(
                subject=subject,
                message=body,
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[recipient],
                fail_silently=False,
            )
        except Exception as e:
            logger.error(
                f"Failed to send email '{subject}' to {recipient}: {e}",
                extra={'booking_id': str(booking_id)}
            )
            return False

        logger.info(f"Sent email '{subject}' to {recipient}")
        return True
