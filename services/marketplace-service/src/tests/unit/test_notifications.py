# services/marketplace-service/src/tests/unit/test_notifications.py
"""
Unit Tests for NotificationService
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from apps.core.services import NotificationService


@pytest.mark.django_db
class TestNotificationService:

    def test_booking_confirmation(self, paid_booking, mailoutbox):
        assert NotificationService.send_booking_confirmation(paid_booking) is True

        message = mailoutbox[0]
        assert message.subject == 'Booking Confirmation - Glow Studio'
        assert message.to == ['carla@example.com']
        assert message.from_email == 'noreply@test.local'
        assert str(paid_booking.id) in message.body
        assert 'Time: 10:00' in message.body

    def test_refund_processed(self, paid_booking, mailoutbox):
        NotificationService.send_refund_processed(paid_booking, Decimal('100'), 're_1')

        assert 'Refund Amount: $100' in mailoutbox[0].body
        assert 'Refund ID: re_1' in mailoutbox[0].body

    def test_cancellation_links_back_to_booking_page(self, paid_booking, mailoutbox):
        NotificationService.send_booking_cancellation(paid_booking)

        assert f'http://testserver/book/{paid_booking.business.slug}' in mailoutbox[0].body

    def test_skips_missing_recipient(self, paid_booking, mailoutbox):
        paid_booking.customer_email = None

        assert NotificationService.send_payment_receipt(paid_booking) is False
        assert mailoutbox == []

    @patch('apps.core.services.notification_service.send_mail', side_effect=OSError('smtp down'))
    def test_delivery_failure_is_reported(self, mock_send_mail, paid_booking):
        assert NotificationService.send_booking_confirmation(paid_booking) is False

    def test_customer_message_default_subject(self, mailoutbox):
        NotificationService.send_customer_message('a@example.com', 'Glow Studio', None, 'Hello')

        assert mailoutbox[0].subject == 'Message from Glow Studio'
        assert mailoutbox[0].body == 'Hello'
