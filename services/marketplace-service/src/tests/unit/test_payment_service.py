# services/marketplace-service/src/tests/unit/test_payment_service.py
"""
Unit Tests for PaymentService

Every Stripe call is patched.
"""

import uuid
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import stripe
from django.utils import timezone

from apps.core.models import Booking, Business
from apps.core.services import (
    PaymentService,
    BookingService,
    BookingConflictError,
    BookingStateError,
    InvalidRequestError,
    NotFoundError,
    PaymentGatewayError,
    PermissionDeniedError,
    UpstreamError,
)

SETTINGS_URL = 'http://testserver/business/dashboard/settings'


@pytest.fixture
def connected_salon(create_business, create_service):
    business = create_business(stripe_account_id='acct_test123', stripe_onboarded=True)
    service = create_service(business, price=Decimal('100.00'), duration=60)
    return business, service


@pytest.fixture
def mock_intent_create():
    with patch('stripe.PaymentIntent.create') as mock_create:
        mock_create.return_value = MagicMock(id='pi_new', client_secret='pi_new_secret')
        yield mock_create


@pytest.mark.django_db
class TestCreatePaymentIntent:

    def setup_method(self):
        self.service = PaymentService()

    def test_create_payment_intent(self, customer_user, connected_salon, booking_day, mock_intent_create):
        business, service = connected_salon

        result = self.service.create_payment_intent(
            customer_user, str(business.id), str(service.id), booking_day.isoformat(), '10:00'
        )

        booking = Booking.objects.get(id=result['bookingId'])
        assert booking.status == Booking.Status.PENDING
        assert booking.payment_status == Booking.PaymentStatus.PENDING
        assert booking.stripe_payment_intent_id == 'pi_new'
        assert booking.platform_fee == Decimal('15.00')
        assert booking.stripe_fee == Decimal('3.20')
        assert booking.business_payout == Decimal('81.80')

        assert result['clientSecret'] == 'pi_new_secret'
        assert result['amount'] == Decimal('100.00')
        assert result['fees'] == {
            'platform': Decimal('15'),
            'stripe': Decimal('3.2'),
            'business': Decimal('81.8'),
        }

        kwargs = mock_intent_create.call_args.kwargs
        assert kwargs['amount'] == 10000
        assert kwargs['currency'] == 'usd'
        assert kwargs['application_fee_amount'] == 1500
        assert kwargs['transfer_data'] == {'destination': 'acct_test123'}
        assert kwargs['metadata']['time'] == '10:00'

    def test_pending_booking_holds_the_slot(self, customer_user, connected_salon, booking_day, mock_intent_create):
        business, service = connected_salon
        self.service.create_payment_intent(
            customer_user, str(business.id), str(service.id), booking_day.isoformat(), '10:00'
        )

        with pytest.raises(BookingConflictError):
            self.service.create_payment_intent(
                customer_user, str(business.id), str(service.id), booking_day.isoformat(), '10:30'
            )
        assert mock_intent_create.call_count == 1

    def test_business_without_stripe(self, customer_user, create_business, create_service, booking_day,
                                     mock_intent_create):
        business = create_business(stripe_account_id='acct_half', stripe_onboarded=False)
        service = create_service(business)

        with pytest.raises(InvalidRequestError) as exc:
            self.service.create_payment_intent(
                customer_user, str(business.id), str(service.id), booking_day.isoformat(), '10:00'
            )
        assert str(exc.value) == 'Business is not set up to accept payments'
        mock_intent_create.assert_not_called()

    def test_unknown_business(self, customer_user, booking_day, mock_intent_create):
        with pytest.raises(NotFoundError):
            self.service.create_payment_intent(
                customer_user, str(uuid.uuid4()), str(uuid.uuid4()), booking_day.isoformat(), '10:00'
            )

    def test_stripe_failure(self, customer_user, connected_salon, booking_day, mock_intent_create):
        business, service = connected_salon
        mock_intent_create.side_effect = stripe.StripeError('card network down')

        with pytest.raises(PaymentGatewayError) as exc:
            self.service.create_payment_intent(
                customer_user, str(business.id), str(service.id), booking_day.isoformat(), '10:00'
            )
        assert str(exc.value) == 'Failed to create payment intent'
        assert not Booking.objects.exists()


@pytest.mark.django_db
class TestRefunds:

    def setup_method(self):
        self.service = PaymentService()

    @pytest.fixture
    def mock_refund_create(self):
        with patch('stripe.Refund.create') as mock_create:
            mock_create.return_value = MagicMock(id='re_1', amount=10000, status='succeeded')
            yield mock_create

    def test_customer_refund(self, customer_user, paid_booking, mock_refund_create, mailoutbox):
        result = self.service.request_refund(customer_user, str(paid_booking.id), reason='Moving away')

        paid_booking.refresh_from_db()
        assert result == {
            'success': True,
            'refund': {'id': 're_1', 'amount': Decimal('100'), 'status': 'succeeded'},
        }
        assert paid_booking.status == Booking.Status.CANCELLED
        assert paid_booking.payment_status == Booking.PaymentStatus.REFUNDED
        assert 'Refund reason: Moving away' in paid_booking.notes
        mock_refund_create.assert_called_once_with(
            payment_intent='pi_test123',
            reason='requested_by_customer',
            metadata={'reason': 'Moving away'},
        )
        assert mailoutbox[0].subject == 'Refund Processed - Glow Studio'

    def test_unpaid_booking(self, customer_user, create_business, create_service, create_booking,
                            booking_day, mock_refund_create):
        business = create_business()
        booking = create_booking(business, create_service(business), booking_day)

        with pytest.raises(InvalidRequestError) as exc:
            self.service.request_refund(customer_user, str(booking.id))
        assert str(exc.value) == 'Only successful payments can be refunded'
        mock_refund_create.assert_not_called()

    def test_stranger(self, make_user, paid_booking, mock_refund_create):
        with pytest.raises(PermissionDeniedError):
            self.service.request_refund(make_user(), str(paid_booking.id))

    def test_inside_window(self, customer_user, owner_user, paid_booking, mock_refund_create):
        start = timezone.now() + timedelta(hours=3)
        paid_booking.start_time = start
        paid_booking.end_time = start + timedelta(hours=1)
        paid_booking.save()

        with pytest.raises(InvalidRequestError):
            self.service.request_refund(customer_user, str(paid_booking.id))

        result = self.service.request_refund(owner_user, str(paid_booking.id))
        assert result['success'] is True

    def test_stripe_failure_leaves_booking(self, customer_user, paid_booking, mock_refund_create):
        mock_refund_create.side_effect = stripe.StripeError('declined')

        with pytest.raises(PaymentGatewayError):
            self.service.request_refund(customer_user, str(paid_booking.id))

        paid_booking.refresh_from_db()
        assert paid_booking.status == Booking.Status.CONFIRMED
        assert paid_booking.payment_status == Booking.PaymentStatus.SUCCEEDED

    def test_completed_booking_is_final(self, owner_user, paid_booking, mock_refund_create):
        Booking.objects.filter(id=paid_booking.id).update(status=Booking.Status.COMPLETED)

        with pytest.raises(BookingStateError) as exc:
            self.service.request_refund(owner_user, str(paid_booking.id))
        assert str(exc.value) == 'Completed bookings cannot be refunded'
        mock_refund_create.assert_not_called()

        paid_booking.refresh_from_db()
        assert paid_booking.status == Booking.Status.COMPLETED
        assert paid_booking.payment_status == Booking.PaymentStatus.SUCCEEDED

    def test_no_show_booking_is_final(self, owner_user, paid_booking, mock_refund_create):
        Booking.objects.filter(id=paid_booking.id).update(status=Booking.Status.NO_SHOW)

        with pytest.raises(BookingStateError):
            self.service.request_refund(owner_user, str(paid_booking.id))
        mock_refund_create.assert_not_called()

    def test_refund_after_cancellation(self, customer_user, paid_booking, mock_refund_create):
        BookingService().cancel_booking(customer_user, str(paid_booking.id))

        self.service.request_refund(customer_user, str(paid_booking.id))

        paid_booking.refresh_from_db()
        assert paid_booking.status == Booking.Status.CANCELLED
        assert paid_booking.payment_status == Booking.PaymentStatus.REFUNDED


@pytest.mark.django_db
class TestConnectOnboarding:

    def setup_method(self):
        self.service = PaymentService()

    @patch('stripe.AccountLink.create')
    @patch('stripe.Account.create')
    def test_creates_account_once(self, mock_account_create, mock_link_create, owner_user, create_business):
        business = create_business()
        mock_account_create.return_value = MagicMock(id='acct_new')
        mock_link_create.return_value = MagicMock(url='https://connect.stripe.com/setup/abc')

        result = self.service.create_connect_account_link(owner_user, str(business.id))

        business.refresh_from_db()
        assert result == {'url': 'https://connect.stripe.com/setup/abc'}
        assert business.stripe_account_id == 'acct_new'
        assert mock_account_create.call_args.kwargs['type'] == 'express'
        assert mock_link_create.call_args.kwargs['return_url'].endswith(f'?businessId={business.id}')

        self.service.create_connect_account_link(owner_user, str(business.id))
        assert mock_account_create.call_count == 1

    @patch('stripe.Account.create', side_effect=stripe.StripeError('nope'))
    def test_account_creation_failure(self, mock_account_create, owner_user, create_business):
        business = create_business()

        with pytest.raises(PaymentGatewayError) as exc:
            self.service.create_connect_account_link(owner_user, str(business.id))
        assert str(exc.value) == 'Failed to create Stripe account'

    def test_callback_without_business(self):
        assert self.service.handle_connect_callback(None) == f'{SETTINGS_URL}?error=missing_business'

    def test_callback_unknown_business(self):
        assert self.service.handle_connect_callback(str(uuid.uuid4())) == f'{SETTINGS_URL}?error=invalid_business'

    @patch('stripe.Account.retrieve')
    def test_callback_completed(self, mock_retrieve, create_business):
        business = create_business(stripe_account_id='acct_1')
        mock_retrieve.return_value = {'id': 'acct_1', 'charges_enabled': True, 'payouts_enabled': True}

        target = self.service.handle_connect_callback(str(business.id))

        business.refresh_from_db()
        assert target == f'{SETTINGS_URL}?success=stripe_connected'
        assert business.stripe_onboarded is True

    @patch('stripe.Account.retrieve')
    def test_callback_incomplete(self, mock_retrieve, create_business):
        business = create_business(stripe_account_id='acct_1')
        mock_retrieve.return_value = {'id': 'acct_1', 'charges_enabled': True, 'payouts_enabled': False}

        target = self.service.handle_connect_callback(str(business.id))

        assert target == f'{SETTINGS_URL}?error=onboarding_incomplete'
        assert Business.objects.get(id=business.id).stripe_onboarded is False

    @patch('stripe.Account.retrieve', side_effect=stripe.StripeError('down'))
    def test_callback_stripe_error(self, mock_retrieve, create_business):
        business = create_business(stripe_account_id='acct_1')

        assert self.service.handle_connect_callback(str(business.id)) == f'{SETTINGS_URL}?error=stripe_error'

    def test_portal_without_account(self, owner_user, create_business):
        create_business()

        with pytest.raises(NotFoundError) as exc:
            self.service.create_portal_link(owner_user)
        assert str(exc.value) == 'Stripe account not found'

    @patch('stripe.Account.create_login_link')
    def test_portal_link(self, mock_login_link, owner_user, create_business):
        create_business(stripe_account_id='acct_1', stripe_onboarded=True)
        mock_login_link.return_value = MagicMock(url='https://connect.stripe.com/express/xyz')

        assert self.service.create_portal_link(owner_user) == {'url': 'https://connect.stripe.com/express/xyz'}
        mock_login_link.assert_called_once_with('acct_1')


@pytest.mark.django_db
class TestWebhooks:

    def setup_method(self):
        self.service = PaymentService()

    def _event(self, event_type, obj):
        return {'type': event_type, 'data': {'object': obj}}

    def test_missing_signature(self):
        with pytest.raises(InvalidRequestError) as exc:
            self.service.handle_webhook(b'{}', None)
        assert str(exc.value) == 'No signature'

    @patch('stripe.Webhook.construct_event')
    def test_invalid_signature(self, mock_construct):
        mock_construct.side_effect = stripe.SignatureVerificationError('bad', 't=1,v1=x')

        with pytest.raises(InvalidRequestError) as exc:
            self.service.handle_webhook(b'{}', 't=1,v1=x')
        assert str(exc.value) == 'Invalid signature'

    @patch('stripe.Webhook.construct_event')
    def test_payment_succeeded(self, mock_construct, connected_salon, create_booking, booking_day, mailoutbox):
        business, service = connected_salon
        booking = create_booking(
            business, service, booking_day,
            status=Booking.Status.PENDING,
            payment_status=Booking.PaymentStatus.PENDING,
            stripe_payment_intent_id='pi_paid',
        )
        mock_construct.return_value = self._event('payment_intent.succeeded', {'id': 'pi_paid'})

        assert self.service.handle_webhook(b'{}', 'sig') == {'received': True}

        booking.refresh_from_db()
        assert booking.status == Booking.Status.CONFIRMED
        assert booking.payment_status == Booking.PaymentStatus.SUCCEEDED
        assert [m.subject for m in mailoutbox] == [
            'Booking Confirmation - Glow Studio',
            'Payment Receipt - Glow Studio',
        ]
        mock_construct.assert_called_once_with(b'{}', 'sig', 'whsec_test_fake')

    @patch('stripe.Webhook.construct_event')
    def test_payment_failed(self, mock_construct, connected_salon, create_booking, booking_day):
        business, service = connected_salon
        booking = create_booking(
            business, service, booking_day,
            status=Booking.Status.PENDING,
            payment_status=Booking.PaymentStatus.PENDING,
            stripe_payment_intent_id='pi_failed',
        )
        mock_construct.return_value = self._event('payment_intent.payment_failed', {'id': 'pi_failed'})

        self.service.handle_webhook(b'{}', 'sig')

        booking.refresh_from_db()
        assert booking.payment_status == Booking.PaymentStatus.FAILED
        assert booking.status == Booking.Status.PENDING

    @patch('stripe.Webhook.construct_event')
    def test_unknown_intent_is_acknowledged(self, mock_construct):
        mock_construct.return_value = self._event('payment_intent.succeeded', {'id': 'pi_ghost'})

        assert self.service.handle_webhook(b'{}', 'sig') == {'received': True}

    @patch('stripe.Webhook.construct_event')
    def test_account_updated(self, mock_construct, create_business):
        business = create_business(stripe_account_id='acct_9')
        mock_construct.return_value = self._event(
            'account.updated', {'id': 'acct_9', 'charges_enabled': True, 'payouts_enabled': True}
        )

        self.service.handle_webhook(b'{}', 'sig')

        business.refresh_from_db()
        assert business.stripe_onboarded is True

    @patch('stripe.Webhook.construct_event')
    def test_unhandled_event_type(self, mock_construct):
        mock_construct.return_value = self._event('charge.dispute.created', {'id': 'dp_1'})

        assert self.service.handle_webhook(b'{}', 'sig') == {'received': True}

    @patch('stripe.Webhook.construct_event')
    @patch('apps.core.services.payment_service.PaymentService._payment_failed', side_effect=RuntimeError('db gone'))
    def test_processing_error(self, mock_failed, mock_construct):
        mock_construct.return_value = self._event('payment_intent.payment_failed', {'id': 'pi_x'})

        with pytest.raises(UpstreamError) as exc:
            self.service.handle_webhook(b'{}', 'sig')
        assert str(exc.value) == 'Webhook processing failed'

    @patch('stripe.Refund.create')
    @patch('stripe.Webhook.construct_event')
    @patch('stripe.PaymentIntent.create')
    def test_payment_after_cancellation_does_not_retake_slot(
        self, mock_intent_create, mock_construct, mock_refund_create,
        customer_user, make_user, connected_salon, booking_day, mailoutbox
    ):
        business, service = connected_salon
        mock_intent_create.return_value = MagicMock(id='pi_late', client_secret='pi_late_secret')
        mock_refund_create.return_value = MagicMock(id='re_late', amount=10000, status='succeeded')

        first = self.service.create_payment_intent(
            customer_user, str(business.id), str(service.id), booking_day.isoformat(), '10:00'
        )
        BookingService().cancel_booking(customer_user, first['bookingId'])
        second = BookingService().create_booking(
            make_user(), str(business.id), str(service.id), booking_day.isoformat(), '10:00'
        )
        mailoutbox.clear()
        mock_construct.return_value = self._event('payment_intent.succeeded', {'id': 'pi_late'})

        assert self.service.handle_webhook(b'{}', 'sig') == {'received': True}

        held = Booking.objects.filter(business=business, status__in=Booking.get_active_statuses())
        assert list(held) == [second]

        late = Booking.objects.get(id=first['bookingId'])
        assert late.status == Booking.Status.CANCELLED
        assert late.payment_status == Booking.PaymentStatus.REFUNDED
        assert 'refunded automatically' in late.notes
        mock_refund_create.assert_called_once_with(
            payment_intent='pi_late',
            reason='requested_by_customer',
            metadata={'reason': 'booking_cancelled'},
        )
        assert [m.subject for m in mailoutbox] == ['Refund Processed - Glow Studio']

    @patch('stripe.Refund.create')
    @patch('stripe.Webhook.construct_event')
    def test_late_payment_refund_failure_is_retried(self, mock_construct, mock_refund_create,
                                                    connected_salon, create_booking, booking_day):
        business, service = connected_salon
        booking = create_booking(
            business, service, booking_day,
            status=Booking.Status.CANCELLED,
            payment_status=Booking.PaymentStatus.PENDING,
            stripe_payment_intent_id='pi_late',
        )
        mock_refund_create.side_effect = stripe.StripeError('api down')
        mock_construct.return_value = self._event('payment_intent.succeeded', {'id': 'pi_late'})

        with pytest.raises(UpstreamError):
            self.service.handle_webhook(b'{}', 'sig')

        booking.refresh_from_db()
        assert booking.status == Booking.Status.CANCELLED
        assert booking.payment_status == Booking.PaymentStatus.PENDING

    @patch('stripe.Webhook.construct_event')
    def test_duplicate_payment_event(self, mock_construct, paid_booking, mailoutbox):
        mock_construct.return_value = self._event('payment_intent.succeeded', {'id': 'pi_test123'})

        self.service.handle_webhook(b'{}', 'sig')

        paid_booking.refresh_from_db()
        assert paid_booking.status == Booking.Status.CONFIRMED
        assert paid_booking.payment_status == Booking.PaymentStatus.SUCCEEDED
        assert mailoutbox == []

    @patch('stripe.Webhook.construct_event')
    def test_payment_for_completed_booking_keeps_status(self, mock_construct, connected_salon,
                                                        create_booking, booking_day, mailoutbox):
        business, service = connected_salon
        booking = create_booking(
            business, service, booking_day,
            status=Booking.Status.COMPLETED,
            payment_status=Booking.PaymentStatus.PENDING,
            stripe_payment_intent_id='pi_done',
        )
        mock_construct.return_value = self._event('payment_intent.succeeded', {'id': 'pi_done'})

        self.service.handle_webhook(b'{}', 'sig')

        booking.refresh_from_db()
        assert booking.status == Booking.Status.COMPLETED
        assert booking.payment_status == Booking.PaymentStatus.SUCCEEDED
        assert mailoutbox == []
