# services/marketplace-service/src/apps/core/services/payment_service.py
"""
Payment Service

Stripe Connect payments: fee split, payment intents, refunds, connected
account onboarding and webhook processing.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Dict, Any

import stripe
from django.conf import settings
from django.db import transaction

from shared.common.constants import UserRole
from shared.common.validators import parse_uuid

from apps.core.models import Booking, Business, Service
from apps.core.policies import (
    can_cancel_booking,
    get_owned_business,
    is_booking_owner,
    require_role,
    user_uuid,
)

from .booking_service import BookingService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

PLATFORM_FEE_RATE = Decimal('0.15')
STRIPE_FEE_RATE = Decimal('0.029')
STRIPE_FEE_FIXED_CENTS = Decimal('30')
CURRENCY = 'usd'
SETTINGS_PATH = '/business/dashboard/settings'

CENT = Decimal('1')
HUNDRED = Decimal('100')


# ==========================================================================
# Fee Computation
# ==========================================================================

@dataclass(frozen=True)
class FeeBreakdown:
    """Split of a charge, in minor units (cents)."""
    total: int
    stripe_fee: int
    platform_fee: int
    business_payout: int

    @property
    def total_dollars(self) -> Decimal:
        return Decimal(self.total) / HUNDRED

    @property
    def stripe_fee_dollars(self) -> Decimal:
        return Decimal(self.stripe_fee) / HUNDRED

    @property
    def platform_fee_dollars(self) -> Decimal:
        return Decimal(self.platform_fee) / HUNDRED

    @property
    def business_payout_dollars(self) -> Decimal:
        return Decimal(self.business_payout) / HUNDRED


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(CENT, rounding=ROUND_HALF_UP))


def calculate_fees(amount) -> FeeBreakdown:
    """
    Split a price in major units into processor fee, platform fee and payout.

    Each fee is rounded on its own, so the payout absorbs any rounding
    difference and the three parts always sum to the total.
    """
    total = _round_half_up(Decimal(str(amount)) * HUNDRED)
    stripe_fee = _round_half_up(total * STRIPE_FEE_RATE + STRIPE_FEE_FIXED_CENTS)
    platform_fee = _round_half_up(total * PLATFORM_FEE_RATE)

    return FeeBreakdown(
        total=total,
        stripe_fee=stripe_fee,
        platform_fee=platform_fee,
        business_payout=total - stripe_fee - platform_fee,
    )


class PaymentService:
    """
    Service for Stripe Connect payments.

    Handles:
    - Payment intents with destination charges
    - Connected account onboarding and dashboard links
    - Refunds
    - Webhook events
    """

    def __init__(self):
        stripe.api_key = settings.STRIPE_SECRET_KEY

    # ==========================================================================
    # Payment Intents
    # ==========================================================================

    def create_payment_intent(
        self,
        user,
        business_id,
        service_id,
        date_value,
        time_value,
        notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Reserve a slot and open a card payment for it.

        The booking stays PENDING until the payment succeeds.
        """
        from . import InvalidRequestError, NotFoundError, PaymentGatewayError

        customer_id = user_uuid(user)

        if not business_id or not service_id:
            raise InvalidRequestError()
        day, start = BookingService.parse_schedule(date_value, time_value)

        business_uuid = parse_uuid(business_id)
        business = Business.objects.filter(id=business_uuid).first() if business_uuid else None
        if business is None:
            raise NotFoundError('Business not found')

        if not business.can_accept_payments:
            raise InvalidRequestError('Business is not set up to accept payments')

        service_uuid = parse_uuid(service_id)
        service = None
        if service_uuid is not None:
            service = Service.objects.filter(id=service_uuid, business=business, is_active=True).first()
        if service is None:
            raise NotFoundError('Service not found')

        end = start + timedelta(minutes=service.duration)
        fees = calculate_fees(service.price)

        with transaction.atomic():
            BookingService.lock_business(business.id)
            BookingService.ensure_slot_free(business.id, start, end)

            try:
                intent = stripe.PaymentIntent.create(
                    amount=fees.total,
                    currency=CURRENCY,
                    payment_method_types=['card'],
                    application_fee_amount=fees.platform_fee,
                    transfer_data={'destination': business.stripe_account_id},
                    receipt_email=getattr(user, 'email', None) or None,
                    metadata={
                        'businessId': str(business.id),
                        'serviceId': str(service.id),
                        'userId': str(customer_id),
                        'date': day.isoformat(),
                        'time': start.strftime('%H:%M'),
                        'serviceName': service.name,
                        'businessName': business.business_name,
                    },
                )
            except stripe.StripeError as e:
                logger.error(f"Stripe payment intent creation failed for business {business.id}: {e}")
                raise PaymentGatewayError('Failed to create payment intent')

            booking = Booking.objects.create(
                business=business,
                service=service,
                customer_id=customer_id,
                customer_name=getattr(user, 'name', None),
                customer_email=getattr(user, 'email', None),
                date=day,
                start_time=start,
                end_time=end,
                status=Booking.Status.PENDING,
                payment_status=Booking.PaymentStatus.PENDING,
                stripe_payment_intent_id=intent.id,
                total_price=service.price,
                stripe_fee=fees.stripe_fee_dollars,
                platform_fee=fees.platform_fee_dollars,
                business_payout=fees.business_payout_dollars,
                notes=notes or None,
            )

        logger.info(
            f"Created payment intent {intent.id} for booking {booking.id}",
            extra={'amount_cents': fees.total, 'business_id': str(business.id)}
        )

        return {
            'bookingId': str(booking.id),
            'clientSecret': intent.client_secret,
            'amount': service.price,
            'fees': {
                'platform': fees.platform_fee_dollars,
                'stripe': fees.stripe_fee_dollars,
                'business': fees.business_payout_dollars,
            },
        }

    # ==========================================================================
    # Refunds
    # ==========================================================================

    def request_refund(self, user, booking_id, reason: Optional[str] = None) -> Dict[str, Any]:
        """
        Refund a paid booking and cancel it.

        Customers must ask at least CANCELLATION_WINDOW_HOURS ahead; the
        business owner may refund at any time. A refund is a cancellation,
        so only bookings that may still move to CANCELLED (or already are
        CANCELLED) can be refunded. COMPLETED and NO_SHOW stay final.
        """
        from . import (
            BookingStateError,
            InvalidRequestError,
            NotFoundError,
            PaymentGatewayError,
            PermissionDeniedError,
        )

        user_uuid(user)
        if not booking_id:
            raise InvalidRequestError('Booking ID is required')

        parsed = parse_uuid(booking_id)

        with transaction.atomic():
            booking = None
            if parsed is not None:
                booking = (
                    Booking.objects
                    .select_for_update()
                    .select_related('business', 'service')
                    .filter(id=parsed)
                    .first()
                )
            if booking is None:
                raise NotFoundError('Booking not found')

            if not can_cancel_booking(user, booking):
                raise PermissionDeniedError('Not authorized to refund this booking')

            if booking.payment_status != Booking.PaymentStatus.SUCCEEDED:
                raise InvalidRequestError('Only successful payments can be refunded')
            if not booking.stripe_payment_intent_id:
                raise InvalidRequestError('No payment intent found for this booking')
            if not booking.can_transition_to(Booking.Status.CANCELLED):
                raise BookingStateError(f'{booking.get_status_display()} bookings cannot be refunded')

            if not is_booking_owner(user, booking) and booking.hours_until_start < settings.CANCELLATION_WINDOW_HOURS:
                raise InvalidRequestError(
                    f'Refunds must be requested at least {settings.CANCELLATION_WINDOW_HOURS} hours '
                    f'before the appointment'
                )

            try:
                refund = stripe.Refund.create(
                    payment_intent=booking.stripe_payment_intent_id,
                    reason='requested_by_customer',
                    metadata={'reason': reason} if reason else {},
                )
            except stripe.StripeError as e:
                logger.error(f"Stripe refund failed for booking {booking.id}: {e}")
                raise PaymentGatewayError('Failed to process refund')

            booking.payment_status = Booking.PaymentStatus.REFUNDED
            if reason:
                booking.append_note(f"Refund reason: {reason}")
            booking.save(update_fields=['payment_status', 'notes', 'updated_at'])
            BookingService.transition(booking, Booking.Status.CANCELLED)

        amount = Decimal(refund.amount) / HUNDRED
        NotificationService.send_refund_processed(booking, amount, refund.id)

        logger.info(f"Refunded booking {booking.id} ({refund.id}, {amount})")

        return {
            'success': True,
            'refund': {
                'id': refund.id,
                'amount': amount,
                'status': refund.status,
            },
        }

    # ==========================================================================
    # Connected Accounts
    # ==========================================================================

    def create_connect_account_link(self, user, business_id=None) -> Dict[str, str]:
        """Onboarding link for the owner's Express account, creating it if needed."""
        from . import PaymentGatewayError

        require_role(user, UserRole.BUSINESS_OWNER)
        business = get_owned_business(user, business_id)

        try:
            if not business.stripe_account_id:
                account = stripe.Account.create(
                    type='express',
                    country=settings.STRIPE_CONNECT_COUNTRY,
                    email=getattr(user, 'email', None) or None,
                    capabilities={
                        'card_payments': {'requested': True},
                        'transfers': {'requested': True},
                    },
                    business_type='individual',
                    business_profile={
                        'name': business.business_name,
                        'product_description': f"Beauty and wellness services at {business.business_name}",
                    },
                    settings={'payouts': {'schedule': {'interval': 'daily'}}},
                )
                business.stripe_account_id = account.id
                business.save(update_fields=['stripe_account_id', 'updated_at'])
                logger.info(f"Created Stripe account {account.id} for business {business.id}")

            link = stripe.AccountLink.create(
                account=business.stripe_account_id,
                refresh_url=f"{settings.APP_BASE_URL}{SETTINGS_PATH}",
                return_url=(
                    f"{settings.APP_BASE_URL}/api/v1/stripe/connect/callback/"
                    f"?businessId={business.id}"
                ),
                type='account_onboarding',
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe onboarding link failed for business {business.id}: {e}")
            raise PaymentGatewayError('Failed to create Stripe account')

        return {'url': link.url}

    def handle_connect_callback(self, business_id) -> str:
        """Settings-page redirect target after Stripe onboarding returns."""
        target = f"{settings.APP_BASE_URL}{SETTINGS_PATH}"

        if not business_id:
            return f"{target}?error=missing_business"

        parsed = parse_uuid(business_id)
        business = Business.objects.filter(id=parsed).first() if parsed else None
        if business is None or not business.stripe_account_id:
            return f"{target}?error=invalid_business"

        try:
            account = stripe.Account.retrieve(business.stripe_account_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe account lookup failed for business {business.id}: {e}")
            return f"{target}?error=stripe_error"

        if account.get('charges_enabled') and account.get('payouts_enabled'):
            self._mark_onboarded(business)
            return f"{target}?success=stripe_connected"

        return f"{target}?error=onboarding_incomplete"

    def create_portal_link(self, user, business_id=None) -> Dict[str, str]:
        """Express dashboard login link."""
        from . import NotFoundError, PaymentGatewayError

        require_role(user, UserRole.BUSINESS_OWNER)
        try:
            business = get_owned_business(user, business_id)
        except NotFoundError:
            business = None
        if business is None or not business.stripe_account_id:
            raise NotFoundError('Stripe account not found')

        try:
            link = stripe.Account.create_login_link(business.stripe_account_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe login link failed for business {business.id}: {e}")
            raise PaymentGatewayError('Failed to access Stripe dashboard')

        return {'url': link.url}

    # ==========================================================================
    # Webhooks
    # ==========================================================================

    def handle_webhook(self, payload: bytes, signature: Optional[str]) -> Dict[str, bool]:
        from . import InvalidRequestError, UpstreamError

        if not signature:
            raise InvalidRequestError('No signature')

        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature,
                settings.STRIPE_WEBHOOK_SECRET,
            )
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise InvalidRequestError('Invalid signature')

        event_type = event['type']
        data = event['data']['object']

        try:
            if event_type == 'payment_intent.succeeded':
                self._payment_succeeded(data)
            elif event_type == 'payment_intent.payment_failed':
                self._payment_failed(data)
            elif event_type == 'account.updated':
                self._account_updated(data)
            else:
                logger.info(f"Unhandled webhook event type: {event_type}")
        except Exception as e:
            logger.exception(f"Error processing webhook {event_type}: {e}")
            raise UpstreamError('Webhook processing failed')

        return {'received': True}

    def _payment_succeeded(self, intent) -> None:
        """
        Settle a booking whose payment went through.

        Only a PENDING booking is confirmed. A booking cancelled while the
        payment was in flight stays CANCELLED and is refunded.
        """
        with transaction.atomic():
            booking = self._booking_for_intent(intent['id'], lock=True)
            if booking is None:
                return

            if booking.payment_status in (Booking.PaymentStatus.SUCCEEDED, Booking.PaymentStatus.REFUNDED):
                logger.info(f"Duplicate payment_intent.succeeded for booking {booking.id}")
                return

            if booking.status == Booking.Status.CANCELLED:
                refund = self._refund_late_payment(booking)
            else:
                refund = None
                booking.payment_status = Booking.PaymentStatus.SUCCEEDED
                booking.save(update_fields=['payment_status', 'updated_at'])

            confirmed = booking.status == Booking.Status.PENDING
            if confirmed:
                BookingService.transition(booking, Booking.Status.CONFIRMED)

        if refund is not None:
            NotificationService.send_refund_processed(booking, Decimal(refund.amount) / HUNDRED, refund.id)
            return

        logger.info(f"Payment succeeded for booking {booking.id} [{booking.status}]")
        if confirmed:
            NotificationService.send_booking_confirmation(booking)
            NotificationService.send_payment_receipt(booking)

    @staticmethod
    def _refund_late_payment(booking: Booking):
        logger.warning(f"Payment arrived for cancelled booking {booking.id}, refunding")

        refund = stripe.Refund.create(
            payment_intent=booking.stripe_payment_intent_id,
            reason='requested_by_customer',
            metadata={'reason': 'booking_cancelled'},
        )

        booking.payment_status = Booking.PaymentStatus.REFUNDED
        booking.append_note('Payment received after cancellation; refunded automatically')
        booking.save(update_fields=['payment_status', 'notes', 'updated_at'])
        return refund

    def _payment_failed(self, intent) -> None:
        booking = self._booking_for_intent(intent['id'])
        if booking is None:
            return

        booking.payment_status = Booking.PaymentStatus.FAILED
        booking.save(update_fields=['payment_status', 'updated_at'])
        logger.info(f"Payment failed for booking {booking.id}")

    def _account_updated(self, account) -> None:
        if not (account.get('charges_enabled') and account.get('payouts_enabled')):
            return

        business = Business.objects.filter(stripe_account_id=account['id']).first()
        if business is None:
            logger.warning(f"account.updated for unknown Stripe account {account['id']}")
            return

        self._mark_onboarded(business)

    @staticmethod
    def _booking_for_intent(intent_id: str, lock: bool = False) -> Optional[Booking]:
        bookings = Booking.objects.select_for_update() if lock else Booking.objects
        booking = (
            bookings
            .select_related('business', 'service')
            .filter(stripe_payment_intent_id=intent_id)
            .first()
        )
        if booking is None:
            logger.warning(f"No booking found for payment intent {intent_id}")
        return booking

    @staticmethod
    def _mark_onboarded(business: Business) -> None:
        if business.stripe_onboarded:
            return
        business.stripe_onboarded = True
        business.save(update_fields=['stripe_onboarded', 'updated_at'])
        logger.info(f"Business {business.id} completed Stripe onboarding")
