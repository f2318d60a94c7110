# services/marketplace-service/src/apps/core/models/booking.py
"""
Booking Model

Customer appointments with a business, including payment state.
"""

import uuid
from datetime import date, datetime, time, timedelta

from django.db import models
from django.utils import timezone


class Booking(models.Model):
    """
    Appointment for one service at one business.

    Status workflow:
        PENDING -> CONFIRMED | CANCELLED
        CONFIRMED -> COMPLETED | CANCELLED | NO_SHOW
    """

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        CONFIRMED = 'CONFIRMED', 'Confirmed'
        CANCELLED = 'CANCELLED', 'Cancelled'
        COMPLETED = 'COMPLETED', 'Completed'
        NO_SHOW = 'NO_SHOW', 'No Show'

    class PaymentStatus(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        SUCCEEDED = 'SUCCEEDED', 'Succeeded'
        FAILED = 'FAILED', 'Failed'
        REFUNDED = 'REFUNDED', 'Refunded'

    ALLOWED_TRANSITIONS = {
        Status.PENDING: {Status.CONFIRMED, Status.CANCELLED},
        Status.CONFIRMED: {Status.COMPLETED, Status.CANCELLED, Status.NO_SHOW},
        Status.CANCELLED: set(),
        Status.COMPLETED: set(),
        Status.NO_SHOW: set(),
    }

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Parties
    business = models.ForeignKey(
        'core.Business',
        on_delete=models.CASCADE,
        related_name='bookings'
    )
    service = models.ForeignKey(
        'core.Service',
        on_delete=models.PROTECT,
        related_name='bookings'
    )
    customer_id = models.UUIDField(db_index=True)
    customer_name = models.CharField(max_length=255, blank=True, null=True)
    customer_email = models.EmailField(blank=True, null=True)

    # Schedule
    date = models.DateField(db_index=True)
    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField()

    # Status
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )

    # Payment
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        blank=True,
        null=True
    )
    stripe_payment_intent_id = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        unique=True
    )
    stripe_fee = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    platform_fee = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    business_payout = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)

    notes = models.TextField(blank=True, null=True)

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['-start_time']
        indexes = [
            models.Index(fields=['business', 'date']),
            models.Index(fields=['business', 'status']),
            models.Index(fields=['customer_id', 'start_time']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F('start_time')),
                name='valid_booking_times'
            ),
        ]

    def __str__(self):
        return f"{self.service_id} @ {self.start_time:%Y-%m-%d %H:%M} [{self.status}]"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def hours_until_start(self) -> float:
        """Hours until the appointment starts."""
        delta = self.start_time - timezone.now()
        return delta.total_seconds() / 3600

    @property
    def local_start(self) -> str:
        """Wall-clock start time as HH:MM."""
        return timezone.localtime(self.start_time).strftime('%H:%M')

    def can_transition_to(self, status: str) -> bool:
        """Same-status updates are accepted as no-ops."""
        if status == self.status:
            return True
        return status in self.ALLOWED_TRANSITIONS.get(self.status, set())

    def append_note(self, line: str):
        self.notes = f"{self.notes}\n{line}" if self.notes else line

    # ==========================================================================
    # Class Methods
    # ==========================================================================

    @classmethod
    def get_active_statuses(cls) -> list:
        """Statuses that hold a slot."""
        return [cls.Status.PENDING, cls.Status.CONFIRMED]

    @staticmethod
    def day_bounds(value: date):
        """Aware [start, end) datetimes covering ``value`` in local time."""
        start = timezone.make_aware(datetime.combine(value, time.min))
        return start, start + timedelta(days=1)

    @classmethod
    def get_active_for_date(cls, business_id: uuid.UUID, value: date):
        """Slot-holding bookings starting on ``value``."""
        start_of_day, end_of_day = cls.day_bounds(value)

        return cls.objects.filter(
            business_id=business_id,
            status__in=cls.get_active_statuses(),
            start_time__gte=start_of_day,
            start_time__lt=end_of_day,
        ).order_by('start_time')

    @classmethod
    def get_conflicts(
        cls,
        business_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: uuid.UUID = None
    ):
        """Slot-holding bookings overlapping [start, end)."""
        queryset = cls.objects.filter(
            business_id=business_id,
            status__in=cls.get_active_statuses(),
            start_time__lt=end,
            end_time__gt=start,
        )

        if exclude_booking_id:
            queryset = queryset.exclude(id=exclude_booking_id)

        return queryset
