# services/marketplace-service/src/apps/core/models/availability.py
"""
Availability Models

Weekly opening hours and dated time-off exceptions.
"""

import uuid
from datetime import date

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator


class Availability(models.Model):
    """
    Recurring weekly opening rule.

    ``day_of_week`` counts from Sunday = 0. Several rules per day are
    allowed and overlapping rules are stored as given.
    """

    class DayOfWeek(models.IntegerChoices):
        SUNDAY = 0, 'Sunday'
        MONDAY = 1, 'Monday'
        TUESDAY = 2, 'Tuesday'
        WEDNESDAY = 3, 'Wednesday'
        THURSDAY = 4, 'Thursday'
        FRIDAY = 5, 'Friday'
        SATURDAY = 6, 'Saturday'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'core.Business',
        on_delete=models.CASCADE,
        related_name='availabilities'
    )

    day_of_week = models.PositiveSmallIntegerField(
        choices=DayOfWeek.choices,
        validators=[MinValueValidator(0), MaxValueValidator(6)]
    )
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'availabilities'
        ordering = ['day_of_week', 'start_time']
        verbose_name_plural = 'availabilities'
        indexes = [
            models.Index(fields=['business', 'day_of_week']),
        ]

    def __str__(self):
        return (
            f"{self.get_day_of_week_display()} "
            f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"
        )

    @staticmethod
    def day_of_week_for(value: date) -> int:
        """Map a date onto the Sunday-first numbering."""
        return (value.weekday() + 1) % 7

    @classmethod
    def get_active_for_date(cls, business_id: uuid.UUID, value: date):
        """Active rules that apply to the weekday of ``value``."""
        return cls.objects.filter(
            business_id=business_id,
            day_of_week=cls.day_of_week_for(value),
            is_active=True,
        ).order_by('start_time')


class TimeOff(models.Model):
    """
    A dated closure.

    Null ``start_time`` and ``end_time`` block the whole day, otherwise only
    the given range is blocked.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'core.Business',
        on_delete=models.CASCADE,
        related_name='time_offs'
    )

    date = models.DateField(db_index=True)
    start_time = models.TimeField(blank=True, null=True)
    end_time = models.TimeField(blank=True, null=True)
    reason = models.CharField(max_length=255, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'time_offs'
        ordering = ['date', 'start_time']

    def __str__(self):
        if self.is_full_day:
            return f"{self.date} (all day)"
        return f"{self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    @property
    def is_full_day(self) -> bool:
        return self.start_time is None and self.end_time is None
