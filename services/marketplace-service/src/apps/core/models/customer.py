# services/marketplace-service/src/apps/core/models/customer.py
"""
Customer Relationship Models

Per-business customer profiles and the notes/messages recorded against them.
"""

import uuid
from decimal import Decimal

from django.db import models


class CustomerProfile(models.Model):
    """
    A customer as seen by one business.

    Visit statistics are derived from the business's bookings.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'core.Business',
        on_delete=models.CASCADE,
        related_name='customers'
    )
    customer_id = models.UUIDField()

    # Contact
    customer_name = models.CharField(max_length=255, default='Unknown')
    customer_email = models.CharField(max_length=255, blank=True, default='')
    customer_phone = models.CharField(max_length=50, blank=True, default='')

    # Visit statistics
    first_visit = models.DateField(blank=True, null=True)
    last_visit = models.DateField(blank=True, null=True)
    total_visits = models.PositiveIntegerField(default=0)
    total_spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    average_spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    favorite_service = models.CharField(max_length=255, blank=True, null=True)

    # Segmentation
    tags = models.JSONField(default=list, blank=True)
    is_vip = models.BooleanField(default=False)
    notes = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customer_profiles'
        ordering = ['-last_visit']
        constraints = [
            models.UniqueConstraint(
                fields=['business', 'customer_id'],
                name='unique_customer_per_business'
            ),
        ]

    def __str__(self):
        return f"{self.customer_name} @ {self.business_id}"


class Communication(models.Model):
    """Note, email or SMS recorded against a business-customer pair."""

    class Type(models.TextChoices):
        NOTE = 'NOTE', 'Note'
        EMAIL = 'EMAIL', 'Email'
        SMS = 'SMS', 'SMS'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'core.Business',
        on_delete=models.CASCADE,
        related_name='communications'
    )
    customer = models.ForeignKey(
        CustomerProfile,
        on_delete=models.CASCADE,
        related_name='communications'
    )

    type = models.CharField(max_length=10, choices=Type.choices, default=Type.NOTE)
    subject = models.CharField(max_length=255, blank=True, null=True)
    content = models.TextField()
    sent_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'communications'
        ordering = ['-sent_at']

    def __str__(self):
        return f"{self.type} to {self.customer_id}"
