# services/marketplace-service/src/apps/core/models/review.py
"""
Review Model
"""

import uuid

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


class Review(models.Model):
    """Customer review of a completed booking. One per booking."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.OneToOneField(
        'core.Booking',
        on_delete=models.CASCADE,
        related_name='review'
    )
    business = models.ForeignKey(
        'core.Business',
        on_delete=models.CASCADE,
        related_name='reviews'
    )
    customer_id = models.UUIDField(db_index=True)

    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.rating}/5 for {self.business_id}"
