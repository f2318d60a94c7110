# services/marketplace-service/src/apps/core/models/photo.py
"""
Business Photo Model
"""

import uuid

from django.db import models


class BusinessPhoto(models.Model):
    """
    Image attached to a business profile.

    A business has at most one active HERO photo; the rest are GALLERY.
    """

    class Type(models.TextChoices):
        HERO = 'HERO', 'Hero'
        GALLERY = 'GALLERY', 'Gallery'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'core.Business',
        on_delete=models.CASCADE,
        related_name='photos'
    )

    url = models.URLField(max_length=1024)
    type = models.CharField(max_length=10, choices=Type.choices, default=Type.GALLERY)
    caption = models.CharField(max_length=255, blank=True, null=True)
    order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'business_photos'
        ordering = ['order', '-created_at']

    def __str__(self):
        return f"{self.type} photo for {self.business_id}"

    @classmethod
    def demote_heroes(cls, business_id: uuid.UUID, exclude_photo_id: uuid.UUID = None) -> int:
        """Turn every HERO photo of the business into GALLERY."""
        queryset = cls.objects.filter(business_id=business_id, type=cls.Type.HERO)
        if exclude_photo_id:
            queryset = queryset.exclude(id=exclude_photo_id)
        return queryset.update(type=cls.Type.GALLERY)
