# services/marketplace-service/src/apps/core/models/business.py
"""
Business Model

A beauty-service business listed on the marketplace.
"""

import re
import uuid

from django.db import models


class Business(models.Model):
    """
    Business profile owned by exactly one business-owner account.

    Owners come from the external identity provider, so the owner is
    referenced by id only.
    """

    class Category(models.TextChoices):
        HAIR_SALON = 'HAIR_SALON', 'Hair Salon'
        BARBERSHOP = 'BARBERSHOP', 'Barbershop'
        NAIL_SALON = 'NAIL_SALON', 'Nail Salon'
        SPA = 'SPA', 'Spa'
        MASSAGE = 'MASSAGE', 'Massage'
        BEAUTY_SALON = 'BEAUTY_SALON', 'Beauty Salon'
        LASH_BROW = 'LASH_BROW', 'Lash & Brow'
        MAKEUP = 'MAKEUP', 'Makeup'
        TATTOO = 'TATTOO', 'Tattoo'
        OTHER = 'OTHER', 'Other'

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.UUIDField(unique=True)

    # Profile
    business_name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(
        max_length=30,
        choices=Category.choices,
        default=Category.OTHER
    )

    # Location
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    zip_code = models.CharField(max_length=20)

    # Contact
    phone = models.CharField(max_length=50)
    email = models.EmailField(blank=True, null=True)
    website = models.URLField(blank=True, null=True)
    instagram = models.CharField(max_length=100, blank=True, null=True)

    # Status
    is_active = models.BooleanField(default=True)

    # Payments
    stripe_account_id = models.CharField(max_length=255, blank=True, null=True, unique=True)
    stripe_onboarded = models.BooleanField(default=False)

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'businesses'
        ordering = ['business_name']
        verbose_name_plural = 'businesses'

    def __str__(self):
        return f"{self.business_name} ({self.slug})"

    @property
    def can_accept_payments(self) -> bool:
        return bool(self.stripe_account_id and self.stripe_onboarded)

    # ==========================================================================
    # Slugs
    # ==========================================================================

    @staticmethod
    def slugify_name(name: str) -> str:
        """Lowercase, collapse non-alphanumerics into '-', trim edge dashes."""
        slug = re.sub(r'[^a-z0-9]+', '-', name.lower())
        return slug.strip('-')

    @classmethod
    def generate_unique_slug(cls, name: str) -> str:
        """Return a slug for ``name`` with a numeric suffix on collision."""
        base = cls.slugify_name(name) or 'business'
        slug = base
        suffix = 0

        while cls.objects.filter(slug=slug).exists():
            suffix += 1
            slug = f"{base}-{suffix}"

        return slug
