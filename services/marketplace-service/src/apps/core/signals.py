# services/marketplace-service/src/apps/core/signals.py
"""
Django Signals for Marketplace Service

Status-change logging for bookings and public profile cache invalidation
when a business or its reviews change.
"""

import logging
from django.db.models.signals import post_save, post_delete, pre_save
from django.dispatch import receiver

from .models import Booking, Business, Review

logger = logging.getLogger(__name__)


# ==========================================================================
# Booking Signals
# ==========================================================================

@receiver(pre_save, sender=Booking)
def booking_pre_save(sender, instance, **kwargs):
    """Track status changes before save."""
    instance._old_status = None
    if instance.pk:
        instance._old_status = (
            Booking.objects.filter(pk=instance.pk)
            .values_list('status', flat=True)
            .first()
        )


@receiver(post_save, sender=Booking)
def booking_post_save(sender, instance, created, **kwargs):
    if created:
        logger.info(
            f"Booking created: {instance.id} [{instance.status}]",
            extra={'business_id': str(instance.business_id)}
        )
        return

    old_status = getattr(instance, '_old_status', None)
    if old_status and old_status != instance.status:
        logger.info(
            f"Booking {instance.id} status changed: {old_status} -> {instance.status}",
            extra={
                'business_id': str(instance.business_id),
                'payment_status': instance.payment_status,
            }
        )


# ==========================================================================
# Public Profile Cache
# ==========================================================================

@receiver(post_save, sender=Business)
@receiver(post_delete, sender=Business)
def business_changed(sender, instance, **kwargs):
    from .services import BusinessService

    BusinessService.invalidate_public_profile(instance.slug)


@receiver(post_save, sender=Review)
@receiver(post_delete, sender=Review)
def review_changed(sender, instance, **kwargs):
    from .services import BusinessService

    slug = Business.objects.filter(id=instance.business_id).values_list('slug', flat=True).first()
    if slug:
        BusinessService.invalidate_public_profile(slug)
