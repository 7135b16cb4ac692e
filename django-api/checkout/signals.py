"""Django signals for cache invalidation."""

from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from checkout.models import Coupon
from checkout.stores.django_store import invalidate_coupon_cache


@receiver(pre_save, sender=Coupon)
def invalidate_renamed_coupon_cache(sender, instance, **kwargs):
    """Drop the cached lookup for a coupon's old code when it is renamed."""
    if instance._state.adding:
        return
    previous_code = sender.objects.filter(pk=instance.pk).values_list("code", flat=True).first()
    if previous_code is not None and previous_code != instance.code:
        invalidate_coupon_cache(previous_code)


@receiver([post_save, post_delete], sender=Coupon)
def invalidate_coupon_caches(sender, instance, **kwargs):
    """Invalidate caches when a coupon is saved or deleted."""
    invalidate_coupon_cache(instance.code)
