"""
Django signals for accounts.

This module defines signal handlers for:
- Auto-creating Profile when User is created
- Dropping cached identities when a Profile changes

Related files:
    - models.py: User and Profile models
    - services.py: ProfileDirectory cache
    - apps.py: Signal import in ready()
"""

import logging

from django.conf import settings
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created, **kwargs):
    """
    Create an empty Profile for newly created users.

    Args:
        sender: The User model class
        instance: The User instance that was saved
        created: Boolean indicating if this is a new record
        **kwargs: Additional signal arguments
    """
    if created:
        from accounts.models import Profile

        Profile.objects.get_or_create(user=instance)
        logger.debug(f"Profile created for user: {instance.email}")


@receiver(post_save, sender="accounts.Profile")
@receiver(post_delete, sender="accounts.Profile")
def invalidate_cached_identity(sender, instance, **kwargs):
    """Evict the profile's cached identity so the next read is fresh."""
    from accounts.services import ProfileDirectory

    ProfileDirectory.invalidate(instance.pk)
