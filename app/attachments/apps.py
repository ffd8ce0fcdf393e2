"""
Django app configuration for attachments.
"""

from django.apps import AppConfig


class AttachmentsConfig(AppConfig):
    """Configuration for the attachments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "attachments"
    verbose_name = "Attachments"
