"""
Account models.

Models:
    User: Email-identified account, the participant identity in threads
    Profile: Business profile (company, contact name, avatar, verification)

Design Decisions:
    - Profile uses the user as its primary key, so a profile id and its
      owner's user id are the same number. The inbox accepts either.
    - Profiles are created empty by a post_save signal on User.
"""

from __future__ import annotations

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from accounts.managers import UserManager
from core.models import BaseModel


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Display data (company name, avatar) lives on Profile.

    Fields:
        email: Primary identifier, unique, used for login
        is_active: Inactive users cannot start or join conversations
        is_staff: Whether the user can access Django admin
        date_joined: When the account was created
    """

    email = models.EmailField(
        unique=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        """Return the profile's display name, or the email if unset."""
        try:
            return self.profile.display_name or self.email
        except Profile.DoesNotExist:
            return self.email

    def get_short_name(self):
        return self.email.split("@")[0]


class Profile(BaseModel):
    """
    Business profile attached to a user.

    Fields:
        user: OneToOne link to User (also serves as primary key)
        company_name: Company shown on enquiry threads
        full_name: Contact person shown on messages
        profile_image: Uploaded avatar (optional)
        profile_image_url: External avatar URL (optional, used when no upload)
        is_verified: Whether the business has passed verification
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        primary_key=True,
        help_text="User this profile belongs to",
    )
    company_name = models.CharField(
        max_length=200,
        blank=True,
        help_text="Registered company name",
    )
    full_name = models.CharField(
        max_length=200,
        blank=True,
        help_text="Contact person's full name",
    )
    profile_image = models.ImageField(
        upload_to="profile_images/",
        blank=True,
        null=True,
        help_text="Uploaded avatar image",
    )
    profile_image_url = models.URLField(
        blank=True,
        help_text="External avatar URL (used when no image is uploaded)",
    )
    is_verified = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether this business profile has been verified",
    )

    class Meta:
        db_table = "accounts_profile"
        verbose_name = "profile"
        verbose_name_plural = "profiles"

    def __str__(self):
        return self.display_name or str(self.user)

    @property
    def display_name(self) -> str:
        """Company name, then contact name, then empty string."""
        return self.company_name or self.full_name

    @property
    def avatar_url(self) -> str:
        """Uploaded image URL if present, else the external URL."""
        if self.profile_image:
            return self.profile_image.url
        return self.profile_image_url
