"""
Django admin configuration for account models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from accounts.models import Profile, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin configuration for the email-identified User model.

    Display data (company, avatar) is managed via ProfileAdmin.
    """

    list_display = ("email", "is_active", "is_staff", "date_joined")
    list_filter = ("is_active", "is_staff", "is_superuser", "date_joined")
    search_fields = ("email",)
    ordering = ("-date_joined",)

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Status", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Permissions", {"fields": ("groups", "user_permissions")}),
        ("Important dates", {"fields": ("date_joined", "last_login")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2"),
            },
        ),
    )

    readonly_fields = ("date_joined", "last_login")


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """Business profiles shown next to inbox threads."""

    list_display = ("user", "company_name", "full_name", "is_verified", "created_at")
    list_filter = ("is_verified", "created_at")
    search_fields = ("user__email", "company_name", "full_name")
    ordering = ("-created_at",)

    raw_id_fields = ("user",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        ("User", {"fields": ("user",)}),
        (
            "Business",
            {"fields": ("company_name", "full_name", "is_verified")},
        ),
        ("Avatar", {"fields": ("profile_image", "profile_image_url")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )
