"""
Serializers for account identity data.

IdentitySerializer renders accounts.services.Identity values, the display
data attached to threads, participants and messages.
"""

from rest_framework import serializers


class IdentitySerializer(serializers.Serializer):
    """Read-only display data for a business profile."""

    profile_id = serializers.IntegerField(read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    display_name = serializers.CharField(read_only=True)
    company_name = serializers.CharField(read_only=True)
    avatar_url = serializers.CharField(read_only=True)
    is_verified = serializers.BooleanField(read_only=True)
