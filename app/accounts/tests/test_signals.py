"""
Tests for account signal handlers.
"""

from accounts.models import Profile, User


class TestCreateUserProfile:
    def test_profile_created_with_user(self, db):
        """
        Every new user gets an empty profile.

        Why it matters: the inbox resolves participants through profiles.
        """
        user = User.objects.create_user(email="new@example.com", password="pw12345!")

        profile = Profile.objects.get(user=user)
        assert profile.pk == user.pk
        assert profile.company_name == ""
        assert profile.is_verified is False

    def test_saving_existing_user_does_not_duplicate_profile(self, db):
        user = User.objects.create_user(email="again@example.com")
        user.is_staff = True
        user.save()

        assert Profile.objects.filter(user=user).count() == 1
