"""
Test configuration and fixtures for accounts tests.
"""

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.tests.factories import UserFactory


@pytest.fixture(autouse=True)
def clear_identity_cache():
    """Start each test with an empty identity cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def supplier(db):
    """A verified supplier with a company name."""
    return UserFactory(
        profile__company_name="Acme Fasteners",
        profile__full_name="Sam Supplier",
        profile__is_verified=True,
    )


@pytest.fixture
def buyer(db):
    """A buyer with only a contact name set."""
    return UserFactory(profile__full_name="Dana Buyer")


@pytest.fixture
def authenticated_client(buyer):
    """API client authenticated with a JWT for the buyer."""
    client = APIClient()
    refresh = RefreshToken.for_user(buyer)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client
