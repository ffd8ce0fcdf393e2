"""
Test configuration and fixtures for messaging tests.

Usage:
    def test_example(enquiry, buyer_client):
        response = buyer_client.get(f"/api/v1/inbox/threads/{enquiry.id}/")
        assert response.status_code == 200
"""

from datetime import timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.tests.factories import UserFactory
from messaging.models import Message
from messaging.services import ConversationService, ThreadService


@pytest.fixture(autouse=True)
def clear_identity_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path)
    return tmp_path


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def buyer(db):
    """Buyer with a contact name only."""
    return UserFactory(profile__full_name="Dana Buyer")


@pytest.fixture
def supplier(db):
    """Verified supplier company."""
    return UserFactory(
        profile__company_name="Acme Fasteners",
        profile__full_name="Sam Supplier",
        profile__is_verified=True,
    )


@pytest.fixture
def outsider(db):
    """User who takes part in none of the test threads."""
    return UserFactory(profile__full_name="Olive Outsider")


# =============================================================================
# Thread Fixtures
# =============================================================================


@pytest.fixture
def conversation(buyer, supplier):
    """Direct conversation between buyer and supplier."""
    return ConversationService.find_or_create(buyer, supplier).data


@pytest.fixture
def enquiry(buyer, supplier):
    """Enquiry from buyer to the supplier's profile."""
    return ThreadService.create_thread(buyer, supplier.pk, "M8 bolts").data


@pytest.fixture
def backdate():
    """Set a message's created_at to ``seconds`` ago."""

    def _backdate(message, seconds):
        created_at = timezone.now() - timedelta(seconds=seconds)
        Message.objects.filter(pk=message.pk).update(created_at=created_at)
        message.created_at = created_at
        return message

    return _backdate


# =============================================================================
# API Client Fixtures
# =============================================================================


def _jwt_client(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def buyer_client(buyer):
    return _jwt_client(buyer)


@pytest.fixture
def supplier_client(supplier):
    return _jwt_client(supplier)


@pytest.fixture
def outsider_client(outsider):
    return _jwt_client(outsider)
