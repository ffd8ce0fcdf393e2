"""
Tests for the attachment upload endpoint.
"""

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient

from accounts.tests.factories import UserFactory
from attachments.tests.conftest import PNG_BYTES

UPLOAD_URL = "/api/v1/inbox/attachments/"


@pytest.fixture
def api_client(db):
    client = APIClient()
    client.force_authenticate(user=UserFactory())
    return client


class TestAttachmentUploadView:
    def test_upload_returns_descriptors(self, api_client):
        upload = SimpleUploadedFile("photo.png", PNG_BYTES, content_type="image/png")

        response = api_client.post(UPLOAD_URL, {"files": [upload]}, format="multipart")

        assert response.status_code == 201
        assert response.data[0]["kind"] == "image"
        assert response.data[0]["name"] == "photo.png"
        assert "storage_name" not in response.data[0]

    def test_avatar_policy_is_enforced(self, api_client, stored_files):
        upload = SimpleUploadedFile("big.png", b"a" * (1024 * 1024 + 1))

        response = api_client.post(
            UPLOAD_URL, {"files": [upload], "policy": "avatar"}, format="multipart"
        )

        assert response.status_code == 413
        assert response.data["error_code"] == "FILE_TOO_LARGE"
        assert stored_files() == []

    def test_no_files_is_400(self, api_client):
        response = api_client.post(UPLOAD_URL, {}, format="multipart")

        assert response.status_code == 400
        assert response.data["error_code"] == "VALIDATION_ERROR"

    def test_unknown_policy_is_400(self, api_client):
        upload = SimpleUploadedFile("a.txt", b"hello")

        response = api_client.post(
            UPLOAD_URL, {"files": [upload], "policy": "billboard"}, format="multipart"
        )

        assert response.status_code == 400

    def test_requires_authentication(self, db):
        response = APIClient().post(UPLOAD_URL, {}, format="multipart")

        assert response.status_code == 401
