"""
Tests for the health check endpoint.
"""

from unittest import mock

from django.db import OperationalError


class TestHealthCheck:
    def test_healthy(self, client, db):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "database": "connected",
            "cache": "connected",
        }

    def test_database_down_is_503(self, client, db):
        with mock.patch(
            "core.views.connection.cursor", side_effect=OperationalError("down")
        ):
            response = client.get("/health/")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"
