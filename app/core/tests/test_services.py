"""
Tests for ServiceResult and BaseService helpers.
"""

import logging

import pytest

from core.services import BaseService, ServiceResult


class WidgetService(BaseService):
    pass


class TestServiceResult:
    def test_success_is_truthy(self):
        result = ServiceResult.success({"id": 1})

        assert result
        assert result.data == {"id": 1}
        assert result.error is None

    def test_failure_is_falsy(self):
        result = ServiceResult.failure(
            "Bad input",
            error_code="VALIDATION_ERROR",
            errors={"body": ["Required."]},
        )

        assert not result
        assert result.data is None
        assert result.to_response() == {
            "error": "Bad input",
            "error_code": "VALIDATION_ERROR",
            "errors": {"body": ["Required."]},
        }

    def test_failure_response_omits_empty_fields(self):
        assert ServiceResult.failure("Nope").to_response() == {"error": "Nope"}


class TestBaseService:
    def test_logger_is_named_after_service(self):
        logger = WidgetService.get_logger()

        assert isinstance(logger, logging.Logger)
        assert logger.name == f"{__name__}.WidgetService"

    @pytest.mark.parametrize(
        ("kwargs", "missing"),
        [
            ({"title": "", "body": "x"}, "title"),
            ({"title": "x", "body": None}, "body"),
        ],
    )
    def test_validate_required_reports_missing_field(self, kwargs, missing):
        result = WidgetService.validate_required(**kwargs)

        assert result is not None
        assert result.error_code == "VALIDATION_ERROR"
        assert missing in result.errors

    def test_validate_required_passes(self):
        assert WidgetService.validate_required(title="x", body="y") is None
