"""
Unit tests for error handlers.

Tests the error response model and exception handlers to ensure
session-store errors produce correctly structured responses.
"""

import json

import pytest
from unittest.mock import MagicMock
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from errors.codes import ErrorCode
from errors.exceptions import AppException, invalid_session_driver
from errors.handlers import (
    ErrorResponse,
    get_request_id,
    handle_app_exception,
    handle_unexpected_exception,
    register_exception_handlers,
)


def make_request(request_id="test-request-id", method="GET"):
    request = MagicMock(spec=Request)
    request.state.request_id = request_id
    request.url.path = "/sessions"
    request.method = method
    return request


class TestErrorResponse:
    """Tests for the ErrorResponse model."""

    def test_error_response_with_all_fields(self):
        response = ErrorResponse(
            error_code="INVALID_SESSION_DRIVER",
            message="Unsupported driver",
            details={"driver": "file"},
            request_id="req-123",
        )

        assert response.error_code == "INVALID_SESSION_DRIVER"
        assert response.details == {"driver": "file"}
        assert response.request_id == "req-123"

    def test_error_response_model_dump_excludes_none(self):
        """Test that model_dump excludes None values when specified."""
        response = ErrorResponse(
            error_code="INTERNAL_ERROR",
            message="An error occurred",
            request_id="req-789",
        )

        dumped = response.model_dump(exclude_none=True)
        assert "details" not in dumped
        assert dumped["request_id"] == "req-789"


class TestGetRequestId:
    """Tests for the get_request_id function."""

    def test_get_request_id_from_state(self):
        assert get_request_id(make_request("existing-request-id")) == "existing-request-id"

    def test_get_request_id_generates_uuid_when_not_set(self):
        """Test that a UUID is generated when request_id is not in state."""
        request = MagicMock(spec=Request)
        del request.state.request_id

        result = get_request_id(request)

        assert len(result) == 36
        assert result.count("-") == 4


class TestHandleAppException:
    """Tests for the handle_app_exception handler."""

    @pytest.mark.asyncio
    async def test_invalid_driver_response(self):
        """Test that the response carries error_code, message, details and request_id."""
        exc = invalid_session_driver("file")

        response = await handle_app_exception(make_request(), exc)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        data = json.loads(response.body.decode("utf-8"))
        assert data["error_code"] == "INVALID_SESSION_DRIVER"
        assert data["message"] == exc.message
        assert data["details"] == {"driver": "file"}
        assert data["request_id"] == "test-request-id"

    @pytest.mark.asyncio
    async def test_uses_exception_status_code(self):
        exc = AppException(
            error_code=ErrorCode.SESSION_STORE_UNAVAILABLE,
            message="Redis is down",
        )

        response = await handle_app_exception(make_request(), exc)

        assert response.status_code == 503


class TestHandleUnexpectedException:
    """Tests for the handle_unexpected_exception handler."""

    @pytest.mark.asyncio
    async def test_hides_internal_details(self):
        """Test that store connection details are not exposed to the client."""
        exc = ConnectionError("Error connecting to redis://:secret@cache:6379")

        response = await handle_unexpected_exception(make_request(method="DELETE"), exc)

        assert response.status_code == 500
        data = json.loads(response.body.decode("utf-8"))
        assert "secret" not in data["message"]
        assert data["error_code"] == "INTERNAL_ERROR"
        assert "unexpected error" in data["message"].lower()
        assert "details" not in data
        assert data["request_id"] == "test-request-id"


class TestRegisterExceptionHandlers:
    """Tests for the register_exception_handlers function."""

    def test_register_exception_handlers_adds_handlers(self):
        mock_app = MagicMock()

        register_exception_handlers(mock_app)

        exception_types = [call[0][0] for call in mock_app.add_exception_handler.call_args_list]
        assert exception_types == [AppException, Exception]

    def test_directory_error_through_app(self):
        """Test an invalid driver raised in an endpoint becomes a JSON error."""
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/sessions")
        async def list_sessions():
            raise invalid_session_driver("file")

        response = TestClient(app).get("/sessions")

        assert response.status_code == 500
        assert response.json()["details"] == {"driver": "file"}
