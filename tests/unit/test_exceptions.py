"""
Unit tests for session-store exceptions and error codes.
"""

import pytest

from errors.codes import ERROR_CODE_STATUS_MAP, ErrorCode, get_default_status_code
from errors.exceptions import (
    AppException,
    internal_error,
    invalid_session_driver,
    session_store_unavailable,
    store_not_connected,
)


class TestErrorCodes:
    """Tests for the error code catalog."""

    def test_every_code_has_a_status(self):
        assert set(ERROR_CODE_STATUS_MAP) == set(ErrorCode)

    def test_store_unavailable_is_503(self):
        assert get_default_status_code(ErrorCode.SESSION_STORE_UNAVAILABLE) == 503

    def test_codes_are_strings(self):
        assert ErrorCode.INVALID_SESSION_DRIVER == "INVALID_SESSION_DRIVER"


class TestAppException:
    """Tests for AppException."""

    def test_default_status_code(self):
        exc = AppException(ErrorCode.INVALID_SESSION_DRIVER, "bad driver")

        assert exc.status_code == 500
        assert str(exc) == "bad driver"

    def test_explicit_status_code_wins(self):
        exc = AppException(ErrorCode.INTERNAL_ERROR, "teapot", status_code=418)

        assert exc.status_code == 418

    def test_to_dict_omits_missing_details(self):
        exc = AppException(ErrorCode.INTERNAL_ERROR, "boom")

        assert exc.to_dict() == {"error_code": "INTERNAL_ERROR", "message": "boom"}

    def test_to_dict_with_details(self):
        exc = invalid_session_driver("file")

        assert exc.to_dict()["details"] == {"driver": "file"}

    def test_repr(self):
        assert "INTERNAL_ERROR" in repr(internal_error())


class TestFactories:
    """Tests for the factory functions."""

    @pytest.mark.parametrize("factory, code", [
        (lambda: invalid_session_driver("array"), ErrorCode.INVALID_SESSION_DRIVER),
        (session_store_unavailable, ErrorCode.SESSION_STORE_UNAVAILABLE),
        (store_not_connected, ErrorCode.STORE_NOT_CONNECTED),
        (internal_error, ErrorCode.INTERNAL_ERROR),
    ])
    def test_factory_error_codes(self, factory, code):
        exc = factory()

        assert isinstance(exc, AppException)
        assert exc.error_code == code
        assert exc.status_code == ERROR_CODE_STATUS_MAP[code]

    def test_invalid_driver_custom_message(self):
        exc = invalid_session_driver(None, message="Session table not configured")

        assert exc.message == "Session table not configured"
        assert exc.details == {"driver": None}

    def test_store_not_connected_default_message(self):
        assert "connect()" in store_not_connected().message
