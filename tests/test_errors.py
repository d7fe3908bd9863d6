# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for responder error codes and exceptions."""

import pytest

from responders.errors import (
    ERROR_CODE_TO_HTTP_STATUS,
    InvalidOptionsError,
    InvalidParamsError,
    ParamsParseError,
    ResponderError,
    ResponderErrorCode,
    UnsupportedMediaTypeError,
    UnsupportedOperationError,
)


class TestResponderErrorCode:
    """Test ResponderErrorCode enum."""

    def test_error_codes_are_strings(self):
        """All error codes should be string values."""
        for code in ResponderErrorCode:
            assert isinstance(code.value, str)
            assert code.value == code.name

    def test_all_codes_have_http_status(self):
        """All error codes should have an HTTP status mapping."""
        for code in ResponderErrorCode:
            assert code in ERROR_CODE_TO_HTTP_STATUS, f"Missing HTTP status for {code}"

    def test_http_status_ranges(self):
        for code, status in ERROR_CODE_TO_HTTP_STATUS.items():
            assert 400 <= status < 600, f"Invalid HTTP status {status} for {code}"


class TestResponderError:
    """Test ResponderError exception class."""

    def test_basic_error(self):
        error = ResponderError(
            code=ResponderErrorCode.INVALID_PARAMS,
            message="page must be an integer",
        )

        assert error.code == ResponderErrorCode.INVALID_PARAMS
        assert error.message == "page must be an integer"
        assert error.http_status == 400
        assert str(error) == "page must be an integer"

    def test_code_from_string(self):
        error = ResponderError(code="NOT_SUPPORTED", message="nope")

        assert error.code is ResponderErrorCode.NOT_SUPPORTED
        assert error.http_status == 501

    def test_unknown_code_rejected(self):
        with pytest.raises(ValueError):
            ResponderError(code="NO_SUCH_CODE", message="x")

    def test_to_dict(self):
        error = ResponderError(
            code=ResponderErrorCode.INTERNAL_ERROR,
            message="boom",
            details={"id": 1},
        )

        assert error.to_dict() == {
            "error": {"code": "INTERNAL_ERROR", "message": "boom", "details": {"id": 1}}
        }


class TestSpecificErrors:
    """Test the convenience subclasses."""

    def test_invalid_options(self):
        error = InvalidOptionsError("owner.type", "Unknown options type")

        assert error.http_status == 400
        assert error.details == {"path": "owner.type"}

    def test_invalid_params_default_message(self):
        error = InvalidParamsError("page")

        assert error.message == "Invalid value for parameter 'page'"
        assert error.details == {"param": "page"}

    def test_params_parse_error(self):
        assert ParamsParseError("bad").details is None
        assert ParamsParseError("bad", "application/json").details == {
            "content_type": "application/json"
        }

    def test_unsupported_media_type(self):
        error = UnsupportedMediaTypeError("application/xml")

        assert error.http_status == 415
        assert "application/xml" in error.message

    def test_unsupported_operation(self):
        error = UnsupportedOperationError("Unmarshal")

        assert error.message == "Unmarshal not supported"
        assert error.http_status == 501

    def test_all_are_responder_errors(self):
        for error in (
            InvalidOptionsError("a", "b"),
            InvalidParamsError("a"),
            ParamsParseError("a"),
            UnsupportedMediaTypeError("a"),
            UnsupportedOperationError("a"),
        ):
            assert isinstance(error, ResponderError)
