# =============================================================================
# tests/test_errors.py - Error Taxonomy Tests
# =============================================================================
# Every ErrorCode maps to one HTTP status and serializes to the shared
# {"success": false, "error", "code"} shape.
#
# Run with: pytest tests/test_errors.py -v
# =============================================================================

import pytest

from social.errors import STATUS_CODES, ApiError, ErrorCode


class TestErrorCodes:

    def test_every_code_has_a_status(self):
        assert set(STATUS_CODES) == set(ErrorCode)

    @pytest.mark.parametrize("code, status", [
        (ErrorCode.AUTH_REQUIRED, 401),
        (ErrorCode.INVALID_USERNAME, 400),
        (ErrorCode.EMPTY_CONTENT, 400),
        (ErrorCode.INVALID_OPERATION, 400),
        (ErrorCode.FORBIDDEN, 403),
        (ErrorCode.NOT_FOUND, 404),
        (ErrorCode.SENDER_NOT_FOUND, 404),
        (ErrorCode.RECEIVER_NOT_FOUND, 404),
        (ErrorCode.USER_NOT_FOUND, 404),
        (ErrorCode.ALREADY_HANDLED, 409),
        (ErrorCode.SEND_FAILED, 500),
        (ErrorCode.UPLOAD_FAILED, 502),
    ])
    def test_status_mapping(self, code, status):
        assert ApiError(code).status_code == status


class TestApiError:

    def test_to_dict_shape(self):
        error = ApiError(ErrorCode.RECEIVER_NOT_FOUND, "User @ghost not found")

        assert error.to_dict() == {
            "success": False,
            "error": "User @ghost not found",
            "code": "RECEIVER_NOT_FOUND",
        }

    def test_details_are_included_when_present(self):
        error = ApiError(ErrorCode.USER_NOT_FOUND, "Some users not found", details={"missing": ["ghost"]})

        assert error.to_dict()["details"] == {"missing": ["ghost"]}

    def test_default_message(self):
        assert ApiError(ErrorCode.AUTH_REQUIRED).message == "You must be signed in"
        assert ApiError(ErrorCode.ALREADY_HANDLED).message == "Already handled"

    def test_plain_string_code_is_coerced(self):
        assert ApiError("FORBIDDEN").code is ErrorCode.FORBIDDEN

    def test_unknown_code_is_rejected(self):
        with pytest.raises(ValueError):
            ApiError("TEAPOT")
