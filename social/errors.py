"""
Error taxonomy shared by every service and view.

Services raise ApiError with one of the ErrorCode members; the view
boundary (social.decorators.api_view) turns it into

    {"success": false, "error": "<message>", "code": "<CODE>"}

with the HTTP status listed in STATUS_CODES.
"""

from enum import Enum


class ErrorCode(str, Enum):
    AUTH_REQUIRED = 'AUTH_REQUIRED'

    VALIDATION_ERROR = 'VALIDATION_ERROR'
    INVALID_JSON = 'INVALID_JSON'
    INVALID_USERNAME = 'INVALID_USERNAME'
    EMPTY_CONTENT = 'EMPTY_CONTENT'
    INVALID_OPERATION = 'INVALID_OPERATION'
    INVALID_REQUEST = 'INVALID_REQUEST'
    INVALID_STATUS = 'INVALID_STATUS'
    NO_FILE = 'NO_FILE'
    INVALID_FILE_TYPE = 'INVALID_FILE_TYPE'
    FILE_TOO_LARGE = 'FILE_TOO_LARGE'

    FORBIDDEN = 'FORBIDDEN'
    NOT_PARTICIPANT = 'NOT_PARTICIPANT'
    NOT_MESSAGE_OWNER = 'NOT_MESSAGE_OWNER'

    NOT_FOUND = 'NOT_FOUND'
    USER_NOT_FOUND = 'USER_NOT_FOUND'
    SENDER_NOT_FOUND = 'SENDER_NOT_FOUND'
    RECEIVER_NOT_FOUND = 'RECEIVER_NOT_FOUND'
    CONVERSATION_NOT_FOUND = 'CONVERSATION_NOT_FOUND'
    MESSAGE_NOT_FOUND = 'MESSAGE_NOT_FOUND'
    NOTIFICATION_NOT_FOUND = 'NOTIFICATION_NOT_FOUND'

    METHOD_NOT_ALLOWED = 'METHOD_NOT_ALLOWED'

    ALREADY_HANDLED = 'ALREADY_HANDLED'
    ALREADY_FRIENDS = 'ALREADY_FRIENDS'
    PENDING_REQUEST = 'PENDING_REQUEST'
    ALREADY_FOLLOWING = 'ALREADY_FOLLOWING'
    NOT_FOLLOWING = 'NOT_FOLLOWING'

    SEND_FAILED = 'SEND_FAILED'
    REQUEST_FAILED = 'REQUEST_FAILED'
    FETCH_FAILED = 'FETCH_FAILED'
    INTERNAL_ERROR = 'INTERNAL_ERROR'
    UPLOAD_FAILED = 'UPLOAD_FAILED'


STATUS_CODES = {
    ErrorCode.AUTH_REQUIRED: 401,

    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_JSON: 400,
    ErrorCode.INVALID_USERNAME: 400,
    ErrorCode.EMPTY_CONTENT: 400,
    ErrorCode.INVALID_OPERATION: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INVALID_STATUS: 400,
    ErrorCode.NO_FILE: 400,
    ErrorCode.INVALID_FILE_TYPE: 400,
    ErrorCode.FILE_TOO_LARGE: 400,

    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_PARTICIPANT: 403,
    ErrorCode.NOT_MESSAGE_OWNER: 403,

    ErrorCode.NOT_FOUND: 404,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.SENDER_NOT_FOUND: 404,
    ErrorCode.RECEIVER_NOT_FOUND: 404,
    ErrorCode.CONVERSATION_NOT_FOUND: 404,
    ErrorCode.MESSAGE_NOT_FOUND: 404,
    ErrorCode.NOTIFICATION_NOT_FOUND: 404,

    ErrorCode.METHOD_NOT_ALLOWED: 405,

    ErrorCode.ALREADY_HANDLED: 409,
    ErrorCode.ALREADY_FRIENDS: 409,
    ErrorCode.PENDING_REQUEST: 409,
    ErrorCode.ALREADY_FOLLOWING: 409,
    ErrorCode.NOT_FOLLOWING: 409,

    ErrorCode.SEND_FAILED: 500,
    ErrorCode.REQUEST_FAILED: 500,
    ErrorCode.FETCH_FAILED: 500,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.UPLOAD_FAILED: 502,
}

DEFAULT_MESSAGES = {
    ErrorCode.AUTH_REQUIRED: "You must be signed in",
    ErrorCode.VALIDATION_ERROR: "Invalid input",
    ErrorCode.INVALID_JSON: "Request body must be valid JSON",
    ErrorCode.FORBIDDEN: "You are not allowed to do that",
    ErrorCode.NOT_FOUND: "Not found",
    ErrorCode.METHOD_NOT_ALLOWED: "Method not allowed",
    ErrorCode.INTERNAL_ERROR: "Something went wrong",
}


class ApiError(Exception):
    """
    Expected failure of a social operation.

    Args:
        code: ErrorCode member (plain strings are coerced)
        message: Human readable explanation sent as "error"
        details: Optional field-level detail (dict or list)
    """

    def __init__(self, code, message=None, details=None):
        self.code = ErrorCode(code)
        self.message = message or DEFAULT_MESSAGES.get(self.code, self.code.value.replace('_', ' ').capitalize())
        self.details = details
        super().__init__(self.message)

    @property
    def status_code(self):
        return STATUS_CODES[self.code]

    def to_dict(self):
        payload = {
            "success": False,
            "error": self.message,
            "code": self.code.value,
        }
        if self.details:
            payload["details"] = self.details
        return payload

    def __repr__(self):
        return f"ApiError({self.code.value!r}, {self.message!r})"
