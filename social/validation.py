"""
Input validation for messaging and relationship requests.

Each helper returns the cleaned value or raises ApiError with the code the
endpoint reports for that field.
"""

import re
from urllib.parse import urlparse

from .errors import ApiError, ErrorCode

MAX_MESSAGE_LENGTH = 5000
MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 50
MAX_GROUP_NAME_LENGTH = 100
MAX_GROUP_PARTICIPANTS = 50
MIN_GROUP_OTHERS = 2
IMAGE_PLACEHOLDER = "[Image]"

USERNAME_RE = re.compile(r'^[a-zA-Z0-9_-]+$')


def clean_receiver_username(value):
    if not isinstance(value, str) or len(value.strip()) < MIN_USERNAME_LENGTH:
        raise ApiError(ErrorCode.INVALID_USERNAME, "Valid receiver username is required")
    return value.strip().lower()


def clean_handle(value, field="username"):
    """Single handle used in a URL or a body field (follow, friend request)."""
    if not isinstance(value, str) or not value.strip():
        raise ApiError(ErrorCode.INVALID_USERNAME, f"Valid {field} is required")
    value = value.strip()
    if len(value) > MAX_USERNAME_LENGTH:
        raise ApiError(ErrorCode.INVALID_USERNAME, "Username too long")
    return value


def clean_content(content, image_url=None):
    """
    Message text. Blank text is allowed only when an image is attached, in
    which case the stored text is the image placeholder.
    """
    if content is None:
        content = ""
    if not isinstance(content, str):
        raise ApiError(ErrorCode.VALIDATION_ERROR, "Message content must be text",
                       details={"content": "must be a string"})

    text = content.strip()
    if not text:
        if image_url:
            return IMAGE_PLACEHOLDER
        raise ApiError(ErrorCode.EMPTY_CONTENT, "Message content or image is required")

    if len(text) > MAX_MESSAGE_LENGTH:
        raise ApiError(ErrorCode.VALIDATION_ERROR,
                       f"Message too long (max {MAX_MESSAGE_LENGTH} characters)",
                       details={"content": "too long"})
    return text


def clean_image_url(url, allowed_hosts):
    if url in (None, ""):
        return ""
    if not isinstance(url, str):
        raise ApiError(ErrorCode.VALIDATION_ERROR, "Invalid image URL", details={"imageUrl": "must be a string"})

    parsed = urlparse(url.strip())
    if parsed.scheme != "https":
        raise ApiError(ErrorCode.VALIDATION_ERROR, "Image URL must use HTTPS",
                       details={"imageUrl": "must use https"})

    host = (parsed.hostname or "").lower()
    if not any(host == allowed or host.endswith("." + allowed) for allowed in allowed_hosts):
        raise ApiError(ErrorCode.VALIDATION_ERROR, "Image must be hosted on an allowed media domain",
                       details={"imageUrl": "host not allowed"})
    return url.strip()


def clean_group_name(name):
    if not isinstance(name, str) or not name.strip():
        raise ApiError(ErrorCode.VALIDATION_ERROR, "Group name is required", details={"name": "required"})
    name = name.strip()
    if len(name) > MAX_GROUP_NAME_LENGTH:
        raise ApiError(ErrorCode.VALIDATION_ERROR,
                       f"Group name too long (max {MAX_GROUP_NAME_LENGTH} characters)",
                       details={"name": "too long"})
    return name


def clean_participants(usernames, exclude=None):
    """
    Handles for a group, minus the creator's own handle.

    Rejects duplicates, malformed handles and lists outside 2..50 entries.
    """
    if not isinstance(usernames, list) or not all(isinstance(u, str) for u in usernames):
        raise ApiError(ErrorCode.VALIDATION_ERROR, "participantUsernames must be a list of usernames",
                       details={"participantUsernames": "must be a list"})

    cleaned = [u.strip() for u in usernames if u.strip()]
    if exclude:
        cleaned = [u for u in cleaned if u.lower() != exclude.lower()]

    if len(cleaned) > MAX_GROUP_PARTICIPANTS:
        raise ApiError(ErrorCode.VALIDATION_ERROR, f"Too many participants (max {MAX_GROUP_PARTICIPANTS})")

    if len({u.lower() for u in cleaned}) != len(cleaned):
        raise ApiError(ErrorCode.VALIDATION_ERROR, "Duplicate participants not allowed")

    for username in cleaned:
        if len(username) > MAX_USERNAME_LENGTH or not USERNAME_RE.match(username):
            raise ApiError(ErrorCode.VALIDATION_ERROR, f"Invalid username format: {username}")

    if len(cleaned) < MIN_GROUP_OTHERS:
        raise ApiError(ErrorCode.VALIDATION_ERROR, "Group needs at least 3 members (you + 2 others)")

    return cleaned


def clean_id(value, field):
    """Integer primary key from a JSON body or query value; floats must be whole numbers."""
    error = ApiError(ErrorCode.VALIDATION_ERROR, f"{field} must be a numeric id", details={field: value})
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise error
    try:
        return int(value)
    except (TypeError, ValueError):
        raise error
