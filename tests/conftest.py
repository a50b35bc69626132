# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Shared fixtures for the social app tests.
#
# Key features:
# - Athlete factory with identity-provider ids
# - Follow helpers (one-way and mutual)
# - A ServiceContainer wired with a stand-in media uploader
# - A JSON API client that authenticates through the identity header
# =============================================================================

import json
import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# Django reads the settings module lazily, the first time settings are used

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "arena.settings_test")
os.environ.setdefault("MESSAGING_ALLOW_EXISTING_THREADS", "True")

import pytest
from django.conf import settings

from social.models import Follow, User
from social.services import build_services


# =============================================================================
# Stand-ins
# =============================================================================

class FakeUploader:
    """Records uploads and answers like cloudinary.uploader.upload."""

    def __init__(self, secure_url="https://res.cloudinary.com/demo/image/upload/v1/sports-chat/pic.jpg",
                 error=None):
        self.secure_url = secure_url
        self.error = error
        self.calls = []

    def upload(self, file, **options):
        self.calls.append((file, options))
        if self.error is not None:
            raise self.error
        return {"secure_url": self.secure_url, "public_id": "sports-chat/pic"}


class ApiClient:
    """Django test client that sends JSON bodies and the identity header."""

    def __init__(self, client, external_id=None):
        self.client = client
        self.external_id = external_id

    def _extra(self):
        if self.external_id:
            return {"HTTP_X_EXTERNAL_USER_ID": self.external_id}
        return {}

    def get(self, path, params=None):
        return self.client.get(path, params or {}, **self._extra())

    def post(self, path, body=None, raw=None):
        data = raw if raw is not None else json.dumps(body if body is not None else {})
        return self.client.post(path, data=data, content_type="application/json", **self._extra())

    def patch(self, path, body=None):
        return self.client.patch(path, data=json.dumps(body or {}), content_type="application/json",
                                 **self._extra())

    def delete(self, path):
        return self.client.delete(path, **self._extra())


# =============================================================================
# Users & relationships
# =============================================================================

@pytest.fixture
def make_user(db):
    """Factory: make_user("alice") -> User with external_id "ext_alice"."""
    def _make(username, external_id=None, **extra):
        return User.objects.create_user(
            username=username,
            password="test-pass-123",
            external_id=external_id or f"ext_{username}",
            **extra,
        )
    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice", first_name="Alice", last_name="Runner")


@pytest.fixture
def bob(make_user):
    return make_user("bob", first_name="Bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def dave(make_user):
    return make_user("dave")


@pytest.fixture
def follow(db):
    def _follow(follower, followed):
        Follow.objects.get_or_create(follower=follower, followed=followed)
    return _follow


@pytest.fixture
def make_mutual(follow):
    def _mutual(a, b):
        follow(a, b)
        follow(b, a)
    return _mutual


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def services(db, uploader):
    return build_services(settings, uploader=uploader)


# =============================================================================
# HTTP
# =============================================================================

@pytest.fixture
def api(client):
    """api(user) -> ApiClient authenticated as `user` (None for anonymous)."""
    def _api(user=None, external_id=None):
        return ApiClient(client, external_id or (user.external_id if user else None))
    return _api
