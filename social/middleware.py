"""
================================================================================
ARENA SOCIAL - CUSTOM MIDDLEWARE
================================================================================

@file        middleware.py
@description Request identity, service wiring and timezone activation

MODULE PURPOSE
================================================================================
1. ExternalIdentityMiddleware
   - Reads the identity provider's user id from a trusted request header
   - Resolves it to a local profile (User.external_id) and sets request.user
   - Records the raw id as request.external_id even when no profile matches

2. ServiceMiddleware
   - Attaches the process-wide ServiceContainer built in SocialConfig.ready()
     to every request as request.services

3. TimezoneMiddleware
   - Activates the user's timezone so serialized timestamps carry the
     user's local offset
   - Falls back to UTC for anonymous users or invalid timezones

ORDER
================================================================================
All three must run after django.contrib.auth's AuthenticationMiddleware:

    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'social.middleware.ExternalIdentityMiddleware',
    'social.middleware.ServiceMiddleware',
    'social.middleware.TimezoneMiddleware',

TRUST MODEL
================================================================================
The identity header is only trustworthy when the app sits behind a proxy
or gateway that strips client-supplied copies of it and injects the
verified value. Session-authenticated users (admin, local development)
keep their session identity; the header never overrides it.
================================================================================
"""

import logging

import pytz
from django.apps import apps
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


# ============================================================================
# EXTERNAL IDENTITY MIDDLEWARE
# ============================================================================

class ExternalIdentityMiddleware:
    """
    Map the identity provider's user id onto request.user.

    Flow:
        1. Session user already authenticated -> keep it, external_id from profile
        2. Header present -> look up User by external_id
        3. Match -> request.user = profile (not persisted to the session)
        4. No match -> request.user stays anonymous, request.external_id set

    Views use request.external_id to tell "not signed in" (AUTH_REQUIRED)
    apart from "signed in but no athlete profile yet" (*_NOT_FOUND).

    Settings:
        EXTERNAL_IDENTITY_HEADER: META key of the header
            (default 'HTTP_X_EXTERNAL_USER_ID')
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.header = settings.EXTERNAL_IDENTITY_HEADER

    def __call__(self, request):
        request.external_id = None

        if request.user.is_authenticated:
            request.external_id = request.user.external_id
            return self.get_response(request)

        external_id = (request.META.get(self.header) or '').strip()
        if external_id:
            request.external_id = external_id
            User = apps.get_model(settings.AUTH_USER_MODEL)
            profile = User.objects.filter(external_id=external_id, is_active=True).first()
            if profile is not None:
                request.user = profile
            else:
                logger.warning(f"No profile for external id {external_id}")

        return self.get_response(request)


# ============================================================================
# SERVICE MIDDLEWARE
# ============================================================================

class ServiceMiddleware:
    """
    Hand the ServiceContainer to views as request.services.

    The container is read once, when Django instantiates the middleware
    chain at process start, so every request shares the same handles.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.services = apps.get_app_config('social').services

    def __call__(self, request):
        request.services = self.services
        return self.get_response(request)


# ============================================================================
# TIMEZONE MIDDLEWARE
# ============================================================================

class TimezoneMiddleware:
    """
    Activate user-specific timezone for datetime serialization.

    Example:
        User.timezone = 'America/New_York'
        Message timestamp 2026-02-05 09:30:00 UTC
        Serialized as "2026-02-05T04:30:00-05:00"

    Error Handling:
        - pytz.UnknownTimeZoneError: Invalid timezone string -> UTC
        - AttributeError: User has no timezone attribute -> UTC
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.user.is_authenticated:
            try:
                timezone.activate(pytz.timezone(request.user.timezone))
            except (pytz.UnknownTimeZoneError, AttributeError):
                timezone.activate(pytz.UTC)
        else:
            timezone.activate(pytz.UTC)

        try:
            return self.get_response(request)
        finally:
            timezone.deactivate()
