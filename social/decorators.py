"""
JSON API boundary.

`api_view` wraps every endpoint in views.py:
- rejects HTTP methods the view does not declare (METHOD_NOT_ALLOWED)
- requires an identity unless login=False (AUTH_REQUIRED, or the view's
  `profile_missing` code when the provider id has no local profile)
- converts ApiError into {"success": false, "error", "code"} responses
- logs any other exception and answers with the view's `failure` code
"""

import json
import logging
from functools import wraps

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from .errors import ApiError, ErrorCode

logger = logging.getLogger(__name__)


def error_response(error):
    return JsonResponse(error.to_dict(), status=error.status_code)


def read_json(request):
    """Parsed JSON object body; an empty body reads as {}."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ApiError(ErrorCode.INVALID_JSON)
    if not isinstance(data, dict):
        raise ApiError(ErrorCode.INVALID_JSON, "Request body must be a JSON object")
    return data


def api_view(methods=('GET',), failure=ErrorCode.INTERNAL_ERROR, login=True,
             profile_missing=ErrorCode.USER_NOT_FOUND):
    methods = tuple(m.upper() for m in methods)

    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            try:
                if request.method not in methods:
                    raise ApiError(ErrorCode.METHOD_NOT_ALLOWED, f"{request.method} not allowed")

                if login and not request.user.is_authenticated:
                    if getattr(request, 'external_id', None):
                        raise ApiError(profile_missing, "Athlete profile not found")
                    raise ApiError(ErrorCode.AUTH_REQUIRED)

                return view(request, *args, **kwargs)

            except ApiError as e:
                if e.status_code >= 500:
                    logger.error(f"{view.__name__}: {e.code.value} {e.message}")
                else:
                    logger.info(f"{view.__name__}: {e.code.value} {e.message}")
                return error_response(e)

            except Exception as e:
                logger.error(f"Unhandled error in {view.__name__}: {e}", exc_info=True)
                return error_response(ApiError(failure))

        return csrf_exempt(wrapper)

    return decorator
