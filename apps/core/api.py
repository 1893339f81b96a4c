# apps/core/api.py

"""
Helpers shared by the JSON views

- api_view: method filter + login check + typed error translation
- parse_json_body / field helpers for request validation
"""

import json
import logging
from datetime import date
from functools import wraps

from django.db import DatabaseError
from django.http import JsonResponse

from .exceptions import KanbanError, NotAuthenticated, ValidationFailed

logger = logging.getLogger(__name__)

MAX_ID = 2 ** 63 - 1


def api_view(methods, login_required=True):
    """
    Decorator for JSON endpoints

    KanbanError subclasses become {"error", "code"} responses with their
    status. Database failures are logged and surfaced as a generic 500.
    """

    allowed = [m.upper() for m in methods]

    def decorator(view_func):
        @wraps(view_func)
        def wrapped_view(request, *args, **kwargs):
            if request.method not in allowed:
                response = JsonResponse(
                    {'error': 'Method not allowed', 'code': 'method_not_allowed'},
                    status=405
                )
                response['Allow'] = ', '.join(allowed)
                return response

            try:
                if login_required and not request.user.is_authenticated:
                    raise NotAuthenticated()
                return view_func(request, *args, **kwargs)
            except KanbanError as e:
                log = logger.warning if e.status_code >= 409 else logger.info
                log(
                    "%s %s rejected: %s (%s)",
                    request.method, request.path, e.code, e.message
                )
                return JsonResponse(e.to_dict(), status=e.status_code)
            except DatabaseError:
                logger.exception("Database error on %s %s", request.method, request.path)
                return JsonResponse(
                    {'error': 'Internal server error', 'code': 'server_error'},
                    status=500
                )

        return wrapped_view

    return decorator


def parse_json_body(request) -> dict:
    """Decode the JSON object of a request body (empty body -> {})"""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationFailed('Invalid JSON body')
    if not isinstance(data, dict):
        raise ValidationFailed('JSON body must be an object')
    return data


def required_text(data: dict, field: str, label: str, max_length: int = None) -> str:
    """Non-empty trimmed string"""
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailed(f'{label} is required')
    value = value.strip()
    if max_length and len(value) > max_length:
        raise ValidationFailed(f'{label} must be {max_length} characters or less')
    return value


def optional_date(value, label: str = 'Date'):
    """ISO date string (YYYY-MM-DD) or None"""
    if value in (None, ''):
        return None
    if not isinstance(value, str):
        raise ValidationFailed(f'{label} must be a YYYY-MM-DD string')
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise ValidationFailed(f'{label} must be a YYYY-MM-DD string')


def optional_text(value, label: str):
    """String or None; blank becomes None"""
    if value in (None, ''):
        return None
    if not isinstance(value, str):
        raise ValidationFailed(f'{label} must be a string')
    return value


def id_list(value, label: str):
    """List of integer ids"""
    if not isinstance(value, list):
        raise ValidationFailed(f'{label} must be an array')
    try:
        ids = [int(v) for v in value]
    except (TypeError, ValueError):
        raise ValidationFailed(f'{label} must contain ids')
    # bigint primary keys
    if any(not 0 < i <= MAX_ID for i in ids):
        raise ValidationFailed(f'{label} must contain ids')
    return ids
