# apps/core/utils.py

import json
import logging
from functools import wraps
from typing import Dict, Iterable

from django.core.exceptions import PermissionDenied
from django.db import models
from django.forms.models import model_to_dict
from django.http import Http404, JsonResponse

logger = logging.getLogger(__name__)


class InvalidPayload(Exception):
    """Request body that is not a JSON object"""


def json_error(message: str, status: int, **extra) -> JsonResponse:
    """Error body shared by every API endpoint"""
    payload = {'success': False, 'error': message}
    payload.update(extra)
    return JsonResponse(payload, status=status)


def parse_json_body(request) -> Dict:
    """
    Decodes the request body as a JSON object

    An empty body is treated as an empty object.
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidPayload(f'Invalid JSON: {exc}') from exc

    if not isinstance(data, dict):
        raise InvalidPayload('Request body must be a JSON object')
    return data


def merge_with_instance(instance: models.Model, fields: Iterable[str], payload: Dict) -> Dict:
    """
    Form data for a partial update

    Starts from the current values of ``instance`` and overlays the fields
    sent by the client, so a PUT only touches what it mentions.
    """
    data = model_to_dict(instance, fields=list(fields))
    for key, value in data.items():
        # Many-to-many values come back as model instances
        if isinstance(value, (list, tuple)) and value and isinstance(value[0], models.Model):
            data[key] = [obj.pk for obj in value]
    data.update({key: value for key, value in payload.items() if key in data})
    return data


def json_view(view_func):
    """
    Decorator for JSON API views

    - anonymous users get 401 instead of a redirect to the login page
    - Http404, PermissionDenied and InvalidPayload become JSON errors
    - UnsupportedOperation (policy gap) is deliberately not caught
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return json_error('Authentication required.', status=401)

        try:
            return view_func(request, *args, **kwargs)
        except InvalidPayload as exc:
            return json_error(str(exc), status=400)
        except Http404 as exc:
            return json_error(str(exc) or 'Not found.', status=404)
        except PermissionDenied as exc:
            reason = getattr(exc, 'reason', None)
            return json_error(str(exc) or 'Permission denied.', status=403, reason=reason)

    return wrapped_view
