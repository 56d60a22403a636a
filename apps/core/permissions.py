# apps/core/permissions.py

"""
Bridge between Django requests and the access policy

Views call ``authorize`` / ``require_capability`` with ORM objects; this
module converts them to domain records, asks the policy, and turns a
denial into PermissionDenied carrying the reason code.
"""

import logging
from functools import wraps

from django.core.exceptions import PermissionDenied

from .domain import Action, Capability
from .policy import UnsupportedOperation, access_policy

logger = logging.getLogger(__name__)

DENIAL_MESSAGES = {
    'not-owner': 'Only the project owner can do this.',
    'not-authorized': 'Only the task creator or assignee can update this task.',
    'not-creator': 'Only the task creator can delete this task.',
    'not-recipient': 'This notification belongs to another user.',
    'not-self': 'You can only change your own profile.',
    'admin-only': 'Only administrators can do this.',
    'role-required': 'Access restricted to managers and administrators.',
}


class AuthorizationDenied(PermissionDenied):
    """Expected denial from the access policy, with its reason code"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(DENIAL_MESSAGES.get(reason, 'Permission denied.'))


def _as_resource(obj):
    return obj.as_resource() if hasattr(obj, 'as_resource') else obj


def authorize(user, obj, action):
    """
    Raises AuthorizationDenied unless ``user`` may perform ``action`` on ``obj``

    ``obj`` is an ORM instance (converted with ``as_resource``) or a domain
    record. A combination with no rule raises UnsupportedOperation.
    """
    actor = user.as_actor()
    resource = _as_resource(obj)

    try:
        verdict = access_policy.enforce(actor, resource, action)
    except UnsupportedOperation:
        logger.error(
            "Access policy has no rule for %s on %s (user %s)",
            Action(action).value, type(resource).__name__, actor.id
        )
        raise

    if not verdict:
        logger.warning(
            "Denied %s on %s for user %s: %s",
            Action(action).value, type(resource).__name__, actor.id, verdict.reason
        )
        raise AuthorizationDenied(verdict.reason)


def can(user, obj, action) -> bool:
    """Non-raising check, for building responses (e.g. 'can_edit' flags)"""
    if not user.is_authenticated:
        return False
    return bool(access_policy.evaluate(user.as_actor(), _as_resource(obj), action))


def require_capability(capability):
    """
    Decorator for role-gated views (listing users, global dashboard)

    Must sit inside ``json_view`` so the denial is rendered as JSON.
    """
    capability = Capability(capability)

    def decorator(view_func):
        @wraps(view_func)
        def wrapped_view(request, *args, **kwargs):
            verdict = access_policy.check_capability(request.user.as_actor(), capability)
            if not verdict:
                logger.warning(
                    "Denied capability %s for user %s: %s",
                    capability.value, request.user.pk, verdict.reason
                )
                raise AuthorizationDenied(verdict.reason)
            return view_func(request, *args, **kwargs)

        return wrapped_view

    return decorator
