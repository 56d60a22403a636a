# apps/core/policy.py

"""
Access policy - decides whether an actor may act on a resource

Every rule lives in a single table keyed by ``(resource type, action)``.
Adding a resource variant or an action means adding rows to ``RULES``,
nothing else. The policy is a pure function: no I/O, no clock, no logging.
Denial is a normal return value; only combinations missing from the table
are escalated (see ``AccessPolicy.enforce``).
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Type

from .domain import (
    Action, Actor, Capability, NotificationResource, ProjectResource, Role,
    TaskResource, UserRecord,
)


class DenyReason:
    NOT_OWNER = 'not-owner'
    NOT_AUTHORIZED = 'not-authorized'
    NOT_CREATOR = 'not-creator'
    NOT_RECIPIENT = 'not-recipient'
    NOT_SELF = 'not-self'
    ADMIN_ONLY = 'admin-only'
    ROLE_REQUIRED = 'role-required'
    UNSUPPORTED = 'unsupported'


@dataclass(frozen=True)
class Verdict:
    """Outcome of an authorization decision (Allow, or Deny with a reason)"""

    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> 'Verdict':
        return ALLOW

    @classmethod
    def deny(cls, reason: str) -> 'Verdict':
        return cls(allowed=False, reason=reason)

    @property
    def is_unsupported(self) -> bool:
        return not self.allowed and self.reason == DenyReason.UNSUPPORTED

    def __bool__(self):
        return self.allowed


ALLOW = Verdict(allowed=True)


class UnsupportedOperation(Exception):
    """
    Action/resource combination that no rule covers

    This is a programming error at the call site, not an ordinary denial,
    so it is raised instead of being turned into a 403.
    """

    def __init__(self, resource, action):
        self.resource = resource
        self.action = action
        super().__init__(
            f"No access rule for action '{action}' on {type(resource).__name__}"
        )


Rule = Callable[[Actor, object], Verdict]


# === RULES ===

def _open(actor, resource):
    """Any authenticated actor"""
    return ALLOW


def _project_owner(actor: Actor, project: ProjectResource) -> Verdict:
    if actor.id == project.owner:
        return ALLOW
    return Verdict.deny(DenyReason.NOT_OWNER)


def _task_creator_or_assignee(actor: Actor, task: TaskResource) -> Verdict:
    if actor.id == task.created_by or (task.assigned_to is not None and actor.id == task.assigned_to):
        return ALLOW
    return Verdict.deny(DenyReason.NOT_AUTHORIZED)


def _task_creator(actor: Actor, task: TaskResource) -> Verdict:
    if actor.id == task.created_by:
        return ALLOW
    return Verdict.deny(DenyReason.NOT_CREATOR)


def _notification_recipient(actor: Actor, notification: NotificationResource) -> Verdict:
    if actor.id == notification.owner:
        return ALLOW
    return Verdict.deny(DenyReason.NOT_RECIPIENT)


def _self(actor: Actor, user: UserRecord) -> Verdict:
    if actor.id == user.id:
        return ALLOW
    return Verdict.deny(DenyReason.NOT_SELF)


def _admin_only(actor, resource):
    # Admins never reach the table
    return Verdict.deny(DenyReason.ADMIN_ONLY)


RULES: Dict[Tuple[Type, str], Rule] = {
    (ProjectResource, Action.VIEW): _open,
    (ProjectResource, Action.CREATE): _open,
    (ProjectResource, Action.UPDATE): _project_owner,
    (ProjectResource, Action.DELETE): _project_owner,

    (TaskResource, Action.VIEW): _open,
    (TaskResource, Action.CREATE): _open,
    (TaskResource, Action.UPDATE): _task_creator_or_assignee,
    (TaskResource, Action.DELETE): _task_creator,

    (NotificationResource, Action.MARK_READ): _notification_recipient,

    (UserRecord, Action.VIEW): _open,
    (UserRecord, Action.UPDATE): _self,
    (UserRecord, Action.DELETE): _admin_only,
}

CAPABILITIES: Dict[str, frozenset] = {
    Capability.LIST_USERS: frozenset({Role.ADMIN, Role.MANAGER}),
    Capability.VIEW_DASHBOARD: frozenset({Role.ADMIN, Role.MANAGER}),
}


class AccessPolicy:
    """
    Table-driven access policy

    Rule order:
    1. Admins are allowed everything
    2. The rule registered for (resource type, action)
    3. Otherwise Deny('unsupported')
    """

    def __init__(self, rules: Dict[Tuple[Type, str], Rule] = None,
                 capabilities: Dict[str, frozenset] = None):
        self._rules = RULES if rules is None else rules
        self._capabilities = CAPABILITIES if capabilities is None else capabilities

    def evaluate(self, actor: Actor, resource, action) -> Verdict:
        action = Action(action)

        if actor.is_admin:
            return ALLOW

        rule = self._rules.get((type(resource), action))
        if rule is None:
            return Verdict.deny(DenyReason.UNSUPPORTED)

        return rule(actor, resource)

    def enforce(self, actor: Actor, resource, action) -> Verdict:
        """
        Same as ``evaluate`` but raises UnsupportedOperation for policy gaps

        Ordinary denials are still returned, never raised.
        """
        verdict = self.evaluate(actor, resource, action)
        if verdict.is_unsupported:
            raise UnsupportedOperation(resource, Action(action))
        return verdict

    def check_capability(self, actor: Actor, capability) -> Verdict:
        """Role gate for operations that do not target a single resource"""
        roles = self._capabilities.get(Capability(capability))
        if roles is None:
            return Verdict.deny(DenyReason.UNSUPPORTED)

        if actor.role in roles:
            return ALLOW
        return Verdict.deny(DenyReason.ROLE_REQUIRED)


# Stateless, shared by views, consumers and signals
access_policy = AccessPolicy()
