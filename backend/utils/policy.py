"""Role-based authorization policy.

A single permission table decides what each role may do. ``authorize`` is a
pure function over explicit inputs; ``enforce`` is the form route handlers
use, raising ``AuthenticationError``/``AuthorizationError`` on deny.

Achievement reads are row-scoped: roles holding only ``ACHIEVEMENT_READ_OWN``
get a ``Decision.owner_filter`` that callers must apply to their queries.
"""

import enum
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from models.users import UserRole
from utils.exceptions import AuthenticationError, AuthorizationError

UNAUTHENTICATED = "Unauthenticated"
FORBIDDEN = "Forbidden"


class Action(str, enum.Enum):
    # Requested by handlers
    ACHIEVEMENT_READ = "achievement:read"
    ACHIEVEMENT_CREATE = "achievement:create"
    ACHIEVEMENT_REVIEW = "achievement:review"
    USER_READ_ALL = "user:read_all"
    USER_READ_SELF = "user:read_self"
    USER_UPDATE_SELF = "user:update_self"
    USER_CREATE = "user:create"
    USER_SET_ROLE = "user:set_role"
    STATS_READ = "stats:read"
    LOGS_READ = "logs:read"
    PUBLIC_READ = "public:read"

    # Grants that refine the requests above
    ACHIEVEMENT_READ_OWN = "achievement:read_own"
    ACHIEVEMENT_READ_ALL = "achievement:read_all"
    ACHIEVEMENT_CREATE_FOR_OTHERS = "achievement:create_for_others"


_TEACHER: FrozenSet[Action] = frozenset({
    Action.PUBLIC_READ,
    Action.ACHIEVEMENT_READ_OWN,
    Action.ACHIEVEMENT_CREATE,
    Action.USER_READ_SELF,
    Action.USER_UPDATE_SELF,
})

_HOD: FrozenSet[Action] = _TEACHER | {
    Action.ACHIEVEMENT_READ_ALL,
    Action.ACHIEVEMENT_CREATE_FOR_OTHERS,
    Action.ACHIEVEMENT_REVIEW,
    Action.USER_READ_ALL,
}

# Admins read everything and manage users but do not author achievements
_ADMIN: FrozenSet[Action] = frozenset({
    Action.PUBLIC_READ,
    Action.ACHIEVEMENT_READ_ALL,
    Action.ACHIEVEMENT_REVIEW,
    Action.USER_READ_ALL,
    Action.USER_READ_SELF,
    Action.USER_UPDATE_SELF,
    Action.USER_CREATE,
    Action.USER_SET_ROLE,
    Action.STATS_READ,
    Action.LOGS_READ,
})

PERMISSIONS: Dict[str, FrozenSet[Action]] = {
    UserRole.TEACHER.value: _TEACHER,
    UserRole.HOD.value: _HOD,
    UserRole.ADMIN.value: _ADMIN,
    UserRole.STUDENT.value: frozenset({Action.PUBLIC_READ}),
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None
    # When set, only achievements whose teacher_id equals this value are visible
    owner_filter: Optional[str] = None


def _deny(reason: str = FORBIDDEN) -> Decision:
    return Decision(allowed=False, reason=reason)


def authorize(
    role: Optional[str],
    action: Action,
    caller_id: Optional[str] = None,
    owner_id: Optional[str] = None,
) -> Decision:
    """Decide whether ``role`` may perform ``action``.

    Args:
        role: Caller's role, or None for an unauthenticated caller.
        action: Requested action.
        caller_id: Caller's teacher id.
        owner_id: Teacher id owning the target resource, when there is one.

    Returns:
        A Decision. Denials carry ``"Unauthenticated"`` or ``"Forbidden"``.
    """
    if action == Action.PUBLIC_READ:
        return Decision(allowed=True)

    if role is None:
        return _deny(UNAUTHENTICATED)

    granted = PERMISSIONS.get(role, frozenset())

    if action == Action.ACHIEVEMENT_READ:
        if Action.ACHIEVEMENT_READ_ALL in granted:
            return Decision(allowed=True)
        if Action.ACHIEVEMENT_READ_OWN in granted and caller_id:
            if owner_id is not None and owner_id != caller_id:
                return _deny()
            return Decision(allowed=True, owner_filter=caller_id)
        return _deny()

    if action == Action.ACHIEVEMENT_CREATE:
        if Action.ACHIEVEMENT_CREATE not in granted:
            return _deny()
        if owner_id is not None and owner_id != caller_id:
            if Action.ACHIEVEMENT_CREATE_FOR_OTHERS not in granted:
                return _deny()
        return Decision(allowed=True)

    if action in granted:
        return Decision(allowed=True)
    return _deny()


def enforce(user, action: Action, owner_id: Optional[str] = None) -> Decision:
    """Apply the policy to a User row (or None) and raise on deny."""
    role = user.role if user is not None else None
    caller_id = user.teacher_id if user is not None else None

    decision = authorize(role, action, caller_id=caller_id, owner_id=owner_id)
    if not decision.allowed:
        if decision.reason == UNAUTHENTICATED:
            raise AuthenticationError(UNAUTHENTICATED)
        raise AuthorizationError(decision.reason or FORBIDDEN)
    return decision
