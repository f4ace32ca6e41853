"""
Authorization guard.

``authorize`` turns an identity and a requirement into an allow/deny
decision without raising; ``ensure_authorized`` raises the matching
exception for a denial. The superuser sentinel is recognised here and
nowhere else.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any

from newsdesk.config import settings
from newsdesk.exceptions import AuthenticationError, AuthorizationError, RoleLockedError
from newsdesk.models.user import User
from newsdesk.permissions_config.permissions import (
    RequirementLike,
    describe_requirement,
    normalize_requirement,
    satisfies,
)
from newsdesk.services.permission_service import resolve_effective_permissions

logger = logging.getLogger(__name__)


class DenyReason(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    LOCKED = "locked"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None
    subject: Any = None

    def raise_for_denial(self) -> None:
        """Raise the exception matching this decision; no-op when allowed."""
        if self.allowed:
            return
        if self.reason is DenyReason.UNAUTHENTICATED:
            raise AuthenticationError()
        if self.reason is DenyReason.LOCKED:
            raise RoleLockedError(self.subject)
        raise AuthorizationError(
            "You do not have permission to access this setting.",
            required_permission=self.subject,
        )


ALLOW = Decision(allowed=True)


def is_superuser_role(role_id: Any) -> bool:
    return role_id is not None and str(role_id) == str(settings.superuser_role_id)


def is_protected_role(role_id: Any) -> bool:
    return role_id is not None and str(role_id) in {str(settings.default_role_id), str(settings.superuser_role_id)}


def is_superuser(user: User | None) -> bool:
    return user is not None and is_superuser_role(user.role_id)


def authorize(user: User | None, requirement: RequirementLike) -> Decision:
    """
    Decide whether *user* satisfies *requirement*.

    - no requirement: allowed, even without an identity
    - no identity: denied as unauthenticated
    - superuser role: allowed without resolving permissions
    - otherwise: allowed iff the effective set satisfies the requirement

    ``RoleNotFoundError`` and ``CorruptPermissionDataError`` from resolution
    propagate; they indicate bad data, not a denial.
    """
    alternatives = normalize_requirement(requirement)
    if not alternatives:
        return ALLOW
    if user is None:
        return Decision(allowed=False, reason=DenyReason.UNAUTHENTICATED)
    if is_superuser(user):
        return ALLOW

    if satisfies(resolve_effective_permissions(user), alternatives):
        return ALLOW

    required = describe_requirement(alternatives)
    logger.info("Permission denied for user %s; required one of %s", user.id, required)
    return Decision(allowed=False, reason=DenyReason.FORBIDDEN, subject=required)


def ensure_authorized(user: User | None, requirement: RequirementLike) -> None:
    authorize(user, requirement).raise_for_denial()


def never_modify_protected_role(role_id: Any) -> Decision:
    """
    Deny any update or deletion of the default or superuser role.

    Absolute: no permission grant overrides it.
    """
    if is_protected_role(role_id):
        logger.warning("Blocked modification of protected role %s", role_id)
        return Decision(allowed=False, reason=DenyReason.LOCKED, subject=role_id)
    return ALLOW
