from fastapi import Depends

from newsdesk.auth import get_current_user
from newsdesk.models.user import User
from newsdesk.permissions_config.guard import ensure_authorized, never_modify_protected_role
from newsdesk.permissions_config.permissions import RequirementLike, normalize_requirement


def permission_required(requirement: RequirementLike):
    """
    Build a dependency that authenticates the caller and then checks *requirement*.

    Both checks must pass; the authenticated user is returned to the route.
    """
    alternatives = normalize_requirement(requirement)

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        ensure_authorized(current_user, alternatives)
        return current_user

    return checker


async def unlocked_role_id(role_id: int, current_user: User = Depends(get_current_user)) -> int:
    """Path dependency rejecting the default and superuser roles before any permission check."""
    never_modify_protected_role(role_id).raise_for_denial()
    return role_id
