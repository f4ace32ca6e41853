"""
PermissionService

Resolves a user's effective permission set by layering per-user overlays
on top of the role's defaults:

    effective = (role.permissions | extra_permissions) - removed_permissions

Removals are applied strictly after additions, so a revocation always wins
over both the role default and an extra grant for the same permission.
Nothing is cached between requests; every resolution reads the stored role
and overlays as they are now.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from newsdesk.exceptions import (
    AuthorizationError,
    CMSError,
    CorruptPermissionDataError,
    DatabaseError,
    InvalidPermissionError,
    RoleNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from newsdesk.models.user import Role, User
from newsdesk.permissions_config.permissions import (
    RequirementLike,
    difference,
    to_permission_set,
    union,
)

logger = logging.getLogger(__name__)


def resolve_effective_permissions(user: User) -> frozenset:
    """
    Compute the effective permission set of *user*.

    Pure: the user's role must already be loaded. A user whose role is
    missing raises ``RoleNotFoundError`` rather than resolving to an empty
    or full set. Unknown ids in the role or the overlays are stored data
    gone bad and raise ``CorruptPermissionDataError``.
    """
    role = user.role
    if role is None:
        raise RoleNotFoundError(role_id=user.role_id, user_id=user.id)

    try:
        effective = union(role.permission_set, to_permission_set(user.extra_permissions))
        return difference(effective, to_permission_set(user.removed_permissions))
    except InvalidPermissionError as e:
        logger.error("User %s or role %s holds unknown permission %r", user.id, role.id, e.value)
        raise CorruptPermissionDataError(e.value, role_id=role.id, user_id=user.id) from e


class PermissionService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ── Lookups ──────────────────────────────────────────────────────────────

    async def get_user(self, user_id: int) -> User | None:
        """Load a user with their role joined in, bypassing stale identity-map state."""
        result = await self.db.execute(
            select(User)
            .options(joinedload(User.role))
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User)
            .options(joinedload(User.role))
            .where(User.email == email)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def get_effective_permissions(self, user: User) -> list[int]:
        """Sorted permission ids, the shape returned to clients."""
        return sorted(int(p) for p in resolve_effective_permissions(user))

    async def list_users_satisfying(self, requirement: RequirementLike) -> list[User]:
        """
        Return every user the guard would allow for *requirement*.

        Used to pick notification recipients. Users whose role is missing are
        skipped with a warning so one broken account cannot block a
        notification to everyone else.
        """
        from newsdesk.permissions_config.guard import authorize

        result = await self.db.execute(select(User).options(joinedload(User.role)).order_by(User.id))
        users = result.scalars().unique().all()

        allowed = []
        for user in users:
            try:
                if authorize(user, requirement).allowed:
                    allowed.append(user)
            except CMSError as e:
                logger.warning("Skipping user %s while resolving recipients: %s", user.id, e.message)
        return allowed

    # ── Overlay management ───────────────────────────────────────────────────

    async def update_user_access(
        self,
        actor: User,
        user_id: int,
        *,
        role_id: int | None = None,
        extra_permissions: list | None = None,
        removed_permissions: list | None = None,
    ) -> tuple[User, bool]:
        """
        Change a user's role and/or permission overlays.

        Overlay values are validated against the catalog before anything is
        written. Only a superuser may hand out the superuser role.

        Returns:
            (user, role_changed)
        """
        from newsdesk.permissions_config.guard import is_superuser, is_superuser_role

        user = await self.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        extra = to_permission_set(extra_permissions) if extra_permissions is not None else None
        removed = to_permission_set(removed_permissions) if removed_permissions is not None else None

        role_changed = False
        if role_id is not None and role_id != user.role_id:
            role = await self.db.get(Role, role_id)
            if role is None:
                raise ValidationError(f"Role '{role_id}' does not exist", field="role_id")
            if is_superuser_role(role_id) and not is_superuser(actor):
                raise AuthorizationError("Only a superuser can grant the superuser role")
            user.role_id = role_id
            role_changed = True

        if extra is not None:
            user.extra_permissions = sorted(int(p) for p in extra)
        if removed is not None:
            user.removed_permissions = sorted(int(p) for p in removed)

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update access for user {user_id}: {e}")
            raise DatabaseError("Failed to update user access", operation="update_user_access") from e

        logger.info(
            "Access updated: user=%s role=%s extra=%s removed=%s by=%s",
            user_id,
            user.role_id,
            user.extra_permissions,
            user.removed_permissions,
            actor.id,
        )
        return await self.get_user(user_id), role_changed

    async def count_users_with_role(self, role_id: int) -> int:
        result = await self.db.execute(select(func.count(User.id)).where(User.role_id == role_id))
        return result.scalar_one()
