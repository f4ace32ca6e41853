"""
Role management.

Roles are named default permission sets. The default and superuser roles
are sentinels: they are seeded once and can never be updated or deleted
here, whatever permissions the caller holds.
"""

import logging

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.constants.roles import SEED_ROLES, SYNC_ROLE_ID_SEQUENCE
from newsdesk.exceptions import (
    DatabaseError,
    DuplicateResourceError,
    ResourceNotFoundError,
    RoleInUseError,
)
from newsdesk.models.user import Role
from newsdesk.permissions_config.guard import never_modify_protected_role
from newsdesk.permissions_config.permissions import to_permission_set
from newsdesk.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


async def list_roles(db: AsyncSession) -> list[Role]:
    result = await db.execute(select(Role).order_by(Role.id))
    return list(result.scalars().all())


async def get_role(db: AsyncSession, role_id: int) -> Role:
    role = await db.get(Role, role_id)
    if role is None:
        raise ResourceNotFoundError("Role", role_id)
    return role


async def upsert_role(db: AsyncSession, name: str, permissions: list, role_id: int | None = None) -> Role:
    """
    Create a role, or update role *role_id* when given.

    Permission values are validated against the catalog before anything is
    written. Sentinel roles are refused with ``RoleLockedError``. Only a
    clash on the role name is reported as a duplicate; any other integrity
    failure is a ``DatabaseError``.
    """
    permission_ids = sorted(int(p) for p in to_permission_set(permissions))

    if role_id is None:
        role = Role(name=name, permissions=permission_ids)
        db.add(role)
    else:
        never_modify_protected_role(role_id).raise_for_denial()
        role = await get_role(db, role_id)
        role.name = name
        role.permissions = permission_ids

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if await _name_taken(db, name, exclude_id=role_id):
            raise DuplicateResourceError("Role", "name", name) from e
        logger.error(f"Integrity error saving role '{name}': {e}")
        raise DatabaseError("Failed to save role", operation="upsert_role") from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error saving role '{name}': {e}")
        raise DatabaseError("Failed to save role", operation="upsert_role") from e

    await db.refresh(role)
    logger.info(f"Role {role.id} ('{role.name}') saved with permissions {role.permissions}")
    return role


async def delete_role(db: AsyncSession, role_id: int) -> None:
    """Delete a role nobody holds; sentinel roles are refused."""
    never_modify_protected_role(role_id).raise_for_denial()
    role = await get_role(db, role_id)

    holders = await PermissionService(db).count_users_with_role(role_id)
    if holders:
        raise RoleInUseError(role_id, holders)

    try:
        await db.delete(role)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error deleting role {role_id}: {e}")
        raise DatabaseError("Failed to delete role", operation="delete_role") from e

    logger.info(f"Role {role_id} deleted")


async def seed_roles(db: AsyncSession) -> int:
    """Insert the sentinel roles if they are missing. Returns how many were created."""
    created = 0
    for seed in SEED_ROLES:
        if await db.get(Role, seed["id"]) is None:
            db.add(Role(**seed))
            created += 1
    if created:
        await db.commit()
        await sync_role_id_sequence(db)
        logger.info(f"Seeded {created} role(s)")
    return created


async def sync_role_id_sequence(db: AsyncSession) -> None:
    """Move the PostgreSQL id sequence past the explicitly seeded ids; other dialects need nothing."""
    if db.get_bind().dialect.name != "postgresql":
        return
    await db.execute(text(SYNC_ROLE_ID_SEQUENCE))
    await db.commit()


async def _name_taken(db: AsyncSession, name: str, exclude_id: int | None = None) -> bool:
    query = select(Role.id).where(Role.name == name)
    if exclude_id is not None:
        query = query.where(Role.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None
