from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.database import get_db
from newsdesk.models.user import User
from newsdesk.permissions_config.permission_dependencies import permission_required, unlocked_role_id
from newsdesk.permissions_config.permissions import Permission
from newsdesk.schemas.user import RoleResponse, RoleUpsert
from newsdesk.services import role_service

router = APIRouter()


@router.get("/", response_model=list[RoleResponse])
async def get_roles(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(permission_required(Permission.READ_ROLE)),
):
    """Fetch all roles with their default permissions."""
    return await role_service.list_roles(db)


@router.post("/", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    payload: RoleUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(permission_required(Permission.UPSERT_ROLE)),
):
    return await role_service.upsert_role(db, payload.name, payload.permissions)


# The lock check runs before the permission check: sentinel roles are refused
# even for callers who hold the role permissions.
@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    payload: RoleUpsert,
    role_id: int = Depends(unlocked_role_id),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(permission_required(Permission.UPSERT_ROLE)),
):
    return await role_service.upsert_role(db, payload.name, payload.permissions, role_id=role_id)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: int = Depends(unlocked_role_id),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(permission_required(Permission.DELETE_ROLE)),
):
    await role_service.delete_role(db, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
