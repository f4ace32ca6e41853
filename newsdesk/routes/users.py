import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.auth import get_current_user
from newsdesk.database import get_db
from newsdesk.exceptions import UserNotFoundError
from newsdesk.models.user import User
from newsdesk.permissions_config.guard import is_superuser
from newsdesk.permissions_config.permission_dependencies import permission_required
from newsdesk.permissions_config.permissions import Permission
from newsdesk.schemas.user import UserAccessUpdate, UserProfileResponse
from newsdesk.services.notification_service import (
    NotificationDispatcher,
    get_notification_dispatcher,
    notify_role_updated,
)
from newsdesk.services.permission_service import PermissionService

logger = logging.getLogger(__name__)

router = APIRouter()


async def _profile(service: PermissionService, user: User) -> UserProfileResponse:
    return UserProfileResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        role_id=user.role_id,
        role_name=user.role.name if user.role else None,
        extra_permissions=user.extra_permissions or [],
        removed_permissions=user.removed_permissions or [],
        effective_permissions=await service.get_effective_permissions(user),
        is_superuser=is_superuser(user),
    )


@router.get("/me", response_model=UserProfileResponse)
async def get_me(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await _profile(PermissionService(db), current_user)


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_user_profile(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = PermissionService(db)
    user = await service.get_user(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return await _profile(service, user)


@router.put("/{user_id}/access", response_model=UserProfileResponse)
async def update_user_access(
    user_id: int,
    payload: UserAccessUpdate,
    current_user: User = Depends(permission_required(Permission.UPDATE_PROFILE)),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Change a user's role and permission overlays."""
    service = PermissionService(db)
    user, role_changed = await service.update_user_access(
        current_user,
        user_id,
        role_id=payload.role_id,
        extra_permissions=payload.extra_permissions,
        removed_permissions=payload.removed_permissions,
    )
    if role_changed:
        await notify_role_updated(dispatcher, user)
    return await _profile(service, user)
