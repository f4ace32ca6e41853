from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Permissions may be given by id or by name ("CreateBlog", "CREATE_BLOG")
PermissionValue = Union[int, str]


class RoleUpsert(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    permissions: list[PermissionValue] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "editor", "permissions": [8, 9, 10, "PublishBlog"]}}
    )


class RoleResponse(BaseModel):
    id: int
    name: str
    permissions: list[int]

    model_config = ConfigDict(from_attributes=True)


class UserAccessUpdate(BaseModel):
    role_id: Optional[int] = None
    extra_permissions: Optional[list[PermissionValue]] = None
    removed_permissions: Optional[list[PermissionValue]] = None


class UserProfileResponse(BaseModel):
    id: int
    username: Optional[str] = None
    email: str
    role_id: int
    role_name: Optional[str] = None
    extra_permissions: list[int]
    removed_permissions: list[int]
    effective_permissions: list[int]
    is_superuser: bool
