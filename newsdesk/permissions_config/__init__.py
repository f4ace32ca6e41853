from .permissions import (
    ALL_PERMISSIONS,
    Permission,
    contains,
    difference,
    normalize_requirement,
    satisfies,
    to_permission,
    to_permission_set,
    union,
)

__all__ = [
    "ALL_PERMISSIONS",
    "Permission",
    "contains",
    "difference",
    "normalize_requirement",
    "satisfies",
    "to_permission",
    "to_permission_set",
    "union",
]
