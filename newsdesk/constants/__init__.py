"""Constants package for Newsdesk."""

from .auth import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM
from .roles import DEFAULT_ROLE_ID, SEED_ROLES, SUPERUSER_ROLE_ID, RoleName

__all__ = [
    # Role constants
    "RoleName",
    "DEFAULT_ROLE_ID",
    "SUPERUSER_ROLE_ID",
    "SEED_ROLES",
    # Auth constants
    "ALGORITHM",
    "ACCESS_TOKEN_EXPIRE_MINUTES",
]
