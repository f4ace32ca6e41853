"""
Role Constants for Newsdesk

Names and default permission sets of the roles seeded into a fresh
database. The default and superuser roles are sentinels: their ids come
from settings and the role endpoints refuse to modify them.
"""

from enum import Enum

from newsdesk.config import settings
from newsdesk.permissions_config.permissions import Permission


class RoleName(str, Enum):
    """Names of the roles created by the initial migration."""

    COLUMNIST = "columnist"
    SUPERUSER = "superuser"


DEFAULT_ROLE_ID = settings.default_role_id
SUPERUSER_ROLE_ID = settings.superuser_role_id

# New accounts start as columnists: they write blogs and submit them for review
DEFAULT_ROLE_PERMISSIONS = [
    Permission.READ_PROFILE,
    Permission.CREATE_BLOG,
    Permission.UPLOAD_IMAGE,
]

# The superuser bypasses permission checks, so its stored set stays empty
SUPERUSER_ROLE_PERMISSIONS: list[Permission] = []

SEED_ROLES = [
    {"id": DEFAULT_ROLE_ID, "name": RoleName.COLUMNIST.value, "permissions": [int(p) for p in DEFAULT_ROLE_PERMISSIONS]},
    {"id": SUPERUSER_ROLE_ID, "name": RoleName.SUPERUSER.value, "permissions": [int(p) for p in SUPERUSER_ROLE_PERMISSIONS]},
]

# Seed roles carry explicit ids, which a PostgreSQL serial sequence never
# sees; run this after seeding so the next created role gets a fresh id
SYNC_ROLE_ID_SEQUENCE = "SELECT setval(pg_get_serial_sequence('roles', 'id'), (SELECT MAX(id) FROM roles))"
