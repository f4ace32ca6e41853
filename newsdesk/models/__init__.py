from .content import Blog, ContentStatus, Edition
from .user import Role, User

__all__ = [
    "Blog",
    "ContentStatus",
    "Edition",
    "Role",
    "User",
]
