"""
Permission catalog and permission-set algebra.

Permissions are atomic capabilities identified by a stable integer id. The
ids are persisted in role and user records, so a shipped id is never
reassigned; new permissions are appended at the end of the catalog.

A *requirement* is a disjunction of conjunctions: ``[[A, B], [C]]`` reads
"(A and B) or C". It is stored normalized as a tuple of frozensets.
"""

import enum
from collections.abc import Iterable
from typing import Any, Union

from newsdesk.exceptions import InvalidPermissionError


class Permission(enum.IntEnum):
    """Atomic capabilities. Values are persisted and must never change."""

    # Create a new account and assign it a role
    CREATE_PROFILE = 0
    # Placeholder: reading a profile requires no permission
    READ_PROFILE = 1
    # Change another user's role and permission overlays
    UPDATE_PROFILE = 2
    DELETE_PROFILE = 3
    # Create a role or update a non-sentinel role
    UPSERT_ROLE = 4
    READ_ROLE = 5
    # Edit any blog that has not been published yet
    EDIT_BEFORE_BLOG_PUBLISH = 6
    DELETE_ROLE = 7
    CREATE_BLOG = 8
    # Read every blog except other users' drafts
    READ_BLOG = 9
    UPDATE_BLOG = 10
    # Delete any blog and take blogs down administratively
    DELETE_BLOG = 11
    # Approve, publish and refresh blogs
    PUBLISH_BLOG = 12
    ACCESS_LOGS = 13
    UPLOAD_IMAGE = 14
    DELETE_IMAGE = 15
    UPDATE_IMAGE = 16
    CREATE_EDITION = 17
    # Update, approve and publish editions
    UPDATE_EDITION = 18
    DELETE_EDITION = 19
    # Opt-in: receive a mail whenever content is published
    RECEIVE_BLOG_PUBLISHED_MAIL = 20


ALL_PERMISSIONS: list[Permission] = list(Permission)

# "CreateBlog", "create_blog" and "CREATE_BLOG" all name the same permission
_BY_COMPACT_NAME = {p.name.replace("_", ""): p for p in Permission}

PermissionSet = frozenset
Requirement = tuple[frozenset, ...]
RequirementLike = Union[None, Permission, int, str, Iterable[Any]]


def to_permission(value: Any) -> Permission:
    """
    Parse a single permission.

    Accepts a ``Permission``, its integer id, or its name (case-insensitive).
    Anything else raises ``InvalidPermissionError``; unknown values are never
    silently dropped.
    """
    if isinstance(value, Permission):
        return value
    # bool is an int subclass; True must not read as permission 1
    if isinstance(value, bool):
        raise InvalidPermissionError(value)
    if isinstance(value, int):
        try:
            return Permission(value)
        except ValueError as e:
            raise InvalidPermissionError(value) from e
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return to_permission(int(text))
        permission = _BY_COMPACT_NAME.get(text.upper().replace("_", ""))
        if permission is None:
            raise InvalidPermissionError(value)
        return permission
    raise InvalidPermissionError(value)


def to_permission_set(values: Iterable[Any] | None) -> frozenset:
    """Parse an iterable of permission values into a set; fails on the first unknown value."""
    if values is None:
        return frozenset()
    return frozenset(to_permission(v) for v in values)


def union(a: Iterable[Permission], b: Iterable[Permission]) -> frozenset:
    return frozenset(a) | frozenset(b)


def difference(a: Iterable[Permission], b: Iterable[Permission]) -> frozenset:
    return frozenset(a) - frozenset(b)


def contains(permissions: Iterable[Permission], permission: Any) -> bool:
    return to_permission(permission) in frozenset(permissions)


def normalize_requirement(requirement: RequirementLike) -> Requirement:
    """
    Normalize the accepted requirement shapes into a tuple of conjunctions.

    - ``None`` or an empty list: no requirement
    - a single permission: ``((P,),)``
    - a flat list of permissions: one conjunction, all of them required
    - a list of lists: alternatives, any one conjunction suffices

    An empty inner conjunction would be satisfied by anyone, so it raises
    ``ValueError`` instead of silently opening the route.
    """
    if requirement is None:
        return ()
    if isinstance(requirement, (Permission, int, str)):
        return (frozenset({to_permission(requirement)}),)

    items = list(requirement)
    if not items:
        return ()
    if all(isinstance(item, (Permission, int, str)) for item in items):
        return (to_permission_set(items),)
    alternatives = tuple(
        to_permission_set([item] if isinstance(item, (Permission, int, str)) else item) for item in items
    )
    if any(not conjunction for conjunction in alternatives):
        raise ValueError(f"Requirement {requirement!r} contains an empty conjunction")
    return alternatives


def satisfies(permissions: Iterable[Permission], requirement: RequirementLike) -> bool:
    """
    Return True if at least one conjunction of *requirement* is fully held.

    An empty requirement is trivially satisfied.
    """
    alternatives = normalize_requirement(requirement)
    if not alternatives:
        return True
    held = frozenset(permissions)
    return any(conjunction <= held for conjunction in alternatives)


def describe_requirement(requirement: RequirementLike) -> list[list[str]]:
    """Readable form of a requirement for error details and logs."""
    return [sorted(p.name for p in conjunction) for conjunction in normalize_requirement(requirement)]
