"""
Content kinds handled by the publication workflow.

Each kind names its model and the requirement guarding every operation,
so blogs and editions share one state machine.
"""

from dataclasses import dataclass
from typing import Any

from newsdesk.models.content import Blog, Edition
from newsdesk.permissions_config.permissions import Permission, Requirement, normalize_requirement


@dataclass(frozen=True)
class ContentKind:
    name: str
    label: str
    model: Any
    create: Requirement
    read: Requirement
    edit: Requirement
    publish: Requirement
    delete: Requirement
    # Content fields callers may set; status and published_at are never among them
    editable_fields: frozenset
    unique_fields: tuple = ()


BLOG = ContentKind(
    name="blog",
    label="blog",
    model=Blog,
    create=normalize_requirement(Permission.CREATE_BLOG),
    read=normalize_requirement(Permission.READ_BLOG),
    edit=normalize_requirement([[Permission.UPDATE_BLOG], [Permission.EDIT_BEFORE_BLOG_PUBLISH]]),
    publish=normalize_requirement(Permission.PUBLISH_BLOG),
    delete=normalize_requirement(Permission.DELETE_BLOG),
    editable_fields=frozenset(
        {"title", "byliner", "slug", "body", "category_id", "cover", "meta_title", "meta_description"}
    ),
    unique_fields=("slug",),
)

EDITION = ContentKind(
    name="edition",
    label="edition",
    model=Edition,
    create=normalize_requirement(Permission.CREATE_EDITION),
    # Any signed-in user may browse editions
    read=normalize_requirement(None),
    edit=normalize_requirement(Permission.UPDATE_EDITION),
    publish=normalize_requirement(Permission.UPDATE_EDITION),
    delete=normalize_requirement(Permission.DELETE_EDITION),
    editable_fields=frozenset({"name", "edition_number", "edition_link", "cover"}),
    unique_fields=("edition_number",),
)

CONTENT_KINDS = (BLOG, EDITION)
