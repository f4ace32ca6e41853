from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from newsdesk.models.content import ContentStatus


class BlogCreate(BaseModel):
    title: str = Field(..., min_length=1, title="Blog Title")
    byliner: str = Field(..., title="Byliner", description="Short standfirst shown under the title.")
    slug: str = Field(..., min_length=1, title="Slug", description="Unique URL slug.")
    body: str = Field(..., title="Blog Body")
    category_id: int = Field(..., title="Category ID")
    cover: Optional[str] = Field(None, title="Cover", description="Name of the stored cover image.")
    meta_title: str = Field(..., title="Meta Title", description="SEO title for the blog.")
    meta_description: str = Field(..., title="Meta Description", description="SEO description for the blog.")
    # Anything but draft is honoured only for publishers, and then only as pending
    status: Any = Field(None, title="Requested Status", description="Status name or legacy numeric id.")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Budget 2026: what changes",
                "byliner": "Five things to know",
                "slug": "budget-2026-what-changes",
                "body": "The budget was tabled on...",
                "category_id": 3,
                "meta_title": "Budget 2026 explained",
                "meta_description": "A quick guide to the new budget.",
                "status": "pending",
            }
        }
    )


class BlogUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    byliner: Optional[str] = None
    slug: Optional[str] = Field(None, min_length=1)
    body: Optional[str] = None
    category_id: Optional[int] = None
    cover: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class BlogResponse(BaseModel):
    id: int
    title: str
    byliner: str
    slug: str
    body: str
    category_id: int
    cover: Optional[str] = None
    meta_title: str
    meta_description: str
    views: int
    likes: int
    status: ContentStatus
    published_at: Optional[datetime] = None
    owner_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EditionCreate(BaseModel):
    name: str = Field(..., min_length=1, title="Edition Name")
    edition_number: int = Field(..., ge=1, title="Edition Number")
    edition_link: str = Field(..., title="Edition Link", description="Where the edition can be read.")
    cover: Optional[str] = None
    status: Any = Field(None, title="Requested Status", description="Status name or legacy numeric id.")


class EditionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    edition_number: Optional[int] = Field(None, ge=1)
    edition_link: Optional[str] = None
    cover: Optional[str] = None


class EditionResponse(BaseModel):
    id: int
    name: str
    edition_number: int
    edition_link: str
    cover: Optional[str] = None
    status: ContentStatus
    published_at: Optional[datetime] = None
    owner_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ApproveRequest(BaseModel):
    publish_at: datetime = Field(..., description="When the item goes live; must be in the future.")


class TakeDownRequest(BaseModel):
    to_pending: bool = Field(False, description="Return the item to pending instead of draft.")


class SweepResponse(BaseModel):
    matched_count: int
    modified_count: int
    promoted_ids: list[int]
