from sqlalchemy import Column, Integer, String, Text, ForeignKey, Enum, Index
from sqlalchemy.orm import declared_attr, relationship
from newsdesk.database import Base
from newsdesk.models.types import UTCDateTime
from newsdesk.utils.clock import utcnow
import enum


class ContentStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    # Scheduled: published_at holds the future publish time
    APPROVED = "approved"
    PUBLISHED = "published"


class PublishableMixin:
    """
    Columns shared by every content kind that moves through the publication workflow.

    ``published_at`` is null while the item is a draft or pending review, the
    scheduled time while approved, and the publish time once published.
    """

    status = Column(
        Enum(ContentStatus, name="contentstatus", values_callable=lambda e: [m.value for m in e]),
        default=ContentStatus.DRAFT,
        nullable=False,
        index=True,
    )
    published_at = Column(UTCDateTime, nullable=True)
    cover = Column(String, nullable=True)  # stored asset name
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @declared_attr
    def owner_id(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    @declared_attr
    def owner(cls):
        return relationship("User", lazy="selectin")


class Blog(PublishableMixin, Base):
    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String, nullable=False)
    byliner = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    body = Column(Text, nullable=False)
    category_id = Column(Integer, nullable=False)
    meta_title = Column(Text, nullable=False)
    meta_description = Column(Text, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    likes = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("idx_blogs_status_published_at", "status", "published_at"),
    )

    @property
    def display_title(self) -> str:
        return self.title

    def __repr__(self) -> str:
        return f"<Blog(id={self.id}, slug={self.slug}, status={self.status})>"


class Edition(PublishableMixin, Base):
    __tablename__ = "editions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    edition_number = Column(Integer, unique=True, nullable=False)
    edition_link = Column(String, nullable=False)

    __table_args__ = (
        Index("idx_editions_status_published_at", "status", "published_at"),
    )

    @property
    def display_title(self) -> str:
        return f"{self.name} (#{self.edition_number})"

    def __repr__(self) -> str:
        return f"<Edition(id={self.id}, number={self.edition_number}, status={self.status})>"
