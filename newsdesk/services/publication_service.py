"""
Publication Service

The content status state machine shared by blogs and editions:

    Draft ──submit──▶ Pending ──approve(t)──▶ Approved ──sweep(t)──▶ Published
      │                  ▲  │                    │                      ▲
      │                  └──┴──── take down ─────┘                      │
      └──────────────────────── publish (any non-Published) ────────────┘

Every transition is one conditional UPDATE guarded by the legal source
states, so a transition that lost a race fails with
``InvalidStatusTransitionError`` instead of overwriting the winner.
Notifications are sent after the commit and never affect the outcome.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.exceptions import (
    AuthorizationError,
    ContentNotFoundError,
    DatabaseError,
    DuplicateResourceError,
    InvalidStatusTransitionError,
    SchedulingViolationError,
)
from newsdesk.models.content import ContentStatus
from newsdesk.models.user import User
from newsdesk.permissions_config.guard import authorize, ensure_authorized
from newsdesk.services.asset_service import AssetStore, asset_store
from newsdesk.services.content_kinds import ContentKind
from newsdesk.services.notification_service import (
    NotificationDispatcher,
    notification_dispatcher,
    notify_awaiting_approval,
    notify_published,
)
from newsdesk.services.status_refresh_service import StatusRefreshService
from newsdesk.utils import clock

logger = logging.getLogger(__name__)

NOT_PUBLISHED = (ContentStatus.DRAFT, ContentStatus.PENDING, ContentStatus.APPROVED)
UNDER_REVIEW = (ContentStatus.PENDING, ContentStatus.APPROVED)
OWNER_EDITABLE = (ContentStatus.DRAFT, ContentStatus.PENDING)


# Numeric ids older clients send; they predate the draft state
LEGACY_STATUS_IDS = {
    0: ContentStatus.PENDING,
    1: ContentStatus.PUBLISHED,
    2: ContentStatus.APPROVED,
}


def parse_status(value: Any) -> ContentStatus | None:
    """Read a status given as a member, a name in any case, or a legacy numeric id; None if unknown."""
    if isinstance(value, ContentStatus):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return LEGACY_STATUS_IDS.get(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text.isdigit():
            return LEGACY_STATUS_IDS.get(int(text))
        try:
            return ContentStatus(text)
        except ValueError:
            return None
    return None


def normalize_initial_status(requested: Any, elevated: bool) -> ContentStatus:
    """
    Status a newly created item starts in.

    Only creators with elevated rights may skip the draft stage, and even
    they land in Pending: a request for Approved or Published is downgraded,
    never rejected. Unknown values fall back to Draft.
    """
    if not elevated:
        return ContentStatus.DRAFT
    status = parse_status(requested)
    if status is None or status is ContentStatus.DRAFT:
        return ContentStatus.DRAFT
    return ContentStatus.PENDING


class PublicationService:
    def __init__(
        self,
        db: AsyncSession,
        kind: ContentKind,
        dispatcher: NotificationDispatcher | None = None,
        assets: AssetStore | None = None,
    ):
        self.db = db
        self.kind = kind
        self.model = kind.model
        self.dispatcher = dispatcher or notification_dispatcher
        self.assets = assets or asset_store

    # ── Lookups ──────────────────────────────────────────────────────────────

    async def get_item(self, item_id: int):
        item = await self.db.get(self.model, item_id, populate_existing=True)
        if item is None:
            raise ContentNotFoundError(self.kind.label.capitalize(), item_id)
        return item

    async def get_for_actor(self, item_id: int, actor: User | None):
        """
        Fetch one item as *actor* may see it.

        Owners see their own items in any state. Everyone else needs the
        kind's read permission and never sees another user's draft; such a
        draft is reported as not found.
        """
        await self.refresh_status()
        item = await self.get_item(item_id)
        if actor is not None and item.owner_id == actor.id:
            return item
        ensure_authorized(actor, self.kind.read)
        if item.status == ContentStatus.DRAFT:
            raise ContentNotFoundError(self.kind.label.capitalize(), item_id)
        return item

    async def list_all(self, actor: User | None, skip: int = 0, limit: int = 10) -> list:
        """Every non-draft item plus the actor's own drafts, after a status refresh."""
        ensure_authorized(actor, self.kind.read)
        await self.refresh_status()

        query = select(self.model)
        if actor is not None:
            query = query.where(or_(self.model.status != ContentStatus.DRAFT, self.model.owner_id == actor.id))
        else:
            query = query.where(self.model.status != ContentStatus.DRAFT)
        query = query.order_by(self.model.id.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def list_published(self, skip: int = 0, limit: int = 10) -> list:
        await self.refresh_status()
        result = await self.db.execute(
            select(self.model)
            .where(self.model.status == ContentStatus.PUBLISHED)
            .order_by(self.model.published_at.desc(), self.model.id.desc())
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_owned(self, actor: User, skip: int = 0, limit: int = 10) -> list:
        await self.refresh_status()
        result = await self.db.execute(
            select(self.model)
            .where(self.model.owner_id == actor.id)
            .order_by(self.model.id.desc())
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def refresh_status(self, now: datetime | None = None):
        return await StatusRefreshService(self.db, self.kind, self.dispatcher).refresh_status(now)

    # ── Writes ───────────────────────────────────────────────────────────────

    async def create_item(self, actor: User, fields: dict, requested_status: Any = None):
        """
        Create an item owned by *actor*.

        The new item is a Draft unless the actor holds the kind's publish
        permission and asked for a later status, in which case it starts as
        Pending and the publishers are told it awaits approval.
        """
        ensure_authorized(actor, self.kind.create)
        elevated = authorize(actor, self.kind.publish).allowed
        status = normalize_initial_status(requested_status, elevated)

        values = {k: v for k, v in fields.items() if k in self.kind.editable_fields}
        item = self.model(**values, owner_id=actor.id, status=status, published_at=None)
        self.db.add(item)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise self._duplicate(values) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error creating {self.kind.name}: {e}")
            raise DatabaseError(f"Failed to create {self.kind.label}", operation="create") from e

        item = await self.get_item(item.id)
        logger.info(f"{self.kind.name} {item.id} created by user {actor.id} as {status.value}")

        if status == ContentStatus.PENDING:
            await notify_awaiting_approval(self.db, self.dispatcher, self.kind, item)
        return item

    async def update_content(self, item_id: int, actor: User, fields: dict):
        """
        Edit content fields; status and publish time are never touched here.

        Owners may edit while Draft or Pending. Holders of the kind's edit
        requirement may edit anything not yet Published.
        """
        item = await self.get_item(item_id)
        sources = OWNER_EDITABLE if item.owner_id == actor.id else ()
        if authorize(actor, self.kind.edit).allowed:
            sources = NOT_PUBLISHED
        elif not sources:
            ensure_authorized(actor, self.kind.edit)

        values = {k: v for k, v in fields.items() if k in self.kind.editable_fields}
        if not values:
            if item.status not in sources:
                raise InvalidStatusTransitionError(item.status.value, "edited", self.kind.label)
            return item

        values["updated_at"] = clock.utcnow()
        try:
            result = await self.db.execute(
                update(self.model)
                .where(self.model.id == item_id, self.model.status.in_(sources))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                await self._raise_for_missed_transition(item_id, "edited")
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise self._duplicate(values) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating {self.kind.name} {item_id}: {e}")
            raise DatabaseError(f"Failed to update {self.kind.label}", operation="update") from e

        logger.info(f"{self.kind.name} {item_id} edited by user {actor.id}: {sorted(values)}")
        return await self.get_item(item_id)

    async def submit_for_approval(self, item_id: int, actor: User):
        """
        Draft or Pending → Pending, then notify everyone able to publish.

        Resubmitting a Pending item is allowed and notifies again.
        """
        item = await self.get_item(item_id)
        if item.owner_id != actor.id:
            ensure_authorized(actor, self.kind.edit)

        item = await self._transition(item_id, OWNER_EDITABLE, ContentStatus.PENDING, published_at=None)
        await notify_awaiting_approval(self.db, self.dispatcher, self.kind, item)
        return item

    async def approve(self, item_id: int, scheduled_at: datetime):
        """
        Pending → Approved, to be published at *scheduled_at*.

        The time must lie strictly in the future; otherwise the item is left
        untouched and ``SchedulingViolationError`` is raised.
        """
        await self.get_item(item_id)
        scheduled_at = clock.as_utc(scheduled_at)
        if scheduled_at <= clock.utcnow():
            logger.info(f"Rejected approval of {self.kind.name} {item_id} for past time {scheduled_at}")
            raise SchedulingViolationError(scheduled_at)

        return await self._transition(
            item_id, (ContentStatus.PENDING,), ContentStatus.APPROVED, published_at=scheduled_at
        )

    async def publish(self, item_id: int):
        """Any non-Published state → Published, effective immediately."""
        item = await self._transition(item_id, NOT_PUBLISHED, ContentStatus.PUBLISHED, published_at=clock.utcnow())
        await notify_published(self.db, self.dispatcher, self.kind, item)
        return item

    async def take_down(self, item_id: int, actor: User, to_pending: bool = False):
        """
        Pull an item under review back to Draft (or Pending) by its owner.

        Published items cannot be taken down. No notification is sent.
        """
        item = await self.get_item(item_id)
        if item.owner_id != actor.id:
            logger.info(f"User {actor.id} tried to take down {self.kind.name} {item_id} they do not own")
            raise AuthorizationError(f"Only the owner can take this {self.kind.label} down")
        return await self._take_down(item_id, to_pending)

    async def admin_take_down(self, item_id: int, to_pending: bool = False):
        """Administrative take-down; callers are checked against the kind's delete permission."""
        await self.get_item(item_id)
        return await self._take_down(item_id, to_pending)

    async def delete_item(self, item_id: int, actor: User) -> None:
        """
        Delete an item and its stored cover.

        Administrators holding the kind's delete permission may delete in any
        state; owners only while the item is a Draft.
        """
        item = await self.get_item(item_id)
        query = delete(self.model).where(self.model.id == item_id)
        if not authorize(actor, self.kind.delete).allowed:
            if item.owner_id != actor.id:
                ensure_authorized(actor, self.kind.delete)
            query = query.where(self.model.status == ContentStatus.DRAFT)

        cover = item.cover
        try:
            result = await self.db.execute(query.execution_options(synchronize_session=False))
            if result.rowcount == 0:
                await self.db.rollback()
                await self._raise_for_missed_transition(item_id, "deleted")
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error deleting {self.kind.name} {item_id}: {e}")
            raise DatabaseError(f"Failed to delete {self.kind.label}", operation="delete") from e

        self.db.expunge(item)
        logger.info(f"{self.kind.name} {item_id} deleted by user {actor.id}")
        if cover:
            self.assets.delete(cover)

    # ── Internals ────────────────────────────────────────────────────────────

    async def _take_down(self, item_id: int, to_pending: bool):
        target = ContentStatus.PENDING if to_pending else ContentStatus.DRAFT
        return await self._transition(item_id, UNDER_REVIEW, target, published_at=None)

    async def _transition(
        self,
        item_id: int,
        sources: tuple,
        target: ContentStatus,
        published_at: datetime | None,
    ):
        """Move the item to *target* iff it is currently in one of *sources*."""
        try:
            result = await self.db.execute(
                update(self.model)
                .where(self.model.id == item_id, self.model.status.in_(sources))
                .values(status=target, published_at=published_at, updated_at=clock.utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                await self._raise_for_missed_transition(item_id, target.value)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error moving {self.kind.name} {item_id} to {target.value}: {e}")
            raise DatabaseError(f"Failed to update {self.kind.label} status", operation=target.value) from e

        logger.info(f"{self.kind.name} {item_id} -> {target.value}")
        return await self.get_item(item_id)

    async def _raise_for_missed_transition(self, item_id: int, target: str):
        item = await self.get_item(item_id)
        logger.info(f"Refused {self.kind.name} {item_id}: {item.status.value} -> {target}")
        raise InvalidStatusTransitionError(item.status.value, target, self.kind.label)

    def _duplicate(self, values: dict) -> DuplicateResourceError:
        field = next((f for f in self.kind.unique_fields if f in values), "id")
        return DuplicateResourceError(self.kind.label.capitalize(), field, values.get(field))
