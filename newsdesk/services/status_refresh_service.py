"""
Status refresh (sweeper).

Promotes approved content whose scheduled time has arrived. The promotion is
a conditional bulk update, so two sweeps racing over the same rows promote
each row once and only the rows this sweep actually changed are notified.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.exceptions import DatabaseError
from newsdesk.models.content import ContentStatus
from newsdesk.services.content_kinds import ContentKind
from newsdesk.services.notification_service import NotificationDispatcher, notify_published
from newsdesk.utils import clock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    matched_count: int = 0
    modified_count: int = 0
    promoted_ids: tuple = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "matched_count": self.matched_count,
            "modified_count": self.modified_count,
            "promoted_ids": list(self.promoted_ids),
        }


class StatusRefreshService:
    def __init__(self, db: AsyncSession, kind: ContentKind, dispatcher: NotificationDispatcher | None = None):
        self.db = db
        self.kind = kind
        self.dispatcher = dispatcher

    async def refresh_status(self, now: datetime | None = None) -> SweepResult:
        """
        Promote every Approved item with ``published_at <= now`` to Published.

        ``published_at`` keeps the scheduled time. Idempotent: a second sweep
        at the same instant matches nothing.
        """
        model = self.kind.model
        now = clock.as_utc(now) if now is not None else clock.utcnow()
        due = (model.status == ContentStatus.APPROVED) & (model.published_at <= now)

        try:
            matched = (await self.db.execute(select(model.id).where(due))).scalars().all()
            if not matched:
                return SweepResult()

            result = await self.db.execute(
                update(model)
                .where(model.id.in_(matched), due)
                .values(status=ContentStatus.PUBLISHED, updated_at=now)
                .returning(model.id)
                .execution_options(synchronize_session=False)
            )
            promoted = tuple(sorted(result.scalars().all()))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Status refresh failed for {self.kind.name}: {e}")
            raise DatabaseError("Failed to refresh content status", operation="refresh_status") from e

        logger.info(
            f"Status refresh for {self.kind.name}: matched={len(matched)} promoted={len(promoted)} ids={list(promoted)}"
        )

        if promoted and self.dispatcher is not None:
            items = await self.db.execute(
                select(model).where(model.id.in_(promoted)).execution_options(populate_existing=True)
            )
            for item in items.scalars().all():
                await notify_published(self.db, self.dispatcher, self.kind, item)

        return SweepResult(matched_count=len(matched), modified_count=len(promoted), promoted_ids=promoted)
