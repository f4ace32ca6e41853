"""
Background status refresh.

An APScheduler interval job sweeps every content kind so approved items go
live close to their scheduled time even when nobody is listing content.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from newsdesk import database
from newsdesk.config import settings
from newsdesk.exceptions import CMSError
from newsdesk.services.content_kinds import CONTENT_KINDS
from newsdesk.services.notification_service import notification_dispatcher
from newsdesk.services.status_refresh_service import StatusRefreshService

scheduler = AsyncIOScheduler()

logger = logging.getLogger(__name__)

JOB_ID = "refresh_content_status"


async def refresh_scheduled_content() -> dict:
    """Sweep every content kind once; a failing kind does not stop the others."""
    results = {}
    async with database.AsyncSessionLocal() as db:
        for kind in CONTENT_KINDS:
            try:
                result = await StatusRefreshService(db, kind, notification_dispatcher).refresh_status()
            except CMSError as e:
                logger.error(f"[Scheduler] Status refresh failed for {kind.name}: {e.message}")
                continue
            results[kind.name] = result
            if result.modified_count:
                logger.info(f"[Scheduler] Published {result.modified_count} {kind.name}(s): {list(result.promoted_ids)}")
    return results


def start_status_refresh(interval_seconds: int | None = None) -> bool:
    interval = settings.sweep_interval_seconds if interval_seconds is None else interval_seconds
    if interval <= 0:
        logger.info("[Scheduler] Status refresh job disabled")
        return False

    scheduler.add_job(
        refresh_scheduled_content,
        trigger=IntervalTrigger(seconds=interval),
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    if not scheduler.running:
        scheduler.start()
    logger.info(f"[Scheduler] Status refresh every {interval}s")
    return True


def stop_status_refresh() -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
