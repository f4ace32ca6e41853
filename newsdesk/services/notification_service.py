"""
Notification Service

Decides who hears about a workflow event and hands the mail to the
dispatcher. Delivery is fire-and-forget relative to the state change:
failures are logged here and never reach the caller, and nothing is
rolled back because a mail could not be sent.
"""

import asyncio
import enum
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import settings
from newsdesk.models.user import User
from newsdesk.permissions_config.permissions import Permission
from newsdesk.services.content_kinds import ContentKind
from newsdesk.services.email_service import EmailService, email_service
from newsdesk.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


class NotificationKind(str, enum.Enum):
    AWAITING_APPROVAL = "awaiting_approval"
    PUBLISHED = "published"
    ROLE_UPDATED = "role_updated"


class NotificationDispatcher:
    """Sends templated mails through the email service without blocking the event loop."""

    def __init__(self, mailer: EmailService | None = None):
        self.mailer = mailer or email_service

    async def dispatch(self, recipients: list[str], kind: NotificationKind, context: dict) -> bool:
        """
        Deliver one notification to *recipients*.

        Returns True on success and False when there was nobody to notify or
        delivery failed. Never raises.
        """
        recipients = sorted({r for r in recipients if r})
        if not recipients:
            logger.debug(f"No recipients for {kind.value} notification")
            return False

        try:
            subject, html_body = self.mailer.render(kind.value, context)
            await asyncio.to_thread(self.mailer.send_email, recipients, subject, html_body)
        except Exception as e:
            logger.error(f"Failed to send {kind.value} notification to {len(recipients)} recipient(s): {e}")
            return False
        return True


notification_dispatcher = NotificationDispatcher()


def get_notification_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency for the notification dispatcher."""
    return notification_dispatcher


def _content_context(kind: ContentKind, item) -> dict:
    return {
        "kind_label": kind.label,
        "content_id": item.id,
        "title": item.display_title,
        "link": f"{settings.app_url}/{kind.name}/{item.id}",
        "published_at": item.published_at.isoformat() if item.published_at else None,
        "author": item.owner.username if item.owner else None,
    }


async def notify_awaiting_approval(
    db: AsyncSession, dispatcher: NotificationDispatcher, kind: ContentKind, item
) -> bool:
    """Tell everyone able to publish this kind that an item awaits approval."""
    try:
        publishers = await PermissionService(db).list_users_satisfying(kind.publish)
        recipients = [user.email for user in publishers]
        context = _content_context(kind, item)
    except Exception as e:
        logger.error(f"Could not prepare approval notification for {kind.name} {item.id}: {e}")
        return False
    return await dispatcher.dispatch(recipients, NotificationKind.AWAITING_APPROVAL, context)


async def notify_published(db: AsyncSession, dispatcher: NotificationDispatcher, kind: ContentKind, item) -> bool:
    """Tell the owner and every subscriber that an item went live."""
    try:
        subscribers = await PermissionService(db).list_users_satisfying(Permission.RECEIVE_BLOG_PUBLISHED_MAIL)
        recipients = [user.email for user in subscribers]
        if item.owner is not None:
            recipients.append(item.owner.email)
        context = _content_context(kind, item)
    except Exception as e:
        logger.error(f"Could not prepare publish notification for {kind.name} {item.id}: {e}")
        return False
    return await dispatcher.dispatch(recipients, NotificationKind.PUBLISHED, context)


async def notify_role_updated(dispatcher: NotificationDispatcher, user: User) -> bool:
    context = {"username": user.username, "role_name": user.role.name if user.role else None}
    return await dispatcher.dispatch([user.email], NotificationKind.ROLE_UPDATED, context)
