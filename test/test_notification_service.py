"""
Tests for notification delivery, email rendering and the asset store
"""

import smtplib
from unittest.mock import MagicMock, patch

import pytest
from utils.mock_utils import create_test_content

from newsdesk.models.content import Blog, ContentStatus
from newsdesk.services.asset_service import AssetStore
from newsdesk.services.content_kinds import BLOG
from newsdesk.services.email_service import EmailService
from newsdesk.services.notification_service import (
    NotificationDispatcher,
    NotificationKind,
    notify_awaiting_approval,
    notify_published,
    notify_role_updated,
)
from newsdesk.services.permission_service import PermissionService
from newsdesk.services.publication_service import PublicationService


@pytest.fixture
def mailer():
    mock = MagicMock(spec=EmailService)
    mock.render.return_value = ("Blog published!", "<p>live</p>")
    mock.send_email.return_value = True
    return mock


class TestNotificationDispatcher:
    async def test_dispatch_sends_one_mail_to_all_recipients(self, mailer):
        dispatcher = NotificationDispatcher(mailer=mailer)
        sent = await dispatcher.dispatch(["b@example.com", "a@example.com", "a@example.com"], NotificationKind.PUBLISHED, {})

        assert sent is True
        mailer.render.assert_called_once_with("published", {})
        mailer.send_email.assert_called_once_with(["a@example.com", "b@example.com"], "Blog published!", "<p>live</p>")

    async def test_no_recipients_is_a_no_op(self, mailer):
        dispatcher = NotificationDispatcher(mailer=mailer)
        assert await dispatcher.dispatch([], NotificationKind.PUBLISHED, {}) is False
        mailer.send_email.assert_not_called()

    async def test_delivery_failure_is_swallowed(self, mailer):
        mailer.send_email.side_effect = smtplib.SMTPException("relay down")
        dispatcher = NotificationDispatcher(mailer=mailer)
        assert await dispatcher.dispatch(["a@example.com"], NotificationKind.PUBLISHED, {}) is False

    async def test_render_failure_is_swallowed(self, mailer):
        mailer.render.side_effect = RuntimeError("template missing")
        dispatcher = NotificationDispatcher(mailer=mailer)
        assert await dispatcher.dispatch(["a@example.com"], NotificationKind.AWAITING_APPROVAL, {}) is False
        mailer.send_email.assert_not_called()

    async def test_failed_mail_does_not_undo_publish(self, test_db, columnist, mailer):
        mailer.send_email.side_effect = OSError("connection refused")
        service = PublicationService(test_db, BLOG, NotificationDispatcher(mailer=mailer))
        blog = await create_test_content(test_db, Blog, columnist, status=ContentStatus.PENDING)

        blog = await service.publish(blog.id)
        assert blog.status == ContentStatus.PUBLISHED
        mailer.send_email.assert_called_once()


class TestNotifyHelpers:
    async def test_awaiting_approval_goes_to_publishers(self, test_db, columnist, editor, reader, dispatcher):
        blog = await create_test_content(test_db, Blog, columnist, status=ContentStatus.PENDING)
        assert await notify_awaiting_approval(test_db, dispatcher, BLOG, blog) is True

        [notification] = dispatcher.sent
        assert notification["kind"] is NotificationKind.AWAITING_APPROVAL
        assert notification["recipients"] == [editor.email]
        assert notification["context"]["kind_label"] == "blog"
        assert notification["context"]["author"] == "columnist"

    async def test_published_goes_to_owner_and_subscribers(self, test_db, columnist, admin, dispatcher):
        blog = await create_test_content(test_db, Blog, columnist, status=ContentStatus.PUBLISHED)
        await notify_published(test_db, dispatcher, BLOG, blog)
        assert set(dispatcher.sent[0]["recipients"]) == {columnist.email, admin.email}

    async def test_recipient_lookup_failure_is_swallowed(self, test_db, columnist, dispatcher):
        blog = await create_test_content(test_db, Blog, columnist, status=ContentStatus.PENDING)
        with patch.object(PermissionService, "list_users_satisfying", side_effect=RuntimeError("db gone")):
            assert await notify_awaiting_approval(test_db, dispatcher, BLOG, blog) is False
        assert dispatcher.sent == []

    async def test_role_updated(self, columnist, dispatcher):
        await notify_role_updated(dispatcher, columnist)
        [notification] = dispatcher.sent
        assert notification["kind"] is NotificationKind.ROLE_UPDATED
        assert notification["recipients"] == [columnist.email]
        assert notification["context"]["role_name"] == "columnist"


class TestEmailService:
    def test_render_published(self):
        subject, html = EmailService().render(
            "published",
            {"kind_label": "blog", "title": "Budget 2026", "link": "http://localhost/blog/1", "published_at": None},
        )
        assert subject == "Blog published!"
        assert "Budget 2026" in html
        assert "http://localhost/blog/1" in html

    def test_render_escapes_titles(self):
        _, html = EmailService().render("awaiting_approval", {"kind_label": "blog", "title": "<script>x</script>"})
        assert "<script>" not in html

    def test_render_role_updated(self):
        subject, html = EmailService().render("role_updated", {"username": "amal", "role_name": "editor"})
        assert "role has been updated" in subject
        assert "editor" in html

    def test_send_email_uses_smtp(self):
        with patch("newsdesk.services.email_service.smtplib.SMTP") as smtp:
            server = smtp.return_value.__enter__.return_value
            assert EmailService().send_email(["a@example.com"], "Subject", "<p>hi</p>") is True
        server.send_message.assert_called_once()

    def test_send_email_propagates_failures(self):
        with patch("newsdesk.services.email_service.smtplib.SMTP", side_effect=OSError("refused")):
            with pytest.raises(OSError):
                EmailService().send_email("a@example.com", "Subject", "<p>hi</p>")


class TestAssetStore:
    def test_delete_existing_asset(self, tmp_path):
        cover = tmp_path / "covers" / "budget.jpg"
        cover.parent.mkdir()
        cover.write_bytes(b"jpeg")

        assert AssetStore(tmp_path).delete("covers/budget.jpg") is True
        assert not cover.exists()

    def test_delete_missing_asset(self, tmp_path):
        assert AssetStore(tmp_path).delete("nothing.jpg") is False

    def test_delete_refuses_paths_outside_root(self, tmp_path):
        outside = tmp_path / "secret.txt"
        outside.write_text("keep me")
        store = AssetStore(tmp_path / "media")

        assert store.delete("../secret.txt") is False
        assert outside.exists()

    def test_delete_nothing(self, tmp_path):
        assert AssetStore(tmp_path).delete(None) is False
