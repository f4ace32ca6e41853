"""
Tests for the status refresh sweeper and the scheduled job that runs it
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from utils.mock_utils import blog_fields, create_test_content

from newsdesk import scheduler as scheduler_module
from newsdesk.models.content import Blog, ContentStatus, Edition
from newsdesk.services.content_kinds import BLOG, EDITION
from newsdesk.services.notification_service import NotificationKind
from newsdesk.services.publication_service import PublicationService
from newsdesk.services.status_refresh_service import StatusRefreshService, SweepResult
from newsdesk.utils import clock


@pytest.fixture
def sweeper(test_db, dispatcher):
    return StatusRefreshService(test_db, BLOG, dispatcher)


class TestRefreshStatus:
    async def test_nothing_due_is_success(self, sweeper):
        result = await sweeper.refresh_status()
        assert result == SweepResult()
        assert result.to_dict() == {"matched_count": 0, "modified_count": 0, "promoted_ids": []}

    async def test_approved_yesterday_is_published_with_one_notification(self, sweeper, test_db, columnist, dispatcher):
        yesterday = clock.utcnow() - timedelta(days=1)
        blog = await create_test_content(test_db, Blog, columnist, status=ContentStatus.APPROVED, published_at=yesterday)

        result = await sweeper.refresh_status()
        assert result.matched_count == 1
        assert result.modified_count == 1
        assert result.promoted_ids == (blog.id,)

        blog = await test_db.get(Blog, blog.id, populate_existing=True)
        assert blog.status == ContentStatus.PUBLISHED
        assert blog.published_at == yesterday

        notifications = dispatcher.of_kind(NotificationKind.PUBLISHED)
        assert len(notifications) == 1
        assert notifications[0]["context"]["content_id"] == blog.id

    async def test_second_sweep_modifies_nothing(self, sweeper, test_db, columnist, dispatcher):
        await create_test_content(
            test_db, Blog, columnist, status=ContentStatus.APPROVED, published_at=clock.utcnow() - timedelta(minutes=5)
        )
        first = await sweeper.refresh_status()
        second = await sweeper.refresh_status()

        assert first.modified_count == 1
        assert second.modified_count == 0
        assert second.matched_count == 0
        assert len(dispatcher.of_kind(NotificationKind.PUBLISHED)) == 1

    async def test_future_and_other_states_are_left_alone(self, sweeper, test_db, columnist):
        past = clock.utcnow() - timedelta(hours=1)
        scheduled = await create_test_content(
            test_db, Blog, columnist, status=ContentStatus.APPROVED, published_at=clock.utcnow() + timedelta(days=1)
        )
        pending = await create_test_content(test_db, Blog, columnist, status=ContentStatus.PENDING)
        draft = await create_test_content(test_db, Blog, columnist)
        already = await create_test_content(test_db, Blog, columnist, status=ContentStatus.PUBLISHED, published_at=past)

        result = await sweeper.refresh_status()
        assert result.modified_count == 0

        for item, status in [
            (scheduled, ContentStatus.APPROVED),
            (pending, ContentStatus.PENDING),
            (draft, ContentStatus.DRAFT),
            (already, ContentStatus.PUBLISHED),
        ]:
            assert (await test_db.get(Blog, item.id, populate_existing=True)).status == status

    async def test_explicit_now(self, sweeper, test_db, columnist):
        publish_at = clock.utcnow() + timedelta(days=3)
        blog = await create_test_content(test_db, Blog, columnist, status=ContentStatus.APPROVED, published_at=publish_at)

        assert (await sweeper.refresh_status(now=publish_at - timedelta(seconds=1))).modified_count == 0
        assert (await sweeper.refresh_status(now=publish_at)).promoted_ids == (blog.id,)

    async def test_only_sweeps_its_own_kind(self, sweeper, test_db, columnist):
        edition = await create_test_content(
            test_db, Edition, columnist, status=ContentStatus.APPROVED, published_at=clock.utcnow() - timedelta(hours=1)
        )
        assert (await sweeper.refresh_status()).modified_count == 0

        result = await StatusRefreshService(test_db, EDITION).refresh_status()
        assert result.promoted_ids == (edition.id,)

    async def test_without_dispatcher_nothing_is_sent(self, test_db, columnist):
        await create_test_content(
            test_db, Blog, columnist, status=ContentStatus.APPROVED, published_at=clock.utcnow() - timedelta(hours=1)
        )
        result = await StatusRefreshService(test_db, BLOG, None).refresh_status()
        assert result.modified_count == 1


class TestScheduledPublication:
    async def test_submit_approve_then_sweep_after_publish_time(self, test_db, columnist, dispatcher, monkeypatch):
        service = PublicationService(test_db, BLOG, dispatcher)
        blog = await service.create_item(columnist, blog_fields())
        await service.submit_for_approval(blog.id, columnist)

        publish_at = clock.utcnow() + timedelta(hours=1)
        await service.approve(blog.id, publish_at)

        later = publish_at + timedelta(minutes=1)
        monkeypatch.setattr(clock, "utcnow", lambda: later)
        result = await service.refresh_status()

        assert result.promoted_ids == (blog.id,)
        blog = await service.get_item(blog.id)
        assert blog.status == ContentStatus.PUBLISHED
        assert blog.published_at == publish_at


class TestSchedulerJob:
    async def test_refresh_scheduled_content_sweeps_every_kind(self, test_db, columnist, dispatcher, monkeypatch):
        monkeypatch.setattr(scheduler_module, "notification_dispatcher", dispatcher)
        hour_ago = clock.utcnow() - timedelta(hours=1)
        await create_test_content(test_db, Blog, columnist, status=ContentStatus.APPROVED, published_at=hour_ago)
        await create_test_content(
            test_db, Edition, columnist, status=ContentStatus.APPROVED, published_at=hour_ago
        )

        results = await scheduler_module.refresh_scheduled_content()

        assert results["blog"].modified_count == 1
        assert results["edition"].modified_count == 1
        assert len(dispatcher.of_kind(NotificationKind.PUBLISHED)) == 2

    def test_disabled_interval_does_not_schedule(self):
        with patch.object(scheduler_module.scheduler, "add_job") as add_job:
            assert scheduler_module.start_status_refresh(0) is False
        add_job.assert_not_called()

    def test_interval_job_is_registered(self):
        with patch.object(scheduler_module.scheduler, "add_job") as add_job, patch.object(
            scheduler_module.scheduler, "start"
        ) as start:
            assert scheduler_module.start_status_refresh(30) is True
        add_job.assert_called_once()
        assert add_job.call_args.kwargs["id"] == scheduler_module.JOB_ID
        start.assert_called_once()

    async def test_failing_kind_does_not_stop_the_others(self, setup_test_database, monkeypatch):
        from newsdesk.exceptions import DatabaseError

        calls = []

        async def fake_refresh(self, now=None):
            calls.append(self.kind.name)
            if self.kind.name == "blog":
                raise DatabaseError("boom", operation="refresh_status")
            return SweepResult()

        monkeypatch.setattr(StatusRefreshService, "refresh_status", fake_refresh)
        results = await scheduler_module.refresh_scheduled_content()

        assert calls == ["blog", "edition"]
        assert "blog" not in results
        assert results["edition"] == SweepResult()
