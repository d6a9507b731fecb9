# tests/unit/test_tasks.py
"""
Unit Tests for the Celery tasks
Async helpers run against the test database; task wrappers run eagerly
with mocked services.
"""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock, patch

import pytest

from src.app.config import get_config
from src.app.models import VideoStatus
from src.domain.exceptions import ResourceNotFoundError
from src.domain.models import ReconciliationReport
from src.infrastructure.tasks import media_tasks, scheduled_tasks
from src.infrastructure.tasks.celery_app import celery_app


# ============================================================================
# Async helpers
# ============================================================================


@pytest.mark.asyncio
async def test_mark_completed(services, alice, make_video):
    video = await make_video(alice, complete=False)

    result = await media_tasks.mark_completed(services, video.id)

    assert result == {
        "video_id": video.id,
        "applied": True,
        "status": "completed",
        "upload_progress": 100,
    }


@pytest.mark.asyncio
async def test_duplicate_completion_is_reported_not_raised(services, alice, make_video):
    video = await make_video(alice)

    result = await media_tasks.mark_completed(services, video.id)

    assert result["applied"] is False
    assert result["error"]["error"] == "INVALID_OPERATION"


@pytest.mark.asyncio
async def test_mark_failed(services, alice, make_video):
    video = await make_video(alice, complete=False)

    result = await media_tasks.mark_failed(services, video.id, reason="bad codec")

    assert result["status"] == "failed"


@pytest.mark.asyncio
async def test_mark_failed_unknown_video(services):
    result = await media_tasks.mark_failed(services, "missing")
    assert result["applied"] is False
    assert result["error"]["error"] == "NOT_FOUND"


# ============================================================================
# Task wrappers
# ============================================================================


def _scope_with(services):
    @asynccontextmanager
    async def _scope(config=None):
        yield services

    return _scope


@pytest.fixture
def no_engine_dispose():
    with patch("src.app.database.db_manager.close", new=AsyncMock()) as close:
        yield close


def test_complete_processing_task(no_engine_dispose):
    video = SimpleNamespace(id="v1", status=VideoStatus.COMPLETED, upload_progress=100)
    services = Mock()
    services.videos.complete_processing = AsyncMock(return_value=video)

    with patch.object(media_tasks, "service_scope", _scope_with(services)):
        result = media_tasks.complete_processing.apply(args=("v1",)).get()

    assert result["applied"] is True
    services.videos.complete_processing.assert_awaited_once_with("v1")
    no_engine_dispose.assert_awaited_once()


def test_fail_processing_task_reports_missing_video(no_engine_dispose):
    services = Mock()
    services.videos.fail_processing = AsyncMock(
        side_effect=ResourceNotFoundError("Video", "v404")
    )

    with patch.object(media_tasks, "service_scope", _scope_with(services)):
        result = media_tasks.fail_processing.apply(args=("v404", "timeout")).get()

    assert result["applied"] is False
    services.videos.fail_processing.assert_awaited_once_with("v404", reason="timeout")


def test_reconcile_task(no_engine_dispose):
    services = Mock()
    services.subscriptions.reconcile_all = AsyncMock(
        return_value=ReconciliationReport(users_scanned=3, edges_repaired=1)
    )

    with patch.object(scheduled_tasks, "service_scope", _scope_with(services)):
        result = scheduled_tasks.reconcile_subscriptions.apply(kwargs={"batch_size": 10}).get()

    assert result == {"users_scanned": 3, "edges_repaired": 1, "counts_repaired": 0}
    services.subscriptions.reconcile_all.assert_awaited_once_with(batch_size=10)


# ============================================================================
# Configuration
# ============================================================================


def test_routing_and_schedule():
    routes = celery_app.conf.task_routes

    assert routes["tasks.media.*"] == {"queue": "media"}
    assert routes["tasks.scheduled.*"] == {"queue": "maintenance"}
    assert (
        celery_app.conf.beat_schedule["reconcile-subscriptions"]["task"]
        == "tasks.scheduled.reconcile_subscriptions"
    )
    assert {q.name for q in celery_app.conf.task_queues} == {
        "default",
        "media",
        "maintenance",
    }


def test_media_tasks_use_configured_retry_limit():
    limit = get_config().celery.task_max_retries

    assert media_tasks.complete_processing.max_retries == limit
    assert media_tasks.fail_processing.max_retries == limit
