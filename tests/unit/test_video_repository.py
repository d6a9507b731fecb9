# tests/unit/test_video_repository.py
"""
Unit Tests for VideoRepository
Listing queries, atomic view counting and per-owner aggregates
"""

import pytest
import pytest_asyncio

from src.app.models import VideoStatus
from src.infrastructure.repositories.video_repository import VideoRepository


# ============================================================================
# Test Fixtures (using pytest_asyncio)
# ============================================================================


@pytest.fixture
def repo(db_session):
    return VideoRepository(db_session)


@pytest_asyncio.fixture
async def sample_videos(alice, bob, make_video, services):
    """Mixed statuses and owners"""
    videos = {
        "a_public": await make_video(alice, title="Alpha"),
        "a_private": await make_video(alice, title="Beta", is_public=False),
        "a_raw": await make_video(alice, title="Gamma", complete=False),
        "b_public": await make_video(bob, title="Delta"),
    }
    failed = await make_video(alice, title="Epsilon", complete=False)
    videos["a_failed"] = await services.videos.fail_processing(failed.id)
    return videos


# ============================================================================
# Listing
# ============================================================================


@pytest.mark.asyncio
async def test_list_published_only(repo, sample_videos):
    videos, total = await repo.list_videos(sort_by="title", order="asc")

    assert total == 2
    assert [v.title for v in videos] == ["Alpha", "Delta"]


@pytest.mark.asyncio
async def test_list_all_of_owner(repo, sample_videos, alice):
    videos, total = await repo.list_videos(owner_id=alice.id, published_only=False)
    assert total == 4
    assert {v.owner_id for v in videos} == {alice.id}


@pytest.mark.asyncio
async def test_list_pagination(repo, sample_videos, alice):
    first, total = await repo.list_videos(
        owner_id=alice.id, published_only=False, page=1, page_size=3, sort_by="title", order="asc"
    )
    second, _ = await repo.list_videos(
        owner_id=alice.id, published_only=False, page=2, page_size=3, sort_by="title", order="asc"
    )

    assert total == 4
    assert [v.title for v in first] == ["Alpha", "Beta", "Epsilon"]
    assert [v.title for v in second] == ["Gamma"]


@pytest.mark.asyncio
async def test_published_by_owner(repo, sample_videos, alice):
    videos = await repo.published_by_owner(alice.id)
    assert [v.id for v in videos] == [sample_videos["a_public"].id]


# ============================================================================
# Views
# ============================================================================


@pytest.mark.asyncio
async def test_increment_views(repo, sample_videos):
    video_id = sample_videos["a_public"].id
    version_before = (await repo.get_by_id(video_id)).version

    assert await repo.increment_views(video_id) == 1
    assert await repo.increment_views(video_id) == 2

    video = await repo.get_by_id(video_id)
    assert video.views == 2
    assert video.version == version_before


@pytest.mark.asyncio
async def test_increment_views_missing(repo):
    assert await repo.increment_views("missing") is None


# ============================================================================
# Analytics & Statistics
# ============================================================================


@pytest.mark.asyncio
async def test_stats_for_owner(repo, services, sample_videos, alice, bob):
    await repo.increment_views(sample_videos["a_public"].id)
    await repo.increment_views(sample_videos["a_private"].id)
    await services.likes.toggle_video_like(sample_videos["a_public"].id, bob.id)

    stats = await repo.stats_for_owner(alice.id)

    assert stats["total_videos"] == 4
    assert stats["published_videos"] == 1
    assert stats["by_status"] == {
        VideoStatus.PENDING.value: 0,
        VideoStatus.PROCESSING.value: 1,
        VideoStatus.COMPLETED.value: 2,
        VideoStatus.FAILED.value: 1,
    }
    assert stats["total_views"] == 2
    assert stats["total_likes"] == 1


@pytest.mark.asyncio
async def test_stats_for_owner_without_videos(repo, make_user):
    carol = await make_user("carol")
    stats = await repo.stats_for_owner(carol.id)

    assert stats["total_videos"] == 0
    assert stats["total_views"] == 0
    assert stats["published_videos"] == 0


# ============================================================================
# Delete
# ============================================================================


@pytest.mark.asyncio
async def test_delete_with_comments(repo, services, sample_videos, alice, bob):
    video_id = sample_videos["a_public"].id
    keep = await services.comments.create_comment(sample_videos["b_public"].id, alice.id, "keep")
    top = await services.comments.create_comment(video_id, bob.id, "gone")
    await services.comments.create_comment(video_id, alice.id, "gone too", parent_id=top.id)

    removed = await repo.delete_with_comments(video_id)

    assert removed == 2
    assert not await repo.exists(video_id)
    assert await services.comments.comment_repo.get_by_id(keep.id) is not None
